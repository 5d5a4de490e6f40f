"""Docker Engine 流式协议客户端：拉取、推送、加载的事件流与镜像层导出。

docker-engine-stream: streaming-protocol layer of a Docker Engine API client.

Drives pull, push, load and log calls whose responses stream progress
events, and extracts manifest-referenced layers from image exports.
"""
from __future__ import annotations

from docker_engine_stream.client import (
    DockerApi,
    OperationState,
    UpdateListener,
)
from docker_engine_stream.errors import (
    DecodeError,
    DockerStreamError,
    EngineError,
    InconsistentResponseError,
    TransportError,
    ValidationError,
)
from docker_engine_stream.transport import DockerHost
from docker_engine_stream.types import (
    ImageArchive,
    ImageArchiveManifest,
    ImageReference,
    LoadImageUpdateEvent,
    LogUpdateEvent,
    PullImageUpdateEvent,
    PushImageUpdateEvent,
)

__version__ = "0.1.0"

__all__ = [
    # Client
    "DockerApi",
    "DockerHost",
    "OperationState",
    "UpdateListener",
    # Errors
    "DecodeError",
    "DockerStreamError",
    "EngineError",
    "InconsistentResponseError",
    "TransportError",
    "ValidationError",
    # Types
    "ImageArchive",
    "ImageArchiveManifest",
    "ImageReference",
    "LoadImageUpdateEvent",
    "LogUpdateEvent",
    "PullImageUpdateEvent",
    "PushImageUpdateEvent",
    # Version
    "__version__",
]
