"""
Client module - Docker Engine API entry points and streaming protocol.
"""

from docker_engine_stream.client.api import (
    API_VERSION,
    ContainerApi,
    DockerApi,
    ImageApi,
    VolumeApi,
    build_url,
)
from docker_engine_stream.client.export import LayerExportDemuxer, ScratchSpool
from docker_engine_stream.client.listeners import (
    DigestCaptureUpdateListener,
    ErrorCaptureUpdateListener,
    StreamCaptureUpdateListener,
    UpdateListener,
)
from docker_engine_stream.client.operation import OperationState, StreamingOperation

__all__ = [
    "API_VERSION",
    "ContainerApi",
    "DigestCaptureUpdateListener",
    "DockerApi",
    "ErrorCaptureUpdateListener",
    "ImageApi",
    "LayerExportDemuxer",
    "OperationState",
    "ScratchSpool",
    "StreamCaptureUpdateListener",
    "StreamingOperation",
    "UpdateListener",
    "VolumeApi",
    "build_url",
]
