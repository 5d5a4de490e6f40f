"""
Type definitions for docker-engine-stream.

Provides pydantic models for update events, manifests and images, plus
reference and archive value objects.
"""

from docker_engine_stream.types.archive import (
    ContainerContent,
    ImageArchive,
    LayerArchive,
    TarArchive,
)
from docker_engine_stream.types.events import (
    ErrorDetail,
    LoadImageUpdateEvent,
    LogUpdateEvent,
    ProgressDetail,
    ProgressUpdateEvent,
    PullImageUpdateEvent,
    PushImageUpdateEvent,
    StreamType,
    UpdateEvent,
)
from docker_engine_stream.types.image import (
    ContainerConfig,
    ContainerStatus,
    Image,
    ImageConfig,
)
from docker_engine_stream.types.manifest import ImageArchiveManifest, ManifestEntry
from docker_engine_stream.types.reference import (
    ContainerReference,
    ImageReference,
    VolumeName,
)

__all__ = [
    # Archives
    "ContainerContent",
    "ImageArchive",
    "LayerArchive",
    "TarArchive",
    # Events
    "ErrorDetail",
    "LoadImageUpdateEvent",
    "LogUpdateEvent",
    "ProgressDetail",
    "ProgressUpdateEvent",
    "PullImageUpdateEvent",
    "PushImageUpdateEvent",
    "StreamType",
    "UpdateEvent",
    # Images and containers
    "ContainerConfig",
    "ContainerStatus",
    "Image",
    "ImageConfig",
    # Manifest
    "ImageArchiveManifest",
    "ManifestEntry",
    # References
    "ContainerReference",
    "ImageReference",
    "VolumeName",
]
