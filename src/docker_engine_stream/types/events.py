"""
Update events streamed back by long-running Docker API calls.

Pull, push and load return a sequence of JSON objects over one response
body; container logs return multiplexed stdout/stderr frames. Each record is
decoded into one of the immutable models below.
"""

from __future__ import annotations

from enum import IntEnum

from pydantic import BaseModel, ConfigDict, Field


class UpdateEvent(BaseModel):
    """Base class for all update events.

    Events are frozen once decoded; unknown fields sent by newer daemons
    are kept rather than rejected.
    """

    model_config = ConfigDict(frozen=True, extra="allow", populate_by_name=True)


class ProgressDetail(BaseModel):
    """Byte progress of a single layer."""

    model_config = ConfigDict(frozen=True, extra="allow")

    current: int | None = Field(default=None, description="Bytes processed so far")
    total: int | None = Field(default=None, description="Total bytes, if known")

    def as_percentage(self) -> int:
        """Return progress as a whole percentage (0 when unknown)."""
        if not self.current or not self.total:
            return 0
        return min(100, int(self.current * 100 / self.total))


class ErrorDetail(BaseModel):
    """Error reported inline in a response stream."""

    model_config = ConfigDict(frozen=True, extra="allow")

    message: str | None = Field(default=None, description="Error message")
    code: int | None = Field(default=None, description="Error code (rarely sent)")

    def __str__(self) -> str:
        return self.message or ""


class ProgressUpdateEvent(UpdateEvent):
    """Event carrying a status line and optional layer progress."""

    id: str | None = Field(default=None, description="Layer or tag identifier")
    status: str | None = Field(default=None, description="Status text")
    progress: str | None = Field(default=None, description="Rendered progress bar")
    progress_detail: ProgressDetail | None = Field(
        default=None, alias="progressDetail", description="Byte progress"
    )


class PullImageUpdateEvent(ProgressUpdateEvent):
    """Event emitted while pulling an image.

    The status line ``Digest: sha256:...`` reports the pulled image digest.
    """


class PushImageUpdateEvent(ProgressUpdateEvent):
    """Event emitted while pushing an image."""

    error_detail: ErrorDetail | None = Field(
        default=None, alias="errorDetail", description="Inline error, if any"
    )


class LoadImageUpdateEvent(ProgressUpdateEvent):
    """Event emitted while loading an image archive.

    A successful load ends with a ``stream`` value such as
    ``"Loaded image: name:tag\\n"``.
    """

    stream: str | None = Field(default=None, description="Final stream text")
    error_detail: ErrorDetail | None = Field(
        default=None, alias="errorDetail", description="Inline error, if any"
    )


class StreamType(IntEnum):
    """Origin of a multiplexed log frame (first byte of the frame header)."""

    STDIN = 0
    STDOUT = 1
    STDERR = 2


class LogUpdateEvent(UpdateEvent):
    """A single frame of container log output."""

    stream_type: StreamType = Field(description="Which stream produced the frame")
    payload: bytes = Field(description="Raw frame payload")

    def __str__(self) -> str:
        return self.payload.decode("utf-8", errors="replace")
