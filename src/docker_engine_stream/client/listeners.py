"""
Update listeners for streaming operations.

An ``UpdateListener`` receives ``on_start`` once, ``on_update`` once per
decoded event and ``on_finish`` once, whatever the outcome of the call. The
capturing listeners below are used internally to check the response stream
as it arrives.
"""

from __future__ import annotations

from typing import Generic, TypeVar

from docker_engine_stream.errors import InconsistentResponseError
from docker_engine_stream.types.events import (
    LoadImageUpdateEvent,
    ProgressUpdateEvent,
    PushImageUpdateEvent,
    UpdateEvent,
)

E = TypeVar("E", bound=UpdateEvent)


class UpdateListener(Generic[E]):
    """Receives lifecycle notifications and events from a streaming call.

    All methods are no-ops by default; override the ones you need.
    Calls into one listener never overlap, but a listener should not assume
    it is called only once per instance across operations.

    Example:
        >>> class PrintingListener(UpdateListener[PullImageUpdateEvent]):
        ...     def on_update(self, event):
        ...         print(event.status)
    """

    def on_start(self) -> None:
        """Called before the request is issued."""

    def on_update(self, event: E) -> None:
        """Called for every event, in arrival order."""

    def on_finish(self) -> None:
        """Called once the operation ends, successfully or not."""

    @staticmethod
    def none() -> UpdateListener[E]:
        """A listener that ignores everything."""
        return _NONE


_NONE: UpdateListener = UpdateListener()


class DigestCaptureUpdateListener(UpdateListener[ProgressUpdateEvent]):
    """Captures the image digest reported by a pull.

    The daemon reports it as a status line ``Digest: sha256:...``. Seeing
    two different digests in one stream is an inconsistent response.
    """

    PREFIX = "Digest:"

    def __init__(self) -> None:
        self._digest: str | None = None

    @property
    def digest(self) -> str | None:
        return self._digest

    def on_update(self, event: ProgressUpdateEvent) -> None:
        status = event.status
        if status is not None and status.startswith(self.PREFIX):
            digest = status[len(self.PREFIX) :].strip()
            if self._digest is not None and self._digest != digest:
                raise InconsistentResponseError(
                    "Different digests IDs provided", operation="pull"
                )
            self._digest = digest


class ErrorCaptureUpdateListener(UpdateListener[PushImageUpdateEvent]):
    """Fails on the first event carrying an error detail."""

    def on_update(self, event: PushImageUpdateEvent) -> None:
        if event.error_detail is not None:
            raise InconsistentResponseError(
                f"Error response received when pushing image: {event.error_detail.message}",
                operation="push",
            )


class StreamCaptureUpdateListener(UpdateListener[LoadImageUpdateEvent]):
    """Keeps the latest ``stream`` value sent while loading an image."""

    def __init__(self) -> None:
        self._stream: str | None = None

    @property
    def captured_stream(self) -> str | None:
        return self._stream

    def on_update(self, event: LoadImageUpdateEvent) -> None:
        if event.stream is not None:
            self._stream = event.stream
