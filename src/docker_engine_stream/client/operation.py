"""
Lifecycle scope shared by the streaming operations.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from docker_engine_stream.telemetry import (
    LogContext,
    get_logger,
    reset_log_context,
    set_log_context,
)
from docker_engine_stream.types.events import UpdateEvent

if TYPE_CHECKING:
    from docker_engine_stream.client.listeners import UpdateListener

E = TypeVar("E", bound=UpdateEvent)

logger = get_logger(__name__)


class OperationState(str, Enum):
    """Where a streaming operation is in its lifecycle."""

    NOT_STARTED = "not_started"
    STREAMING = "streaming"
    COMPLETED = "completed"
    FAILED = "failed"


class StreamingOperation(Generic[E]):
    """Scope that drives a listener through start, updates and finish.

    Entering calls ``on_start``; leaving always calls ``on_finish``, whether
    the body ended, decoding failed, a capture listener raised or the
    caller's own listener raised. ``update`` fans each event out to the
    capture listeners first and then to the caller's listener, so an event
    that fails a capture check is never forwarded. Events that arrived
    before the failure have already been forwarded.

    Example:
        >>> with StreamingOperation("pull", listener, digest_capture) as operation:
        ...     json_stream.get(response.iter_bytes(), PullImageUpdateEvent, operation.update)
    """

    def __init__(
        self,
        name: str,
        listener: UpdateListener[E],
        *captures: UpdateListener[Any],
        reference: object | None = None,
    ) -> None:
        self._name = name
        self._listener = listener
        self._captures = captures
        self._reference = str(reference) if reference is not None else None
        self._state = OperationState.NOT_STARTED
        self._events = 0
        self._log_token: Any = None

    @property
    def state(self) -> OperationState:
        return self._state

    @property
    def events(self) -> int:
        """Number of events dispatched so far."""
        return self._events

    def update(self, event: E) -> None:
        """Dispatch one decoded event."""
        for capture in self._captures:
            capture.on_update(event)
        self._listener.on_update(event)
        self._events += 1

    def __enter__(self) -> StreamingOperation[E]:
        self._log_token = set_log_context(
            LogContext(operation=self._name, reference=self._reference)
        )
        try:
            self._listener.on_start()
        except BaseException:
            reset_log_context(self._log_token)
            raise
        self._state = OperationState.STREAMING
        logger.debug("Operation started")
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self._state = OperationState.FAILED if exc_type is not None else OperationState.COMPLETED
        try:
            logger.debug("Operation finished", state=self._state.value, events=self._events)
            self._listener.on_finish()
        finally:
            reset_log_context(self._log_token)
