"""错误基类：提供分层错误体系和结构化错误上下文。

Base error classes for docker-engine-stream.

Provides a layered error hierarchy:
- DockerStreamError: Base class for all library errors
- TransportError: HTTP/network errors talking to the daemon
- EngineError: Error status returned by the Docker daemon
- DecodeError: Malformed event records, log frames or manifests
- InconsistentResponseError: A response stream broke a protocol invariant
- ValidationError: Missing required arguments
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class ErrorContext:
    """Structured error context for diagnostics.

    Provides actionable information for debugging and error handling.
    """

    details: dict[str, Any] = field(default_factory=dict)
    """Additional details about the error"""

    source: str | None = None
    """Error source (e.g., 'transport', 'decode', 'protocol')"""

    hint: str | None = None
    """Actionable hint for resolving the error"""

    def __str__(self) -> str:
        parts = []
        if self.source:
            parts.append(f"[{self.source}]")
        if self.hint:
            parts.append(f"(hint: {self.hint})")
        return " ".join(parts)


class DockerStreamError(Exception):
    """Base class for all docker-engine-stream errors.

    All errors from this library inherit from this class, making it easy
    to catch all library errors with a single except clause.

    Attributes:
        message: Human-readable error message
        context: Optional structured error context
    """

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
    ) -> None:
        self.message = message
        self.context = context or ErrorContext()
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the full error message."""
        ctx_str = str(self.context)
        if ctx_str:
            return f"{self.message} {ctx_str}"
        return self.message

    def with_hint(self, hint: str) -> DockerStreamError:
        """Add a hint to this error."""
        self.context.hint = hint
        return self


class TransportError(DockerStreamError):
    """Error during HTTP transport.

    Raised when:
    - The daemon socket or host cannot be reached
    - A request or read times out
    - The connection drops while a response body is streaming
    """

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
        *,
        url: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        ctx = context or ErrorContext(source="transport")
        if url:
            ctx.details["url"] = url
        super().__init__(message, ctx)
        self.url = url
        self.__cause__ = cause


class EngineError(DockerStreamError):
    """Error status returned by the Docker daemon.

    Attributes:
        status_code: HTTP status code
        url: Request URL
        engine_message: The daemon's own ``message`` field, if any
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int,
        url: str | None = None,
        engine_message: str | None = None,
    ) -> None:
        ctx = ErrorContext(source="engine")
        ctx.details["status_code"] = status_code
        if url:
            ctx.details["url"] = url
        super().__init__(message, ctx)
        self.status_code = status_code
        self.url = url
        self.engine_message = engine_message

    @classmethod
    def from_response(
        cls,
        status_code: int,
        url: str,
        body: dict[str, Any] | None = None,
    ) -> EngineError:
        """Create an EngineError from an error response.

        Args:
            status_code: HTTP status code
            url: Request URL
            body: Parsed JSON body (the daemon sends ``{"message": ...}``)

        Returns:
            EngineError carrying the daemon message when present
        """
        engine_message = None
        if isinstance(body, dict) and isinstance(body.get("message"), str):
            engine_message = body["message"]
        message = f"Docker API call to '{url}' failed with status code {status_code}"
        if engine_message:
            message = f'{message} "{engine_message}"'
        return cls(
            message,
            status_code=status_code,
            url=url,
            engine_message=engine_message,
        )


class DecodeError(DockerStreamError):
    """Error decoding a response body.

    Raised when:
    - An event record is not valid JSON or not a JSON object
    - An event record does not match the expected event model
    - A multiplexed log frame has an unknown stream type
    - A response body that should be JSON is not
    - ``manifest.json`` cannot be parsed
    """

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
        *,
        record: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        ctx = context or ErrorContext(source="decode")
        if record is not None:
            ctx.details["record"] = record[:200]
        super().__init__(message, ctx)
        self.record = record
        self.__cause__ = cause


class InconsistentResponseError(DockerStreamError):
    """A response stream violated a protocol invariant.

    Raised when:
    - A pull reports two different digests
    - A push event carries an error detail
    - A load never reports a final stream marker
    - An image export carries no manifest
    """

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
        *,
        operation: str | None = None,
    ) -> None:
        ctx = context or ErrorContext(source="protocol")
        if operation:
            ctx.details["operation"] = operation
        super().__init__(message, ctx)
        self.operation = operation


class ValidationError(DockerStreamError):
    """Invalid arguments passed to an API call."""

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
        *,
        field: str | None = None,
    ) -> None:
        ctx = context or ErrorContext(source="validation")
        if field:
            ctx.details["field"] = field
        super().__init__(message, ctx)
        self.field = field


def require(value: Any, name: str) -> None:
    """Raise ValidationError if a required argument is None."""
    if value is None:
        raise ValidationError(f"{name} must not be None", field=name)
