"""Tests for error module."""

import pytest

from docker_engine_stream.errors import (
    DecodeError,
    DockerStreamError,
    EngineError,
    ErrorContext,
    InconsistentResponseError,
    TransportError,
    ValidationError,
    require,
)


class TestErrorContext:
    """Tests for ErrorContext."""

    def test_empty_context(self) -> None:
        """Test empty context string representation."""
        assert str(ErrorContext()) == ""

    def test_context_with_source_and_hint(self) -> None:
        """Test context with source and hint."""
        ctx = ErrorContext(source="transport", hint="Is the daemon running?")
        assert str(ctx) == "[transport] (hint: Is the daemon running?)"


class TestDockerStreamError:
    """Tests for the base error."""

    def test_basic_error(self) -> None:
        error = DockerStreamError("Something went wrong")
        assert error.message == "Something went wrong"
        assert str(error) == "Something went wrong"

    def test_with_hint(self) -> None:
        error = DockerStreamError("Failed").with_hint("Check DOCKER_HOST")
        assert error.context.hint == "Check DOCKER_HOST"

    def test_hierarchy(self) -> None:
        """Test every library error can be caught through the base class."""
        for error_type in (DecodeError, InconsistentResponseError, TransportError, ValidationError):
            assert issubclass(error_type, DockerStreamError)
        assert issubclass(EngineError, DockerStreamError)


class TestEngineError:
    """Tests for EngineError."""

    def test_from_response_with_message(self) -> None:
        error = EngineError.from_response(404, "http://localhost/v1.24/images/x/json", {"message": "No such image: x"})
        assert error.status_code == 404
        assert error.engine_message == "No such image: x"
        assert '"No such image: x"' in str(error)
        assert "[engine]" in str(error)

    def test_from_response_without_body(self) -> None:
        error = EngineError.from_response(500, "http://localhost/v1.24/_ping")
        assert error.engine_message is None
        assert "500" in error.message


class TestDecodeError:
    """Tests for DecodeError."""

    def test_record_is_truncated_in_details(self) -> None:
        error = DecodeError("bad", record="x" * 500)
        assert error.record == "x" * 500
        assert len(error.context.details["record"]) == 200

    def test_cause_is_chained(self) -> None:
        cause = ValueError("inner")
        error = DecodeError("bad", cause=cause)
        assert error.__cause__ is cause


class TestInconsistentResponseError:
    """Tests for InconsistentResponseError."""

    def test_operation_recorded(self) -> None:
        error = InconsistentResponseError("Different digests IDs provided", operation="pull")
        assert error.operation == "pull"
        assert error.context.details["operation"] == "pull"
        assert "[protocol]" in str(error)


class TestRequire:
    """Tests for argument checks."""

    def test_none_rejected(self) -> None:
        with pytest.raises(ValidationError, match="listener must not be None") as exc_info:
            require(None, "listener")
        assert exc_info.value.field == "listener"

    def test_value_accepted(self) -> None:
        require("alpine", "reference")
