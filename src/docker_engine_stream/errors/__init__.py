"""错误体系：提供流式协议层的结构化错误类型。

Error hierarchy for docker-engine-stream.
"""

from docker_engine_stream.errors.base import (
    DecodeError,
    DockerStreamError,
    EngineError,
    ErrorContext,
    InconsistentResponseError,
    TransportError,
    ValidationError,
    require,
)

__all__ = [
    "DecodeError",
    "DockerStreamError",
    "EngineError",
    "ErrorContext",
    "InconsistentResponseError",
    "TransportError",
    "ValidationError",
    "require",
]
