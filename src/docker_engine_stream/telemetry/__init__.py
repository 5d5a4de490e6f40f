"""
Telemetry module for docker-engine-stream.

Provides structured logging with registry credential masking.
"""

from docker_engine_stream.telemetry.logger import (
    JsonFormatter,
    LogContext,
    LogLevel,
    SensitiveDataMasker,
    StreamLogger,
    TextFormatter,
    clear_log_context,
    get_log_context,
    get_logger,
    reset_log_context,
    set_log_context,
)

__all__ = [
    "JsonFormatter",
    "LogContext",
    "LogLevel",
    "SensitiveDataMasker",
    "StreamLogger",
    "TextFormatter",
    "clear_log_context",
    "get_log_context",
    "get_logger",
    "reset_log_context",
    "set_log_context",
]
