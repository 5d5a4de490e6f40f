"""
Pipeline layer - Response body decoding.

- Decoder: Base interface (bytes -> frames)
- JsonLinesDecoder / JsonStream: JSON event records -> typed update events
- LogFrameDecoder: multiplexed container log frames -> LogUpdateEvents
"""

from docker_engine_stream.pipeline.base import Decoder
from docker_engine_stream.pipeline.decode import JsonLinesDecoder, JsonStream
from docker_engine_stream.pipeline.frames import LogFrameDecoder, read_all

__all__ = [
    "Decoder",
    "JsonLinesDecoder",
    "JsonStream",
    "LogFrameDecoder",
    "read_all",
]
