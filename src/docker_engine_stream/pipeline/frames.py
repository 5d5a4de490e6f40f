"""
Multiplexed log stream decoding.

Container logs (without a TTY) arrive as frames:
```
[stream type: 1 byte][0, 0, 0][payload size: uint32 big-endian][payload]
```
where the stream type is 0 (stdin), 1 (stdout) or 2 (stderr).
The log ends when the connection closes, even partway through a frame.
"""

from __future__ import annotations

import struct
from typing import TYPE_CHECKING

from docker_engine_stream.errors import DecodeError
from docker_engine_stream.pipeline.base import Decoder
from docker_engine_stream.telemetry import get_logger
from docker_engine_stream.types.events import LogUpdateEvent, StreamType

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Iterator

_HEADER = struct.Struct(">B3xI")

logger = get_logger(__name__)


class LogFrameDecoder(Decoder[LogUpdateEvent]):
    """Decodes multiplexed stdout/stderr frames into LogUpdateEvents."""

    def decode(self, byte_stream: Iterable[bytes]) -> Iterator[LogUpdateEvent]:
        """Decode frames until the stream ends.

        Args:
            byte_stream: Iterable of raw byte chunks

        Yields:
            One event per frame

        Raises:
            DecodeError: On an unknown stream type
        """
        buffer = bytearray()

        for chunk in byte_stream:
            buffer.extend(chunk)
            while len(buffer) >= _HEADER.size:
                stream_id, size = _HEADER.unpack_from(buffer)
                if len(buffer) < _HEADER.size + size:
                    break
                payload = bytes(buffer[_HEADER.size : _HEADER.size + size])
                del buffer[: _HEADER.size + size]
                yield LogUpdateEvent(stream_type=self._stream_type(stream_id), payload=payload)

        # The connection closing mid-frame ends the log normally
        if buffer:
            logger.debug("Discarding partial log frame", trailing_bytes=len(buffer))

    @staticmethod
    def _stream_type(stream_id: int) -> StreamType:
        try:
            return StreamType(stream_id)
        except ValueError as e:
            raise DecodeError(
                f"Stream type is out of bounds. Must be >= 0 and < {len(StreamType)}, "
                f"but was {stream_id}",
                cause=e,
            ) from e


def read_all(byte_stream: Iterable[bytes], consumer: Callable[[LogUpdateEvent], None]) -> None:
    """Decode every log frame and hand each to ``consumer``."""
    for event in LogFrameDecoder().decode(byte_stream):
        consumer(event)
