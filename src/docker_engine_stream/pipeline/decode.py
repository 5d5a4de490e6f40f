"""JSON 流解码：将拉取、推送、加载的响应体逐条解码为事件。

JSON event stream decoding.

Implements:
- JsonLinesDecoder: concatenated JSON records, split on object boundaries
  (newlines are ordinary whitespace, inside or between records)
- JsonStream: JsonLinesDecoder plus validation into typed update events
"""

from __future__ import annotations

import codecs
import json
from typing import TYPE_CHECKING, Any, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from docker_engine_stream.errors import DecodeError
from docker_engine_stream.pipeline.base import Decoder

if TYPE_CHECKING:
    from collections.abc import Callable, Generator, Iterable, Iterator

E = TypeVar("E", bound=BaseModel)


class JsonLinesDecoder(Decoder[dict[str, Any]]):
    """JSON Lines (NDJSON) decoder.

    Parses the JSON records sent by the Docker daemon:
    ```
    {"status": "Pulling fs layer", "id": "a1b2"}
    {"status": "Digest: sha256:..."}
    ```

    Records are read one object at a time, so several objects may share a
    line and one object may span lines or chunks. A record that is merely
    incomplete waits for more data; a malformed record raises DecodeError.
    Records are never skipped.
    """

    def __init__(self) -> None:
        self._json = json.JSONDecoder()

    def decode(self, byte_stream: Iterable[bytes]) -> Iterator[dict[str, Any]]:
        """Decode a JSON byte stream into JSON objects.

        Args:
            byte_stream: Iterable of raw byte chunks

        Yields:
            Parsed JSON objects, in arrival order

        Raises:
            DecodeError: If a record is malformed, not a JSON object, or
                still incomplete when the stream ends
        """
        utf8 = codecs.getincrementaldecoder("utf-8")()
        pending: list[str] = []

        for chunk in byte_stream:
            piece = self._decode_text(utf8, chunk)
            pending.append(piece)
            # An unfinished record can only complete once a closing bracket arrives
            if len(pending) > 1 and "}" not in piece and "]" not in piece:
                continue
            text = "".join(pending)
            consumed = yield from self._records(text, final=False)
            pending = [text[consumed:]] if consumed < len(text) else []

        pending.append(self._decode_text(utf8, b"", final=True))
        yield from self._records("".join(pending), final=True)

    @staticmethod
    def _decode_text(utf8: codecs.IncrementalDecoder, chunk: bytes, final: bool = False) -> str:
        try:
            return utf8.decode(chunk, final)
        except UnicodeDecodeError as e:
            raise DecodeError("Event record is not valid UTF-8", cause=e) from e

    def _records(self, text: str, final: bool) -> Generator[dict[str, Any], None, int]:
        """Yield the complete records in ``text``; return where the unparsed tail starts."""
        pos = 0
        end = len(text)
        while True:
            while pos < end and text[pos].isspace():
                pos += 1
            if pos == end:
                return pos
            try:
                frame, next_pos = self._json.raw_decode(text, pos)
            except json.JSONDecodeError as e:
                # No token spans a newline, so an error with a newline after it is not truncation
                if not final and "\n" not in text[e.pos :]:
                    return pos
                raise DecodeError(
                    f"Malformed event record: {e.msg}", record=text[pos : e.pos + 1], cause=e
                ) from e
            if not isinstance(frame, dict):
                raise DecodeError("Event record is not a JSON object", record=text[pos:next_pos])
            pos = next_pos
            yield frame


class JsonStream:
    """Decodes a response body into typed update events.

    Example:
        >>> stream = JsonStream()
        >>> stream.get(response.iter_bytes(), PullImageUpdateEvent, print)
    """

    def __init__(self, decoder: Decoder[dict[str, Any]] | None = None) -> None:
        self._decoder = decoder or JsonLinesDecoder()

    def iter_events(self, byte_stream: Iterable[bytes], event_type: type[E]) -> Iterator[E]:
        """Lazily decode events of ``event_type``.

        Args:
            byte_stream: Iterable of raw byte chunks
            event_type: Pydantic model each record is validated against

        Yields:
            One event per record

        Raises:
            DecodeError: If a record is malformed or does not match ``event_type``
        """
        for frame in self._decoder.decode(byte_stream):
            try:
                event = event_type.model_validate(frame)
            except PydanticValidationError as e:
                raise DecodeError(
                    f"Event record does not match {event_type.__name__}",
                    record=json.dumps(frame),
                    cause=e,
                ) from e
            yield event

    def get(
        self,
        byte_stream: Iterable[bytes],
        event_type: type[E],
        consumer: Callable[[E], None],
    ) -> None:
        """Decode every event and hand each to ``consumer`` as it arrives."""
        for event in self.iter_events(byte_stream, event_type):
            consumer(event)
