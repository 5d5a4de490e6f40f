"""
Base abstractions for the pipeline layer.

Defines the interface that all stream decoders implement.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Generic, TypeVar

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

T = TypeVar("T")


class Decoder(ABC, Generic[T]):
    """Abstract decoder that converts a byte stream into frames.

    Decoders consume response bodies incrementally: they hold at most one
    incomplete record in memory and yield each record as soon as it is
    complete.
    """

    @abstractmethod
    def decode(self, byte_stream: Iterable[bytes]) -> Iterator[T]:
        """Decode a byte stream into frames.

        Args:
            byte_stream: Iterable of raw byte chunks, in arrival order

        Yields:
            Decoded frames
        """
        ...
