"""
Tar content sent to, or received from, the Docker daemon.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, BinaryIO

from docker_engine_stream.errors import DockerStreamError

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    from docker_engine_stream.types.reference import ImageReference

CHUNK_SIZE = 64 * 1024


def _iter_file(path: Path) -> Iterator[bytes]:
    with path.open("rb") as f:
        while chunk := f.read(CHUNK_SIZE):
            yield chunk


class TarArchive:
    """Tar content that can be written out or streamed as a request body.

    The content is produced lazily each time it is read, so large archives
    never need to sit in memory.
    """

    def __init__(self, chunks: Callable[[], Iterator[bytes]]) -> None:
        self._chunks = chunks

    @classmethod
    def from_bytes(cls, content: bytes) -> TarArchive:
        return cls(lambda: iter((content,)))

    @classmethod
    def from_path(cls, path: str | Path) -> TarArchive:
        path = Path(path)
        return cls(lambda: _iter_file(path))

    def iter_bytes(self) -> Iterator[bytes]:
        """Iterate over the archive content."""
        return self._chunks()

    def write_to(self, output: BinaryIO) -> None:
        """Copy the archive content to ``output``."""
        for chunk in self.iter_bytes():
            output.write(chunk)


class ImageArchive(TarArchive):
    """An image tarball to load into the daemon.

    Attributes:
        tag: The image tag the archive is expected to load, used in error
            messages when known
    """

    def __init__(
        self,
        chunks: Callable[[], Iterator[bytes]],
        tag: ImageReference | str | None = None,
    ) -> None:
        super().__init__(chunks)
        self.tag = tag

    @classmethod
    def from_bytes(cls, content: bytes, tag: ImageReference | str | None = None) -> ImageArchive:
        return cls(lambda: iter((content,)), tag=tag)

    @classmethod
    def from_path(cls, path: str | Path, tag: ImageReference | str | None = None) -> ImageArchive:
        path = Path(path)
        return cls(lambda: _iter_file(path), tag=tag)


class LayerArchive(TarArchive):
    """One exported layer, readable only while the export callback runs.

    Once the callback returns the backing scratch file is deleted and any
    further read raises ``DockerStreamError``.
    """

    def __init__(self, path: Path) -> None:
        super().__init__(lambda: _iter_file(path))
        self._open = True

    def iter_bytes(self) -> Iterator[bytes]:
        if not self._open:
            raise DockerStreamError("Layer content can only be read during the export callback")
        return super().iter_bytes()

    def close(self) -> None:
        self._open = False


@dataclass(frozen=True)
class ContainerContent:
    """Tar content to upload into a container at ``destination_path``."""

    archive: TarArchive
    destination_path: str

    @classmethod
    def of(cls, archive: TarArchive | bytes, destination_path: str = "/") -> ContainerContent:
        if isinstance(archive, bytes):
            archive = TarArchive.from_bytes(archive)
        return cls(archive, destination_path)
