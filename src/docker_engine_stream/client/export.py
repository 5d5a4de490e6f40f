"""镜像导出解复用：从完整的镜像导出 tar 流中提取 manifest 引用的层。

Layer extraction from a full image export (``GET /images/{name}/get``).

The export is a tar stream holding ``manifest.json`` and one ``.tar`` entry
per layer, in no guaranteed order. Layers are spooled to scratch files while
the stream is read; once it ends, only the layers the manifest references
are handed to the caller, one at a time, and every scratch file is deleted
before ``export`` returns.
"""

from __future__ import annotations

import io
import os
import shutil
import tarfile
import tempfile
from contextlib import suppress
from pathlib import Path
from typing import TYPE_CHECKING, Any

from docker_engine_stream.errors import DecodeError, InconsistentResponseError
from docker_engine_stream.telemetry import get_logger
from docker_engine_stream.types.manifest import ImageArchiveManifest

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Iterator

MANIFEST_NAME = "manifest.json"
LAYER_SUFFIX = ".tar"
SCRATCH_PREFIX = "layer-export-scratch-"

_COPY_BUFFER = 64 * 1024

logger = get_logger(__name__)


class _ChunkReader(io.RawIOBase):
    """Read-only, non-seekable file over an iterable of byte chunks."""

    def __init__(self, chunks: Iterable[bytes]) -> None:
        self._chunks = iter(chunks)
        self._pending = b""

    def readable(self) -> bool:
        return True

    def readinto(self, buffer: Any) -> int:
        while not self._pending:
            chunk = next(self._chunks, None)
            if chunk is None:
                return 0
            self._pending = chunk
        size = min(len(buffer), len(self._pending))
        buffer[:size] = self._pending[:size]
        self._pending = self._pending[size:]
        return size


class ScratchSpool:
    """Scratch files keyed by tar entry name.

    Leaving the ``with`` block deletes whatever is still spooled. Deletion
    errors are ignored so they cannot replace the error being raised.
    """

    def __init__(self, directory: str | Path | None = None) -> None:
        self._directory = str(directory) if directory is not None else None
        self._files: dict[str, Path] = {}

    def spool(self, name: str, source: io.BufferedIOBase | Any) -> Path:
        """Copy ``source`` into a new scratch file for entry ``name``."""
        self.release(name)
        fd, raw_path = tempfile.mkstemp(prefix=SCRATCH_PREFIX, dir=self._directory)
        path = Path(raw_path)
        self._files[name] = path
        with os.fdopen(fd, "wb") as out:
            shutil.copyfileobj(source, out, _COPY_BUFFER)
        return path

    def items(self) -> list[tuple[str, Path]]:
        return list(self._files.items())

    def release(self, name: str) -> None:
        """Delete the scratch file for ``name``, if any."""
        path = self._files.pop(name, None)
        if path is not None:
            with suppress(OSError):
                path.unlink()

    def __len__(self) -> int:
        return len(self._files)

    def __enter__(self) -> ScratchSpool:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        for name in list(self._files):
            self.release(name)


class LayerExportDemuxer:
    """Splits an image export stream into manifest-referenced layers.

    Example:
        >>> demuxer = LayerExportDemuxer()
        >>> with transport.get(url) as response:
        ...     demuxer.export(response.iter_bytes(), "app:1.0", lambda name, path: print(name))
    """

    def __init__(self, scratch_dir: str | Path | None = None) -> None:
        """Initialize the demuxer.

        Args:
            scratch_dir: Directory for scratch files (default: system temp dir)
        """
        self._scratch_dir = scratch_dir

    def export(
        self,
        byte_stream: Iterable[bytes],
        reference: object,
        consumer: Callable[[str, Path], None],
    ) -> None:
        """Read the export stream and call ``consumer`` for each referenced layer.

        Args:
            byte_stream: Export tar body, in arrival order
            reference: Exported image, used in error messages
            consumer: Called with ``(entry name, scratch path)``; the path is
                deleted as soon as the call returns or raises

        Raises:
            DecodeError: If the tar stream or the manifest is malformed
            InconsistentResponseError: If the stream has no ``manifest.json``
        """
        with ScratchSpool(self._scratch_dir) as spool:
            manifest = self._read(byte_stream, spool)
            if manifest is None:
                raise InconsistentResponseError(
                    f"Manifest not found in image {reference}", operation="export"
                )
            for name, path in spool.items():
                try:
                    if manifest.contains_layer(name):
                        consumer(name, path)
                    else:
                        logger.debug("Skipping unreferenced layer", entry=name)
                finally:
                    spool.release(name)

    def _read(self, byte_stream: Iterable[bytes], spool: ScratchSpool) -> ImageArchiveManifest | None:
        manifest = None
        reader = io.BufferedReader(_ChunkReader(byte_stream), _COPY_BUFFER)
        try:
            with tarfile.open(fileobj=reader, mode="r|*") as tar:
                for entry in self._entries(tar):
                    if entry.name == MANIFEST_NAME:
                        manifest = self._read_manifest(tar, entry)
                    elif entry.name.endswith(LAYER_SUFFIX):
                        source = tar.extractfile(entry)
                        if source is not None:
                            spool.spool(entry.name, source)
                            logger.debug("Spooled layer", entry=entry.name, size=entry.size)
        except tarfile.TarError as e:
            raise DecodeError(f"Invalid image export stream: {e}", cause=e) from e
        return manifest

    @staticmethod
    def _entries(tar: tarfile.TarFile) -> Iterator[tarfile.TarInfo]:
        for entry in tar:
            if entry.isfile():
                yield entry

    @staticmethod
    def _read_manifest(tar: tarfile.TarFile, entry: tarfile.TarInfo) -> ImageArchiveManifest:
        source = tar.extractfile(entry)
        content = source.read() if source is not None else b""
        try:
            text = content.decode("utf-8")
        except UnicodeDecodeError as e:
            raise DecodeError(f"{MANIFEST_NAME} is not valid UTF-8", cause=e) from e
        return ImageArchiveManifest.from_json(text)
