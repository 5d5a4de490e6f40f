"""
Image archive manifest (``manifest.json`` in a ``docker save`` tarball).
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from docker_engine_stream.errors import DecodeError


class ManifestEntry(BaseModel):
    """One image in the archive, with the tar paths of its layers."""

    model_config = ConfigDict(frozen=True, extra="allow", populate_by_name=True)

    config: str | None = Field(default=None, alias="Config")
    repo_tags: list[str] | None = Field(default=None, alias="RepoTags")
    layers: list[str] = Field(default_factory=list, alias="Layers")


_ENTRIES = TypeAdapter(list[ManifestEntry])


class ImageArchiveManifest(BaseModel):
    """Parsed ``manifest.json``: an ordered list of manifest entries.

    Example:
        >>> manifest = ImageArchiveManifest.from_json(b'[{"Layers": ["a/layer.tar"]}]')
        >>> manifest.contains_layer("a/layer.tar")
        True
    """

    model_config = ConfigDict(frozen=True)

    entries: list[ManifestEntry] = Field(default_factory=list)

    @classmethod
    def from_json(cls, content: bytes | str) -> ImageArchiveManifest:
        """Parse manifest JSON.

        Args:
            content: Raw ``manifest.json`` content

        Returns:
            Parsed manifest

        Raises:
            DecodeError: If the content is not a JSON array of manifest entries
        """
        try:
            entries = _ENTRIES.validate_json(content)
        except PydanticValidationError as e:
            text = content.decode("utf-8", errors="replace") if isinstance(content, bytes) else content
            raise DecodeError(
                f"Invalid image archive manifest: {e.errors()[0]['msg']}",
                record=text,
                cause=e,
            ) from e
        return cls(entries=entries)

    def contains_layer(self, name: str) -> bool:
        """Whether any entry lists ``name`` among its layers."""
        return any(name in entry.layers for entry in self.entries)
