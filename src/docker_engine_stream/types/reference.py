"""
Reference value objects for images, containers and volumes.
"""

from __future__ import annotations

from dataclasses import dataclass

from docker_engine_stream.errors import ValidationError


@dataclass(frozen=True)
class ImageReference:
    """A reference to a Docker image: ``[domain/]name[:tag][@digest]``.

    Example:
        >>> ref = ImageReference.of("registry.example.com:5000/app/web:1.2")
        >>> ref.name, ref.tag
        ('registry.example.com:5000/app/web', '1.2')
    """

    name: str
    tag: str | None = None
    digest: str | None = None

    @classmethod
    def of(cls, value: str) -> ImageReference:
        """Parse an image reference string."""
        if not value or not value.strip():
            raise ValidationError("Image reference must not be empty", field="reference")
        remainder = value.strip()
        digest = None
        if "@" in remainder:
            remainder, digest = remainder.split("@", 1)
        tag = None
        # A colon after the last slash separates the tag; earlier ones are ports.
        last_slash = remainder.rfind("/")
        colon = remainder.rfind(":")
        if colon > last_slash:
            remainder, tag = remainder[:colon], remainder[colon + 1 :]
        if not remainder:
            raise ValidationError(f"Invalid image reference '{value}'", field="reference")
        return cls(name=remainder, tag=tag or None, digest=digest or None)

    def in_tagless_form(self) -> ImageReference:
        """Return this reference without tag or digest."""
        return ImageReference(self.name)

    def with_tag(self, tag: str) -> ImageReference:
        return ImageReference(self.name, tag=tag)

    def __str__(self) -> str:
        result = self.name
        if self.tag:
            result += f":{self.tag}"
        if self.digest:
            result += f"@{self.digest}"
        return result


@dataclass(frozen=True)
class ContainerReference:
    """A reference to a container by ID or name."""

    value: str

    @classmethod
    def of(cls, value: str) -> ContainerReference:
        if not value:
            raise ValidationError("Container reference must not be empty", field="reference")
        return cls(value)

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class VolumeName:
    """The name of a Docker volume."""

    value: str

    @classmethod
    def of(cls, value: str) -> VolumeName:
        if not value:
            raise ValidationError("Volume name must not be empty", field="name")
        return cls(value)

    def __str__(self) -> str:
        return self.value
