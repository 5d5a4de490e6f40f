"""
Image and container models exchanged with simple (non-streaming) endpoints.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ImageConfig(BaseModel):
    """The runtime configuration stored in an image."""

    model_config = ConfigDict(frozen=True, extra="allow", populate_by_name=True)

    env: list[str] = Field(default_factory=list, alias="Env")
    labels: dict[str, str] | None = Field(default=None, alias="Labels")

    @property
    def env_map(self) -> dict[str, str]:
        """Environment as a dictionary (``KEY=VALUE`` entries split once)."""
        result: dict[str, str] = {}
        for item in self.env:
            key, _, value = item.partition("=")
            result[key] = value
        return result


class RootFs(BaseModel):
    model_config = ConfigDict(frozen=True, extra="allow", populate_by_name=True)

    layers: list[str] = Field(default_factory=list, alias="Layers")


class Image(BaseModel):
    """Image details as returned by ``GET /images/{name}/json``."""

    model_config = ConfigDict(frozen=True, extra="allow", populate_by_name=True)

    id: str = Field(alias="Id")
    repo_digests: list[str] = Field(default_factory=list, alias="RepoDigests")
    config: ImageConfig = Field(default_factory=ImageConfig, alias="Config")
    rootfs: RootFs = Field(default_factory=RootFs, alias="RootFS")
    os: str | None = Field(default=None, alias="Os")
    created: str | None = Field(default=None, alias="Created")

    @property
    def layers(self) -> list[str]:
        """Layer digests in order."""
        return self.rootfs.layers

    @classmethod
    def from_json(cls, content: bytes | str) -> Image:
        return cls.model_validate_json(content)


class ContainerStatus(BaseModel):
    """Result of ``POST /containers/{id}/wait``."""

    model_config = ConfigDict(frozen=True, extra="allow", populate_by_name=True)

    status_code: int = Field(alias="StatusCode")
    error: dict[str, Any] | None = Field(default=None, alias="Error")

    @property
    def wait_error_message(self) -> str | None:
        if self.error:
            return self.error.get("Message")
        return None

    @classmethod
    def from_json(cls, content: bytes | str) -> ContainerStatus:
        return cls.model_validate_json(content)


class ContainerConfig(BaseModel):
    """Configuration used to create a container.

    Example:
        >>> config = ContainerConfig(image="alpine:3", command=["echo", "hi"])
        >>> config.to_json()["Cmd"]
        ['echo', 'hi']
    """

    model_config = ConfigDict(frozen=True)

    image: str
    command: list[str] = Field(default_factory=list)
    env: dict[str, str] = Field(default_factory=dict)
    labels: dict[str, str] = Field(default_factory=dict)
    user: str | None = None
    working_dir: str | None = None
    binds: list[str] = Field(default_factory=list)
    network_mode: str | None = None

    def to_json(self) -> dict[str, Any]:
        """Render the Docker ``/containers/create`` request body."""
        body: dict[str, Any] = {"Image": self.image}
        if self.command:
            body["Cmd"] = list(self.command)
        if self.env:
            body["Env"] = [f"{k}={v}" for k, v in self.env.items()]
        if self.labels:
            body["Labels"] = dict(self.labels)
        if self.user:
            body["User"] = self.user
        if self.working_dir:
            body["WorkingDir"] = self.working_dir
        host_config: dict[str, Any] = {}
        if self.binds:
            host_config["Binds"] = list(self.binds)
        if self.network_mode:
            host_config["NetworkMode"] = self.network_mode
        if host_config:
            body["HostConfig"] = host_config
        return body
