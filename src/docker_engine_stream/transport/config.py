"""
Docker daemon host configuration.

Resolved from explicit arguments first, then the environment:
- DOCKER_HOST: ``unix:///var/run/docker.sock`` (default), ``tcp://host:port``
  or an ``http(s)://`` URL
- DOCKER_ENGINE_TIMEOUT_SECS: read timeout in seconds (unset means no limit)
- DOCKER_ENGINE_TRUST_ENV: ``1`` lets httpx honour proxy variables
"""

from __future__ import annotations

import os
from contextlib import suppress
from dataclasses import dataclass

from docker_engine_stream.errors import ValidationError

DEFAULT_SOCKET_PATH = "/var/run/docker.sock"
DEFAULT_HOST = f"unix://{DEFAULT_SOCKET_PATH}"

_SOCKET_BASE_URL = "http://localhost"


@dataclass(frozen=True)
class DockerHost:
    """Address of a Docker daemon.

    Example:
        >>> DockerHost.of("tcp://10.0.0.5:2375").base_url
        'http://10.0.0.5:2375'
        >>> DockerHost.of("unix:///run/user/1000/podman/podman.sock").socket_path
        '/run/user/1000/podman/podman.sock'
    """

    address: str

    @classmethod
    def of(cls, address: str) -> DockerHost:
        if not address:
            raise ValidationError("Docker host must not be empty", field="address")
        if not address.startswith(("unix://", "tcp://", "http://", "https://")):
            raise ValidationError(
                f"Unsupported Docker host '{address}'",
                field="address",
            ).with_hint("Use unix://, tcp://, http:// or https://")
        return cls(address)

    @classmethod
    def from_env(cls) -> DockerHost:
        """Read ``DOCKER_HOST``, falling back to the local socket."""
        return cls.of(os.getenv("DOCKER_HOST") or DEFAULT_HOST)

    @property
    def is_socket(self) -> bool:
        return self.address.startswith("unix://")

    @property
    def socket_path(self) -> str | None:
        if self.is_socket:
            return self.address[len("unix://") :]
        return None

    @property
    def base_url(self) -> str:
        """Base URL requests are resolved against."""
        if self.is_socket:
            return _SOCKET_BASE_URL
        if self.address.startswith("tcp://"):
            return "http://" + self.address[len("tcp://") :]
        return self.address.rstrip("/")


def timeout_from_env() -> float | None:
    """Read timeout from ``DOCKER_ENGINE_TIMEOUT_SECS``, if set and valid."""
    env_timeout = os.getenv("DOCKER_ENGINE_TIMEOUT_SECS")
    if env_timeout:
        with suppress(ValueError):
            return float(env_timeout)
    return None


def trust_env_enabled() -> bool:
    """Use env proxy settings only when explicitly enabled."""
    return os.getenv("DOCKER_ENGINE_TRUST_ENV", "0") == "1"
