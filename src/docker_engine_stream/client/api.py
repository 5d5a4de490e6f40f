"""Docker API 客户端：镜像、容器和卷操作，以及拉取、推送、加载的流式协议。

Docker Engine API client.

Provides the image, container and volume operations a build tool needs.
Pull, push, load and container logs are long-running calls whose response
bodies stream progress events; see ``StreamingOperation`` for the listener
lifecycle they follow.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import httpx

from docker_engine_stream.client.export import LayerExportDemuxer
from docker_engine_stream.client.listeners import (
    DigestCaptureUpdateListener,
    ErrorCaptureUpdateListener,
    StreamCaptureUpdateListener,
    UpdateListener,
)
from docker_engine_stream.client.operation import StreamingOperation
from docker_engine_stream.errors import InconsistentResponseError, require
from docker_engine_stream.pipeline import JsonStream, read_all
from docker_engine_stream.telemetry import get_logger
from docker_engine_stream.transport import DockerHost, HttpTransport
from docker_engine_stream.types.archive import LayerArchive
from docker_engine_stream.types.events import (
    LoadImageUpdateEvent,
    LogUpdateEvent,
    PullImageUpdateEvent,
    PushImageUpdateEvent,
)
from docker_engine_stream.types.image import ContainerStatus, Image
from docker_engine_stream.types.reference import (
    ContainerReference,
    ImageReference,
    VolumeName,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from pathlib import Path

    from docker_engine_stream.types.archive import ContainerContent, ImageArchive
    from docker_engine_stream.types.image import ContainerConfig

API_VERSION = "1.24"

FORCE_PARAMS: tuple[tuple[str, str], ...] = (("force", "1"),)

logger = get_logger(__name__)


def build_url(path: str, params: Sequence[tuple[str, str]] = ()) -> httpx.URL:
    """Build a versioned API URL.

    Example:
        >>> str(build_url("/images/create", [("fromImage", "alpine:3")]))
        '/v1.24/images/create?fromImage=alpine%3A3'
    """
    return httpx.URL(f"/v{API_VERSION}{path}", params=list(params))


def _image_reference(value: ImageReference | str) -> ImageReference:
    require(value, "reference")
    return value if isinstance(value, ImageReference) else ImageReference.of(value)


def _container_reference(value: ContainerReference | str) -> ContainerReference:
    require(value, "reference")
    return value if isinstance(value, ContainerReference) else ContainerReference.of(value)


class ImageApi:
    """Docker API for image operations."""

    def __init__(self, api: DockerApi) -> None:
        self._api = api

    def pull(
        self,
        reference: ImageReference | str,
        listener: UpdateListener[PullImageUpdateEvent] | None = None,
        registry_auth: str | None = None,
    ) -> Image:
        """Pull an image from a registry.

        Args:
            reference: The image to pull
            listener: Receives pull progress events
            registry_auth: Registry credential, sent as-is in X-Registry-Auth

        Returns:
            The pulled image, as inspected after the pull completes

        Raises:
            InconsistentResponseError: If the daemon reports two different digests
        """
        reference = _image_reference(reference)
        if listener is None:
            listener = UpdateListener.none()
        url = build_url("/images/create", [("fromImage", str(reference))])
        digest_capture = DigestCaptureUpdateListener()
        with StreamingOperation("pull", listener, digest_capture, reference=reference) as operation:
            with self._api.http.post(url, registry_auth=registry_auth) as response:
                self._api.json_stream.get(response.iter_bytes(), PullImageUpdateEvent, operation.update)
            logger.debug("Pull complete", digest=digest_capture.digest)
            return self.inspect(reference)

    def push(
        self,
        reference: ImageReference | str,
        listener: UpdateListener[PushImageUpdateEvent] | None = None,
        registry_auth: str | None = None,
    ) -> None:
        """Push an image to a registry.

        The listener sees progress events as they arrive, so it may receive
        events from a push that later fails on an error event.

        Args:
            reference: The image to push
            listener: Receives push progress events
            registry_auth: Registry credential, sent as-is in X-Registry-Auth

        Raises:
            InconsistentResponseError: If the daemon reports an error detail
        """
        reference = _image_reference(reference)
        if listener is None:
            listener = UpdateListener.none()
        url = build_url(f"/images/{reference}/push")
        error_capture = ErrorCaptureUpdateListener()
        with StreamingOperation("push", listener, error_capture, reference=reference) as operation:
            with self._api.http.post(url, registry_auth=registry_auth) as response:
                self._api.json_stream.get(response.iter_bytes(), PushImageUpdateEvent, operation.update)

    def load(
        self,
        archive: ImageArchive,
        listener: UpdateListener[LoadImageUpdateEvent] | None = None,
    ) -> None:
        """Load an image archive into the daemon.

        Args:
            archive: The image tarball to upload
            listener: Receives load progress events

        Raises:
            InconsistentResponseError: If the daemon never confirms the load
        """
        require(archive, "archive")
        if listener is None:
            listener = UpdateListener.none()
        url = build_url("/images/load")
        stream_capture = StreamCaptureUpdateListener()
        with StreamingOperation("load", listener, stream_capture, reference=archive.tag) as operation:
            with self._api.http.post(
                url, content_type="application/x-tar", content=archive.iter_bytes()
            ) as response:
                self._api.json_stream.get(response.iter_bytes(), LoadImageUpdateEvent, operation.update)
            captured = stream_capture.captured_stream
            if not captured or not captured.strip():
                tag = f' "{archive.tag}"' if archive.tag is not None else ""
                raise InconsistentResponseError(
                    f"Invalid response received when loading image{tag}", operation="load"
                )

    def export_layers(
        self,
        reference: ImageReference | str,
        exports: Callable[[str, LayerArchive], None],
    ) -> None:
        """Export the layers of an image as archives.

        Args:
            reference: The image to export
            exports: Called with ``(layer name, archive)`` for each layer; the
                archive can only be read during the call
        """
        require(exports, "exports")

        def accept(name: str, path: Path) -> None:
            archive = LayerArchive(path)
            try:
                exports(name, archive)
            finally:
                archive.close()

        self.export_layer_files(reference, accept)

    def export_layer_files(
        self,
        reference: ImageReference | str,
        exports: Callable[[str, Path], None],
    ) -> None:
        """Export the layers of an image as paths to layer tar files.

        Args:
            reference: The image to export
            exports: Called with ``(layer name, path)`` for each layer; the
                file is deleted as soon as the call returns

        Raises:
            InconsistentResponseError: If the export has no manifest
            DecodeError: If the export stream or manifest is malformed
        """
        reference = _image_reference(reference)
        require(exports, "exports")
        url = build_url(f"/images/{reference}/get")
        with self._api.http.get(url) as response:
            self._api.layer_demuxer.export(response.iter_bytes(), reference, exports)

    def remove(self, reference: ImageReference | str, force: bool = False) -> None:
        """Remove an image."""
        reference = _image_reference(reference)
        url = build_url(f"/images/{reference}", FORCE_PARAMS if force else ())
        self._api.http.delete(url).close()

    def inspect(self, reference: ImageReference | str) -> Image:
        """Inspect an image in the local store."""
        reference = _image_reference(reference)
        url = build_url(f"/images/{reference}/json")
        with self._api.http.get(url) as response:
            return Image.from_json(response.read())

    def tag(self, source: ImageReference | str, target: ImageReference | str) -> None:
        """Tag ``source`` as ``target``."""
        source = _image_reference(source)
        target = _image_reference(target)
        if target.tag is None:
            params = [("repo", str(target))]
        else:
            params = [("repo", str(target.in_tagless_form())), ("tag", target.tag)]
        self._api.http.post(build_url(f"/images/{source}/tag", params)).close()


class ContainerApi:
    """Docker API for container operations."""

    def __init__(self, api: DockerApi) -> None:
        self._api = api

    def create(self, config: ContainerConfig, *contents: ContainerContent) -> ContainerReference:
        """Create a container and upload ``contents`` into it.

        Args:
            config: The container configuration
            contents: Archives to copy into the container before it starts

        Returns:
            Reference to the new container
        """
        require(config, "config")
        for content in contents:
            require(content, "contents")
        with self._api.http.post(build_url("/containers/create"), json=config.to_json()) as response:
            body = response.json()
        container_id = body.get("Id") if isinstance(body, dict) else None
        if not isinstance(container_id, str) or not container_id:
            raise InconsistentResponseError(
                "Invalid response received when creating container", operation="create"
            )
        reference = ContainerReference.of(container_id)
        for content in contents:
            url = build_url(f"/containers/{reference}/archive", [("path", content.destination_path)])
            self._api.http.put(
                url, content_type="application/x-tar", content=content.archive.iter_bytes()
            ).close()
        return reference

    def start(self, reference: ContainerReference | str) -> None:
        reference = _container_reference(reference)
        self._api.http.post(build_url(f"/containers/{reference}/start")).close()

    def logs(
        self,
        reference: ContainerReference | str,
        listener: UpdateListener[LogUpdateEvent] | None = None,
    ) -> None:
        """Follow the logs of a container until it exits.

        Args:
            reference: The container
            listener: Receives one event per stdout/stderr frame
        """
        reference = _container_reference(reference)
        if listener is None:
            listener = UpdateListener.none()
        params = [("stdout", "1"), ("stderr", "1"), ("follow", "1")]
        url = build_url(f"/containers/{reference}/logs", params)
        with StreamingOperation("logs", listener, reference=reference) as operation:
            with self._api.http.get(url) as response:
                read_all(response.iter_bytes(), operation.update)

    def wait(self, reference: ContainerReference | str) -> ContainerStatus:
        """Wait for a container to stop and return its exit status."""
        reference = _container_reference(reference)
        with self._api.http.post(build_url(f"/containers/{reference}/wait")) as response:
            return ContainerStatus.from_json(response.read())

    def remove(self, reference: ContainerReference | str, force: bool = False) -> None:
        reference = _container_reference(reference)
        url = build_url(f"/containers/{reference}", FORCE_PARAMS if force else ())
        self._api.http.delete(url).close()


class VolumeApi:
    """Docker API for volume operations."""

    def __init__(self, api: DockerApi) -> None:
        self._api = api

    def delete(self, name: VolumeName | str, force: bool = False) -> None:
        require(name, "name")
        name = name if isinstance(name, VolumeName) else VolumeName.of(name)
        url = build_url(f"/volumes/{name}", FORCE_PARAMS if force else ())
        self._api.http.delete(url).close()


class DockerApi:
    """Access to the Docker Engine API operations used for building images.

    Example:
        >>> with DockerApi.create() as docker:
        ...     image = docker.image.pull("alpine:3", PrintingListener())
        ...     docker.image.export_layer_files("alpine:3", lambda name, path: ...)
    """

    def __init__(
        self,
        http: HttpTransport | None = None,
        *,
        json_stream: JsonStream | None = None,
        scratch_dir: str | Path | None = None,
    ) -> None:
        """Initialize the API.

        Args:
            http: Transport to the daemon (default: from the environment)
            json_stream: Event stream decoder
            scratch_dir: Directory for layer export scratch files
        """
        self._http = http or HttpTransport()
        self._json_stream = json_stream or JsonStream()
        self._layer_demuxer = LayerExportDemuxer(scratch_dir)
        self._image = ImageApi(self)
        self._container = ContainerApi(self)
        self._volume = VolumeApi(self)

    @classmethod
    def create(
        cls,
        host: DockerHost | str | None = None,
        *,
        timeout: float | None = None,
        scratch_dir: str | Path | None = None,
    ) -> DockerApi:
        """Create an API for ``host`` (default: DOCKER_HOST or the local socket)."""
        if isinstance(host, str):
            host = DockerHost.of(host)
        return cls(HttpTransport(host, timeout=timeout), scratch_dir=scratch_dir)

    @property
    def http(self) -> HttpTransport:
        return self._http

    @property
    def json_stream(self) -> JsonStream:
        return self._json_stream

    @property
    def layer_demuxer(self) -> LayerExportDemuxer:
        return self._layer_demuxer

    @property
    def image(self) -> ImageApi:
        return self._image

    @property
    def container(self) -> ContainerApi:
        return self._container

    @property
    def volume(self) -> VolumeApi:
        return self._volume

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> DockerApi:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
