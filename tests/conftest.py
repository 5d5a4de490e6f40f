"""Root pytest fixtures for docker-engine-stream tests."""

from __future__ import annotations

import io
import json
import tarfile
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import Any

import httpx
import pytest

from docker_engine_stream.client import DockerApi, UpdateListener
from docker_engine_stream.transport import DockerHost, HttpTransport


class RecordingListener(UpdateListener):
    """Listener that records every call it receives."""

    def __init__(self, fail_on: int | None = None) -> None:
        self.calls: list[str] = []
        self.events: list[Any] = []
        self._fail_on = fail_on

    @property
    def started(self) -> int:
        return self.calls.count("start")

    @property
    def finished(self) -> int:
        return self.calls.count("finish")

    def on_start(self) -> None:
        self.calls.append("start")

    def on_update(self, event: Any) -> None:
        if self._fail_on is not None and len(self.events) == self._fail_on:
            raise RuntimeError("listener failed")
        self.calls.append("update")
        self.events.append(event)

    def on_finish(self) -> None:
        self.calls.append("finish")


class FakeDaemon:
    """Serves canned responses keyed by (method, path) through httpx.MockTransport."""

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], Callable[[], httpx.Response]] = {}
        self.requests: list[httpx.Request] = []

    def add(
        self,
        method: str,
        path: str,
        *,
        status: int = 200,
        content: bytes | Iterable[bytes] = b"",
        json_body: Any = None,
    ) -> None:
        if json_body is not None:
            self.routes[(method, path)] = lambda: httpx.Response(status, json=json_body)
        else:
            self.routes[(method, path)] = lambda: httpx.Response(status, content=content)

    def handler(self, request: httpx.Request) -> httpx.Response:
        request.read()
        self.requests.append(request)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json={"message": f"no route for {request.url.path}"})
        return route()

    def last(self, method: str, path: str) -> httpx.Request:
        for request in reversed(self.requests):
            if request.method == method and request.url.path == path:
                return request
        raise AssertionError(f"no {method} request to {path}")


@pytest.fixture
def listener() -> RecordingListener:
    return RecordingListener()


@pytest.fixture
def failing_listener() -> Callable[[int], RecordingListener]:
    """Factory for a listener that raises on the n-th update."""
    return lambda n: RecordingListener(fail_on=n)


@pytest.fixture
def daemon() -> FakeDaemon:
    return FakeDaemon()


@pytest.fixture
def scratch_dir(tmp_path: Path) -> Path:
    path = tmp_path / "scratch"
    path.mkdir()
    return path


@pytest.fixture
def docker(daemon: FakeDaemon, scratch_dir: Path) -> DockerApi:
    transport = HttpTransport(
        DockerHost.of("tcp://docker.test:2375"),
        http_transport=httpx.MockTransport(daemon.handler),
    )
    return DockerApi(transport, scratch_dir=scratch_dir)


@pytest.fixture
def ndjson() -> Callable[..., bytes]:
    """Render events the way the daemon streams them (CRLF-terminated JSON)."""

    def render(*events: dict[str, Any]) -> bytes:
        return b"".join(json.dumps(event).encode() + b"\r\n" for event in events)

    return render


@pytest.fixture
def image_json() -> dict[str, Any]:
    return {
        "Id": "sha256:0123456789abcdef",
        "RepoDigests": ["alpine@sha256:feedface"],
        "Config": {"Env": ["PATH=/usr/bin", "LANG=C.UTF-8"], "Labels": {"maintainer": "ops"}},
        "RootFS": {"Type": "layers", "Layers": ["sha256:aaa", "sha256:bbb"]},
        "Os": "linux",
    }


@pytest.fixture
def make_tar() -> Callable[[dict[str, bytes]], bytes]:
    """Build an uncompressed tar from {entry name: content}, preserving order."""

    def build(entries: dict[str, bytes]) -> bytes:
        buffer = io.BytesIO()
        with tarfile.open(fileobj=buffer, mode="w") as tar:
            for name, content in entries.items():
                info = tarfile.TarInfo(name)
                info.size = len(content)
                tar.addfile(info, io.BytesIO(content))
        return buffer.getvalue()

    return build


@pytest.fixture
def export_tar(make_tar: Callable[[dict[str, bytes]], bytes]) -> bytes:
    """Export with layers a.tar and b.tar referenced, c.tar not referenced."""
    manifest = json.dumps(
        [{"Config": "config.json", "RepoTags": ["app:1.0"], "Layers": ["a.tar", "b.tar"]}]
    ).encode()
    return make_tar(
        {
            "a.tar": b"layer-a",
            "config.json": b"{}",
            "b.tar": b"layer-b",
            "c.tar": b"layer-c",
            "manifest.json": manifest,
        }
    )
