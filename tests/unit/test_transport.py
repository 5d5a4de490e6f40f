"""Tests for transport module."""

import httpx
import pytest

from docker_engine_stream.client import DockerApi, UpdateListener
from docker_engine_stream.errors import EngineError, TransportError, ValidationError
from docker_engine_stream.transport import DEFAULT_HOST, DockerHost, HttpTransport
from docker_engine_stream.transport.config import timeout_from_env, trust_env_enabled


class TestDockerHost:
    """Tests for daemon host configuration."""

    def test_default_from_env(self, monkeypatch) -> None:
        """Test the local socket is used when DOCKER_HOST is unset."""
        monkeypatch.delenv("DOCKER_HOST", raising=False)

        host = DockerHost.from_env()

        assert host.address == DEFAULT_HOST
        assert host.is_socket
        assert host.socket_path == "/var/run/docker.sock"
        assert host.base_url == "http://localhost"

    def test_env_override(self, monkeypatch) -> None:
        """Test DOCKER_HOST is honoured."""
        monkeypatch.setenv("DOCKER_HOST", "tcp://10.0.0.5:2375")

        host = DockerHost.from_env()

        assert not host.is_socket
        assert host.socket_path is None
        assert host.base_url == "http://10.0.0.5:2375"

    def test_https_host(self) -> None:
        """Test an explicit https URL is kept."""
        assert DockerHost.of("https://docker.example.com/").base_url == "https://docker.example.com"

    def test_unsupported_scheme(self) -> None:
        """Test unknown schemes are rejected with a hint."""
        with pytest.raises(ValidationError) as exc_info:
            DockerHost.of("npipe:////./pipe/docker_engine")

        assert exc_info.value.context.hint is not None


class TestEnvironment:
    """Tests for environment-driven settings."""

    def test_timeout(self, monkeypatch) -> None:
        monkeypatch.setenv("DOCKER_ENGINE_TIMEOUT_SECS", "12.5")
        assert timeout_from_env() == 12.5

    def test_invalid_timeout_ignored(self, monkeypatch) -> None:
        monkeypatch.setenv("DOCKER_ENGINE_TIMEOUT_SECS", "soon")
        assert timeout_from_env() is None

    def test_trust_env_off_by_default(self, monkeypatch) -> None:
        monkeypatch.delenv("DOCKER_ENGINE_TRUST_ENV", raising=False)
        assert trust_env_enabled() is False


class TestHttpTransport:
    """Tests for HttpTransport against pytest-httpx."""

    def test_get_streams_body(self, httpx_mock) -> None:
        """Test the body is readable from the response."""
        httpx_mock.add_response(
            method="GET",
            url="http://docker.test:2375/v1.24/images/app:1.0/json",
            json={"Id": "sha256:1"},
        )
        transport = HttpTransport(DockerHost.of("tcp://docker.test:2375"))

        with transport.get("/v1.24/images/app:1.0/json") as response:
            assert response.json() == {"Id": "sha256:1"}

        transport.close()

    def test_user_agent_and_auth_headers(self, httpx_mock) -> None:
        """Test default headers and the registry credential header."""
        httpx_mock.add_response(method="POST", url="http://docker.test:2375/v1.24/images/create")
        transport = HttpTransport(DockerHost.of("tcp://docker.test:2375"))

        transport.post("/v1.24/images/create", registry_auth="abc==").close()

        request = httpx_mock.get_request()
        assert request.headers["User-Agent"].startswith("docker-engine-stream/")
        assert request.headers["X-Registry-Auth"] == "abc=="

    def test_error_status_raises_engine_error(self, httpx_mock) -> None:
        """Test the daemon message is surfaced."""
        httpx_mock.add_response(
            method="DELETE",
            url="http://docker.test:2375/v1.24/images/app:1.0",
            status_code=409,
            json={"message": "conflict: unable to remove repository reference"},
        )
        transport = HttpTransport(DockerHost.of("tcp://docker.test:2375"))

        with pytest.raises(EngineError) as exc_info:
            transport.delete("/v1.24/images/app:1.0")

        assert exc_info.value.status_code == 409
        assert "conflict: unable to remove repository reference" in str(exc_info.value)

    def test_error_status_without_json_body(self, httpx_mock) -> None:
        """Test a plain text error body."""
        httpx_mock.add_response(
            method="GET",
            url="http://docker.test:2375/v1.24/images/x/json",
            status_code=500,
            text="boom",
        )
        transport = HttpTransport(DockerHost.of("tcp://docker.test:2375"))

        with pytest.raises(EngineError) as exc_info:
            transport.get("/v1.24/images/x/json")

        assert exc_info.value.engine_message is None

    def test_connect_error(self, httpx_mock) -> None:
        """Test connection failures become TransportError with a hint."""
        httpx_mock.add_exception(httpx.ConnectError("Connection refused"))
        transport = HttpTransport(DockerHost.of("tcp://docker.test:2375"))

        with pytest.raises(TransportError) as exc_info:
            transport.get("/v1.24/_ping")

        assert "Connection failed" in str(exc_info.value)
        assert exc_info.value.context.hint is not None

    def test_timeout_error(self, httpx_mock) -> None:
        """Test timeouts become TransportError."""
        httpx_mock.add_exception(httpx.ReadTimeout("timed out"))
        transport = HttpTransport(DockerHost.of("tcp://docker.test:2375"))

        with pytest.raises(TransportError, match="timed out"):
            transport.get("/v1.24/_ping")


class BrokenStream(httpx.SyncByteStream):
    """Body that drops the connection after one record."""

    def __iter__(self):
        yield b'{"status": "Pulling fs layer"}\n'
        raise httpx.ReadError("connection reset by peer")


class CountingListener(UpdateListener):
    def __init__(self) -> None:
        self.started = 0
        self.finished = 0
        self.updates = 0

    def on_start(self) -> None:
        self.started += 1

    def on_update(self, event) -> None:
        self.updates += 1

    def on_finish(self) -> None:
        self.finished += 1


class TestMidStreamFailure:
    """Tests for connection loss while a body streams."""

    def test_read_error_becomes_transport_error(self) -> None:
        """Test a dropped connection fails the pull and still finishes."""
        transport = HttpTransport(
            DockerHost.of("tcp://docker.test:2375"),
            http_transport=httpx.MockTransport(lambda request: httpx.Response(200, stream=BrokenStream())),
        )
        listener = CountingListener()

        with pytest.raises(TransportError, match="Error reading response body"):
            DockerApi(transport).image.pull("alpine:3", listener)

        assert (listener.started, listener.updates, listener.finished) == (1, 1, 1)
