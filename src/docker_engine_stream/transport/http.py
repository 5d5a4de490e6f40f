"""HTTP 传输层：基于 httpx 的同步 HTTP 客户端，支持 Unix 套接字和流式响应体。

HTTP transport to the Docker daemon using httpx.

Provides:
- Unix socket and TCP daemons
- Streaming response bodies (nothing is buffered unless asked for)
- Streaming request bodies (tar uploads)
- Daemon error responses mapped to EngineError
"""

from __future__ import annotations

import json as json_module
from contextlib import suppress
from typing import TYPE_CHECKING, Any

import httpx

from docker_engine_stream.errors import DecodeError, EngineError, TransportError
from docker_engine_stream.telemetry import get_logger
from docker_engine_stream.transport.config import (
    DockerHost,
    timeout_from_env,
    trust_env_enabled,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

_DEFAULT_CONNECT_TIMEOUT = 10.0

_UA_VERSION: str | None = None

logger = get_logger(__name__)


def _get_ua_version() -> str:
    """Get package version for User-Agent (cached)."""
    global _UA_VERSION
    if _UA_VERSION is None:
        try:
            from importlib.metadata import version

            _UA_VERSION = version("docker-engine-stream")
        except Exception:
            _UA_VERSION = "0.1.0"
    return _UA_VERSION


class Response:
    """A response whose body has not been read yet.

    Use as a context manager so the connection is released however the
    body is consumed:

        >>> with transport.get("/v1.24/images/ubuntu/get") as response:
        ...     for chunk in response.iter_bytes():
        ...         process(chunk)
    """

    def __init__(self, response: httpx.Response) -> None:
        self._response = response

    @property
    def status_code(self) -> int:
        return self._response.status_code

    @property
    def headers(self) -> httpx.Headers:
        return self._response.headers

    def iter_bytes(self, chunk_size: int | None = None) -> Iterator[bytes]:
        """Iterate over the body as it arrives."""
        try:
            yield from self._response.iter_bytes(chunk_size)
        except httpx.HTTPError as e:
            raise TransportError(
                f"Error reading response body: {e}",
                url=str(self._response.request.url),
                cause=e,
            ) from e

    def read(self) -> bytes:
        """Read the whole body."""
        return b"".join(self.iter_bytes())

    def json(self) -> Any:
        """Read the whole body as JSON."""
        content = self.read()
        try:
            return json_module.loads(content)
        except ValueError as e:
            raise DecodeError(
                "Response body is not valid JSON",
                record=content.decode("utf-8", errors="replace"),
                cause=e,
            ) from e

    def close(self) -> None:
        self._response.close()

    def __enter__(self) -> Response:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()


class HttpTransport:
    """HTTP transport for Docker Engine API calls.

    Every call returns a streaming ``Response``; status codes >= 400 raise
    ``EngineError`` before the caller sees the body.

    Example:
        >>> transport = HttpTransport(DockerHost.of("tcp://localhost:2375"))
        >>> with transport.post("/v1.24/images/create?fromImage=alpine") as response:
        ...     for chunk in response.iter_bytes():
        ...         process(chunk)
    """

    def __init__(
        self,
        host: DockerHost | None = None,
        *,
        timeout: float | None = None,
        http_transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize HTTP transport.

        Args:
            host: Daemon address (default: from DOCKER_HOST)
            timeout: Read timeout in seconds (default: from the environment,
                otherwise unlimited so follow-mode streams are not cut off)
            http_transport: Explicit httpx transport (mainly for tests)
        """
        self._host = host or DockerHost.from_env()
        self._timeout = timeout if timeout is not None else timeout_from_env()
        self._http_transport = http_transport
        self._client: httpx.Client | None = None

    @property
    def host(self) -> DockerHost:
        return self._host

    def _get_client(self) -> httpx.Client:
        """Get or create the HTTP client."""
        if self._client is None:
            transport = self._http_transport
            if transport is None and self._host.is_socket:
                transport = httpx.HTTPTransport(uds=self._host.socket_path)

            self._client = httpx.Client(
                base_url=self._host.base_url,
                timeout=httpx.Timeout(self._timeout, connect=_DEFAULT_CONNECT_TIMEOUT),
                transport=transport,
                trust_env=trust_env_enabled(),
            )
        return self._client

    def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            self._client.close()
            self._client = None

    def _build_headers(
        self,
        content_type: str | None,
        registry_auth: str | None,
    ) -> dict[str, str]:
        headers = {"User-Agent": f"docker-engine-stream/{_get_ua_version()}"}
        if content_type:
            headers["Content-Type"] = content_type
        # Passed through untouched; the daemon decodes it.
        if registry_auth:
            headers["X-Registry-Auth"] = registry_auth
        return headers

    def request(
        self,
        method: str,
        url: httpx.URL | str,
        *,
        content_type: str | None = None,
        content: bytes | Iterable[bytes] | None = None,
        json: dict[str, Any] | None = None,
        registry_auth: str | None = None,
    ) -> Response:
        """Issue a request and return the response with its body unread.

        Args:
            method: HTTP method
            url: Request URL (relative to the daemon base URL)
            content_type: Request content type
            content: Request body, either bytes or an iterable of chunks
            json: JSON request body
            registry_auth: Opaque registry credential for X-Registry-Auth

        Returns:
            Streaming response

        Raises:
            TransportError: On network/connection errors
            EngineError: On daemon error responses (4xx, 5xx)
        """
        client = self._get_client()
        if json is not None and content_type is None:
            content_type = "application/json"
        headers = self._build_headers(content_type, registry_auth)

        logger.debug("Docker API request", method=method, url=str(url))
        request = client.build_request(method, url, content=content, json=json, headers=headers)
        try:
            response = client.send(request, stream=True)
        except httpx.ConnectError as e:
            raise TransportError(
                f"Connection failed: {e}", url=str(request.url), cause=e
            ).with_hint("Check that the Docker daemon is running and DOCKER_HOST is correct") from e
        except httpx.TimeoutException as e:
            raise TransportError(f"Request timed out: {e}", url=str(request.url), cause=e) from e
        except httpx.HTTPError as e:
            raise TransportError(f"HTTP error: {e}", url=str(request.url), cause=e) from e

        if response.status_code >= 400:
            try:
                body = None
                with suppress(Exception):
                    body = json_module.loads(response.read())
            finally:
                response.close()
            raise EngineError.from_response(response.status_code, str(request.url), body)

        return Response(response)

    def get(self, url: httpx.URL | str) -> Response:
        return self.request("GET", url)

    def post(
        self,
        url: httpx.URL | str,
        *,
        content_type: str | None = None,
        content: bytes | Iterable[bytes] | None = None,
        json: dict[str, Any] | None = None,
        registry_auth: str | None = None,
    ) -> Response:
        return self.request(
            "POST",
            url,
            content_type=content_type,
            content=content,
            json=json,
            registry_auth=registry_auth,
        )

    def put(
        self,
        url: httpx.URL | str,
        *,
        content_type: str | None = None,
        content: bytes | Iterable[bytes] | None = None,
    ) -> Response:
        return self.request("PUT", url, content_type=content_type, content=content)

    def delete(self, url: httpx.URL | str) -> Response:
        return self.request("DELETE", url)

    def __enter__(self) -> HttpTransport:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
