"""
Transport layer - HTTP client for Docker daemon communication.

Provides httpx-based transport with:
- Unix socket and TCP daemons
- Streaming request and response bodies
- Environment-driven host and timeout configuration
"""

from docker_engine_stream.transport.config import DEFAULT_HOST, DockerHost
from docker_engine_stream.transport.http import HttpTransport, Response

__all__ = [
    "DEFAULT_HOST",
    "DockerHost",
    "HttpTransport",
    "Response",
]
