#!/usr/bin/env python3
"""
Run a container and follow its logs.

Copies a small script into the container before starting it, prints
stdout and stderr frames as they arrive, then reports the exit code.

Usage:
    python examples/run_container.py
"""

import io
import sys
import tarfile

from docker_engine_stream import DockerApi, UpdateListener
from docker_engine_stream.types import (
    ContainerConfig,
    ContainerContent,
    LogUpdateEvent,
    StreamType,
)

SCRIPT = b"#!/bin/sh\necho hello from stdout\necho hello from stderr >&2\n"


class LogPrinter(UpdateListener[LogUpdateEvent]):
    def on_update(self, event: LogUpdateEvent) -> None:
        out = sys.stderr if event.stream_type == StreamType.STDERR else sys.stdout
        out.write(str(event))


def script_archive() -> bytes:
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w") as tar:
        info = tarfile.TarInfo("hello.sh")
        info.size = len(SCRIPT)
        info.mode = 0o755
        tar.addfile(info, io.BytesIO(SCRIPT))
    return buffer.getvalue()


def main() -> None:
    """Run container example."""
    with DockerApi.create() as docker:
        docker.image.pull("alpine:3")
        container = docker.container.create(
            ContainerConfig(image="alpine:3", command=["/tmp/hello.sh"]),
            ContainerContent.of(script_archive(), "/tmp"),
        )
        try:
            docker.container.start(container)
            docker.container.logs(container, LogPrinter())
            status = docker.container.wait(container)
        finally:
            docker.container.remove(container, force=True)

    print(f"Exit code: {status.status_code}")


if __name__ == "__main__":
    main()
