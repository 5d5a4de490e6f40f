#!/usr/bin/env python3
"""
Pull an image with a progress listener.

Shows per-layer download progress as the daemon streams it, then prints
the digest and layers of the pulled image.

Usage:
    export DOCKER_HOST="unix:///var/run/docker.sock"   # optional
    python examples/pull_image.py alpine:3
"""

import sys

from docker_engine_stream import DockerApi, UpdateListener
from docker_engine_stream.telemetry import LogLevel, StreamLogger
from docker_engine_stream.types import PullImageUpdateEvent


class ProgressPrinter(UpdateListener[PullImageUpdateEvent]):
    """Print one line per event, with a percentage for downloads."""

    def on_start(self) -> None:
        print("Pulling...")

    def on_update(self, event: PullImageUpdateEvent) -> None:
        line = event.status or ""
        if event.id:
            line = f"{event.id}: {line}"
        if event.progress_detail and event.progress_detail.total:
            line += f" {event.progress_detail.as_percentage()}%"
        print(line)

    def on_finish(self) -> None:
        print("Done.")


def main() -> None:
    """Run pull example."""
    reference = sys.argv[1] if len(sys.argv) > 1 else "alpine:3"
    StreamLogger.configure(LogLevel.WARNING)

    with DockerApi.create() as docker:
        image = docker.image.pull(reference, ProgressPrinter())

    print(f"\nImage: {image.id}")
    for digest in image.repo_digests:
        print(f"  digest: {digest}")
    for layer in image.layers:
        print(f"  layer:  {layer}")


if __name__ == "__main__":
    main()
