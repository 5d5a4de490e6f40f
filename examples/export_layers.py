#!/usr/bin/env python3
"""
Export the layers of a local image.

Each layer tar is handed over while the export streams; it is copied to
the output directory here because the scratch file is deleted as soon as
the callback returns.

Usage:
    python examples/export_layers.py alpine:3 ./layers
"""

import shutil
import sys
from pathlib import Path

from docker_engine_stream import DockerApi


def main() -> None:
    """Run layer export example."""
    reference = sys.argv[1] if len(sys.argv) > 1 else "alpine:3"
    output = Path(sys.argv[2] if len(sys.argv) > 2 else "layers")
    output.mkdir(parents=True, exist_ok=True)

    def keep(name: str, path: Path) -> None:
        target = output / name.replace("/", "_")
        shutil.copyfile(path, target)
        print(f"{name} -> {target} ({target.stat().st_size} bytes)")

    with DockerApi.create() as docker:
        docker.image.export_layer_files(reference, keep)


if __name__ == "__main__":
    main()
