"""Tests for value types and models."""

import json
from io import BytesIO

import pytest

from docker_engine_stream.errors import DockerStreamError, ValidationError
from docker_engine_stream.types import (
    ContainerConfig,
    ContainerContent,
    ContainerStatus,
    Image,
    ImageArchive,
    ImageReference,
    LayerArchive,
    LogUpdateEvent,
    ProgressDetail,
    PullImageUpdateEvent,
    StreamType,
    TarArchive,
)


class TestImageReference:
    """Tests for image reference parsing."""

    @pytest.mark.parametrize(
        ("value", "name", "tag", "digest"),
        [
            ("alpine", "alpine", None, None),
            ("alpine:3", "alpine", "3", None),
            ("registry.example.com:5000/app/web", "registry.example.com:5000/app/web", None, None),
            ("registry.example.com:5000/app/web:1.2", "registry.example.com:5000/app/web", "1.2", None),
            ("app@sha256:abc", "app", None, "sha256:abc"),
            ("app:1.0@sha256:abc", "app", "1.0", "sha256:abc"),
        ],
    )
    def test_parse(self, value: str, name: str, tag: str | None, digest: str | None) -> None:
        ref = ImageReference.of(value)

        assert (ref.name, ref.tag, ref.digest) == (name, tag, digest)
        assert str(ref) == value

    def test_tagless_form(self) -> None:
        """Test tag and digest are dropped."""
        ref = ImageReference.of("registry:5000/app:1.0@sha256:abc").in_tagless_form()
        assert str(ref) == "registry:5000/app"

    def test_with_tag(self) -> None:
        assert str(ImageReference.of("app:1.0").with_tag("latest")) == "app:latest"

    @pytest.mark.parametrize("value", ["", "   ", ":tag"])
    def test_invalid(self, value: str) -> None:
        with pytest.raises(ValidationError):
            ImageReference.of(value)


class TestEvents:
    """Tests for event models."""

    def test_aliases_and_unknown_fields(self) -> None:
        """Test camelCase aliases map and unknown fields are kept."""
        event = PullImageUpdateEvent.model_validate(
            {
                "id": "a1",
                "status": "Downloading",
                "progress": "[==>  ]",
                "progressDetail": {"current": 50, "total": 200},
                "future": True,
            }
        )

        assert event.progress_detail == ProgressDetail(current=50, total=200)
        assert event.progress_detail.as_percentage() == 25
        assert event.model_extra == {"future": True}

    def test_percentage_without_total(self) -> None:
        assert ProgressDetail(current=5).as_percentage() == 0

    def test_log_event_text(self) -> None:
        event = LogUpdateEvent(stream_type=StreamType.STDERR, payload=b"warn\n")
        assert str(event) == "warn\n"


class TestImage:
    """Tests for image inspection models."""

    def test_from_json(self, image_json: dict) -> None:
        image = Image.from_json(json.dumps(image_json))

        assert image.id == "sha256:0123456789abcdef"
        assert image.layers == ["sha256:aaa", "sha256:bbb"]
        assert image.config.env_map["LANG"] == "C.UTF-8"
        assert image.os == "linux"

    def test_container_status(self) -> None:
        status = ContainerStatus.from_json(b'{"StatusCode": 1, "Error": {"Message": "oom"}}')
        assert status.status_code == 1
        assert status.wait_error_message == "oom"
        assert ContainerStatus.from_json(b'{"StatusCode": 0}').wait_error_message is None


class TestContainerConfig:
    """Tests for container create bodies."""

    def test_minimal(self) -> None:
        assert ContainerConfig(image="alpine:3").to_json() == {"Image": "alpine:3"}

    def test_full(self) -> None:
        config = ContainerConfig(
            image="app:1.0",
            command=["run"],
            env={"A": "1", "B": "x=y"},
            labels={"owner": "build"},
            user="1000",
            working_dir="/workspace",
            binds=["/var/run/docker.sock:/var/run/docker.sock"],
            network_mode="host",
        )

        assert config.to_json() == {
            "Image": "app:1.0",
            "Cmd": ["run"],
            "Env": ["A=1", "B=x=y"],
            "Labels": {"owner": "build"},
            "User": "1000",
            "WorkingDir": "/workspace",
            "HostConfig": {
                "Binds": ["/var/run/docker.sock:/var/run/docker.sock"],
                "NetworkMode": "host",
            },
        }


class TestArchives:
    """Tests for tar content wrappers."""

    def test_from_path_is_rereadable(self, tmp_path) -> None:
        path = tmp_path / "image.tar"
        path.write_bytes(b"x" * 100_000)
        archive = ImageArchive.from_path(path, tag="app:1.0")

        assert b"".join(archive.iter_bytes()) == b"x" * 100_000
        assert b"".join(archive.iter_bytes()) == b"x" * 100_000
        assert archive.tag == "app:1.0"

    def test_write_to(self) -> None:
        output = BytesIO()
        TarArchive.from_bytes(b"content").write_to(output)
        assert output.getvalue() == b"content"

    def test_layer_archive_closed(self, tmp_path) -> None:
        path = tmp_path / "layer.tar"
        path.write_bytes(b"layer")
        archive = LayerArchive(path)

        assert b"".join(archive.iter_bytes()) == b"layer"
        archive.close()
        with pytest.raises(DockerStreamError):
            archive.iter_bytes()

    def test_container_content_from_bytes(self) -> None:
        content = ContainerContent.of(b"tar")
        assert content.destination_path == "/"
        assert b"".join(content.archive.iter_bytes()) == b"tar"
