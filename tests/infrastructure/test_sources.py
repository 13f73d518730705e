"""Tests for configuration source providers."""

from __future__ import annotations

import io
from pathlib import Path

import pytest

from confline.domain.errors import SourceNotFoundError, SourceUnreadableError
from confline.infrastructure.sources import (
    DefaultSourceProvider,
    FileSourceProvider,
    ResourceSourceProvider,
    StdinSourceProvider,
)


class _Recorder:
    def __init__(self) -> None:
        self.locations: list[str] = []

    def open(self, location: str) -> io.BytesIO:
        self.locations.append(location)
        return io.BytesIO(b"")


class TestFileSourceProvider:
    def test_reads_bytes(self, tmp_path: Path) -> None:
        path = tmp_path / "service.yml"
        path.write_bytes(b"server:\n  port: 9090\n")
        with FileSourceProvider().open(str(path)) as stream:
            assert stream.read() == b"server:\n  port: 9090\n"

    def test_missing_file(self, tmp_path: Path) -> None:
        location = str(tmp_path / "missing.yml")
        with pytest.raises(SourceNotFoundError) as exc_info:
            FileSourceProvider().open(location)
        assert exc_info.value.location == location
        assert exc_info.value.message == f"File {location} not found"

    def test_missing_parent_directory(self, tmp_path: Path) -> None:
        with pytest.raises(SourceNotFoundError):
            FileSourceProvider().open(str(tmp_path / "nope" / "service.yml"))

    def test_directory(self, tmp_path: Path) -> None:
        with pytest.raises(SourceUnreadableError):
            FileSourceProvider().open(str(tmp_path))


class TestStdinSourceProvider:
    def test_buffers_input(self) -> None:
        source = io.BytesIO(b"logging:\n  level: DEBUG\n")
        stream = StdinSourceProvider(source).open("-")
        stream.close()
        assert not source.closed
        assert source.read() == b""

    def test_returns_content(self) -> None:
        stream = StdinSourceProvider(io.BytesIO(b"a: 1\n")).open("-")
        assert stream.read() == b"a: 1\n"


class TestResourceSourceProvider:
    def test_packaged_file(self) -> None:
        with ResourceSourceProvider().open("resource:confline.config/models.py") as stream:
            assert b"class Configuration" in stream.read()

    def test_missing_resource(self) -> None:
        with pytest.raises(SourceNotFoundError):
            ResourceSourceProvider().open("resource:confline.config/missing.yml")

    def test_missing_package(self) -> None:
        with pytest.raises(SourceNotFoundError):
            ResourceSourceProvider().open("resource:no_such_package_xyz/app.yml")

    @pytest.mark.parametrize("location", ["resource:", "resource:confline", "resource:/x.yml"])
    def test_malformed_location(self, location: str) -> None:
        with pytest.raises(SourceNotFoundError, match="must look like"):
            ResourceSourceProvider().open(location)


class TestDefaultSourceProvider:
    def _provider(self, **kwargs: str) -> tuple[DefaultSourceProvider, dict[str, _Recorder]]:
        recorders = {"files": _Recorder(), "stdin": _Recorder(), "packaged": _Recorder()}
        return DefaultSourceProvider(**kwargs, **recorders), recorders  # type: ignore[arg-type]

    def test_dash_means_stdin(self) -> None:
        provider, recorders = self._provider()
        provider.open("-")
        assert recorders["stdin"].locations == ["-"]
        assert recorders["files"].locations == []

    def test_custom_stdin_marker(self) -> None:
        provider, recorders = self._provider(stdin_marker="@stdin")
        provider.open("@stdin")
        provider.open("-")
        assert recorders["stdin"].locations == ["@stdin"]
        assert recorders["files"].locations == ["-"]

    def test_resource_scheme(self) -> None:
        provider, recorders = self._provider()
        provider.open("resource:pkg/app.yml")
        assert recorders["packaged"].locations == ["resource:pkg/app.yml"]

    def test_everything_else_is_a_file(self) -> None:
        provider, recorders = self._provider()
        provider.open("conf/service.yml")
        assert recorders["files"].locations == ["conf/service.yml"]
