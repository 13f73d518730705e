"""Configuration sources: turn a location string into a readable byte stream.

Location forms understood by :class:`DefaultSourceProvider`:

- ``-`` (configurable): standard input
- ``resource:<package>/<name>``: a file shipped inside an importable package
- anything else: a filesystem path

INVARIANT: ``open()`` returns a fresh stream the caller owns and must close.
Closing a stdin-backed stream never closes the process's stdin.
"""

from __future__ import annotations

import io
import sys
from importlib import resources
from pathlib import Path
from typing import BinaryIO, Protocol

from confline.domain.errors import SourceNotFoundError, SourceUnreadableError

RESOURCE_SCHEME = "resource:"


class SourceProvider(Protocol):
    """Anything that can open a configuration location."""

    def open(self, location: str) -> BinaryIO: ...


class FileSourceProvider:
    """Open configuration files from the local filesystem."""

    def open(self, location: str) -> BinaryIO:
        path = Path(location).expanduser()
        try:
            return path.open("rb")
        except (FileNotFoundError, NotADirectoryError) as exc:
            msg = f"File {location} not found"
            raise SourceNotFoundError(msg, location=location) from exc
        except IsADirectoryError as exc:
            msg = f"{location} is a directory, not a configuration file"
            raise SourceUnreadableError(msg, location=location) from exc
        except OSError as exc:
            msg = f"File {location} could not be read: {exc.strerror or exc}"
            raise SourceUnreadableError(msg, location=location) from exc


class StdinSourceProvider:
    """Read the whole configuration from standard input.

    The input is buffered into memory so the returned stream can be closed
    without touching the real stdin.
    """

    def __init__(self, stream: BinaryIO | None = None) -> None:
        self._stream = stream

    def open(self, location: str) -> BinaryIO:
        stream = self._stream if self._stream is not None else sys.stdin.buffer
        try:
            return io.BytesIO(stream.read())
        except OSError as exc:
            msg = f"Standard input could not be read: {exc.strerror or exc}"
            raise SourceUnreadableError(msg, location=location) from exc


class ResourceSourceProvider:
    """Open files packaged inside an importable Python package."""

    def open(self, location: str) -> BinaryIO:
        reference = location.removeprefix(RESOURCE_SCHEME)
        package, _, name = reference.partition("/")
        if not package or not name:
            msg = f"Resource {location} must look like {RESOURCE_SCHEME}<package>/<name>"
            raise SourceNotFoundError(msg, location=location)
        try:
            return resources.files(package).joinpath(name).open("rb")
        except (ModuleNotFoundError, FileNotFoundError, NotADirectoryError) as exc:
            msg = f"Resource {location} not found"
            raise SourceNotFoundError(msg, location=location) from exc
        except OSError as exc:
            msg = f"Resource {location} could not be read: {exc.strerror or exc}"
            raise SourceUnreadableError(msg, location=location) from exc


class DefaultSourceProvider:
    """Dispatch on the location form to the matching provider."""

    def __init__(
        self,
        *,
        stdin_marker: str = "-",
        files: SourceProvider | None = None,
        stdin: SourceProvider | None = None,
        packaged: SourceProvider | None = None,
    ) -> None:
        self.stdin_marker = stdin_marker
        self._files = files or FileSourceProvider()
        self._stdin = stdin or StdinSourceProvider()
        self._packaged = packaged or ResourceSourceProvider()

    def open(self, location: str) -> BinaryIO:
        if location == self.stdin_marker:
            return self._stdin.open(location)
        if location.startswith(RESOURCE_SCHEME):
            return self._packaged.open(location)
        return self._files.open(location)
