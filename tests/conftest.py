"""Shared pytest fixtures and test helpers for confline tests.

Helpers are imported by test modules as ``from tests.conftest import ...``.
"""

from __future__ import annotations

import io
import logging
from collections.abc import Callable, Generator
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, BinaryIO

import pytest
import structlog
from click.testing import CliRunner

from confline.commands._base import ConfiguredCommand
from confline.config.models import Configuration, LoggingConfiguration


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def _restore_logging() -> Generator[None]:
    """Drop root handlers added during a test and reset structlog.

    Configured commands install handlers on the root logger; CliRunner closes
    the streams those handlers point at when the invocation ends.
    """
    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    yield
    for handler in root.handlers[:]:
        if handler not in original_handlers:
            root.removeHandler(handler)
    root.setLevel(original_level)
    structlog.reset_defaults()


@pytest.fixture
def write_config(tmp_path: Path) -> Callable[..., Path]:
    """Write YAML text to a file under tmp_path and return its path."""

    def _write(text: str, name: str = "service.yml") -> Path:
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return path

    return _write


# ---------------------------------------------------------------------------
# Shared test helpers
# ---------------------------------------------------------------------------


@dataclass
class RecordingBootstrap:
    """Logging bootstrap stand-in that remembers every call."""

    calls: list[tuple[LoggingConfiguration, str]] = field(default_factory=list)

    def __call__(self, config: LoggingConfiguration, service_name: str) -> None:
        self.calls.append((config, service_name))


class RecordingCommand(ConfiguredCommand):
    """Configured command that records what it was dispatched with."""

    def __init__(self, configuration_class: Any = Configuration) -> None:
        super().__init__("record", "Records its configuration.", configuration_class)
        self.received: list[tuple[Configuration, dict[str, Any]]] = []

    def run(self, configuration: Configuration, namespace: dict[str, Any]) -> None:
        self.received.append((configuration, namespace))


class TrackingProvider:
    """Source provider serving fixed bytes and remembering opened streams."""

    def __init__(self, payload: bytes) -> None:
        self.payload = payload
        self.opened: list[io.BytesIO] = []

    def open(self, location: str) -> BinaryIO:
        stream = io.BytesIO(self.payload)
        self.opened.append(stream)
        return stream


@pytest.fixture
def bootstrap() -> RecordingBootstrap:
    return RecordingBootstrap()


@pytest.fixture
def command() -> RecordingCommand:
    return RecordingCommand()
