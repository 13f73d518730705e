"""Command: parse and validate a configuration file without running anything."""

from __future__ import annotations

import logging
from typing import Any

import click

from confline.commands._base import ConfiguredCommand
from confline.config.models import Configuration

logger = logging.getLogger(__name__)


class CheckCommand(ConfiguredCommand):
    """Report whether a configuration decodes and validates cleanly."""

    examples = """\
  confline check
  confline check service.yml
  cat service.yml | confline check -
  confline -D dw.server.port=9090 check service.yml"""

    def __init__(self, configuration_class: type[Configuration] = Configuration) -> None:
        super().__init__(
            "check",
            "Parses and validates the configuration file.",
            configuration_class,
        )

    def run(self, configuration: Configuration, namespace: dict[str, Any]) -> None:
        logger.debug("Configuration %s validated", namespace.get("file") or "defaults")
        click.echo("Configuration is OK")
