"""Command: print the effective configuration after defaults and overrides."""

from __future__ import annotations

from typing import Any

import click

from confline.commands._base import ConfiguredCommand
from confline.config.models import Configuration
from confline.services.decoder import ConfigurationDecoder

REDACTED = "********"


def redact(data: Any) -> Any:
    """Replace the value of every set ``*password*`` property."""
    if isinstance(data, dict):
        return {
            key: REDACTED if "password" in str(key).lower() and value is not None else redact(value)
            for key, value in data.items()
        }
    if isinstance(data, list):
        return [redact(item) for item in data]
    return data


class DumpCommand(ConfiguredCommand):
    """Print the validated configuration as YAML."""

    examples = """\
  confline dump service.yml
  confline dump service.yml --show-secrets
  confline -D dw.server.port=9090 dump service.yml"""

    def __init__(self, configuration_class: type[Configuration] = Configuration) -> None:
        super().__init__(
            "dump",
            "Prints the effective configuration as YAML.",
            configuration_class,
        )

    def configure(self) -> list[click.Parameter]:
        return [
            *super().configure(),
            click.Option(
                ["--show-secrets"],
                is_flag=True,
                help="Print password values instead of masking them.",
            ),
        ]

    def run(self, configuration: Configuration, namespace: dict[str, Any]) -> None:
        data = configuration.model_dump(mode="json", by_alias=True)
        if not namespace.get("show_secrets"):
            data = redact(data)
        click.echo(ConfigurationDecoder.dump_tree(data), nl=False)
