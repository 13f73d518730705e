"""Service: a named set of commands sharing one configuration type.

A service renders itself as a Click group with global flags::

    myservice [--json] [-v] [-D dw.server.port=9090 ...] COMMAND [FILE] ...

Override namespace sources, highest priority first: ``-D`` definitions, then
environment entries whose names start with ``<prefix>.``.
"""

from __future__ import annotations

import os
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

import click

from confline import __version__
from confline.commands import register_commands
from confline.commands._base import Command, ConfiguredCommand, ConflineGroup
from confline.commands._context import AppContext
from confline.config.logging import configure_logging
from confline.config.models import Configuration
from confline.config.settings import RuntimeSettings
from confline.infrastructure.sources import SourceProvider
from confline.services.decoder import collect_overrides
from confline.services.pipeline import LoggingBootstrap
from confline.services.resolver import resolve_configuration_type


_ROOT_EXAMPLES = """\
  # Validate a file, then print the effective configuration
  {name} check service.yml
  {name} dump service.yml

  # Override a property for one run
  {name} -D dw.server.port=9090 check service.yml

  # Same override from the environment
  env dw.server.port=9090 {name} check service.yml"""


def parse_definitions(definitions: Iterable[str]) -> dict[str, str]:
    """Split ``KEY=VALUE`` strings; the last definition of a key wins."""
    parsed: dict[str, str] = {}
    for definition in definitions:
        key, sep, value = definition.partition("=")
        if not sep or not key.strip():
            msg = f"{definition!r} is not of the form KEY=VALUE"
            raise click.BadParameter(msg, param_hint="'-D' / '--define'")
        parsed[key.strip()] = value
    return parsed


class Service:
    """A named service and the commands it exposes.

    Attributes:
        name: Service identity, passed to the logging bootstrap.
        configuration_class: Configuration type the built-in commands load.
        source_provider: Overrides the default file/stdin/resource provider.
        logging_bootstrap: Called once per configured command run.
    """

    def __init__(
        self,
        name: str,
        configuration_class: type[Configuration] = Configuration,
        *,
        version: str = __version__,
        source_provider: SourceProvider | None = None,
        logging_bootstrap: LoggingBootstrap = configure_logging,
        environ: Mapping[str, str] | None = None,
        builtin_commands: bool = True,
    ) -> None:
        self.name = name
        self.configuration_class = configuration_class
        self.version = version
        self.source_provider = source_provider
        self.logging_bootstrap = logging_bootstrap
        self._environ = environ
        self.commands: dict[str, Command] = {}
        if builtin_commands:
            register_commands(self)

    def add_command(self, command: Command) -> None:
        """Register *command*; configured commands are type-checked now.

        Raises:
            UnresolvableConfigurationTypeError: A configured command names no
                usable configuration class.
        """
        if isinstance(command, ConfiguredCommand):
            resolve_configuration_type(command)
        self.commands[command.name] = command

    def cli(self) -> click.Group:
        """Build the Click group for this service."""

        @click.group(
            name=self.name,
            cls=ConflineGroup,
            invoke_without_command=True,
            help=f"{self.name}: configured service commands.",
            examples=self._examples(),
        )
        @click.version_option(version=self.version, prog_name=self.name)
        @click.option("--json", "json_output", is_flag=True, help="Report errors as JSON.")
        @click.option("-v", "--verbose", is_flag=True, help="Include error codes in reports.")
        @click.option(
            "-D",
            "--define",
            "definitions",
            multiple=True,
            metavar="KEY=VALUE",
            help="Override a configuration property (e.g. dw.server.port=9090).",
        )
        @click.pass_context
        def group(
            ctx: click.Context,
            json_output: bool,
            verbose: bool,
            definitions: tuple[str, ...],
        ) -> None:
            settings = RuntimeSettings.from_cli(
                json_output=json_output or None,
                verbose=verbose or None,
            )
            ctx.obj = AppContext(self, settings, self.overrides(settings, definitions))
            if ctx.invoked_subcommand is None:
                click.echo(ctx.get_help())

        for command in self.commands.values():
            group.add_command(command.to_click())
        return group

    def _examples(self) -> str | None:
        if not self.commands.keys() >= {"check", "dump"}:
            return None
        return _ROOT_EXAMPLES.format(name=self.name)

    def overrides(self, settings: RuntimeSettings, definitions: Iterable[str]) -> dict[str, str]:
        """Collect the override namespace for one invocation."""
        environ = self._environ if self._environ is not None else os.environ
        return collect_overrides(
            environ,
            parse_definitions(definitions),
            prefix=settings.override_prefix,
        )

    def run(self, argv: Sequence[str] | None = None, **kwargs: Any) -> Any:
        """Parse *argv* (default: ``sys.argv[1:]``) and run the chosen command."""
        return self.cli().main(args=argv, prog_name=self.name, **kwargs)


cli = Service("confline").cli()