"""AppContext: shared Click context for all commands of a service.

Created once by the service's root group and flows to every subcommand via
``@click.pass_obj``.  Owns the pipeline wiring for this invocation and the
error reporting (stderr routing + exit codes).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, NoReturn

import click

from confline.domain.errors import ConfigurationError
from confline.infrastructure.sources import DefaultSourceProvider
from confline.output.formatters import format_error
from confline.services.decoder import ConfigurationDecoder
from confline.services.pipeline import ConfigurationPipeline, PipelineRun

if TYPE_CHECKING:
    from confline.cli import Service
    from confline.commands._base import ConfiguredCommand
    from confline.config.settings import RuntimeSettings


class AppContext:
    """Per-invocation state shared through Click's command hierarchy.

    The pipeline is built lazily so ``--help`` and ``--version`` never touch
    any configuration source.
    """

    def __init__(
        self,
        service: Service,
        settings: RuntimeSettings,
        overrides: dict[str, str],
    ) -> None:
        self.service = service
        self.settings = settings
        self.overrides = overrides
        self._pipeline: ConfigurationPipeline | None = None

    @property
    def pipeline(self) -> ConfigurationPipeline:
        if self._pipeline is None:
            self._pipeline = ConfigurationPipeline(
                source_provider=self.service.source_provider
                or DefaultSourceProvider(stdin_marker=self.settings.stdin_marker),
                decoder=ConfigurationDecoder(override_prefix=self.settings.override_prefix),
                logging_bootstrap=self.service.logging_bootstrap,
            )
        return self._pipeline

    def run_configured(self, command: ConfiguredCommand, namespace: dict[str, Any]) -> PipelineRun:
        """Run *command* through the pipeline, reporting configuration errors.

        On a configuration error every problem is written to stderr and the
        process exits with status 1; the command body never runs.
        """
        try:
            return self.pipeline.execute(
                command,
                namespace,
                service_name=self.service.name,
                overrides=self.overrides,
            )
        except ConfigurationError as exc:
            self.fail(command.name, exc)

    def fail(self, op: str, error: ConfigurationError) -> NoReturn:
        """Write *error* to stderr and exit with status 1."""
        output = format_error(
            op,
            error,
            json_output=self.settings.json_output,
            verbose=self.settings.verbose,
        )
        click.echo(output, err=True)
        raise SystemExit(1)
