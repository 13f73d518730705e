"""ConfigurationPipeline: load, validate, and dispatch one command run.

States, strictly in order::

    START -> TYPE_RESOLVED -> SOURCE_OPENED? -> DECODED -> VALIDATED
          -> LOGGING_INITIALIZED -> DISPATCHED

Any failure moves the run to ABORTED and re-raises.  The command body is
only reached with a configuration that produced zero violations.

INVARIANT: the source stream is closed before the run leaves DECODED, on
every path.  A pipeline instance holds no per-run state; everything about a
run lives in its :class:`PipelineRun`.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from confline.config.logging import configure_logging
from confline.domain.errors import ConfigurationValidationError
from confline.infrastructure.sources import DefaultSourceProvider, SourceProvider
from confline.services.decoder import ConfigurationDecoder
from confline.services.resolver import resolve_configuration_type
from confline.services.validator import ConfigurationValidator

if TYPE_CHECKING:
    from confline.config.models import Configuration, LoggingConfiguration

logger = logging.getLogger(__name__)

LoggingBootstrap = Callable[["LoggingConfiguration", str], None]


class PipelineState(StrEnum):
    START = "start"
    TYPE_RESOLVED = "type_resolved"
    SOURCE_OPENED = "source_opened"
    DECODED = "decoded"
    VALIDATED = "validated"
    LOGGING_INITIALIZED = "logging_initialized"
    DISPATCHED = "dispatched"
    ABORTED = "aborted"


@dataclass
class PipelineRun:
    """Record of a single pass through the pipeline."""

    command: str
    location: str | None = None
    state: PipelineState = PipelineState.START
    history: list[PipelineState] = field(default_factory=lambda: [PipelineState.START])
    configuration_class: type[Configuration] | None = None
    configuration: Configuration | None = None
    error: BaseException | None = None

    def advance(self, state: PipelineState) -> None:
        self.state = state
        self.history.append(state)
        logger.debug("Command %s: %s", self.command, state)

    def abort(self, error: BaseException) -> None:
        self.error = error
        self.advance(PipelineState.ABORTED)


class ConfigurationPipeline:
    """Sequence type resolution, decoding, validation, logging, and dispatch.

    Collaborators are injectable for tests and embedding; the defaults read
    from the filesystem/stdin, parse YAML, and configure structlog.
    """

    def __init__(
        self,
        *,
        source_provider: SourceProvider | None = None,
        decoder: ConfigurationDecoder | None = None,
        validator: ConfigurationValidator | None = None,
        logging_bootstrap: LoggingBootstrap = configure_logging,
    ) -> None:
        self.source_provider = source_provider or DefaultSourceProvider()
        self.decoder = decoder or ConfigurationDecoder()
        self.validator = validator or ConfigurationValidator()
        self.logging_bootstrap = logging_bootstrap

    def load(
        self,
        run: PipelineRun,
        configuration_class: type[Configuration],
        overrides: Mapping[str, str],
    ) -> Configuration:
        """Open, decode, and validate; stops at VALIDATED."""
        if run.location is None:
            configuration = self.decoder.decode(None, configuration_class, overrides)
        else:
            stream = self.source_provider.open(run.location)
            run.advance(PipelineState.SOURCE_OPENED)
            with stream:
                configuration = self.decoder.decode(
                    stream, configuration_class, overrides, location=run.location
                )
        run.advance(PipelineState.DECODED)

        violations = self.validator.validate(configuration)
        if violations:
            raise ConfigurationValidationError(violations, location=run.location)
        run.configuration = configuration
        run.advance(PipelineState.VALIDATED)
        return configuration

    def execute(
        self,
        command: Any,
        namespace: Mapping[str, Any],
        *,
        service_name: str,
        overrides: Mapping[str, str] | None = None,
    ) -> PipelineRun:
        """Run *command* with a validated configuration.

        ``namespace["file"]`` is the optional configuration location.

        Raises:
            UnresolvableConfigurationTypeError: The command names no usable
                configuration class.
            ConfigurationError: Source, decode, or validation failure; the
                command body is not run.
        """
        run = PipelineRun(command=getattr(command, "name", type(command).__name__))
        run.location = namespace.get("file")
        try:
            run.configuration_class = resolve_configuration_type(command)
            run.advance(PipelineState.TYPE_RESOLVED)
            configuration = self.load(run, run.configuration_class, overrides or {})
            assert configuration.logging is not None
            self.logging_bootstrap(configuration.logging, service_name)
            run.advance(PipelineState.LOGGING_INITIALIZED)
        except Exception as exc:
            run.abort(exc)
            raise

        # The command body's own failures are not the pipeline's concern.
        run.advance(PipelineState.DISPATCHED)
        command.run(configuration, dict(namespace))
        return run
