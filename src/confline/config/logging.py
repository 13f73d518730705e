"""structlog configuration driven by a validated ``LoggingConfiguration``.

This is the logging bootstrap the pipeline triggers once per command run,
after validation and before dispatch.  Each configured output becomes one
stdlib handler on the root logger:

- ``logFormat: console``: structlog console rendering (colors on a TTY)
- ``logFormat: json``: structured JSON lines
"""

from __future__ import annotations

import logging
import logging.handlers
import sys
from datetime import datetime
from typing import TYPE_CHECKING, Any
from zoneinfo import ZoneInfo

import structlog

if TYPE_CHECKING:
    from structlog.types import EventDict, Processor, WrappedLogger

    from confline.config.models import LogOutputConfiguration, LoggingConfiguration

# OFF sits above CRITICAL so nothing passes; ALL lets everything through
# without meaning "inherit from parent" the way NOTSET does on named loggers.
# WARN and TRACE are the logback names found in existing service files.
LEVELS: dict[str, int] = {
    "OFF": logging.CRITICAL + 10,
    "CRITICAL": logging.CRITICAL,
    "ERROR": logging.ERROR,
    "WARN": logging.WARNING,
    "WARNING": logging.WARNING,
    "INFO": logging.INFO,
    "DEBUG": logging.DEBUG,
    "TRACE": 5,
    "ALL": 1,
}


def level_for(name: str) -> int:
    """Map a configured level name (any case) to a stdlib level number."""
    return LEVELS[name.upper()]


def _service_adder(service_name: str) -> Processor:
    def add_service(_logger: WrappedLogger, _method: str, event_dict: EventDict) -> EventDict:
        event_dict.setdefault("service", service_name)
        return event_dict

    return add_service


def _timestamper(time_zone: str) -> Processor:
    if time_zone == "UTC":
        return structlog.processors.TimeStamper(fmt="iso", utc=True)
    if time_zone == "local":
        return structlog.processors.TimeStamper(fmt="iso", utc=False)
    zone = ZoneInfo(time_zone)

    def stamp(_logger: WrappedLogger, _method: str, event_dict: EventDict) -> EventDict:
        event_dict["timestamp"] = datetime.now(zone).isoformat()
        return event_dict

    return stamp


def _build_handler(output: LogOutputConfiguration) -> logging.Handler:
    if output.type == "file":
        assert output.current_log_filename is not None
        max_bytes = output.max_file_size.to_bytes() if output.max_file_size else 0
        return logging.handlers.RotatingFileHandler(
            output.current_log_filename,
            maxBytes=max_bytes,
            backupCount=output.archived_file_count,
            encoding="utf-8",
            delay=True,
        )
    stream = sys.stdout if output.target == "stdout" else sys.stderr
    return logging.StreamHandler(stream)


def _renderer(output: LogOutputConfiguration, handler: logging.Handler) -> Processor:
    if output.log_format == "json":
        return structlog.processors.JSONRenderer()
    stream: Any = getattr(handler, "stream", None)
    colors = output.type == "console" and stream is not None and stream.isatty()
    return structlog.dev.ConsoleRenderer(colors=colors)


def configure_logging(config: LoggingConfiguration, service_name: str) -> None:
    """Configure structlog processors and output routing.

    Replaces any handlers already on the root logger, so repeated calls
    never stack outputs.

    Args:
        config: The validated ``logging`` section of the configuration.
        service_name: Added to every event as ``service``.
    """
    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        _service_adder(service_name),
        _timestamper(config.time_zone),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()

    for output in config.outputs:
        handler = _build_handler(output)
        handler.setLevel(level_for(output.threshold))
        handler.setFormatter(
            structlog.stdlib.ProcessorFormatter(
                foreign_pre_chain=shared_processors,
                processors=[
                    structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                    _renderer(output, handler),
                ],
            )
        )
        root_logger.addHandler(handler)

    root_logger.setLevel(level_for(config.level))
    for name, level in config.loggers.items():
        logging.getLogger(name).setLevel(level_for(level))
