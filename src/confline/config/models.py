"""Pydantic configuration models with code-baked defaults.

Sparse file contract: defaults baked here, configuration files only contain
overrides.  ``Configuration()`` with no input at all is a valid configuration.

File property names are camelCase (``requestLog``, ``maxThreads``); the
Python attribute names are snake_case and are also accepted on input.

Every node declares its ``field_constraints`` and ``cross_field_rules``
tables next to its fields; a subclass table extends the inherited ones.
Pydantic only checks structure (types, unknown fields); range and
relationship checks are left to the validator so that all of them can be
reported together.
"""

from __future__ import annotations

import os
from typing import ClassVar
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

from confline.domain.constraints import (
    CrossFieldRule,
    FieldConstraint,
    min_duration,
    min_size,
    minimum,
    not_null,
    one_of,
    port_range,
    satisfies,
)
from confline.domain.units import Duration, Size, SizeUnit, TimeUnit

LOG_LEVELS: tuple[str, ...] = (
    "OFF",
    "CRITICAL",
    "ERROR",
    "WARN",
    "WARNING",
    "INFO",
    "DEBUG",
    "TRACE",
    "ALL",
)
LOG_FORMATS: tuple[str, ...] = ("console", "json")
OUTPUT_TYPES: tuple[str, ...] = ("console", "file")
CONSOLE_TARGETS: tuple[str, ...] = ("stderr", "stdout")


def is_time_zone(name: str) -> bool:
    """True if *name* is ``UTC``, ``local``, or a known IANA zone."""
    if name in ("UTC", "local"):
        return True
    try:
        ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        return False
    return True


def _is_level(value: str) -> bool:
    return value.upper() in LOG_LEVELS


def _cpu_count() -> int:
    return os.cpu_count() or 1


class ConfigurationNode(BaseModel):
    """Base for every configuration section.

    Frozen, strict about unknown fields, camelCase on the outside.
    """

    model_config = {
        "frozen": True,
        "extra": "forbid",
        "alias_generator": to_camel,
        "populate_by_name": True,
    }

    field_constraints: ClassVar[tuple[FieldConstraint, ...]] = ()
    cross_field_rules: ClassVar[tuple[CrossFieldRule, ...]] = ()


# --- logging ---


class LogOutputConfiguration(ConfigurationNode):
    """One log destination: a console stream or a size-rotated file."""

    type: str = "console"
    threshold: str = "ALL"
    log_format: str = "console"
    target: str = "stderr"
    current_log_filename: str | None = None
    archived_file_count: int = 5
    max_file_size: Size | None = Size.mebibytes(10)

    field_constraints = (
        one_of("type", OUTPUT_TYPES),
        one_of("threshold", LOG_LEVELS, case_sensitive=False),
        one_of("log_format", LOG_FORMATS),
        one_of("target", CONSOLE_TARGETS),
        minimum("archived_file_count", 0),
        not_null("max_file_size"),
        min_size("max_file_size", 1, SizeUnit.KIBIBYTES),
    )
    cross_field_rules = (
        CrossFieldRule(
            "file_output_has_filename",
            lambda out: out.type != "file" or bool(out.current_log_filename),
            "must have currentLogFilename if type is file",
        ),
    )


class LoggingConfiguration(ConfigurationNode):
    """[logging] section: application log levels and outputs."""

    level: str = "INFO"
    loggers: dict[str, str] = Field(default_factory=dict)
    time_zone: str = "UTC"
    outputs: list[LogOutputConfiguration] = Field(
        default_factory=lambda: [LogOutputConfiguration()]
    )

    field_constraints = (
        one_of("level", LOG_LEVELS, case_sensitive=False),
        satisfies(
            "loggers",
            lambda loggers: all(_is_level(level) for level in loggers.values()),
            f"must map logger names to one of [{', '.join(LOG_LEVELS)}]",
        ),
        satisfies("time_zone", is_time_zone, "must be a known time zone"),
    )


# --- server ---


class RequestLogConfiguration(ConfigurationNode):
    """[server.requestLog] section."""

    time_zone: str = "UTC"
    outputs: list[LogOutputConfiguration] = Field(
        default_factory=lambda: [LogOutputConfiguration()]
    )

    field_constraints = (
        satisfies("time_zone", is_time_zone, "must be a known time zone"),
        not_null("outputs"),
    )


class GzipConfiguration(ConfigurationNode):
    """[server.gzip] section."""

    enabled: bool = True
    minimum_entity_size: Size | None = Size.bytes(256)
    buffer_size: Size | None = Size.kibibytes(8)
    excluded_user_agents: frozenset[str] = frozenset()
    compressed_mime_types: frozenset[str] = frozenset()
    included_methods: frozenset[str] | None = None

    field_constraints = (
        not_null("minimum_entity_size"),
        not_null("buffer_size"),
        min_size("buffer_size", 2, SizeUnit.KIBIBYTES),
    )


def _buffer_pool_sized_correctly(server: ServerConfiguration) -> bool:
    low, high = server.min_buffer_pool_size, server.max_buffer_pool_size
    return low is None or high is None or low <= high


class ServerConfiguration(ConfigurationNode):
    """[server] section: values consumed by the HTTP layer."""

    request_log: RequestLogConfiguration | None = Field(default_factory=RequestLogConfiguration)
    gzip: GzipConfiguration | None = Field(default_factory=GzipConfiguration)
    port: int = 8080
    admin_port: int = 8081
    max_threads: int = 1024
    min_threads: int = 8
    acceptor_threads: int = Field(default_factory=lambda: max(1, _cpu_count() // 2))
    selector_threads: int = Field(default_factory=_cpu_count)
    accept_queue_size: int | None = None
    reuse_address: bool = True
    so_linger_time: Duration | None = None
    use_server_header: bool = False
    use_date_header: bool = True
    use_forwarded_headers: bool = True
    use_direct_buffers: bool = True
    bind_host: str | None = None
    admin_username: str | None = None
    admin_password: str | None = None
    header_cache_size: Size | None = Size.bytes(512)
    output_buffer_size: Size | None = Size.kibibytes(32)
    max_request_header_size: Size | None = Size.kibibytes(8)
    max_response_header_size: Size | None = Size.kibibytes(8)
    input_buffer_size: Size | None = Size.kibibytes(8)
    idle_timeout: Duration | None = Duration.seconds(30)
    min_buffer_pool_size: Size | None = Size.bytes(64)
    buffer_pool_increment: Size | None = Size.bytes(1024)
    max_buffer_pool_size: Size | None = Size.kibibytes(64)
    max_queued_requests: int | None = None

    field_constraints = (
        not_null("request_log"),
        not_null("gzip"),
        port_range("port"),
        port_range("admin_port"),
        minimum("max_threads", 2),
        minimum("min_threads", 1),
        minimum("acceptor_threads", 1),
        minimum("selector_threads", 1),
        minimum("accept_queue_size", 1),
        not_null("header_cache_size"),
        min_size("header_cache_size", 128),
        not_null("output_buffer_size"),
        min_size("output_buffer_size", 8, SizeUnit.KIBIBYTES),
        not_null("max_request_header_size"),
        min_size("max_request_header_size", 1, SizeUnit.KIBIBYTES),
        not_null("max_response_header_size"),
        min_size("max_response_header_size", 1, SizeUnit.KIBIBYTES),
        not_null("input_buffer_size"),
        min_size("input_buffer_size", 1, SizeUnit.KIBIBYTES),
        not_null("idle_timeout"),
        min_duration("idle_timeout", 1, TimeUnit.MILLISECONDS),
        not_null("min_buffer_pool_size"),
        min_size("min_buffer_pool_size", 64),
        not_null("buffer_pool_increment"),
        min_size("buffer_pool_increment", 1, SizeUnit.KIBIBYTES),
        not_null("max_buffer_pool_size"),
        min_size("max_buffer_pool_size", 1, SizeUnit.KIBIBYTES),
        minimum("max_queued_requests", 1),
    )
    cross_field_rules = (
        CrossFieldRule(
            "thread_pool_sized_correctly",
            lambda server: server.min_threads <= server.max_threads,
            "must have a smaller minThreads than maxThreads",
        ),
        CrossFieldRule(
            "buffer_pool_sized_correctly",
            _buffer_pool_sized_correctly,
            "must have a smaller minBufferPoolSize than maxBufferPoolSize",
        ),
        CrossFieldRule(
            "admin_username_defined",
            lambda server: server.admin_password is None or server.admin_username is not None,
            "must have adminUsername if adminPassword is defined",
        ),
        CrossFieldRule(
            "ports_distinct",
            lambda server: server.port != server.admin_port,
            "must use different values for port and adminPort",
        ),
    )


# --- root ---


class Configuration(ConfigurationNode):
    """Root configuration every configured command consumes.

    Services subclass this to add their own sections; the ``server`` and
    ``logging`` sections are always present.
    """

    server: ServerConfiguration | None = Field(default_factory=ServerConfiguration)
    logging: LoggingConfiguration | None = Field(default_factory=LoggingConfiguration)

    field_constraints = (
        not_null("server"),
        not_null("logging"),
    )
