"""Exception hierarchy for the configuration pipeline.

I/O errors (``SourceNotFoundError``, ``SourceUnreadableError``) report a
single problem.  Decode and validation errors carry every violation found at
their stage.  ``UnresolvableConfigurationTypeError`` is a programming defect
and is never aggregated or reported as a data problem.
"""

from __future__ import annotations

from collections.abc import Iterable

from confline.domain.violations import Violation


class ConfigurationError(Exception):
    """Base class for recoverable configuration failures."""

    code = "CONFIGURATION_ERROR"

    def __init__(self, message: str, *, location: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.location = location

    @property
    def violations(self) -> tuple[Violation, ...]:
        return ()


class SourceNotFoundError(ConfigurationError):
    """The configuration location does not resolve to anything."""

    code = "SOURCE_NOT_FOUND"


class SourceUnreadableError(ConfigurationError):
    """The configuration location exists but could not be read."""

    code = "SOURCE_UNREADABLE"


class _AggregatedError(ConfigurationError):
    def __init__(
        self,
        violations: Iterable[Violation],
        *,
        location: str | None = None,
    ) -> None:
        self._violations = tuple(violations)
        source = location or "default configuration"
        count = len(self._violations)
        noun = "error" if count == 1 else "errors"
        super().__init__(f"{source} has {count} {noun}", location=location)

    @property
    def violations(self) -> tuple[Violation, ...]:
        return self._violations


class ConfigurationDecodeError(_AggregatedError):
    """The source could not be turned into a configuration object."""

    code = "DECODE_FAILED"


class ConfigurationValidationError(_AggregatedError):
    """The decoded configuration object breaks one or more constraints."""

    code = "VALIDATION_FAILED"


class UnresolvableConfigurationTypeError(TypeError):
    """A command does not name a usable configuration type."""


class MalformedUnitValueError(ValueError):
    """A duration or size literal could not be parsed."""

    def __init__(self, text: object, reason: str) -> None:
        super().__init__(f"{text!r} is not a valid {reason}")
        self.text = text
        self.reason = reason
