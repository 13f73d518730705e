"""confline: typed configuration loading and validation for service commands."""

from confline.config.models import (
    Configuration,
    ConfigurationNode,
    GzipConfiguration,
    LoggingConfiguration,
    LogOutputConfiguration,
    RequestLogConfiguration,
    ServerConfiguration,
)
from confline.domain.constraints import CrossFieldRule, FieldConstraint
from confline.domain.errors import (
    ConfigurationDecodeError,
    ConfigurationError,
    ConfigurationValidationError,
    MalformedUnitValueError,
    SourceNotFoundError,
    SourceUnreadableError,
    UnresolvableConfigurationTypeError,
)
from confline.domain.units import Duration, Size, SizeUnit, TimeUnit
from confline.domain.violations import Violation, ViolationKind

__version__ = "0.1.0"

__all__ = [
    "Configuration",
    "ConfigurationDecodeError",
    "ConfigurationError",
    "ConfigurationNode",
    "ConfigurationValidationError",
    "CrossFieldRule",
    "Duration",
    "FieldConstraint",
    "GzipConfiguration",
    "LogOutputConfiguration",
    "LoggingConfiguration",
    "MalformedUnitValueError",
    "RequestLogConfiguration",
    "ServerConfiguration",
    "Size",
    "SizeUnit",
    "SourceNotFoundError",
    "SourceUnreadableError",
    "TimeUnit",
    "UnresolvableConfigurationTypeError",
    "Violation",
    "ViolationKind",
    "__version__",
]
