"""Configuration type resolution.

A configured command names its configuration class explicitly when it is
constructed.  This module checks that declaration once, at registration time,
so a broken command fails the service at startup instead of on first use.
"""

from __future__ import annotations

import inspect
from typing import Any

from confline.config.models import Configuration
from confline.domain.errors import UnresolvableConfigurationTypeError


def resolve_configuration_type(command: Any) -> type[Configuration]:
    """Return the configuration class *command* was declared against.

    Raises:
        UnresolvableConfigurationTypeError: The command names no class, or a
            class that does not derive from :class:`Configuration`.
    """
    name = getattr(command, "name", type(command).__name__)
    declared = getattr(command, "configuration_class", None)
    if declared is None:
        msg = f"Command {name!r} does not declare a configuration class"
        raise UnresolvableConfigurationTypeError(msg)
    if not inspect.isclass(declared) or not issubclass(declared, Configuration):
        msg = (
            f"Command {name!r} declares {declared!r} as its configuration class; "
            f"expected a subclass of {Configuration.__qualname__}"
        )
        raise UnresolvableConfigurationTypeError(msg)
    return declared
