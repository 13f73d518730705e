"""Built-in commands every service gets.

Provides register_commands() which adds the configured commands shipped with
confline to a service, bound to the service's configuration class.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from confline.cli import Service


def register_commands(service: Service) -> None:
    """Register the built-in commands on *service*.

    Uses deferred imports so modules are only loaded when a service is built.
    """
    from confline.commands.check import CheckCommand
    from confline.commands.dump import DumpCommand

    service.add_command(CheckCommand(service.configuration_class))
    service.add_command(DumpCommand(service.configuration_class))
