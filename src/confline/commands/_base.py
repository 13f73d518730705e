"""Command boundary and the Click classes commands are rendered into.

A :class:`Command` contributes its name, description, and Click parameters;
the service turns it into a Click command whose callback receives the shared
:class:`~confline.commands._context.AppContext`.

:class:`ConfiguredCommand` adds the optional positional ``file`` argument and
runs the configuration pipeline before its own :meth:`run`.  Subclasses that
override :meth:`configure` must extend ``super().configure()`` so the
``file`` argument is kept.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

import click

from confline.config.models import Configuration

if TYPE_CHECKING:
    from confline.commands._context import AppContext


def _add_examples_option(cmd: click.Command | click.Group, examples: str) -> None:
    """Attach an eager ``--examples`` flag to a Click command or group."""

    def show_examples(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
        if not value:
            return
        click.echo(f"Examples for '{ctx.command_path}':\n")
        click.echo(examples)
        ctx.exit(0)

    cmd.params.append(
        click.Option(
            ["--examples"],
            is_flag=True,
            expose_value=False,
            is_eager=True,
            callback=show_examples,
            help="Show usage examples.",
        )
    )


class ConflineCommand(click.Command):
    """Click Command subclass that supports an ``--examples`` flag."""

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.examples = examples
        if examples:
            _add_examples_option(self, examples)


class ConflineGroup(click.Group):
    """Click Group subclass that supports an ``--examples`` flag."""

    command_class = ConflineCommand

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.examples = examples
        if examples:
            _add_examples_option(self, examples)


class Command(ABC):
    """A named unit of work a service exposes on its command line."""

    examples: str | None = None

    def __init__(self, name: str, description: str) -> None:
        self.name = name
        self.description = description

    def configure(self) -> list[click.Parameter]:
        """Return the Click parameters this command accepts."""
        return []

    @abstractmethod
    def execute(self, app: AppContext, namespace: dict[str, Any]) -> None:
        """Entry point called by Click with the parsed arguments."""

    def to_click(self) -> click.Command:
        """Render this command as a Click command."""

        @click.pass_obj
        def callback(app: AppContext, **namespace: Any) -> None:
            self.execute(app, namespace)

        return ConflineCommand(
            name=self.name,
            help=self.description,
            params=self.configure(),
            callback=callback,
            examples=self.examples,
        )


class ConfiguredCommand(Command):
    """A command whose first argument is the location of a configuration file.

    The file is decoded into an instance of ``configuration_class``, which is
    validated; only a valid configuration reaches :meth:`run`.
    """

    def __init__(
        self,
        name: str,
        description: str,
        configuration_class: type[Configuration] = Configuration,
    ) -> None:
        super().__init__(name, description)
        self.configuration_class = configuration_class

    def configure(self) -> list[click.Parameter]:
        return [
            click.Argument(["file"], required=False, metavar="[FILE]"),
        ]

    def execute(self, app: AppContext, namespace: dict[str, Any]) -> None:
        app.run_configured(self, namespace)

    @abstractmethod
    def run(self, configuration: Configuration, namespace: dict[str, Any]) -> None:
        """Do the command's work with a validated configuration."""
