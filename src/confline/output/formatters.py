"""Rich/JSON rendering of configuration errors.

Humans get one status line followed by every violation, each with its path
and message.  Machines (``--json``) get an :class:`ErrorReport`.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, Field
from rich.text import Text

from confline.domain.violations import Violation
from confline.output.console import create_console, get_output

if TYPE_CHECKING:
    from confline.domain.errors import ConfigurationError


class ErrorReport(BaseModel):
    """Structured payload for a failed command.

    Attributes:
        ok: Always False; mirrors the success payload shape.
        op: Name of the command that was aborted.
        code: Error class code (``VALIDATION_FAILED``, ``SOURCE_NOT_FOUND``...).
        message: One-line summary.
        location: The configuration location, if one was given.
        violations: Every problem found, in report order.
    """

    model_config = {"frozen": True}

    ok: bool = False
    op: str
    code: str
    message: str
    location: str | None = None
    violations: list[Violation] = Field(default_factory=list)


def build_report(op: str, error: ConfigurationError) -> ErrorReport:
    return ErrorReport(
        op=op,
        code=error.code,
        message=error.message,
        location=error.location,
        violations=list(error.violations),
    )


def render_error(report: ErrorReport, *, verbose: bool = False) -> str:
    """Render *report* to a styled string via Rich.

    Violation text is printed literally (no markup) and never wrapped, so
    each problem stays on one line.
    """
    console = create_console()
    line = Text()
    line.append("ERROR", style="confline.error")
    line.append(f"  {report.op}", style="confline.op")
    line.append(f": {report.message}")
    if verbose:
        line.append(f" [{report.code}]", style="confline.kind")
    console.print(line, soft_wrap=True)

    for violation in report.violations:
        entry = Text("  * ")
        if violation.path:
            entry.append(violation.path, style="confline.path")
            entry.append(" ")
        entry.append(violation.message)
        if verbose:
            entry.append(f" ({violation.kind})", style="confline.kind")
        console.print(entry, soft_wrap=True)

    return get_output(console).rstrip("\n")


def format_error(
    op: str,
    error: ConfigurationError,
    *,
    json_output: bool = False,
    verbose: bool = False,
) -> str:
    """Format a configuration error for display.

    Args:
        op: Name of the command that was aborted.
        error: The error to format.
        json_output: If True, return JSON; otherwise human-readable text.
        verbose: Include error codes and violation kinds in human output.
    """
    report = build_report(op, error)
    if json_output:
        return report.model_dump_json(indent=2)
    return render_error(report, verbose=verbose)
