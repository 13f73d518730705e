"""Violation records shared by the decoder and the validator.

Decode failures and validation failures use the same shape so callers see one
failure list, never two error models.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel


class ViolationKind(StrEnum):
    """Where in the pipeline a violation was detected."""

    MALFORMED_INPUT = "malformed_input"
    UNKNOWN_FIELD = "unknown_field"
    TYPE_MISMATCH = "type_mismatch"
    CONSTRAINT = "constraint"
    CROSS_FIELD = "cross_field"

    @property
    def is_decode_error(self) -> bool:
        return self in _DECODE_KINDS


_DECODE_KINDS = frozenset(
    {ViolationKind.MALFORMED_INPUT, ViolationKind.UNKNOWN_FIELD, ViolationKind.TYPE_MISMATCH}
)


class Violation(BaseModel):
    """One problem found in a configuration.

    Attributes:
        path: Dotted location within the configuration tree (``server.port``).
            Empty for problems with the document as a whole.
        message: Human-readable description, phrased to follow the path.
        kind: The stage and category that produced the violation.
        rule: Name of the cross-field rule, for ``cross_field`` violations.
    """

    model_config = {"frozen": True}

    path: str
    message: str
    kind: ViolationKind
    rule: str | None = None

    def __str__(self) -> str:
        if not self.path:
            return self.message
        return f"{self.path} {self.message}"


def join_path(parent: str, child: str | int) -> str:
    """Append a field name or sequence index to a dotted path.

    Examples:
        >>> join_path("", "server")
        'server'
        >>> join_path("server", "port")
        'server.port'
        >>> join_path("server.requestLog.outputs", 0)
        'server.requestLog.outputs[0]'
    """
    if isinstance(child, int):
        return f"{parent}[{child}]"
    if not parent:
        return child
    return f"{parent}.{child}"
