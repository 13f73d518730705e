"""Field constraints and cross-field rules.

Configuration node types declare two explicit tables:

- ``field_constraints``: ``FieldConstraint`` entries, each naming one field,
  a predicate over that field's value, and the failure message.
- ``cross_field_rules``: ``CrossFieldRule`` entries, each a named predicate
  over the whole node.

The validator walks the tree and evaluates both tables; nothing here is
discovered from annotations or method names.

INVARIANT: ``None`` satisfies every field constraint except ``not_null``, so
optional fields are only checked when they are set.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any

from confline.domain.units import Duration, Size, SizeUnit, TimeUnit
from confline.domain.violations import Violation, ViolationKind

MIN_PORT = 1
MAX_PORT = 65535


@dataclass(frozen=True)
class FieldConstraint:
    """A predicate over one field's value plus its failure message.

    Attributes:
        field: Python attribute name of the constrained field.
        predicate: Returns True when the value is acceptable.
        message: Failure text, phrased to follow the field path.
    """

    field: str
    predicate: Callable[[Any], bool]
    message: str

    def check(self, value: Any) -> bool:
        return bool(self.predicate(value))

    def evaluate(self, value: Any, path: str) -> Violation | None:
        if self.check(value):
            return None
        return Violation(path=path, message=self.message, kind=ViolationKind.CONSTRAINT)


@dataclass(frozen=True)
class CrossFieldRule:
    """A named predicate over a whole configuration node."""

    name: str
    check: Callable[[Any], bool]
    message: str

    def evaluate(self, node: Any, path: str) -> Violation | None:
        if self.check(node):
            return None
        return Violation(
            path=path,
            message=self.message,
            kind=ViolationKind.CROSS_FIELD,
            rule=self.name,
        )


def _optional(check: Callable[[Any], bool]) -> Callable[[Any], bool]:
    return lambda value: value is None or check(value)


# ---------------------------------------------------------------------------
# Constraint factories
# ---------------------------------------------------------------------------


def not_null(field: str) -> FieldConstraint:
    return FieldConstraint(field, lambda value: value is not None, "may not be null")


def minimum(field: str, bound: int | float) -> FieldConstraint:
    return FieldConstraint(
        field,
        _optional(lambda value: value >= bound),
        f"must be greater than or equal to {bound}",
    )


def maximum(field: str, bound: int | float) -> FieldConstraint:
    return FieldConstraint(
        field,
        _optional(lambda value: value <= bound),
        f"must be less than or equal to {bound}",
    )


def port_range(field: str, low: int = MIN_PORT, high: int = MAX_PORT) -> FieldConstraint:
    """Network port constraint; both bounds are inclusive."""
    return FieldConstraint(
        field,
        _optional(lambda value: low <= value <= high),
        f"must be between {low} and {high}",
    )


def min_duration(
    field: str, quantity: int, unit: TimeUnit = TimeUnit.SECONDS
) -> FieldConstraint:
    bound = Duration(quantity, unit)
    return FieldConstraint(
        field,
        _optional(lambda value: value >= bound),
        f"must be greater than or equal to {bound}",
    )


def max_duration(
    field: str, quantity: int, unit: TimeUnit = TimeUnit.SECONDS
) -> FieldConstraint:
    bound = Duration(quantity, unit)
    return FieldConstraint(
        field,
        _optional(lambda value: value <= bound),
        f"must be less than or equal to {bound}",
    )


def min_size(field: str, quantity: int, unit: SizeUnit = SizeUnit.BYTES) -> FieldConstraint:
    bound = Size(quantity, unit)
    return FieldConstraint(
        field,
        _optional(lambda value: value >= bound),
        f"must be greater than or equal to {bound}",
    )


def max_size(field: str, quantity: int, unit: SizeUnit = SizeUnit.BYTES) -> FieldConstraint:
    bound = Size(quantity, unit)
    return FieldConstraint(
        field,
        _optional(lambda value: value <= bound),
        f"must be less than or equal to {bound}",
    )


def one_of(field: str, choices: Iterable[str], *, case_sensitive: bool = True) -> FieldConstraint:
    """Enumerated-range constraint over string values."""
    allowed = tuple(choices)
    folded = frozenset(choice.casefold() for choice in allowed)

    def check(value: Any) -> bool:
        if case_sensitive:
            return value in allowed
        return isinstance(value, str) and value.casefold() in folded

    return FieldConstraint(field, _optional(check), f"must be one of [{', '.join(allowed)}]")


def satisfies(field: str, predicate: Callable[[Any], bool], message: str) -> FieldConstraint:
    """Ad-hoc constraint for checks the factories above do not cover."""
    return FieldConstraint(field, _optional(predicate), message)
