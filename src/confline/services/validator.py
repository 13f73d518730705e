"""ConfigurationValidator: constraint and rule checks over a decoded tree.

Two phases, one pass over the tree:

1. Walk depth-first in field declaration order.  Each node's
   ``field_constraints`` are checked as its fields are visited; nested nodes
   (directly, inside lists, or as mapping values) are visited in place.
   A node's tables include those declared on its base classes.
2. After the walk, every visited node's ``cross_field_rules`` run in visit
   order, including nodes that already had field violations.

INVARIANT: validation is read-only and never stops at the first problem.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

from pydantic import BaseModel

from confline.domain.constraints import CrossFieldRule, FieldConstraint
from confline.domain.violations import Violation, join_path


def declared_table(node_type: type, attribute: str) -> tuple[Any, ...]:
    """Collect *attribute* from every class in the MRO, base classes first.

    A subclass table adds to the inherited ones instead of replacing them.
    Entries repeated by a subclass that spreads its parent's table are kept once.
    """
    entries: list[Any] = []
    for cls in reversed(node_type.__mro__):
        for entry in vars(cls).get(attribute, ()):
            if entry not in entries:
                entries.append(entry)
    return tuple(entries)


def _constraints_by_field(node_type: type[BaseModel]) -> dict[str, list[FieldConstraint]]:
    table: dict[str, list[FieldConstraint]] = {}
    for constraint in declared_table(node_type, "field_constraints"):
        if constraint.field not in node_type.model_fields:
            msg = (
                f"{node_type.__qualname__} constrains unknown field {constraint.field!r}"
            )
            raise AttributeError(msg)
        table.setdefault(constraint.field, []).append(constraint)
    return table


def _children(value: Any, path: str) -> Iterator[tuple[str, BaseModel]]:
    if isinstance(value, BaseModel):
        yield path, value
    elif isinstance(value, (list, tuple)):
        for index, item in enumerate(value):
            if isinstance(item, BaseModel):
                yield join_path(path, index), item
    elif isinstance(value, dict):
        for key, item in value.items():
            if isinstance(item, BaseModel):
                yield join_path(path, str(key)), item


class ConfigurationValidator:
    """Evaluate every field constraint and cross-field rule in a tree."""

    def validate(self, configuration: BaseModel) -> tuple[Violation, ...]:
        """Return all violations, ordered by where they were found.

        An empty tuple means the configuration is valid.
        """
        violations: list[Violation] = []
        visited: list[tuple[str, BaseModel]] = []
        self._walk(configuration, "", violations, visited)
        for path, node in visited:
            rules: tuple[CrossFieldRule, ...] = declared_table(type(node), "cross_field_rules")
            for rule in rules:
                violation = rule.evaluate(node, path)
                if violation is not None:
                    violations.append(violation)
        return tuple(violations)

    def is_valid(self, configuration: BaseModel) -> bool:
        return not self.validate(configuration)

    def _walk(
        self,
        node: BaseModel,
        path: str,
        violations: list[Violation],
        visited: list[tuple[str, BaseModel]],
    ) -> None:
        visited.append((path, node))
        node_type = type(node)
        constraints = _constraints_by_field(node_type)
        for name, field in node_type.model_fields.items():
            value = getattr(node, name)
            field_path = join_path(path, field.alias or name)
            for constraint in constraints.get(name, ()):
                violation = constraint.evaluate(value, field_path)
                if violation is not None:
                    violations.append(violation)
            for child_path, child in _children(value, field_path):
                self._walk(child, child_path, violations, visited)
