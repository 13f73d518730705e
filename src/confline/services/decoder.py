"""ConfigurationDecoder: bytes (or nothing) to a typed configuration object.

Precedence, highest first: override namespace, configuration file, field
defaults.  Without a source stream the configuration comes from field
defaults alone.

Every structural problem is reported as a :class:`Violation` and raised
together in one :class:`ConfigurationDecodeError`:

- YAML syntax and encoding errors: ``malformed_input``
- unit literals that do not parse: ``malformed_input``
- properties the configuration type does not declare: ``unknown_field``
- values of the wrong shape: ``type_mismatch``
"""

from __future__ import annotations

import copy
import inspect
import logging
import types
from collections.abc import Iterable, Mapping
from io import StringIO
from typing import Any, BinaryIO, TypeVar, Union, get_args, get_origin

from pydantic import BaseModel, ValidationError
from pydantic.fields import FieldInfo
from ruamel.yaml import YAML
from ruamel.yaml.error import MarkedYAMLError, YAMLError

from confline.domain.errors import ConfigurationDecodeError, SourceUnreadableError
from confline.domain.violations import Violation, ViolationKind, join_path

logger = logging.getLogger(__name__)

C = TypeVar("C", bound=BaseModel)

DEFAULT_OVERRIDE_PREFIX = "dw"

_SEQUENCE_ORIGINS = (list, set, frozenset, tuple)
_MALFORMED_TYPES = frozenset({"malformed_unit_value"})


def _new_yaml() -> YAML:
    """Create a fresh safe YAML parser/emitter.

    ruamel.yaml's YAML object is stateful, so every call gets its own.
    """
    y = YAML(typ="safe", pure=True)
    y.default_flow_style = False
    return y


# ---------------------------------------------------------------------------
# Override namespace
# ---------------------------------------------------------------------------


def collect_overrides(
    *sources: Mapping[str, str], prefix: str = DEFAULT_OVERRIDE_PREFIX
) -> dict[str, str]:
    """Merge the ``<prefix>.*`` entries of *sources*; later sources win."""
    marker = f"{prefix}."
    merged: dict[str, str] = {}
    for source in sources:
        for key, value in source.items():
            if key.startswith(marker):
                merged[key] = value
    return merged


def _unwrap_optional(annotation: Any) -> Any:
    if get_origin(annotation) in (Union, types.UnionType):
        members = [arg for arg in get_args(annotation) if arg is not type(None)]
        if len(members) == 1:
            return members[0]
    return annotation


def _is_node(annotation: Any) -> bool:
    return inspect.isclass(annotation) and issubclass(annotation, BaseModel)


def _lookup_field(model: type[BaseModel], segment: str) -> tuple[str, FieldInfo] | None:
    for name, field in model.model_fields.items():
        if segment in (field.alias, name):
            return name, field
    return None


def _override_value(annotation: Any, value: str) -> Any:
    """Comma-separated values for sequence fields, the raw string otherwise."""
    if get_origin(annotation) in _SEQUENCE_ORIGINS:
        return [item.strip() for item in value.split(",") if item.strip()]
    return value


def _child_mapping(tree: dict[str, Any], key: str) -> dict[str, Any] | None:
    """The mapping at *key*, created when absent or null; None for any other value."""
    child = tree.get(key)
    if child is None:
        child = {}
        tree[key] = child
    return child if isinstance(child, dict) else None


def _apply_one(
    tree: dict[str, Any],
    model: type[BaseModel],
    segments: list[str],
    value: str,
) -> Violation | None:
    node, path = tree, ""
    for index, segment in enumerate(segments):
        found = _lookup_field(model, segment)
        if found is None:
            return Violation(
                path=join_path(path, segment),
                message="is not a recognized field",
                kind=ViolationKind.UNKNOWN_FIELD,
            )
        name, field = found
        key = field.alias or name
        if name != key and name in node:
            node[key] = node.pop(name)
        path = join_path(path, key)
        annotation = _unwrap_optional(field.annotation)
        rest = segments[index + 1 :]

        if not rest:
            node[key] = _override_value(annotation, value)
            return None
        if _is_node(annotation) or get_origin(annotation) is dict:
            child = _child_mapping(node, key)
            if child is None:
                # Keep the file value; model validation reports its wrong type.
                return None
            if _is_node(annotation):
                node, model = child, annotation
                continue
            # Mapping keys may themselves contain dots (logger names).
            child[".".join(rest)] = value
            return None
        return Violation(
            path=join_path(path, rest[0]),
            message="is not a recognized field",
            kind=ViolationKind.UNKNOWN_FIELD,
        )
    return None


# ---------------------------------------------------------------------------
# pydantic error mapping
# ---------------------------------------------------------------------------


def _loc_to_path(loc: Iterable[str | int]) -> str:
    path = ""
    for part in loc:
        path = join_path(path, part)
    return path


def violations_from_validation_error(exc: ValidationError) -> list[Violation]:
    """Translate pydantic's structural errors into decode violations."""
    violations: list[Violation] = []
    for error in exc.errors(include_url=False):
        path = _loc_to_path(error["loc"])
        if error["type"] == "extra_forbidden":
            violations.append(
                Violation(
                    path=path,
                    message="is not a recognized field",
                    kind=ViolationKind.UNKNOWN_FIELD,
                )
            )
        elif error["type"] in _MALFORMED_TYPES:
            violations.append(
                Violation(
                    path=path,
                    message=f"is malformed: {error['msg']}",
                    kind=ViolationKind.MALFORMED_INPUT,
                )
            )
        else:
            violations.append(
                Violation(
                    path=path,
                    message=f"has the wrong type: {error['msg']}",
                    kind=ViolationKind.TYPE_MISMATCH,
                )
            )
    return violations


def _syntax_violation(exc: YAMLError) -> Violation:
    if isinstance(exc, MarkedYAMLError) and exc.problem_mark is not None:
        mark = exc.problem_mark
        problem = exc.problem or exc.context or "invalid YAML"
        message = f"Malformed YAML at line {mark.line + 1}, column {mark.column + 1}: {problem}"
    else:
        message = f"Malformed YAML: {exc}"
    return Violation(path="", message=message, kind=ViolationKind.MALFORMED_INPUT)


# ---------------------------------------------------------------------------
# Decoder
# ---------------------------------------------------------------------------


class ConfigurationDecoder:
    """Build configuration objects from YAML (or JSON) sources.

    The decoder holds no per-invocation state; one instance can serve any
    number of independent decodes.
    """

    def __init__(self, *, override_prefix: str = DEFAULT_OVERRIDE_PREFIX) -> None:
        self.override_prefix = override_prefix

    def decode(
        self,
        stream: BinaryIO | None,
        configuration_class: type[C],
        overrides: Mapping[str, str] | None = None,
        *,
        location: str | None = None,
    ) -> C:
        """Decode *stream* into an instance of *configuration_class*.

        Raises:
            ConfigurationDecodeError: With every structural violation found.
            SourceUnreadableError: The stream failed while being read.
        """
        overrides = overrides or {}
        if stream is None:
            ignored = collect_overrides(overrides, prefix=self.override_prefix)
            if ignored:
                logger.warning(
                    "No configuration source given; ignoring overrides: %s",
                    ", ".join(sorted(ignored)),
                )
            return self._build(configuration_class, {}, [], location)

        tree = self.parse_tree(stream, location=location)
        tree, violations = self.apply_overrides(tree, configuration_class, overrides)
        return self._build(configuration_class, tree, violations, location)

    def parse_tree(self, stream: BinaryIO, *, location: str | None = None) -> dict[str, Any]:
        """Read and parse the whole stream into a plain mapping tree."""
        try:
            raw = stream.read()
        except OSError as exc:
            msg = f"{location or 'Configuration source'} could not be read: {exc}"
            raise SourceUnreadableError(msg, location=location) from exc

        try:
            text = raw.decode("utf-8-sig") if isinstance(raw, bytes) else raw
        except UnicodeDecodeError as exc:
            violation = Violation(
                path="",
                message=f"Malformed input: not valid UTF-8 ({exc.reason} at byte {exc.start})",
                kind=ViolationKind.MALFORMED_INPUT,
            )
            raise ConfigurationDecodeError([violation], location=location) from exc

        try:
            data = _new_yaml().load(text)
        except YAMLError as exc:
            raise ConfigurationDecodeError([_syntax_violation(exc)], location=location) from exc

        if data is None:
            return {}
        if not isinstance(data, dict):
            violation = Violation(
                path="",
                message=f"Malformed input: the document root must be a mapping, "
                f"not {type(data).__name__}",
                kind=ViolationKind.MALFORMED_INPUT,
            )
            raise ConfigurationDecodeError([violation], location=location)
        return data

    def apply_overrides(
        self,
        tree: Mapping[str, Any],
        configuration_class: type[BaseModel],
        overrides: Mapping[str, str],
    ) -> tuple[dict[str, Any], list[Violation]]:
        """Return a copy of *tree* with the override namespace applied.

        Keys outside ``<prefix>.`` are ignored.  Applying the same overrides
        again yields the same tree.
        """
        result = copy.deepcopy(dict(tree))
        violations: list[Violation] = []
        marker = f"{self.override_prefix}."
        for key, value in overrides.items():
            if not key.startswith(marker):
                continue
            segments = key[len(marker) :].split(".")
            violation = _apply_one(result, configuration_class, segments, value)
            if violation is not None:
                violations.append(violation)
        return result, violations

    def encode(self, configuration: BaseModel) -> str:
        """Serialize *configuration* as YAML using its file property names."""
        return self.dump_tree(configuration.model_dump(mode="json", by_alias=True))

    @staticmethod
    def dump_tree(data: Mapping[str, Any]) -> str:
        """Serialize a plain mapping tree as block-style YAML."""
        buf = StringIO()
        _new_yaml().dump(dict(data), buf)
        return buf.getvalue()

    def _build(
        self,
        configuration_class: type[C],
        tree: dict[str, Any],
        violations: list[Violation],
        location: str | None,
    ) -> C:
        try:
            configuration = configuration_class.model_validate(tree)
        except ValidationError as exc:
            violations = [*violations, *violations_from_validation_error(exc)]
            raise ConfigurationDecodeError(violations, location=location) from exc
        if violations:
            raise ConfigurationDecodeError(violations, location=location)
        return configuration
