"""Tests for field constraints and cross-field rules."""

from __future__ import annotations

from types import SimpleNamespace

import pytest

from confline.domain.constraints import (
    CrossFieldRule,
    max_duration,
    max_size,
    maximum,
    min_duration,
    min_size,
    minimum,
    not_null,
    one_of,
    port_range,
    satisfies,
)
from confline.domain.units import Duration, Size, SizeUnit, TimeUnit
from confline.domain.violations import ViolationKind


class TestPortRange:
    @pytest.mark.parametrize("port", [1, 80, 65535])
    def test_accepts_inclusive_bounds(self, port: int) -> None:
        assert port_range("port").check(port)

    @pytest.mark.parametrize("port", [0, 65536, -1])
    def test_rejects_outside(self, port: int) -> None:
        assert not port_range("port").check(port)

    def test_message(self) -> None:
        violation = port_range("port").evaluate(99999, "server.port")
        assert violation is not None
        assert str(violation) == "server.port must be between 1 and 65535"
        assert violation.kind is ViolationKind.CONSTRAINT

    def test_custom_bounds(self) -> None:
        constraint = port_range("port", 1024, 2048)
        assert not constraint.check(80)
        assert constraint.message == "must be between 1024 and 2048"


class TestNumericBounds:
    def test_minimum(self) -> None:
        constraint = minimum("max_threads", 2)
        assert constraint.check(2)
        assert not constraint.check(1)
        assert constraint.message == "must be greater than or equal to 2"

    def test_maximum(self) -> None:
        constraint = maximum("ratio", 1.0)
        assert constraint.check(0.5)
        assert not constraint.check(1.5)
        assert constraint.message == "must be less than or equal to 1.0"


class TestNullHandling:
    def test_not_null(self) -> None:
        constraint = not_null("gzip")
        assert constraint.check(0)
        violation = constraint.evaluate(None, "server.gzip")
        assert violation is not None
        assert str(violation) == "server.gzip may not be null"

    @pytest.mark.parametrize(
        "constraint",
        [
            minimum("f", 1),
            maximum("f", 1),
            port_range("f"),
            min_size("f", 1),
            max_size("f", 1),
            min_duration("f", 1),
            max_duration("f", 1),
            one_of("f", ["a"]),
            satisfies("f", lambda value: False, "never"),
        ],
    )
    def test_none_passes_range_constraints(self, constraint) -> None:
        assert constraint.check(None)


class TestUnitBounds:
    def test_min_size(self) -> None:
        constraint = min_size("buffer_size", 2, SizeUnit.KIBIBYTES)
        assert constraint.check(Size.bytes(2048))
        assert not constraint.check(Size.bytes(2047))
        assert constraint.message == "must be greater than or equal to 2KiB"

    def test_max_size(self) -> None:
        constraint = max_size("buffer_size", 1, SizeUnit.MEBIBYTES)
        assert constraint.check(Size.kibibytes(1024))
        assert not constraint.check(Size.kibibytes(1025))

    def test_min_duration(self) -> None:
        constraint = min_duration("idle_timeout", 1, TimeUnit.MILLISECONDS)
        assert constraint.check(Duration.nanoseconds(1_000_000))
        assert not constraint.check(Duration.microseconds(999))
        assert constraint.message == "must be greater than or equal to 1ms"

    def test_max_duration_defaults_to_seconds(self) -> None:
        constraint = max_duration("timeout", 30)
        assert constraint.check(Duration.seconds(30))
        assert not constraint.check(Duration.minutes(1))
        assert constraint.message == "must be less than or equal to 30s"


class TestOneOf:
    def test_case_sensitive_by_default(self) -> None:
        constraint = one_of("type", ["console", "file"])
        assert constraint.check("file")
        assert not constraint.check("FILE")
        assert constraint.message == "must be one of [console, file]"

    def test_case_insensitive(self) -> None:
        constraint = one_of("level", ["INFO", "DEBUG"], case_sensitive=False)
        assert constraint.check("debug")
        assert not constraint.check("verbose")


class TestSatisfies:
    def test_predicate_and_message(self) -> None:
        constraint = satisfies("name", str.isidentifier, "must be an identifier")
        assert constraint.check("service")
        violation = constraint.evaluate("not valid", "name")
        assert violation is not None
        assert violation.message == "must be an identifier"


class TestCrossFieldRule:
    def test_passing_rule(self) -> None:
        rule = CrossFieldRule("ordered", lambda node: node.low <= node.high, "must be ordered")
        assert rule.evaluate(SimpleNamespace(low=1, high=2), "pool") is None

    def test_failing_rule_names_itself(self) -> None:
        rule = CrossFieldRule("ordered", lambda node: node.low <= node.high, "must be ordered")
        violation = rule.evaluate(SimpleNamespace(low=3, high=2), "pool")
        assert violation is not None
        assert violation.kind is ViolationKind.CROSS_FIELD
        assert violation.rule == "ordered"
        assert violation.path == "pool"
        assert str(violation) == "pool must be ordered"
