"""Duration and Size: self-validating unit values.

Both types parse a compact literal (``30s``, ``8KiB``), compare by their
normalized magnitude (nanoseconds, bytes) regardless of the unit they were
written in, and plug into pydantic so configuration models can declare them
as ordinary field types.

Conversion policy: converting to a coarser unit FLOORS.  ``Size.bytes(1500)``
is 1 KiB, ``Duration.milliseconds(1999)`` is 1 second.

Sizes use binary multiples throughout: ``KB`` and ``KiB`` both mean 1024
bytes, matching how buffer sizes are usually written in server configuration.
"""

from __future__ import annotations

import re
from datetime import timedelta
from enum import Enum
from functools import total_ordering
from typing import Any, ClassVar, Self

from pydantic import GetCoreSchemaHandler
from pydantic_core import PydanticCustomError, core_schema

from confline.domain.errors import MalformedUnitValueError

_LITERAL = re.compile(r"^\s*(\d+)\s*([A-Za-z]+)\s*$")


class TimeUnit(Enum):
    """Time units, valued in nanoseconds."""

    NANOSECONDS = 1
    MICROSECONDS = 1_000
    MILLISECONDS = 1_000_000
    SECONDS = 1_000_000_000
    MINUTES = 60 * 1_000_000_000
    HOURS = 60 * 60 * 1_000_000_000
    DAYS = 24 * 60 * 60 * 1_000_000_000

    @property
    def symbol(self) -> str:
        return _TIME_SYMBOLS[self]


class SizeUnit(Enum):
    """Size units, valued in bytes."""

    BYTES = 1
    KIBIBYTES = 1024
    MEBIBYTES = 1024**2
    GIBIBYTES = 1024**3
    TEBIBYTES = 1024**4

    @property
    def symbol(self) -> str:
        return _SIZE_SYMBOLS[self]


_TIME_SYMBOLS: dict[TimeUnit, str] = {
    TimeUnit.NANOSECONDS: "ns",
    TimeUnit.MICROSECONDS: "us",
    TimeUnit.MILLISECONDS: "ms",
    TimeUnit.SECONDS: "s",
    TimeUnit.MINUTES: "m",
    TimeUnit.HOURS: "h",
    TimeUnit.DAYS: "d",
}

_SIZE_SYMBOLS: dict[SizeUnit, str] = {
    SizeUnit.BYTES: "B",
    SizeUnit.KIBIBYTES: "KiB",
    SizeUnit.MEBIBYTES: "MiB",
    SizeUnit.GIBIBYTES: "GiB",
    SizeUnit.TEBIBYTES: "TiB",
}


def _suffix_table(spellings: dict[Any, tuple[str, ...]]) -> dict[str, Any]:
    return {suffix: unit for unit, suffixes in spellings.items() for suffix in suffixes}


# Keys are lowercase; literals are lowercased before lookup.
TIME_SUFFIXES: dict[str, TimeUnit] = _suffix_table(
    {
        TimeUnit.NANOSECONDS: ("ns", "nanosecond", "nanoseconds"),
        TimeUnit.MICROSECONDS: ("us", "microsecond", "microseconds"),
        TimeUnit.MILLISECONDS: ("ms", "millisecond", "milliseconds"),
        TimeUnit.SECONDS: ("s", "second", "seconds"),
        TimeUnit.MINUTES: ("m", "min", "mins", "minute", "minutes"),
        TimeUnit.HOURS: ("h", "hour", "hours"),
        TimeUnit.DAYS: ("d", "day", "days"),
    }
)

SIZE_SUFFIXES: dict[str, SizeUnit] = _suffix_table(
    {
        SizeUnit.BYTES: ("b", "byte", "bytes"),
        SizeUnit.KIBIBYTES: ("k", "kb", "kib", "kilobyte", "kilobytes", "kibibyte", "kibibytes"),
        SizeUnit.MEBIBYTES: ("m", "mb", "mib", "megabyte", "megabytes", "mebibyte", "mebibytes"),
        SizeUnit.GIBIBYTES: ("g", "gb", "gib", "gigabyte", "gigabytes", "gibibyte", "gibibytes"),
        SizeUnit.TEBIBYTES: ("t", "tb", "tib", "terabyte", "terabytes", "tebibyte", "tebibytes"),
    }
)


@total_ordering
class _UnitValue:
    """Shared behaviour for an immutable non-negative quantity plus unit."""

    __slots__ = ("_quantity", "_unit")

    kind: ClassVar[str]
    example: ClassVar[str]
    suffixes: ClassVar[dict[str, Any]]

    def __init__(self, quantity: int, unit: Any) -> None:
        if isinstance(quantity, bool) or not isinstance(quantity, int):
            msg = f"{self.kind} quantity must be an integer, got {quantity!r}"
            raise TypeError(msg)
        if quantity < 0:
            msg = f"{self.kind} quantity must be non-negative, got {quantity}"
            raise ValueError(msg)
        object.__setattr__(self, "_quantity", quantity)
        object.__setattr__(self, "_unit", unit)

    def __setattr__(self, name: str, value: Any) -> None:
        msg = f"{type(self).__name__} is immutable"
        raise AttributeError(msg)

    def __reduce__(self) -> tuple[Any, ...]:
        return (type(self), (self._quantity, self._unit))

    @property
    def quantity(self) -> int:
        return self._quantity

    @property
    def unit(self) -> Any:
        return self._unit

    @property
    def normalized(self) -> int:
        """Magnitude in the finest supported unit."""
        return self._quantity * self._unit.value

    def to_unit(self, unit: Any) -> int:
        """Convert to *unit*, flooring any remainder."""
        return self.normalized // unit.value

    @classmethod
    def parse(cls, text: str) -> Self:
        """Parse a ``<integer><suffix>`` literal.

        Raises:
            MalformedUnitValueError: Non-numeric or negative magnitude, or an
                unrecognized suffix.
        """
        if not isinstance(text, str):
            raise MalformedUnitValueError(text, f"{cls.kind} literal")
        match = _LITERAL.match(text)
        if match is None:
            raise MalformedUnitValueError(text, f"{cls.kind} literal")
        quantity, suffix = match.groups()
        unit = cls.suffixes.get(suffix.lower())
        if unit is None:
            raise MalformedUnitValueError(text, f"{cls.kind} unit")
        return cls(int(quantity), unit)

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        assert isinstance(other, _UnitValue)
        return self.normalized == other.normalized

    def __lt__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        assert isinstance(other, _UnitValue)
        return self.normalized < other.normalized

    def __hash__(self) -> int:
        return hash((type(self).__name__, self.normalized))

    def __str__(self) -> str:
        return f"{self._quantity}{self._unit.symbol}"

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._quantity}, {self._unit.name})"

    # --- pydantic integration ---

    @classmethod
    def __get_pydantic_core_schema__(
        cls, source_type: Any, handler: GetCoreSchemaHandler
    ) -> core_schema.CoreSchema:
        return core_schema.no_info_plain_validator_function(
            cls._coerce,
            serialization=core_schema.to_string_ser_schema(),
        )

    @classmethod
    def _coerce(cls, value: Any) -> Self:
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            raise PydanticCustomError(
                "unit_value_type",
                "Input should be a {kind} literal such as '{example}'",
                {"kind": cls.kind, "example": cls.example},
            )
        try:
            return cls.parse(value)
        except MalformedUnitValueError as exc:
            raise PydanticCustomError(
                "malformed_unit_value",
                "'{text}' is not a valid {reason}",
                {"text": value, "reason": exc.reason},
            ) from exc


class Duration(_UnitValue):
    """A length of time such as ``30s`` or ``500ms``."""

    __slots__ = ()

    kind = "duration"
    example = "30s"
    suffixes = TIME_SUFFIXES

    @classmethod
    def nanoseconds(cls, count: int) -> Duration:
        return cls(count, TimeUnit.NANOSECONDS)

    @classmethod
    def microseconds(cls, count: int) -> Duration:
        return cls(count, TimeUnit.MICROSECONDS)

    @classmethod
    def milliseconds(cls, count: int) -> Duration:
        return cls(count, TimeUnit.MILLISECONDS)

    @classmethod
    def seconds(cls, count: int) -> Duration:
        return cls(count, TimeUnit.SECONDS)

    @classmethod
    def minutes(cls, count: int) -> Duration:
        return cls(count, TimeUnit.MINUTES)

    @classmethod
    def hours(cls, count: int) -> Duration:
        return cls(count, TimeUnit.HOURS)

    @classmethod
    def days(cls, count: int) -> Duration:
        return cls(count, TimeUnit.DAYS)

    def to_nanoseconds(self) -> int:
        return self.normalized

    def to_milliseconds(self) -> int:
        return self.to_unit(TimeUnit.MILLISECONDS)

    def to_seconds(self) -> int:
        return self.to_unit(TimeUnit.SECONDS)

    def to_timedelta(self) -> timedelta:
        # timedelta resolution is one microsecond
        return timedelta(microseconds=self.to_unit(TimeUnit.MICROSECONDS))


class Size(_UnitValue):
    """An amount of data such as ``512B`` or ``8KiB``."""

    __slots__ = ()

    kind = "size"
    example = "8KiB"
    suffixes = SIZE_SUFFIXES

    @classmethod
    def bytes(cls, count: int) -> Size:
        return cls(count, SizeUnit.BYTES)

    @classmethod
    def kibibytes(cls, count: int) -> Size:
        return cls(count, SizeUnit.KIBIBYTES)

    @classmethod
    def mebibytes(cls, count: int) -> Size:
        return cls(count, SizeUnit.MEBIBYTES)

    @classmethod
    def gibibytes(cls, count: int) -> Size:
        return cls(count, SizeUnit.GIBIBYTES)

    @classmethod
    def tebibytes(cls, count: int) -> Size:
        return cls(count, SizeUnit.TEBIBYTES)

    def to_bytes(self) -> int:
        return self.normalized

    def to_kibibytes(self) -> int:
        return self.to_unit(SizeUnit.KIBIBYTES)

    def to_mebibytes(self) -> int:
        return self.to_unit(SizeUnit.MEBIBYTES)
