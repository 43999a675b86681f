"""Atomic portals: strings, numbers, booleans, UUIDs, dates, raw and nothing."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import UTC, date, datetime, time, timedelta
from fractions import Fraction
from typing import Any

from safe_portals.constants import NOTHING_PLACEHOLDER, UUID_PATTERN
from safe_portals.diagnostics import ValidationError, fail
from safe_portals.portal import JSONValue, Portal

_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)
_ONE_MICROSECOND = timedelta(microseconds=1)
_MICROS_PER_SECOND = 1_000_000
_MICROS_PER_MILLISECOND = 1_000


def _as_number(data: object, *, integral: bool = False) -> int | float | None:
    # bool is an int subclass but never a number on the wire.
    if isinstance(data, bool):
        return None
    if isinstance(data, (int, float)):
        return data
    if isinstance(data, str):
        text = data.strip()
        if integral:
            try:
                return int(text)
            except ValueError:
                pass
        try:
            return float(text)
        except ValueError:
            return None
    return None


def _is_finite_number(value: object) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return isinstance(value, int) or math.isfinite(value)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None or value.utcoffset() is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def _native_moment(data: object) -> datetime | None:
    # datetime subclasses date, so it is checked first; a bare date is midnight UTC.
    if isinstance(data, datetime):
        return _as_utc(data)
    if isinstance(data, date):
        return datetime.combine(data, time(), tzinfo=UTC)
    return None


def _is_aware(value: object) -> bool:
    return isinstance(value, datetime) and value.tzinfo is not None and value.utcoffset() is not None


def _datetime_to_iso8601z(value: datetime) -> str:
    normalized = value.astimezone(UTC)
    timespec = "milliseconds" if normalized.microsecond % 1000 == 0 else "microseconds"
    return normalized.isoformat(timespec=timespec).replace("+00:00", "Z")


def _micros_since_epoch(value: datetime) -> int:
    return (value - _EPOCH) // _ONE_MICROSECOND


def _from_epoch_units(data: int | float, micros_per_unit: int) -> datetime:
    """Exact inverse of ``_to_epoch_units``; raises ``ValidationError`` out of range."""

    try:
        # Fraction holds the float's exact binary value, so no rounding happens
        # before the final step to whole microseconds.
        micros = round(Fraction(data) * micros_per_unit)
        return _EPOCH + timedelta(microseconds=micros)
    except (ValueError, OverflowError) as exc:
        raise ValidationError("", data) from exc


def _to_epoch_units(value: datetime, micros_per_unit: int) -> int | float:
    micros = _micros_since_epoch(value)
    if micros % micros_per_unit == 0:
        return micros // micros_per_unit
    written = micros / micros_per_unit
    # Far from the epoch a float cannot hold every microsecond.
    if round(Fraction(written) * micros_per_unit) != micros:
        fail(value)
    return written


@dataclass(frozen=True, slots=True)
class StrPortal(Portal[str]):
    def read(self, data: object) -> str:
        if isinstance(data, str):
            return data
        fail(data)

    def write(self, value: str) -> JSONValue:
        if isinstance(value, str):
            return value
        fail(value)

    def description(self) -> str:
        return "str"


@dataclass(frozen=True, slots=True)
class BoolPortal(Portal[bool]):
    def read(self, data: object) -> bool:
        if isinstance(data, bool):
            return data
        fail(data)

    def write(self, value: bool) -> JSONValue:
        if isinstance(value, bool):
            return value
        fail(value)

    def description(self) -> str:
        return "bool"


@dataclass(frozen=True, slots=True)
class IntPortal(Portal[int]):
    """Integers; fractional input is truncated toward zero."""

    def read(self, data: object) -> int:
        parsed = _as_number(data, integral=True)
        if parsed is None:
            fail(data)
        if isinstance(parsed, int):
            return parsed
        if not math.isfinite(parsed):
            fail(data)
        return math.trunc(parsed)

    def write(self, value: int) -> JSONValue:
        if not _is_finite_number(value):
            fail(value)
        return math.trunc(value)

    def description(self) -> str:
        return "int"


@dataclass(frozen=True, slots=True)
class FloatPortal(Portal[float]):
    def read(self, data: object) -> float:
        parsed = _as_number(data)
        if parsed is None or (isinstance(parsed, float) and math.isnan(parsed)):
            fail(data)
        return parsed

    def write(self, value: float) -> JSONValue:
        # NaN and Infinity have no primitive-tree representation.
        if not _is_finite_number(value):
            fail(value)
        return value

    def description(self) -> str:
        return "float"


@dataclass(frozen=True, slots=True)
class RawPortal(Portal[Any]):
    """Identity in both directions."""

    def read(self, data: object) -> Any:
        return data

    def write(self, value: Any) -> JSONValue:
        return value

    def description(self) -> str:
        return "raw"


@dataclass(frozen=True, slots=True)
class NothingPortal(Portal[None]):
    """Placeholder slot that carries no information."""

    def read(self, data: object) -> None:
        return None

    def write(self, value: None) -> JSONValue:
        return NOTHING_PLACEHOLDER

    def description(self) -> str:
        return "nothing"


@dataclass(frozen=True, slots=True)
class UuidPortal(Portal[str]):
    def read(self, data: object) -> str:
        if isinstance(data, str) and UUID_PATTERN.fullmatch(data):
            return data
        fail(data)

    def write(self, value: str) -> JSONValue:
        if isinstance(value, str) and UUID_PATTERN.fullmatch(value):
            return value
        fail(value)

    def description(self) -> str:
        return "uuid"


@dataclass(frozen=True, slots=True)
class DateIsoPortal(Portal[datetime]):
    """ISO-8601 text. Offset-less input is taken as UTC; output is always ``Z``.

    Native ``datetime`` values read as themselves; a bare ``date`` reads as
    midnight UTC.
    """

    def read(self, data: object) -> datetime:
        moment = _native_moment(data)
        if moment is not None:
            return moment
        if not isinstance(data, str):
            fail(data)
        text = data.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            return _as_utc(datetime.fromisoformat(text))
        except (ValueError, OverflowError) as exc:
            raise ValidationError("", data) from exc

    def write(self, value: datetime) -> JSONValue:
        if not _is_aware(value):
            fail(value)
        return _datetime_to_iso8601z(value)

    def description(self) -> str:
        return "date_iso"


@dataclass(frozen=True, slots=True)
class DateUnixSecsPortal(Portal[datetime]):
    """Seconds since the epoch; whole seconds are written as ints.

    A moment whose microseconds a float cannot represent exactly is rejected
    on write.
    """

    def read(self, data: object) -> datetime:
        moment = _native_moment(data)
        if moment is not None:
            return moment
        if not isinstance(data, (int, float)) or isinstance(data, bool):
            fail(data)
        return _from_epoch_units(data, _MICROS_PER_SECOND)

    def write(self, value: datetime) -> JSONValue:
        if not _is_aware(value):
            fail(value)
        return _to_epoch_units(value, _MICROS_PER_SECOND)

    def description(self) -> str:
        return "date_unix_secs"


@dataclass(frozen=True, slots=True)
class DateUnixMillisPortal(Portal[datetime]):
    def read(self, data: object) -> datetime:
        moment = _native_moment(data)
        if moment is not None:
            return moment
        if not isinstance(data, (int, float)) or isinstance(data, bool):
            fail(data)
        return _from_epoch_units(data, _MICROS_PER_MILLISECOND)

    def write(self, value: datetime) -> JSONValue:
        if not _is_aware(value):
            fail(value)
        return _to_epoch_units(value, _MICROS_PER_MILLISECOND)

    def description(self) -> str:
        return "date_unix_millis"


str_ = StrPortal()
bool_ = BoolPortal()
int_ = IntPortal()
float_ = FloatPortal()
raw = RawPortal()
nothing = NothingPortal()
uuid = UuidPortal()
date_iso = DateIsoPortal()
date_unix_secs = DateUnixSecsPortal()
date_unix_millis = DateUnixMillisPortal()

__all__ = [
    "BoolPortal",
    "DateIsoPortal",
    "DateUnixMillisPortal",
    "DateUnixSecsPortal",
    "FloatPortal",
    "IntPortal",
    "NothingPortal",
    "RawPortal",
    "StrPortal",
    "UuidPortal",
    "bool_",
    "date_iso",
    "date_unix_millis",
    "date_unix_secs",
    "float_",
    "int_",
    "nothing",
    "raw",
    "str_",
    "uuid",
]
