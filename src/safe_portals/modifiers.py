"""Optional and nullable wrappers around any portal."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TypeVar

from safe_portals.portal import JSONValue, Portal

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class OptionalPortal(Portal[T | None]):
    """Missing or null reads as ``None``; ``None`` writes as null."""

    inner: Portal[T]

    def read(self, data: object) -> T | None:
        if data is None:
            return None
        return self.inner.read(data)

    def write(self, value: T | None) -> JSONValue:
        if value is None:
            return None
        return self.inner.write(value)

    def description(self) -> str:
        return f"optional({self.inner.description()})"


@dataclass(frozen=True, slots=True)
class NullablePortal(Portal[T | None]):
    """Same behavior as ``OptionalPortal``; the slot is expected to be present and hold null."""

    inner: Portal[T]

    def read(self, data: object) -> T | None:
        if data is None:
            return None
        return self.inner.read(data)

    def write(self, value: T | None) -> JSONValue:
        if value is None:
            return None
        return self.inner.write(value)

    def description(self) -> str:
        return f"nullable({self.inner.description()})"


def optional(inner: Portal[T]) -> OptionalPortal[T]:
    return OptionalPortal(inner)


def nullable(inner: Portal[T]) -> NullablePortal[T]:
    return NullablePortal(inner)


__all__ = ["NullablePortal", "OptionalPortal", "nullable", "optional"]
