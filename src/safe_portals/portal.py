"""
safe-portals — portal protocol.

Purpose
- Define the ``Portal[T]`` base every primitive and combinator implements.
- Provide the non-raising ``try_read``/``try_write`` channel and schema fingerprints.

Contract
- ``read`` turns a primitive tree into a typed value or raises ``ValidationError``.
- ``write`` turns a typed value into a primitive tree or raises ``ValidationError``.
- ``description`` is purely structural: equal shapes render equal text.
- Portals are immutable and safe to share between threads.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import ClassVar, Generic, TypeVar, cast

from safe_portals.diagnostics import ValidationError
from safe_portals.utils.hashing import sha256_text, short_digest

JSONScalar = str | int | float | bool | None
JSONValue = JSONScalar | list["JSONValue"] | dict[str, "JSONValue"]

T = TypeVar("T")
U = TypeVar("U")

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Attempt(Generic[U]):
    """Outcome of ``try_read``/``try_write``: a value or the failure that prevented it."""

    value: U | None
    error: ValidationError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> U:
        if self.error is not None:
            raise self.error
        return cast("U", self.value)


class Portal(ABC, Generic[T]):
    """Paired read/write/description operations for one logical type."""

    __slots__ = ()

    kind: ClassVar[str] = "none"

    @abstractmethod
    def read(self, data: object) -> T:
        """Convert a primitive tree into the typed value."""

    @abstractmethod
    def write(self, value: T) -> JSONValue:
        """Convert the typed value into a primitive tree."""

    @abstractmethod
    def description(self) -> str:
        """Return the structural rendering of this portal."""

    def try_read(self, data: object) -> Attempt[T]:
        try:
            return Attempt(value=self.read(data))
        except ValidationError as exc:
            self._log_rejection("read", exc)
            return Attempt(value=None, error=exc)

    def try_write(self, value: T) -> Attempt[JSONValue]:
        try:
            return Attempt(value=self.write(value))
        except ValidationError as exc:
            self._log_rejection("write", exc)
            return Attempt(value=None, error=exc)

    def fingerprint(self) -> str:
        """SHA-256 of the description; changes whenever the schema shape changes."""
        return sha256_text(self.description())

    def __str__(self) -> str:
        return self.description()

    def _log_rejection(self, operation: str, exc: ValidationError) -> None:
        if not _LOGGER.isEnabledFor(logging.DEBUG):
            return
        _LOGGER.debug(
            "%s rejected at data%s by %s",
            operation,
            exc.path,
            self.description(),
            extra={
                "operation": operation,
                "path": exc.path,
                "schema": short_digest(self.fingerprint()),
                "got": exc.got,
            },
        )


__all__ = ["Attempt", "JSONScalar", "JSONValue", "Portal"]
