"""
safe-portals — versioned schemas with data migrations.

Wire format
- ``[version, payload]``. ``write`` always tags the current version, which is
  the number of migrations.

Reading
- ``migrations[v]`` turns version ``v`` raw data into version ``v + 1`` raw
  data. Migrations run on the un-validated payload; the schema only sees the
  fully migrated result.
- A tag newer than the current version is rejected at ``[0]``: this runtime
  cannot know how to read data written by a later schema.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import ClassVar, TypeVar

from safe_portals.containers import tuple_
from safe_portals.diagnostics import fail, index_fragment
from safe_portals.portal import JSONValue, Portal
from safe_portals.primitives import int_, raw

T = TypeVar("T")

Migration = Callable[[JSONValue], JSONValue]

_LOGGER = logging.getLogger(__name__)
_ENVELOPE = tuple_(int_, raw)


def migration_guidance(found_version: int, current_version: int) -> str:
    """Return deterministic guidance for a wire version this portal cannot read."""

    if found_version < 0:
        return f"version {found_version} is not a valid schema version"
    if found_version > current_version:
        return (
            f"version {found_version} is newer than supported {current_version}; "
            "upgrade the reader to a schema with the newer migrations"
        )
    return "version is readable"


@dataclass(frozen=True, slots=True)
class VersionedPortal(Portal[T]):
    kind: ClassVar[str] = "versioned"

    schema: Portal[T]
    migrations: tuple[Migration, ...] = ()

    @property
    def version(self) -> int:
        return len(self.migrations)

    def read(self, data: object) -> T:
        found, payload = _ENVELOPE.read(data)
        current = self.version
        if found < 0 or found > current:
            _LOGGER.warning(
                "rejecting versioned payload: %s",
                migration_guidance(found, current),
                extra={"found_version": found, "current_version": current},
            )
            fail(data, index_fragment(0))
        for step in range(found, current):
            _LOGGER.debug("migrating payload from version %d to %d", step, step + 1)
            payload = self.migrations[step](payload)
        return self.schema.read(payload)

    def write(self, value: T) -> JSONValue:
        return _ENVELOPE.write((self.version, self.schema.write(value)))

    def description(self) -> str:
        current = self.version
        if current == 0:
            return f"versioned({self.schema.description()}, v0)"
        return f"versioned({self.schema.description()}, v{current}, migrates from v0..v{current - 1})"


def versioned(schema: Portal[T], migrations: Sequence[Migration] = ()) -> VersionedPortal[T]:
    """Wrap ``schema`` so older wire versions are migrated before reading."""

    if not isinstance(schema, Portal):
        raise TypeError(f"versioned: expected a portal, got {type(schema).__name__}")
    for index, migration in enumerate(migrations):
        if not callable(migration):
            raise TypeError(f"versioned: migration {index} is not callable")
    return VersionedPortal(schema, tuple(migrations))


__all__ = ["Migration", "VersionedPortal", "migration_guidance", "versioned"]
