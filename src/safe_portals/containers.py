"""
safe-portals — composite portals.

Purpose
- Arrays, fixed tuples, records (required and partial), record merges, closed
  string enums and tagged unions of records.

Failure reporting
- A failing child is re-raised with a path fragment for its position
  (``[i]``, ``.name``, ``<tag>``) and with the container's whole input as ``got``.
- Records pass ``None`` for a missing key, so ``optional`` fields tolerate
  absence while bare fields reject it.
"""

from __future__ import annotations

from abc import abstractmethod
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar, TypeVar, cast

from safe_portals.constants import VARIANT_TAG_FIELD
from safe_portals.diagnostics import (
    ValidationError,
    fail,
    field_fragment,
    index_fragment,
    tag_fragment,
)
from safe_portals.portal import JSONValue, Portal

T = TypeVar("T")

Record = dict[str, Any]
FieldPairs = tuple[tuple[str, Portal[Any]], ...]


def _expect_mapping(data: object) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        fail(data)
    return data


def _expect_primitive_list(data: object) -> Sequence[Any]:
    if not isinstance(data, (list, tuple)):
        fail(data)
    return data


def _expect_sequence(value: object) -> Sequence[Any]:
    if not isinstance(value, Sequence) or isinstance(value, (str, bytes, bytearray)):
        fail(value)
    return value


def _read_field(portal: Portal[Any], name: str, item: object, whole: object) -> Any:
    try:
        return portal.read(item)
    except ValidationError as exc:
        raise exc.nested(field_fragment(name), whole) from exc


def _write_field(portal: Portal[Any], name: str, item: Any, whole: object) -> JSONValue:
    try:
        return portal.write(item)
    except ValidationError as exc:
        raise exc.nested(field_fragment(name), whole) from exc


def _render_fields(fields: FieldPairs) -> str:
    return ", ".join(f"{name}: {portal.description()}" for name, portal in fields)


@dataclass(frozen=True, slots=True)
class ArrayPortal(Portal[list[T]]):
    kind: ClassVar[str] = "list"

    inner: Portal[T]

    def read(self, data: object) -> list[T]:
        items = _expect_primitive_list(data)
        out: list[T] = []
        for index, item in enumerate(items):
            try:
                out.append(self.inner.read(item))
            except ValidationError as exc:
                raise exc.nested(index_fragment(index), data) from exc
        return out

    def write(self, value: list[T]) -> JSONValue:
        items = _expect_sequence(value)
        out: list[JSONValue] = []
        for index, item in enumerate(items):
            try:
                out.append(self.inner.write(item))
            except ValidationError as exc:
                raise exc.nested(index_fragment(index), value) from exc
        return out

    def description(self) -> str:
        return f"array({self.inner.description()})"


@dataclass(frozen=True, slots=True)
class TuplePortal(Portal[tuple[Any, ...]]):
    """Fixed arity; both directions require exactly ``len(items)`` elements."""

    kind: ClassVar[str] = "tuple"

    items: tuple[Portal[Any], ...]

    def read(self, data: object) -> tuple[Any, ...]:
        values = _expect_primitive_list(data)
        if len(values) != len(self.items):
            fail(data)
        out: list[Any] = []
        for index, (portal, item) in enumerate(zip(self.items, values)):
            try:
                out.append(portal.read(item))
            except ValidationError as exc:
                raise exc.nested(index_fragment(index), data) from exc
        return tuple(out)

    def write(self, value: tuple[Any, ...]) -> JSONValue:
        values = _expect_sequence(value)
        if len(values) != len(self.items):
            fail(value)
        out: list[JSONValue] = []
        for index, (portal, item) in enumerate(zip(self.items, values)):
            try:
                out.append(portal.write(item))
            except ValidationError as exc:
                raise exc.nested(index_fragment(index), value) from exc
        return out

    def description(self) -> str:
        return "tuple(" + ", ".join(portal.description() for portal in self.items) + ")"


class RecordPortal(Portal[Record]):
    """Portals whose typed value is a string-keyed record."""

    __slots__ = ()

    kind: ClassVar[str] = "obj"

    @abstractmethod
    def field_names(self) -> tuple[str, ...]:
        """Declared keys, in declaration order."""

    @abstractmethod
    def read_with_defaults(self, default: Mapping[str, Any], data: object) -> Record:
        """Read ``data``, taking keys it lacks from the already-typed ``default``."""


@dataclass(frozen=True, slots=True)
class ObjPortal(RecordPortal):
    """Record with every declared key required (unless its portal tolerates ``None``)."""

    fields: FieldPairs

    def field_names(self) -> tuple[str, ...]:
        return tuple(name for name, _ in self.fields)

    def read(self, data: object) -> Record:
        record = _expect_mapping(data)
        return {
            name: _read_field(portal, name, record.get(name), data) for name, portal in self.fields
        }

    def write(self, value: Record) -> JSONValue:
        record = _expect_mapping(value)
        return {
            name: _write_field(portal, name, record.get(name), value)
            for name, portal in self.fields
        }

    def read_with_defaults(self, default: Mapping[str, Any], data: object) -> Record:
        _check_default(default)
        record = _expect_mapping(data)
        out: Record = {}
        for name, portal in self.fields:
            if name not in record and name in default:
                out[name] = default[name]
            else:
                out[name] = _read_field(portal, name, record.get(name), data)
        return out

    def description(self) -> str:
        return "obj({" + _render_fields(self.fields) + "})"


@dataclass(frozen=True, slots=True)
class PartialObjPortal(RecordPortal):
    """Record whose keys may all be absent.

    A missing key stays missing in both directions; a key holding null maps to
    ``None`` and back.
    """

    fields: FieldPairs

    def field_names(self) -> tuple[str, ...]:
        return tuple(name for name, _ in self.fields)

    def read(self, data: object) -> Record:
        record = _expect_mapping(data)
        out: Record = {}
        for name, portal in self.fields:
            if name not in record:
                continue
            item = record[name]
            out[name] = None if item is None else _read_field(portal, name, item, data)
        return out

    def write(self, value: Record) -> JSONValue:
        record = _expect_mapping(value)
        out: dict[str, JSONValue] = {}
        for name, portal in self.fields:
            if name not in record:
                continue
            item = record[name]
            out[name] = None if item is None else _write_field(portal, name, item, value)
        return out

    def read_with_defaults(self, default: Mapping[str, Any], data: object) -> Record:
        _check_default(default)
        out = self.read(data)
        for name in self.field_names():
            if name not in out and name in default:
                out[name] = default[name]
        return out

    def description(self) -> str:
        return "partial_obj({" + _render_fields(self.fields) + "})"


@dataclass(frozen=True, slots=True)
class CombinedPortal(RecordPortal):
    """Merge of record portals; later parts win on key collisions."""

    parts: tuple[RecordPortal, ...]

    def field_names(self) -> tuple[str, ...]:
        return tuple(dict.fromkeys(name for part in self.parts for name in part.field_names()))

    def read(self, data: object) -> Record:
        merged: Record = {}
        for part in self.parts:
            merged.update(part.read(data))
        return merged

    def write(self, value: Record) -> JSONValue:
        merged: dict[str, JSONValue] = {}
        for part in self.parts:
            merged.update(cast("dict[str, JSONValue]", part.write(value)))
        return merged

    def read_with_defaults(self, default: Mapping[str, Any], data: object) -> Record:
        merged: Record = {}
        for part in self.parts:
            merged.update(part.read_with_defaults(default, data))
        return merged

    def description(self) -> str:
        return "combine(" + ", ".join(part.description() for part in self.parts) + ")"


@dataclass(frozen=True, slots=True)
class OneOfPortal(Portal[Any]):
    """Closed set of literal strings, optionally backed by a string ``Enum``."""

    kind: ClassVar[str] = "sumtype"

    values: tuple[str, ...]
    enum_type: type[Enum] | None = None

    def read(self, data: object) -> Any:
        if isinstance(data, str) and data in self.values:
            return data if self.enum_type is None else self.enum_type(data)
        fail(data)

    def write(self, value: Any) -> JSONValue:
        candidate = value
        if self.enum_type is not None and isinstance(value, self.enum_type):
            candidate = value.value
        if isinstance(candidate, str) and candidate in self.values:
            return candidate
        fail(value)

    def description(self) -> str:
        return "one_of(" + ", ".join(f'"{value}"' for value in self.values) + ")"


@dataclass(frozen=True, slots=True)
class VariantPortal(Portal[Record]):
    """Tagged union of record portals, discriminated by a flat ``type`` key."""

    kind: ClassVar[str] = "sumtype"

    branches: tuple[tuple[str, RecordPortal], ...]

    @property
    def tags(self) -> tuple[str, ...]:
        return tuple(tag for tag, _ in self.branches)

    def _branch(self, tag: object) -> RecordPortal | None:
        if not isinstance(tag, str):
            return None
        for candidate, portal in self.branches:
            if candidate == tag:
                return portal
        return None

    def read(self, data: object) -> Record:
        record = _expect_mapping(data)
        tag = record.get(VARIANT_TAG_FIELD)
        branch = self._branch(tag)
        if branch is None:
            fail(data)
        try:
            payload = branch.read(record)
        except ValidationError as exc:
            raise exc.nested(tag_fragment(tag), data) from exc
        return {**payload, VARIANT_TAG_FIELD: tag}

    def write(self, value: Record) -> JSONValue:
        record = _expect_mapping(value)
        tag = record.get(VARIANT_TAG_FIELD)
        branch = self._branch(tag)
        if branch is None:
            fail(value)
        try:
            payload = branch.write(record)
        except ValidationError as exc:
            raise exc.nested(tag_fragment(tag), value) from exc
        if not isinstance(payload, dict):
            fail(value)
        return {**payload, VARIANT_TAG_FIELD: tag}

    def description(self) -> str:
        rendered = ", ".join(f'"{tag}", {portal.description()}' for tag, portal in self.branches)
        return f"variant({rendered})"


def _check_default(default: object) -> None:
    if not isinstance(default, Mapping):
        raise TypeError(f"default must be a mapping, got {type(default).__name__}")


def _check_portal(value: object, context: str) -> None:
    if not isinstance(value, Portal):
        raise TypeError(f"{context}: expected a portal, got {type(value).__name__}")


def _collect_fields(
    fields: Mapping[str, Portal[Any]] | None,
    named: Mapping[str, Portal[Any]],
    context: str,
) -> FieldPairs:
    pairs: dict[str, Portal[Any]] = {}
    for source in (fields or {}, named):
        for name, portal in source.items():
            if not isinstance(name, str):
                raise TypeError(f"{context}: field names must be strings, got {type(name).__name__}")
            if name in pairs:
                raise ValueError(f"{context}: field {name!r} declared twice")
            _check_portal(portal, f"{context}.{name}")
            pairs[name] = portal
    return tuple(pairs.items())


def array(inner: Portal[T]) -> ArrayPortal[T]:
    _check_portal(inner, "array")
    return ArrayPortal(inner)


def tuple_(*items: Portal[Any]) -> TuplePortal:
    for index, portal in enumerate(items):
        _check_portal(portal, f"tuple[{index}]")
    return TuplePortal(tuple(items))


def obj(fields: Mapping[str, Portal[Any]] | None = None, /, **named: Portal[Any]) -> ObjPortal:
    """Record portal; fields come from a mapping, keyword arguments, or both."""
    return ObjPortal(_collect_fields(fields, named, "obj"))


def partial_obj(
    fields: Mapping[str, Portal[Any]] | None = None, /, **named: Portal[Any]
) -> PartialObjPortal:
    return PartialObjPortal(_collect_fields(fields, named, "partial_obj"))


def combine(*parts: RecordPortal) -> CombinedPortal:
    if len(parts) < 2:
        raise ValueError("combine() requires at least two record portals")
    for index, part in enumerate(parts):
        if not isinstance(part, RecordPortal):
            raise TypeError(
                f"combine[{index}]: expected obj/partial_obj/combine, got {type(part).__name__}"
            )
    return CombinedPortal(tuple(parts))


def one_of(*candidates: Any) -> OneOfPortal:
    """Closed string enum.

    Accepts literal strings, a single mapping (its keys are the candidates), or
    a single ``Enum`` subclass with string values (reads yield members).
    """
    enum_type: type[Enum] | None = None
    values: tuple[object, ...] = candidates
    if len(candidates) == 1:
        only = candidates[0]
        if isinstance(only, type) and issubclass(only, Enum):
            enum_type = only
            values = tuple(member.value for member in only)
        elif isinstance(only, Mapping):
            values = tuple(only)
    if not values:
        raise ValueError("one_of() requires at least one candidate")
    for value in values:
        if not isinstance(value, str):
            raise TypeError(f"one_of: candidates must be strings, got {type(value).__name__}")
    return OneOfPortal(tuple(str(value) for value in values), enum_type=enum_type)


def variant(*pairs: object) -> VariantPortal:
    """Tagged union from alternating ``tag, record_portal`` arguments."""
    if not pairs or len(pairs) % 2:
        raise TypeError("variant() takes alternating tag, portal arguments")
    branches: list[tuple[str, RecordPortal]] = []
    seen: set[str] = set()
    for index in range(0, len(pairs), 2):
        tag, portal = pairs[index], pairs[index + 1]
        if not isinstance(tag, str):
            raise TypeError(f"variant: tag must be a string, got {type(tag).__name__}")
        if not isinstance(portal, RecordPortal):
            raise TypeError(
                f"variant<{tag}>: expected obj/partial_obj/combine, got {type(portal).__name__}"
            )
        if tag in seen:
            raise ValueError(f"variant: duplicate tag {tag!r}")
        seen.add(tag)
        branches.append((tag, portal))
    return VariantPortal(tuple(branches))


__all__ = [
    "ArrayPortal",
    "CombinedPortal",
    "ObjPortal",
    "OneOfPortal",
    "PartialObjPortal",
    "RecordPortal",
    "TuplePortal",
    "VariantPortal",
    "array",
    "combine",
    "obj",
    "one_of",
    "partial_obj",
    "tuple_",
    "variant",
]
