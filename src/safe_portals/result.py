"""Result type for passing exceptional conditions across serialization boundaries."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, ClassVar, Generic, TypeGuard, TypedDict, TypeVar

from safe_portals.constants import RESULT_ERROR_FIELD, RESULT_OK_FIELD
from safe_portals.diagnostics import ValidationError, fail, field_fragment
from safe_portals.portal import JSONValue, Portal

R = TypeVar("R")
E = TypeVar("E")


class Ok(TypedDict, Generic[R]):
    ok: R


class Err(TypedDict, Generic[E]):
    error: E


Result = Ok[R] | Err[E]


def ok(value: R) -> Ok[R]:
    return {"ok": value}


def err(error: E) -> Err[E]:
    return {"error": error}


def is_ok(result: Mapping[str, Any]) -> TypeGuard[Ok[Any]]:
    return RESULT_ERROR_FIELD not in result


def is_err(result: Mapping[str, Any]) -> TypeGuard[Err[Any]]:
    return RESULT_ERROR_FIELD in result


@dataclass(frozen=True, slots=True)
class ResultPortal(Portal[dict[str, Any]], Generic[R, E]):
    """Exactly one of ``ok``/``error``; presence of ``error`` selects the error branch."""

    kind: ClassVar[str] = "obj"

    ok: Portal[R]
    error: Portal[E]

    def _branch(self, record: Mapping[str, Any]) -> tuple[str, Portal[Any]]:
        if RESULT_ERROR_FIELD in record:
            return RESULT_ERROR_FIELD, self.error
        return RESULT_OK_FIELD, self.ok

    def read(self, data: object) -> dict[str, Any]:
        if not isinstance(data, Mapping):
            fail(data)
        name, portal = self._branch(data)
        try:
            return {name: portal.read(data.get(name))}
        except ValidationError as exc:
            raise exc.nested(field_fragment(name), data) from exc

    def write(self, value: dict[str, Any]) -> JSONValue:
        if not isinstance(value, Mapping):
            fail(value)
        name, portal = self._branch(value)
        try:
            return {name: portal.write(value.get(name))}
        except ValidationError as exc:
            raise exc.nested(field_fragment(name), value) from exc

    def description(self) -> str:
        return f"result({self.ok.description()}, {self.error.description()})"


def portal(*, ok: Portal[R], error: Portal[E]) -> ResultPortal[R, E]:
    for name, candidate in ((RESULT_OK_FIELD, ok), (RESULT_ERROR_FIELD, error)):
        if not isinstance(candidate, Portal):
            raise TypeError(f"result.{name}: expected a portal, got {type(candidate).__name__}")
    return ResultPortal(ok, error)


__all__ = [
    "Err",
    "Ok",
    "Result",
    "ResultPortal",
    "err",
    "is_err",
    "is_ok",
    "ok",
    "portal",
]
