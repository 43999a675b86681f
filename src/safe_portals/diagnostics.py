"""
safe-portals — validation failures and path accumulation.

Purpose
- Define the single failure kind raised by every portal read/write.
- Provide the path-prefixing protocol containers use when a child fails.
- Render the offending input as compact JSON for human-readable messages.

Path fragments
- ``.name`` for record fields, ``[i]`` for list/tuple positions, ``<tag>`` for
  union branches. Fragments are prepended as the error unwinds, so the final
  path reads outermost-first.
"""

from __future__ import annotations

import json
from datetime import date, datetime
from enum import Enum
from typing import NoReturn

__all__ = [
    "ValidationError",
    "fail",
    "field_fragment",
    "index_fragment",
    "render_input",
    "tag_fragment",
]


class ValidationError(ValueError):
    """Raised when data does not match the shape a portal expects.

    ``path`` locates the failing leaf inside ``got``, which is the whole value
    the outermost failing container received.
    """

    def __init__(self, path: str, got: object) -> None:
        self.path = path
        self.got = got
        super().__init__(f"data{path} does not match serializer in data {render_input(got)}")

    @property
    def message(self) -> str:
        return str(self)

    def nested(self, fragment: str, got: object) -> ValidationError:
        """Return a new error located one level further out."""
        return ValidationError(fragment + self.path, got)

    def __reduce__(self) -> tuple[type[ValidationError], tuple[str, object]]:
        return (self.__class__, (self.path, self.got))


def fail(got: object, path: str = "") -> NoReturn:
    raise ValidationError(path, got)


def field_fragment(name: str) -> str:
    return f".{name}"


def index_fragment(index: int) -> str:
    return f"[{index}]"


def tag_fragment(tag: str) -> str:
    return f"<{tag}>"


def render_input(value: object) -> str:
    """Render ``value`` as compact JSON, falling back to ``repr``."""
    try:
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False, default=_json_default)
    except (TypeError, ValueError):
        return repr(value)


def _json_default(value: object) -> object:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (set, frozenset)):
        return sorted(value, key=repr)
    return repr(value)
