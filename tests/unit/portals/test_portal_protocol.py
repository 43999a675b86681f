"""
safe-portals — unit tests for the portal protocol and validation errors

Purpose
- Validate non-raising attempts, schema fingerprints and structural equality.
- Validate error messages, path nesting and pickling of ``ValidationError``.
"""

from __future__ import annotations

import logging
import pickle
from datetime import UTC, datetime

import pytest

from safe_portals import (
    Attempt,
    ValidationError,
    array,
    int_,
    obj,
    optional,
    str_,
)
from safe_portals.diagnostics import (
    fail,
    field_fragment,
    index_fragment,
    render_input,
    tag_fragment,
)
from safe_portals.utils import short_digest


def test_try_read_returns_value_or_error() -> None:
    portal = obj(x=int_)
    success = portal.try_read({"x": 1})
    assert success.ok
    assert success.unwrap() == {"x": 1}

    failure = portal.try_read({"x": "nope"})
    assert not failure.ok
    assert failure.value is None
    assert isinstance(failure.error, ValidationError)
    assert failure.error.path == ".x"
    with pytest.raises(ValidationError):
        failure.unwrap()


def test_try_write_returns_attempt() -> None:
    assert array(int_).try_write([1, 2]) == Attempt(value=[1, 2])
    assert not array(int_).try_write(["a"]).ok


def test_try_read_logs_rejections_at_debug(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.DEBUG, logger="safe_portals")
    portal = obj(x=int_)
    portal.try_read({"x": "nope"})

    records = [r for r in caplog.records if r.name == "safe_portals.portal"]
    assert len(records) == 1
    assert records[0].operation == "read"
    assert records[0].path == ".x"
    assert records[0].schema == short_digest(portal.fingerprint())


def test_fingerprint_tracks_structure() -> None:
    first = obj(x=str_, y=optional(int_))
    second = obj(x=str_, y=optional(int_))
    changed = obj(x=str_, y=int_)

    assert first == second
    assert hash(first) == hash(second)
    assert first.fingerprint() == second.fingerprint()
    assert first.fingerprint() != changed.fingerprint()
    assert len(first.fingerprint()) == 64


def test_validation_error_message_renders_compact_json() -> None:
    error = ValidationError(".a[0]", {"a": ["x"]})
    assert error.message == 'data.a[0] does not match serializer in data {"a":["x"]}'
    assert isinstance(error, ValueError)


def test_validation_error_renders_non_json_values() -> None:
    moment = datetime(2024, 1, 1, tzinfo=UTC)
    assert render_input(moment) == '"2024-01-01T00:00:00+00:00"'
    assert render_input({"b", "a"}) == '["a","b"]'
    assert render_input(float("nan")) == "NaN"


def test_nested_prepends_fragments_outermost_first() -> None:
    inner = ValidationError("", 5)
    step = inner.nested(index_fragment(1), [0, 5])
    outer = step.nested(field_fragment("items"), {"items": [0, 5]})
    tagged = outer.nested(tag_fragment("bag"), {"type": "bag", "items": [0, 5]})
    assert tagged.path == "<bag>.items[1]"
    assert tagged.got == {"type": "bag", "items": [0, 5]}


def test_fail_raises_with_path() -> None:
    with pytest.raises(ValidationError) as excinfo:
        fail("x", "[0]")
    assert excinfo.value.path == "[0]"


def test_validation_error_pickles() -> None:
    error = ValidationError(".x", {"x": 1})
    restored = pickle.loads(pickle.dumps(error))
    assert restored.path == ".x"
    assert restored.got == {"x": 1}
    assert str(restored) == str(error)
