"""Property-based checks: ``read(write(v)) == v`` for representative schemas."""

from __future__ import annotations

import json
from datetime import UTC, datetime, timedelta, timezone
from typing import Any

import pytest

from safe_portals import (
    ValidationError,
    array,
    bool_,
    date_iso,
    date_unix_millis,
    date_unix_secs,
    float_,
    int_,
    obj,
    one_of,
    optional,
    partial_obj,
    str_,
    tuple_,
    variant,
    versioned,
)

try:
    from hypothesis import given, settings
    from hypothesis import strategies as st
except ModuleNotFoundError:
    _HYPOTHESIS_AVAILABLE = False
else:
    _HYPOTHESIS_AVAILABLE = True


_EVENT = versioned(
    variant(
        "created",
        obj(
            id=int_,
            title=str_,
            tags=array(one_of("red", "green", "blue")),
            at=date_iso,
        ),
        "moved",
        obj(id=int_, position=tuple_(float_, float_), note=optional(str_)),
        "patched",
        partial_obj(title=str_, archived=bool_),
    )
)


def _json_wire(portal: Any, value: Any) -> Any:
    return portal.read(json.loads(json.dumps(portal.write(value))))


if _HYPOTHESIS_AVAILABLE:
    _DATETIMES = st.datetimes(
        min_value=datetime(1, 1, 1),
        max_value=datetime(9999, 12, 31, 23, 59, 59, 999999),
    ).map(lambda value: value.replace(tzinfo=UTC))

    # Leaves room for a fourteen hour offset without leaving the datetime range.
    _MODERN_DATETIMES = st.datetimes(
        min_value=datetime(1900, 1, 1),
        max_value=datetime(2100, 1, 1),
    ).map(lambda value: value.replace(tzinfo=UTC))

    _FINITE_FLOATS = st.floats(allow_nan=False, allow_infinity=False, width=64)

    _CREATED = st.fixed_dictionaries(
        {
            "type": st.just("created"),
            "id": st.integers(min_value=-(2**53), max_value=2**53),
            "title": st.text(max_size=20),
            "tags": st.lists(st.sampled_from(["red", "green", "blue"]), max_size=4),
            "at": _DATETIMES,
        }
    )
    _MOVED = st.fixed_dictionaries(
        {
            "type": st.just("moved"),
            "id": st.integers(min_value=0, max_value=10_000),
            "position": st.tuples(_FINITE_FLOATS, _FINITE_FLOATS),
            "note": st.none() | st.text(max_size=10),
        }
    )
    _PATCHED = st.fixed_dictionaries(
        {"type": st.just("patched")},
        optional={"title": st.text(max_size=10), "archived": st.booleans()},
    )

    @given(event=st.one_of(_CREATED, _MOVED, _PATCHED))
    @settings(max_examples=50, derandomize=True, deadline=None)
    def test_property_event_survives_json_round_trip(event: dict[str, Any]) -> None:
        assert _json_wire(_EVENT, event) == event

    @given(moment=_MODERN_DATETIMES)
    @settings(max_examples=50, derandomize=True, deadline=None)
    def test_property_unix_dates_are_exact_near_the_epoch(moment: datetime) -> None:
        assert _json_wire(date_unix_secs, moment) == moment
        assert _json_wire(date_unix_millis, moment) == moment

    @given(moment=_DATETIMES)
    @settings(max_examples=100, derandomize=True, deadline=None)
    def test_property_unix_dates_round_trip_or_refuse_to_write(moment: datetime) -> None:
        for portal in (date_unix_secs, date_unix_millis):
            attempt = portal.try_write(moment)
            if attempt.ok:
                assert portal.read(json.loads(json.dumps(attempt.value))) == moment
            else:
                assert isinstance(attempt.error, ValidationError)

    @given(moment=_DATETIMES)
    @settings(max_examples=100, derandomize=True, deadline=None)
    def test_property_whole_units_always_round_trip(moment: datetime) -> None:
        whole_second = moment.replace(microsecond=0)
        assert _json_wire(date_unix_secs, whole_second) == whole_second
        whole_milli = moment.replace(microsecond=moment.microsecond // 1000 * 1000)
        assert _json_wire(date_unix_millis, whole_milli) == whole_milli

    @given(
        moment=_MODERN_DATETIMES,
        offset_minutes=st.integers(min_value=-14 * 60, max_value=14 * 60),
    )
    @settings(max_examples=50, derandomize=True, deadline=None)
    def test_property_iso_write_is_offset_independent(
        moment: datetime, offset_minutes: int
    ) -> None:
        shifted = moment.astimezone(timezone(timedelta(minutes=offset_minutes)))
        assert date_iso.write(shifted) == date_iso.write(moment)
        assert date_iso.read(date_iso.write(shifted)) == moment

else:

    def test_property_event_survives_json_round_trip() -> None:
        pytest.skip("hypothesis is not installed")

    def test_property_unix_dates_are_exact_near_the_epoch() -> None:
        pytest.skip("hypothesis is not installed")

    def test_property_unix_dates_round_trip_or_refuse_to_write() -> None:
        pytest.skip("hypothesis is not installed")

    def test_property_whole_units_always_round_trip() -> None:
        pytest.skip("hypothesis is not installed")

    def test_property_iso_write_is_offset_independent() -> None:
        pytest.skip("hypothesis is not installed")
