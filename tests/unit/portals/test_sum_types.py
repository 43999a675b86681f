"""Closed string enums and tagged unions of records."""

from __future__ import annotations

from enum import Enum

import pytest

from safe_portals import (
    ValidationError,
    float_,
    int_,
    obj,
    one_of,
    optional,
    partial_obj,
    str_,
    variant,
)


class Color(Enum):
    RED = "red"
    GREEN = "green"


SHAPE = variant(
    "circle",
    obj(radius=float_),
    "person",
    obj(name=str_, age=optional(int_)),
)


def test_one_of_accepts_only_listed_strings() -> None:
    portal = one_of("a", "b")
    assert portal.read("a") == "a"
    assert portal.write("b") == "b"
    for bad in ("c", "A", 1, None):
        with pytest.raises(ValidationError):
            portal.read(bad)
    assert portal.description() == 'one_of("a", "b")'


def test_one_of_takes_mapping_keys_as_candidates() -> None:
    portal = one_of({"low": 1, "high": 2})
    assert portal.values == ("low", "high")
    assert portal.read("high") == "high"


def test_one_of_enum_reads_members_and_writes_values() -> None:
    portal = one_of(Color)
    assert portal.read("red") is Color.RED
    assert portal.write(Color.GREEN) == "green"
    assert portal.write("green") == "green"
    assert portal.description() == 'one_of("red", "green")'
    with pytest.raises(ValidationError):
        portal.read("blue")


def test_one_of_rejects_empty_and_non_string_candidates() -> None:
    with pytest.raises(ValueError):
        one_of()
    with pytest.raises(TypeError):
        one_of("a", 1)


def test_variant_reads_selected_branch_and_keeps_tag() -> None:
    assert SHAPE.read({"type": "circle", "radius": 2.5}) == {"type": "circle", "radius": 2.5}
    assert SHAPE.read({"type": "person", "name": "Ada"}) == {
        "type": "person",
        "name": "Ada",
        "age": None,
    }


def test_variant_writes_flat_record_with_tag() -> None:
    written = SHAPE.write({"type": "circle", "radius": 1.0})
    assert written == {"radius": 1.0, "type": "circle"}


def test_variant_branch_failure_path_is_tagged() -> None:
    data = {"type": "person", "name": 3}
    with pytest.raises(ValidationError) as excinfo:
        SHAPE.read(data)
    assert excinfo.value.path == "<person>.name"
    assert excinfo.value.got == data


@pytest.mark.parametrize(
    "bad",
    [{"type": "square", "side": 1}, {"radius": 1.0}, {"type": 1}, ["circle"]],
)
def test_variant_unknown_or_missing_tag_fails_at_root(bad: object) -> None:
    with pytest.raises(ValidationError) as excinfo:
        SHAPE.read(bad)
    assert excinfo.value.path == ""


def test_variant_write_rejects_unknown_tag() -> None:
    with pytest.raises(ValidationError):
        SHAPE.write({"type": "square"})


def test_variant_description_lists_tags_and_branches() -> None:
    portal = variant("circle", obj(radius=float_), "person", obj(name=str_))
    assert portal.description() == (
        'variant("circle", obj({radius: float}), "person", obj({name: str}))'
    )
    assert portal.tags == ("circle", "person")


def test_variant_accepts_partial_records() -> None:
    portal = variant("patch", partial_obj(name=str_))
    assert portal.read({"type": "patch"}) == {"type": "patch"}


def test_variant_construction_errors() -> None:
    with pytest.raises(ValueError):
        variant("a", obj(x=str_), "a", obj(y=str_))
    with pytest.raises(TypeError):
        variant("a", str_)
    with pytest.raises(TypeError):
        variant("a", obj(x=str_), "b")
    with pytest.raises(TypeError):
        variant()
