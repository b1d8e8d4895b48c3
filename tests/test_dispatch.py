"""Tests for the type dispatcher."""

from dataclasses import dataclass
from typing import ClassVar

import pytest

from psb_core import dispatch
from psb_core.dispatch import Kind, classify, raw_tag
from psb_core.errors import UnsupportedType
from psb_core.nodes import (
    NumberType,
    PSBArray,
    PSBBoolean,
    PSBCollection,
    PSBNull,
    PSBNumber,
    PSBObjects,
    PSBResource,
    PSBString,
    PSBValue,
)


@pytest.mark.parametrize("node, kind", [
    (PSBNull(), Kind.NULL),
    (PSBBoolean(True), Kind.BOOLEAN),
    (PSBResource(b"ab", 2), Kind.RESOURCE),
    (PSBNumber(NumberType.INTEGER, 1), Kind.NUMBER),
    (PSBArray([1, 2]), Kind.ARRAY),
    (PSBString(b"x"), Kind.STRING),
    (PSBObjects([]), Kind.OBJECTS),
    (PSBCollection([]), Kind.COLLECTION),
])
def test_classify_known(node, kind):
    assert classify(node) is kind


def test_every_kind_has_a_node_type():
    assert set(dispatch._KIND_BY_TYPE.values()) == set(Kind)


# ---------------------------------------------------------------------------
# Unrecognized nodes
# ---------------------------------------------------------------------------

def test_generic_base_is_unsupported():
    with pytest.raises(UnsupportedType) as exc_info:
        classify(PSBValue())
    assert exc_info.value.raw_tag == "psb_value_t"


def test_unknown_tag_reports_raw_tag():
    @dataclass(slots=True)
    class PSBList(PSBValue):
        type_name: ClassVar[str] = "psb_list_t"

    with pytest.raises(UnsupportedType) as exc_info:
        classify(PSBList())
    assert exc_info.value.raw_tag == "psb_list_t"
    assert "psb_list_t" in str(exc_info.value)


def test_subclass_of_known_type_is_not_its_parent():
    class PSBFancyString(PSBString):
        pass

    with pytest.raises(UnsupportedType):
        classify(PSBFancyString(b"x"))


def test_foreign_object():
    with pytest.raises(UnsupportedType) as exc_info:
        classify(object())
    assert exc_info.value.raw_tag == "object"


def test_raw_tag():
    assert raw_tag(PSBNull()) == "psb_null_t"
    assert raw_tag(42) == "int"


def test_registry_is_read_only():
    with pytest.raises(TypeError):
        dispatch._KIND_BY_TYPE[PSBValue] = Kind.NULL
