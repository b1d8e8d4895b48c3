"""Tests for MemoryArchive and its JSON fixture format."""

import json

import pytest

from psb_core.archive import MemoryArchive, Ref
from psb_core.errors import FormatError
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
)


# ---------------------------------------------------------------------------
# Building / resolving
# ---------------------------------------------------------------------------

def test_add_returns_sequential_refs():
    archive = MemoryArchive()
    assert archive.add(PSBNull()) == Ref(0)
    assert archive.add(PSBNull()) == Ref(1)
    assert len(archive) == 2


def test_resolve_hands_out_fresh_copies():
    archive = MemoryArchive()
    ref = archive.add(PSBString(b"x"))
    a = archive.resolve(ref)
    b = archive.resolve(ref)
    assert a == b == PSBString(b"x")
    assert a is not b
    assert archive.outstanding == 2
    archive.release(a)
    archive.release(b)
    assert archive.outstanding == 0
    assert archive.resolve_count == 2


def test_resolve_out_of_range():
    archive = MemoryArchive()
    with pytest.raises(FormatError):
        archive.resolve(Ref(0))
    with pytest.raises(FormatError):
        archive.resolve(0)


def test_release_foreign_node():
    archive = MemoryArchive()
    with pytest.raises(ValueError):
        archive.release(PSBNull())


def test_default_root_is_null():
    assert MemoryArchive().root == PSBNull()


# ---------------------------------------------------------------------------
# JSON fixtures
# ---------------------------------------------------------------------------

def _doc(root, nodes=()):
    return json.dumps({"root": root, "nodes": list(nodes)}).encode("utf-8")


def test_from_json_all_node_types():
    archive = MemoryArchive.from_json(_doc(
        {"type": "objects", "entries": [["a", 0], ["b", 1]]},
        [
            {"type": "collection", "refs": [2, 3, 4, 5, 6]},
            {"type": "resource", "base64": "AAEC"},
            {"type": "null"},
            {"type": "bool", "value": True},
            {"type": "number", "subtype": "f32", "value": 0.5},
            {"type": "array", "values": [1, 2]},
            {"type": "string", "hex": "6869"},
        ],
    ))
    assert archive.root == PSBObjects([(b"a", Ref(0)), (b"b", Ref(1))])
    assert archive.resolve(Ref(0)) == PSBCollection([Ref(i) for i in range(2, 7)])
    assert archive.resolve(Ref(1)) == PSBResource(b"\x00\x01\x02", 3)
    assert archive.resolve(Ref(3)) == PSBBoolean(True)
    assert archive.resolve(Ref(4)) == PSBNumber(NumberType.FLOAT32, 0.5)
    assert archive.resolve(Ref(5)) == PSBArray([1, 2])
    assert archive.resolve(Ref(6)) == PSBString(b"hi")


def test_from_json_number_defaults_to_integer():
    archive = MemoryArchive.from_json(_doc({"type": "number", "value": 3}))
    assert archive.root == PSBNumber(NumberType.INTEGER, 3)


def test_from_json_keeps_raw_subtype():
    archive = MemoryArchive.from_json(_doc({"type": "number", "subtype": 7, "value": 3}))
    assert archive.root.subtype == 7


def test_from_bytes_is_from_json():
    archive = MemoryArchive.from_bytes(_doc({"type": "string", "value": "x"}))
    assert archive.root == PSBString(b"x")


@pytest.mark.parametrize("data", [
    b"not json",
    b"\xff\xfe",
    b"[]",
    b'{"nodes": []}',
    _doc({"type": "mystery"}),
    _doc({"type": "bool"}),
    _doc({"type": "collection", "refs": [0]}),
    _doc({"type": "objects", "entries": [["a", 5]]}, [{"type": "null"}]),
    _doc({"type": "number", "subtype": "f16", "value": 1}),
    _doc({"type": "string", "hex": "zz"}),
    _doc({"type": "resource", "base64": "!!"}),
    _doc("root"),
])
def test_from_json_rejects_malformed(data):
    with pytest.raises(FormatError):
        MemoryArchive.from_json(data)
