"""Tests for psb_core.values."""

from psb_core.values import (
    Null,
    VBool,
    VBytes,
    VDict,
    VFloat32,
    VFloat64,
    VInt,
    VList,
    VText,
    _Null,
)


class TestNull:
    def test_singleton(self):
        assert Null is _Null()

    def test_falsy(self):
        assert not Null

    def test_repr(self):
        assert repr(Null) == "Null"
        assert str(Null) == "null"


class TestValueTypes:
    def test_float_types_are_distinct(self):
        assert VFloat32(1.5) != VFloat64(1.5)
        assert VFloat32(1.5) == VFloat32(1.5)

    def test_int_is_not_bool(self):
        assert VInt(1) != VBool(True)

    def test_str(self):
        assert str(VBool(True)) == "true"
        assert str(VInt(42)) == "42"
        assert str(VFloat64(0.5)) == "0.5"
        assert str(VBytes(b"abc")) == "<3 bytes>"
        assert str(VText("hero")) == "hero"

    def test_vlist(self):
        lst = VList([VInt(1), VInt(2)])
        assert len(lst.items) == 2
        assert str(lst) == "[1, 2]"

    def test_vdict_keeps_insertion_order(self):
        d = VDict({"b": VInt(1), "a": VInt(2)})
        assert list(d.entries) == ["b", "a"]
        assert str(d) == "{b: 1, a: 2}"

    def test_empty_defaults(self):
        assert VList().items == []
        assert VDict().entries == {}
