"""Tagged nodes — the value tree as handed out by an archive reader."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import ClassVar, Hashable, Protocol, Union


# ---------------------------------------------------------------------------
# Number subtypes
# ---------------------------------------------------------------------------

class NumberType(IntEnum):
    INTEGER = 0
    FLOAT32 = 1
    FLOAT64 = 2


# ---------------------------------------------------------------------------
# Node types
# ---------------------------------------------------------------------------

Reference = Hashable
"""Opaque handle into the archive's node storage."""


@dataclass(slots=True)
class PSBValue:
    """Generic base of every node.  Never valid as a terminal node."""

    type_name: ClassVar[str] = "psb_value_t"


@dataclass(slots=True)
class PSBNull(PSBValue):
    type_name: ClassVar[str] = "psb_null_t"


@dataclass(slots=True)
class PSBBoolean(PSBValue):
    value: bool
    type_name: ClassVar[str] = "psb_boolean_t"


@dataclass(slots=True)
class PSBResource(PSBValue):
    buffer: bytes
    length: int
    type_name: ClassVar[str] = "psb_resource_t"


@dataclass(slots=True)
class PSBNumber(PSBValue):
    subtype: NumberType | int
    value: int | float
    type_name: ClassVar[str] = "psb_number_t"


@dataclass(slots=True)
class PSBArray(PSBValue):
    """Inline literal integers.  Elements are values, not references."""

    values: list[int] = field(default_factory=list)
    type_name: ClassVar[str] = "psb_array_t"


@dataclass(slots=True)
class PSBString(PSBValue):
    data: bytes  # UTF-8
    type_name: ClassVar[str] = "psb_string_t"


@dataclass(slots=True)
class PSBObjects(PSBValue):
    """Ordered ``(key, reference)`` pairs; values are resolved lazily."""

    entries: list[tuple[bytes | str, Reference]] = field(default_factory=list)
    type_name: ClassVar[str] = "psb_objects_t"


@dataclass(slots=True)
class PSBCollection(PSBValue):
    refs: list[Reference] = field(default_factory=list)
    type_name: ClassVar[str] = "psb_collection_t"


Node = Union[
    PSBNull,
    PSBBoolean,
    PSBResource,
    PSBNumber,
    PSBArray,
    PSBString,
    PSBObjects,
    PSBCollection,
]


# ---------------------------------------------------------------------------
# ArchiveReader
# ---------------------------------------------------------------------------

class ArchiveReader(Protocol):
    """What the converter needs from an archive reader.

    ``resolve`` hands out an owned node for a reference; the caller gives it
    back with ``release`` once done.  Readers that do not track ownership
    may implement ``release`` as a no-op.
    """

    @property
    def root(self) -> PSBValue: ...

    def resolve(self, ref: Reference) -> PSBValue: ...

    def release(self, node: PSBValue) -> None: ...
