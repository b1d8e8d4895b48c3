"""Type dispatch: classify a tagged node into one of a closed set of kinds."""

from __future__ import annotations

from enum import Enum, auto
from types import MappingProxyType

from .errors import UnsupportedType
from .nodes import (
    PSBArray,
    PSBBoolean,
    PSBCollection,
    PSBNull,
    PSBNumber,
    PSBObjects,
    PSBResource,
    PSBString,
)


class Kind(Enum):
    NULL = auto()
    BOOLEAN = auto()
    RESOURCE = auto()
    NUMBER = auto()
    ARRAY = auto()
    STRING = auto()
    OBJECTS = auto()
    COLLECTION = auto()


# Exact node class -> Kind.  PSBValue (the generic base) has no Kind.
_KIND_BY_TYPE = MappingProxyType({
    PSBNull: Kind.NULL,
    PSBBoolean: Kind.BOOLEAN,
    PSBResource: Kind.RESOURCE,
    PSBNumber: Kind.NUMBER,
    PSBArray: Kind.ARRAY,
    PSBString: Kind.STRING,
    PSBObjects: Kind.OBJECTS,
    PSBCollection: Kind.COLLECTION,
})

CONTAINER_KINDS = frozenset({Kind.OBJECTS, Kind.COLLECTION})


def raw_tag(node: object) -> str:
    """The archive tag name of *node*, falling back to its class name."""
    return getattr(node, "type_name", None) or type(node).__name__


def classify(node: object) -> Kind:
    """Return the Kind of *node*.

    Matching is on the exact class, so subclasses of a known node type are
    not silently treated as their parent.  Raises UnsupportedType otherwise.
    """
    kind = _KIND_BY_TYPE.get(type(node))
    if kind is None:
        raise UnsupportedType(raw_tag(node))
    return kind
