"""Converter: tagged node tree → generic Value tree."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterator

from .dispatch import Kind, classify
from .errors import (
    EncodingError,
    FormatError,
    InvalidNumberType,
    TypeMismatchError,
)
from .nodes import ArchiveReader, NumberType, PSBValue, Reference
from .options import DEFAULT_OPTIONS, ConvertOptions, DuplicateKeys
from .resolver import Resolver
from .values import (
    Null,
    Value,
    VBool,
    VBytes,
    VDict,
    VFloat32,
    VFloat64,
    VInt,
    VList,
    VText,
)

LOG = logging.getLogger(__name__)

_BYTES_LIKE = (bytes, bytearray, memoryview)


# ---------------------------------------------------------------------------
# Public entry point
# ---------------------------------------------------------------------------

def convert(
    node: PSBValue,
    reader: ArchiveReader,
    options: ConvertOptions | None = None,
) -> Value:
    """Convert *node* (usually ``reader.root``) into a Value tree.

    The walk is depth-first in archive order and uses an explicit stack, so
    nesting depth is not limited by the interpreter's recursion limit.  Any
    error aborts the whole conversion; nodes resolved along the way are
    released either way.

    With ``cache_references`` on, a reference seen again within the call
    reuses the Value already built for it, so repeated occurrences share one
    subtree and the work is bounded by the number of distinct references.
    """
    options = options or DEFAULT_OPTIONS
    with Resolver(reader, cache=options.cache_references) as resolver:
        converter = _Converter(resolver, options)
        if options.cache_references:
            converter.built = {}
        value = converter.run(node)
    LOG.debug(
        "Converted %d node(s): %d resolved, %d reused",
        converter.visited, resolver.resolved, converter.reused,
    )
    return value


# ---------------------------------------------------------------------------
# Shared entry validation (also used by the dumper)
# ---------------------------------------------------------------------------

def object_pairs(node) -> Iterator[tuple[object, Reference]]:
    """Yield the raw ``(key, reference)`` pairs of an Objects node."""
    for entry in _as_sequence(node.entries, "objects"):
        if not isinstance(entry, tuple) or len(entry) != 2:
            raise TypeMismatchError("objects", f"entry is not a (key, reference) pair: {entry!r}")
        yield entry


def collection_refs(node) -> Iterator[Reference]:
    yield from _as_sequence(node.refs, "collection")


def on_path(ref: Reference, path: set) -> bool:
    """True if *ref* is already open on the current path."""
    try:
        return ref in path
    except TypeError as exc:
        raise FormatError(f"unhashable reference {ref!r}") from exc


# ---------------------------------------------------------------------------
# Work stack
# ---------------------------------------------------------------------------

@dataclass(slots=True)
class _Frame:
    """A container whose children are still being converted."""

    node: PSBValue
    ref: Reference | None
    container: VList | VDict
    pending: Iterator[tuple[str | None, Reference]]
    key: str | None = None  # key of the child currently on top of this frame

    def put(self, key: str | None, value: Value) -> None:
        if isinstance(self.container, VList):
            self.container.items.append(value)
        else:
            self.container.entries[key] = value


@dataclass
class _Converter:
    resolver: Resolver
    options: ConvertOptions
    visited: int = 0
    reused: int = 0
    built: dict[Reference, Value] | None = None
    _path: set = field(default_factory=set)

    def run(self, root: PSBValue) -> Value:
        top = self._open(root, None)
        if not isinstance(top, _Frame):
            return top

        stack: list[_Frame] = [top]
        while True:
            frame = stack[-1]
            step = next(frame.pending, None)

            if step is None:
                # Container finished: hand it to its parent
                stack.pop()
                self._leave(frame)
                self._remember(frame.ref, frame.container)
                if not stack:
                    return frame.container
                parent = stack[-1]
                parent.put(parent.key, frame.container)
                continue

            key, ref = step
            if (
                isinstance(frame.container, VDict)
                and key in frame.container.entries
                and self.options.duplicate_keys is DuplicateKeys.ERROR
            ):
                raise FormatError(f"duplicate key {key!r} in {frame.node.type_name}")

            if on_path(ref, self._path):
                raise FormatError(f"reference cycle through {ref!r}")
            if self.built is not None and ref in self.built:
                self.reused += 1
                frame.put(key, self.built[ref])
                continue

            child_node = self.resolver.acquire(ref)
            child = self._open(child_node, ref)
            if isinstance(child, _Frame):
                frame.key = key
                self._path.add(ref)
                stack.append(child)
            else:
                self.resolver.release(child_node)
                self._remember(ref, child)
                frame.put(key, child)

    # -- Frames ---------------------------------------------------------

    def _leave(self, frame: _Frame) -> None:
        if frame.ref is not None:
            self._path.discard(frame.ref)
        self.resolver.release(frame.node)

    def _remember(self, ref: Reference | None, value: Value) -> None:
        if self.built is not None and ref is not None:
            self.built[ref] = value

    def _open(self, node: PSBValue, ref: Reference | None) -> Value | _Frame:
        """Convert a leaf node, or start a frame for a container node."""
        self.visited += 1
        kind = classify(node)

        if kind is Kind.OBJECTS:
            return _Frame(node, ref, VDict(), self._object_entries(node))
        if kind is Kind.COLLECTION:
            return _Frame(node, ref, VList(), self._collection_entries(node))
        return self._convert_leaf(kind, node)

    def _object_entries(self, node) -> Iterator[tuple[str | None, Reference]]:
        for key, ref in object_pairs(node):
            yield self._decode(key, "objects key"), ref

    def _collection_entries(self, node) -> Iterator[tuple[str | None, Reference]]:
        for ref in collection_refs(node):
            yield None, ref

    # -- Leaves ---------------------------------------------------------

    def _convert_leaf(self, kind: Kind, node) -> Value:
        if kind is Kind.NULL:
            return Null

        if kind is Kind.BOOLEAN:
            if not isinstance(node.value, bool):
                raise TypeMismatchError("boolean", f"payload is {type(node.value).__name__}")
            return VBool(node.value)

        if kind is Kind.RESOURCE:
            return VBytes(_resource_bytes(node))

        if kind is Kind.NUMBER:
            return _convert_number(node)

        if kind is Kind.ARRAY:
            items: list[Value] = []
            for v in _as_sequence(node.values, "array"):
                if not _is_int(v):
                    raise TypeMismatchError("array", f"element {v!r} is not an integer")
                items.append(VInt(v))
            return VList(items)

        if kind is Kind.STRING:
            return VText(self._decode(node.data, "string"))

        raise AssertionError(f"unhandled kind {kind}")

    def _decode(self, data, what: str) -> str:
        if isinstance(data, str):
            return data
        if not isinstance(data, _BYTES_LIKE):
            raise TypeMismatchError(what, f"payload is {type(data).__name__}, not UTF-8 bytes")
        raw = bytes(data)
        try:
            return raw.decode("utf-8", self.options.string_errors)
        except UnicodeDecodeError as exc:
            raise EncodingError(raw, exc.reason) from exc


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _is_int(v) -> bool:
    return isinstance(v, int) and not isinstance(v, bool)


def _as_sequence(items, kind: str):
    if isinstance(items, (list, tuple)):
        return items
    raise TypeMismatchError(kind, f"payload is {type(items).__name__}, not a sequence")


def _resource_bytes(node) -> bytes:
    buf = node.buffer
    length = node.length
    if not isinstance(buf, _BYTES_LIKE):
        raise TypeMismatchError("resource", f"buffer is {type(buf).__name__}")
    if not _is_int(length) or length < 0 or length > len(buf):
        raise TypeMismatchError(
            "resource", f"length {length!r} does not fit buffer of {len(buf)} bytes"
        )
    # Copy: the Value must not alias the archive's storage
    return bytes(buf[:length])


def _convert_number(node) -> Value:
    subtype = node.subtype
    value = node.value
    if not _is_int(subtype):
        raise InvalidNumberType(subtype)
    try:
        subtype = NumberType(subtype)
    except ValueError:
        raise InvalidNumberType(subtype) from None

    if subtype is NumberType.INTEGER:
        if not _is_int(value):
            raise TypeMismatchError("number", f"integer subtype carries {value!r}")
        return VInt(value)

    if not isinstance(value, (int, float)) or isinstance(value, bool):
        raise TypeMismatchError("number", f"float subtype carries {value!r}")
    try:
        value = float(value)
    except OverflowError as exc:
        raise TypeMismatchError("number", "float subtype carries an integer out of float range") from exc
    if subtype is NumberType.FLOAT32:
        return VFloat32(value)
    return VFloat64(value)
