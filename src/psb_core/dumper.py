"""Diagnostic dump of a tagged node tree as indented text.

Troubleshooting aid only; ``convert`` never calls into this module.
Unrecognized nodes, bad number subtypes and non-sequence arrays are
rendered as placeholders rather than raising.  Malformed object entries and
reference failures raise the same errors ``convert`` does.
"""

from __future__ import annotations

import io
import sys
from dataclasses import dataclass, field
from typing import IO, Iterator

from .converter import collection_refs, object_pairs, on_path
from .dispatch import Kind, classify
from .errors import UnsupportedType
from .nodes import ArchiveReader, NumberType, PSBValue, Reference
from .options import DEFAULT_OPTIONS, ConvertOptions
from .resolver import Resolver

INDENT = "  "

_NUMBER_FORMATS = {
    NumberType.INTEGER: "int({})",
    NumberType.FLOAT32: "f32({})",
    NumberType.FLOAT64: "f64({})",
}


def dump(
    node: PSBValue,
    reader: ArchiveReader,
    writer: IO[str] | None = None,
    options: ConvertOptions | None = None,
) -> None:
    """Write a readable rendering of *node* to *writer* (stdout by default)."""
    options = options or DEFAULT_OPTIONS
    writer = writer if writer is not None else sys.stdout
    with Resolver(reader, cache=options.cache_references) as resolver:
        _Dumper(resolver, writer).run(node)


def dumps(node: PSBValue, reader: ArchiveReader, options: ConvertOptions | None = None) -> str:
    """Like ``dump`` but return the text."""
    buf = io.StringIO()
    dump(node, reader, buf, options)
    return buf.getvalue()


# ---------------------------------------------------------------------------
# Implementation
# ---------------------------------------------------------------------------

@dataclass(slots=True)
class _Frame:
    node: PSBValue
    ref: Reference | None
    depth: int
    closer: str
    pending: Iterator[tuple[str | None, Reference]]


@dataclass
class _Dumper:
    resolver: Resolver
    writer: IO[str]
    _path: set = field(default_factory=set)

    def run(self, root: PSBValue) -> None:
        stack: list[_Frame] = []
        self._start(root, None, 0, stack)

        while stack:
            frame = stack[-1]
            step = next(frame.pending, None)

            if step is None:
                stack.pop()
                if frame.ref is not None:
                    self._path.discard(frame.ref)
                self.resolver.release(frame.node)
                self.writer.write(INDENT * frame.depth + frame.closer)
                if stack:
                    self.writer.write(",\n")
                continue

            label, ref = step
            self.writer.write(INDENT * (frame.depth + 1))
            if label is not None:
                self.writer.write(f"{label}: ")

            if on_path(ref, self._path):
                self.writer.write("<cycle>,\n")
                continue

            child = self.resolver.acquire(ref)
            if not self._start(child, ref, frame.depth + 1, stack):
                self.resolver.release(child)
                self.writer.write(",\n")

        self.writer.write("\n")

    def _start(self, node: PSBValue, ref: Reference | None, depth: int, stack: list[_Frame]) -> bool:
        """Write a leaf, or open a container and push it.  True if pushed."""
        try:
            kind = classify(node)
        except UnsupportedType:
            self.writer.write("<unknown value>")
            return False

        if kind is Kind.OBJECTS:
            entries = [(_label(key), r) for key, r in object_pairs(node)]
        elif kind is Kind.COLLECTION:
            entries = [(None, r) for r in collection_refs(node)]
        else:
            entries = []

        if entries:
            self.writer.write("{\n" if kind is Kind.OBJECTS else "[\n")
            closer = "}" if kind is Kind.OBJECTS else "]"
            stack.append(_Frame(node, ref, depth, closer, iter(entries)))
        else:
            self.writer.write(_leaf_text(kind, node))
            return False

        if ref is not None:
            self._path.add(ref)
        return True


def _label(key) -> str:
    if isinstance(key, (bytes, bytearray, memoryview)):
        return bytes(key).decode("utf-8", "replace")
    return str(key)


def _leaf_text(kind: Kind, node) -> str:
    if kind is Kind.NULL:
        return "<null>"
    if kind is Kind.BOOLEAN:
        return "true" if node.value else "false"
    if kind is Kind.RESOURCE:
        return f"<resource {node.length} bytes>"
    if kind is Kind.NUMBER:
        try:
            fmt = _NUMBER_FORMATS[NumberType(node.subtype)]
        except (ValueError, KeyError):
            return "<invalid number>"
        return fmt.format(node.value)
    if kind is Kind.ARRAY:
        if not isinstance(node.values, (list, tuple)):
            return "<invalid array>"
        return "[" + ", ".join(str(v) for v in node.values) + "]"
    if kind is Kind.STRING:
        return '"' + _label(node.data) + '"'
    if kind is Kind.OBJECTS:
        return "{}"
    return "[]"
