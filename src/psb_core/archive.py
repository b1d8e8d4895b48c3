"""MemoryArchive — an archive reader over an in-memory node table.

Real PSB parsing happens elsewhere; this reader holds already-built nodes and
hands out fresh copies on ``resolve``, counting the ones not yet released.
It can also be loaded from a small JSON fixture format::

    {
      "root": {"type": "objects", "entries": [["name", 0], ["tags", 1]]},
      "nodes": [
        {"type": "string", "value": "hero"},
        {"type": "collection", "refs": [2, 3]},
        {"type": "number", "subtype": "int", "value": 1},
        {"type": "number", "subtype": "f32", "value": 0.5}
      ]
    }

References in ``entries`` / ``refs`` are indices into ``nodes``.
"""

from __future__ import annotations

import base64
import binascii
import json
import logging
from dataclasses import dataclass, replace

from .errors import FormatError
from .nodes import (
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

LOG = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Ref:
    index: int


class MemoryArchive:
    """Archive reader backed by a list of nodes.

    Usage::

        archive = MemoryArchive()
        hp = archive.add(PSBNumber(NumberType.INTEGER, 100))
        archive.root = PSBObjects([(b"hp", hp)])
        convert(archive.root, archive)
    """

    def __init__(self, nodes: list[PSBValue] | None = None, root: PSBValue | None = None) -> None:
        self._nodes: list[PSBValue] = list(nodes or [])
        self._root: PSBValue = root if root is not None else PSBNull()
        self._live: dict[int, PSBValue] = {}
        self.resolve_count = 0

    # -- Building -------------------------------------------------------

    def add(self, node: PSBValue) -> Ref:
        self._nodes.append(node)
        return Ref(len(self._nodes) - 1)

    @property
    def root(self) -> PSBValue:
        return self._root

    @root.setter
    def root(self, node: PSBValue) -> None:
        self._root = node

    def __len__(self) -> int:
        return len(self._nodes)

    # -- Reader protocol ------------------------------------------------

    def resolve(self, ref: Ref) -> PSBValue:
        if not isinstance(ref, Ref) or not 0 <= ref.index < len(self._nodes):
            raise FormatError(f"reference out of range: {ref!r}")
        node = replace(self._nodes[ref.index])
        self._live[id(node)] = node
        self.resolve_count += 1
        return node

    def release(self, node: PSBValue) -> None:
        if self._live.pop(id(node), None) is None:
            raise ValueError(f"{node!r} was not handed out by this archive")

    @property
    def outstanding(self) -> int:
        """Nodes resolved but not yet released."""
        return len(self._live)

    # -- JSON fixtures --------------------------------------------------

    @classmethod
    def from_json(cls, data: bytes | str) -> "MemoryArchive":
        try:
            doc = json.loads(data)
        except (ValueError, UnicodeDecodeError) as exc:
            raise FormatError(f"not a JSON archive: {exc}") from exc
        if not isinstance(doc, dict) or "root" not in doc:
            raise FormatError("JSON archive needs a 'root' node")

        raw_nodes = doc.get("nodes", [])
        if not isinstance(raw_nodes, list):
            raise FormatError("'nodes' must be a list")
        archive = cls([_node_from_json(n, len(raw_nodes)) for n in raw_nodes])
        archive.root = _node_from_json(doc["root"], len(raw_nodes))
        LOG.debug("Loaded JSON archive with %d node(s)", len(archive))
        return archive

    from_bytes = from_json


# ---------------------------------------------------------------------------
# JSON node decoding
# ---------------------------------------------------------------------------

_SUBTYPES = {
    "int": NumberType.INTEGER,
    "f32": NumberType.FLOAT32,
    "f64": NumberType.FLOAT64,
}


def _node_from_json(obj, n_nodes: int) -> PSBValue:
    if not isinstance(obj, dict):
        raise FormatError(f"node must be an object, got {obj!r}")
    kind = obj.get("type")

    try:
        if kind == "null":
            return PSBNull()
        if kind == "bool":
            return PSBBoolean(obj["value"])
        if kind == "resource":
            buf = _payload_bytes(obj)
            return PSBResource(buf, obj.get("length", len(buf)))
        if kind == "number":
            subtype = obj.get("subtype", "int")
            if isinstance(subtype, str):
                if subtype not in _SUBTYPES:
                    raise FormatError(f"unknown number subtype {subtype!r}")
                subtype = _SUBTYPES[subtype]
            return PSBNumber(subtype, obj["value"])
        if kind == "array":
            return PSBArray(list(obj["values"]))
        if kind == "string":
            return PSBString(_payload_bytes(obj))
        if kind == "objects":
            return PSBObjects([
                (key.encode("utf-8"), _ref(index, n_nodes))
                for key, index in obj["entries"]
            ])
        if kind == "collection":
            return PSBCollection([_ref(index, n_nodes) for index in obj["refs"]])
    except KeyError as exc:
        raise FormatError(f"{kind} node is missing {exc}") from exc
    except (TypeError, ValueError, AttributeError) as exc:
        raise FormatError(f"malformed {kind} node: {exc}") from exc

    raise FormatError(f"unknown node type {kind!r}")


def _payload_bytes(obj: dict) -> bytes:
    """Bytes from ``value`` (text), ``hex`` or ``base64``."""
    if "hex" in obj:
        return bytes.fromhex(obj["hex"])
    if "base64" in obj:
        try:
            return base64.b64decode(obj["base64"], validate=True)
        except binascii.Error as exc:
            raise FormatError(f"bad base64 payload: {exc}") from exc
    return obj["value"].encode("utf-8")


def _ref(index, n_nodes: int) -> Ref:
    if not isinstance(index, int) or isinstance(index, bool) or not 0 <= index < n_nodes:
        raise FormatError(f"reference out of range: {index!r}")
    return Ref(index)
