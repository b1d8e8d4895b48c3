"""Lazy reference resolution with scoped ownership of materialized nodes."""

from __future__ import annotations

import logging

from .errors import FormatError, PSBCoreError
from .nodes import ArchiveReader, PSBValue, Reference

LOG = logging.getLogger(__name__)


class Resolver:
    """Turns references into owned nodes for the span of one top-level call.

    Usage::

        with Resolver(reader) as resolver:
            node = resolver.acquire(ref)
            ...
            resolver.release(node)

    Without the cache a node is given back to the reader on ``release``.
    With the cache, repeated references share one materialized node and every
    cached node is given back when the resolver closes.  Closing also gives
    back anything still owned, so an exception half-way through a traversal
    leaks nothing.
    """

    def __init__(self, reader: ArchiveReader, cache: bool = True) -> None:
        self.reader = reader
        self._cache: dict[Reference, PSBValue] | None = {} if cache else None
        # id -> (node, times resolved and not yet given back)
        self._owned: dict[int, tuple[PSBValue, int]] = {}
        self._closed = False
        self.resolved = 0
        self.hits = 0

    # -- Context manager ------------------------------------------------

    def __enter__(self) -> "Resolver":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    @property
    def outstanding(self) -> int:
        """Number of nodes currently owned by this resolver."""
        return sum(count for _, count in self._owned.values())

    # -- Acquire / release ----------------------------------------------

    def acquire(self, ref: Reference) -> PSBValue:
        if self._closed:
            raise RuntimeError("resolver is closed")

        if self._cache is not None:
            try:
                node = self._cache.get(ref)
            except TypeError as exc:
                raise FormatError(f"unhashable reference {ref!r}") from exc
            if node is not None:
                self.hits += 1
                return node

        node = self._resolve(ref)
        _, count = self._owned.get(id(node), (node, 0))
        self._owned[id(node)] = (node, count + 1)
        if self._cache is not None:
            self._cache[ref] = node
        return node

    def release(self, node: PSBValue) -> None:
        """Give *node* back once its subtree is converted.

        Cached nodes stay owned until ``close``.  Nodes this resolver did not
        hand out (the archive root) are ignored.
        """
        if self._cache is not None:
            return
        held = self._owned.get(id(node))
        if held is None:
            return
        if held[1] > 1:
            self._owned[id(node)] = (node, held[1] - 1)
        else:
            del self._owned[id(node)]
        self._give_back(node)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        owned = list(self._owned.values())
        self._owned.clear()
        if self._cache is not None:
            self._cache.clear()
        if owned:
            LOG.debug("Releasing %d resolved node(s)", sum(count for _, count in owned))
        for node, count in reversed(owned):
            for _ in range(count):
                self._give_back(node)

    # -- Reader access --------------------------------------------------

    def _resolve(self, ref: Reference) -> PSBValue:
        try:
            node = self.reader.resolve(ref)
        except PSBCoreError:
            raise
        except (LookupError, ValueError) as exc:
            raise FormatError(f"cannot resolve reference {ref!r}: {exc}") from exc
        if node is None:
            raise FormatError(f"reference {ref!r} resolved to nothing")
        self.resolved += 1
        return node

    def _give_back(self, node: PSBValue) -> None:
        release = getattr(self.reader, "release", None)
        if release is not None:
            release(node)
