"""PSBFile — load an archive and hold its converted Value tree."""

from __future__ import annotations

import io
import logging
import os
import struct
from typing import IO, BinaryIO, Callable, Union

from .archive import MemoryArchive
from .converter import convert
from .dumper import dump as dump_tree
from .errors import FormatError, PSBCoreError, PSBIOError
from .nodes import ArchiveReader
from .options import DEFAULT_OPTIONS, ConvertOptions
from .values import Value

LOG = logging.getLogger(__name__)

Source = Union[str, "os.PathLike[str]", BinaryIO]
ReaderFactory = Callable[[bytes], ArchiveReader]


# ---------------------------------------------------------------------------
# Byte loading
# ---------------------------------------------------------------------------

def source_name(source: Source) -> str:
    if isinstance(source, (str, os.PathLike)):
        return os.fspath(source)
    return str(getattr(source, "name", None) or f"<{type(source).__name__}>")


def read_source(source: Source) -> bytes:
    """Read the whole of *source* (a path or a binary stream) into memory.

    Failures raise PSBIOError whose ``stage`` is ``open``, ``seek`` or
    ``read``.  A stream is read from its start regardless of its position.
    """
    name = source_name(source)
    if isinstance(source, (str, os.PathLike)):
        try:
            stream = open(source, "rb")
        except OSError as exc:
            raise PSBIOError(name, "open", exc.strerror or str(exc)) from exc
        with stream:
            return _read_stream(stream, name)
    return _read_stream(source, name)


def _read_stream(stream: BinaryIO, name: str) -> bytes:
    try:
        size = stream.seek(0, io.SEEK_END)
        stream.seek(0, io.SEEK_SET)
    except (OSError, ValueError, AttributeError) as exc:
        raise PSBIOError(name, "seek", str(exc)) from exc

    data = bytearray()
    try:
        while len(data) < size:
            chunk = stream.read(size - len(data))
            if not chunk:
                break
            if not isinstance(chunk, (bytes, bytearray)):
                raise PSBIOError(name, "read", f"stream returned {type(chunk).__name__}, not bytes")
            data += chunk
    except PSBIOError:
        raise
    except (OSError, ValueError) as exc:
        raise PSBIOError(name, "read", str(exc)) from exc

    if len(data) != size:
        raise PSBIOError(name, "read", f"got {len(data)} of {size} bytes")
    LOG.debug("Read %d bytes from %s", size, name)
    return bytes(data)


# ---------------------------------------------------------------------------
# PSBFile
# ---------------------------------------------------------------------------

class PSBFile:
    """A loaded archive.  Conversion happens once, in the constructor.

    Usage::

        psb = PSBFile("scenario.psb", reader_factory=my_reader)
        psb.root            # → VDict(...)

    *reader_factory* turns the raw bytes into an ArchiveReader; the default
    reads the JSON fixture format of MemoryArchive.  Passing a text stream as
    *dump* writes the diagnostic dump of the tree before converting it.
    """

    def __init__(
        self,
        source: Source,
        reader_factory: ReaderFactory | None = None,
        *,
        options: ConvertOptions | None = None,
        dump: IO[str] | None = None,
    ) -> None:
        self.name = source_name(source)
        self.options = options or DEFAULT_OPTIONS
        self.buffer = read_source(source)
        self.reader = _make_reader(reader_factory or MemoryArchive.from_bytes, self.buffer, self.name)

        if dump is not None:
            dump_tree(self.reader.root, self.reader, dump, self.options)

        LOG.debug("Converting %s", self.name)
        self._root = convert(self.reader.root, self.reader, self.options)

    @property
    def root(self) -> Value:
        return self._root

    def __repr__(self) -> str:
        return f"PSBFile({self.name!r})"


def _make_reader(factory: ReaderFactory, buffer: bytes, name: str) -> ArchiveReader:
    try:
        reader = factory(buffer)
    except PSBCoreError:
        raise
    except (ValueError, LookupError, struct.error) as exc:
        raise FormatError(f"{name}: {exc}") from exc
    if reader is None:
        raise FormatError(f"{name}: reader factory returned nothing")
    return reader
