"""PSB Core — converts PSB tagged-value trees into generic values."""

from .archive import MemoryArchive, Ref
from .converter import convert
from .dispatch import Kind, classify
from .dumper import dump, dumps
from .nodes import (
    ArchiveReader,
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
from .options import ConvertOptions, DuplicateKeys
from .psbfile import PSBFile, read_source
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
    _Null,
)
from .errors import (
    EncodingError,
    FormatError,
    InvalidNumberType,
    PSBCoreError,
    PSBIOError,
    TypeMismatchError,
    UnsupportedType,
)

__all__ = [
    "convert",
    "classify",
    "dump",
    "dumps",
    "read_source",
    "PSBFile",
    "MemoryArchive",
    "Ref",
    "Resolver",
    "Kind",
    "ArchiveReader",
    "NumberType",
    "PSBValue",
    "PSBNull",
    "PSBBoolean",
    "PSBResource",
    "PSBNumber",
    "PSBArray",
    "PSBString",
    "PSBObjects",
    "PSBCollection",
    "ConvertOptions",
    "DuplicateKeys",
    "Null",
    "Value",
    "VBool",
    "VBytes",
    "VDict",
    "VFloat32",
    "VFloat64",
    "VInt",
    "VList",
    "VText",
    "PSBCoreError",
    "PSBIOError",
    "FormatError",
    "TypeMismatchError",
    "UnsupportedType",
    "InvalidNumberType",
    "EncodingError",
]
