"""Command-line viewer for PSB archives.

Provides the ``psb-core`` CLI entry point via ``main()``.
"""

from __future__ import annotations

import argparse
import importlib
import logging
import sys
from typing import IO, Iterator

from .errors import PSBCoreError
from .options import ConvertOptions, DuplicateKeys
from .psbfile import PSBFile, ReaderFactory
from .values import (
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

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


# ---------------------------------------------------------------------------
# Formatting
# ---------------------------------------------------------------------------

def _fmt_inline(value: Value) -> str:
    """Format a scalar (or an empty container) for one-line display."""
    if isinstance(value, _Null):
        return "null"
    if isinstance(value, VText):
        return f'"{value.value}"'
    if isinstance(value, VFloat32):
        return f"{value.value!r}f"
    if isinstance(value, (VBool, VInt, VFloat64, VBytes)):
        return str(value)
    if isinstance(value, VList) and not value.items:
        return "[]"
    if isinstance(value, VDict) and not value.entries:
        return "{}"
    return repr(value)


def _children(value: VList | VDict) -> Iterator[tuple[str | None, Value]]:
    if isinstance(value, VList):
        return ((None, v) for v in value.items)
    return iter(value.entries.items())


def _is_open_container(value: Value) -> bool:
    return (isinstance(value, VList) and bool(value.items)) or (
        isinstance(value, VDict) and bool(value.entries)
    )


def _fmt_inspect(value: Value, indent: str = "  ") -> str:
    """Pretty-print a Value tree, one entry per line."""
    if not _is_open_container(value):
        return _fmt_inline(value)

    lines: list[str] = []
    stack: list[tuple[Iterator, int, str]] = []

    def _open(v: Value, depth: int, prefix: str) -> None:
        opener, closer = ("[", "]") if isinstance(v, VList) else ("{", "}")
        lines.append(prefix + opener)
        stack.append((_children(v), depth, closer))

    _open(value, 0, "")
    while stack:
        children, depth, closer = stack[-1]
        step = next(children, None)
        if step is None:
            stack.pop()
            lines.append(indent * depth + closer)
            continue
        key, child = step
        prefix = indent * (depth + 1) + ("" if key is None else f"{key}: ")
        if _is_open_container(child):
            _open(child, depth + 1, prefix)
        else:
            lines.append(prefix + _fmt_inline(child))
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Reader lookup
# ---------------------------------------------------------------------------

def load_reader_factory(target: str) -> ReaderFactory:
    """Import ``module:attr`` (``attr`` may be dotted) and return it."""
    module_name, sep, attr = target.partition(":")
    if not sep or not module_name or not attr:
        raise ValueError(f"reader must look like MODULE:ATTR, got {target!r}")
    obj = importlib.import_module(module_name)
    for part in attr.split("."):
        obj = getattr(obj, part)
    if not callable(obj):
        raise ValueError(f"{target} is not callable")
    return obj


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------

def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="psb-core",
        description="Convert a PSB archive and print its value tree.",
    )
    parser.add_argument("file", help="archive to load")
    parser.add_argument(
        "--reader", metavar="MODULE:ATTR",
        help="callable turning the file's bytes into an archive reader "
             "(default: JSON fixture reader)",
    )
    parser.add_argument("--dump", action="store_true",
                        help="print the raw node dump before the converted tree")
    parser.add_argument("--no-cache", action="store_true",
                        help="re-resolve repeated references instead of caching them")
    parser.add_argument("--duplicate-keys", choices=[d.value for d in DuplicateKeys],
                        default=DuplicateKeys.ERROR.value,
                        help="what to do when an objects node repeats a key")
    parser.add_argument("--lossy-strings", action="store_true",
                        help="replace invalid UTF-8 with U+FFFD instead of failing")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    return parser


def main(argv: list[str] | None = None, dest: IO[str] | None = None) -> int:
    """``psb-core`` / ``python -m psb_core.cli``."""
    parser = _build_parser()
    args = parser.parse_args(argv)
    dest = dest if dest is not None else sys.stdout

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format=LOG_FORMAT,
    )

    factory = None
    if args.reader:
        try:
            factory = load_reader_factory(args.reader)
        except (ImportError, AttributeError, ValueError) as exc:
            parser.error(f"cannot load reader {args.reader!r}: {exc}")

    options = ConvertOptions(
        cache_references=not args.no_cache,
        duplicate_keys=DuplicateKeys(args.duplicate_keys),
        string_errors="replace" if args.lossy_strings else "strict",
    )

    try:
        psb = PSBFile(args.file, factory, options=options,
                      dump=dest if args.dump else None)
    except PSBCoreError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    print(_fmt_inspect(psb.root), file=dest)
    return 0


if __name__ == "__main__":
    sys.exit(main())
