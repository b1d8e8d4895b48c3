"""Error types for PSB Core."""

from __future__ import annotations


class PSBCoreError(Exception):
    """Base class for every error raised by psb_core."""


class PSBIOError(PSBCoreError, OSError):
    """Reading the archive bytes failed at *stage* (open / seek / read)."""

    def __init__(self, source: str, stage: str, detail: str = "") -> None:
        self.source = source
        self.stage = stage
        self.detail = detail
        msg = f"cannot {stage}: {source}"
        if detail:
            msg += f" ({detail})"
        super().__init__(msg)

    def __str__(self) -> str:
        return self.args[0]


class FormatError(PSBCoreError):
    """Malformed archive structure or a reference the reader cannot resolve."""


class TypeMismatchError(PSBCoreError):
    """A node's payload cannot be interpreted as the kind its tag claims."""

    def __init__(self, kind: str, detail: str) -> None:
        self.kind = kind
        self.detail = detail
        super().__init__(f"{kind}: {detail}")


class UnsupportedType(PSBCoreError):
    """Node tag outside the known closed set."""

    def __init__(self, raw_tag: str) -> None:
        self.raw_tag = raw_tag
        super().__init__(f"unsupported node type: {raw_tag}")


class InvalidNumberType(PSBCoreError):
    def __init__(self, subtype: object) -> None:
        self.subtype = subtype
        super().__init__(f"invalid number subtype: {subtype!r}")


class EncodingError(PSBCoreError, UnicodeError):
    """String payload is not valid UTF-8 (strict policy)."""

    def __init__(self, data: bytes, reason: str = "") -> None:
        self.data = bytes(data)
        self.reason = reason
        super().__init__(f"invalid UTF-8 string {self.data[:32]!r}: {reason}")

    def __str__(self) -> str:
        return self.args[0]
