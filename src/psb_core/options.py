"""Conversion options."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class DuplicateKeys(Enum):
    ERROR = "error"          # FormatError
    KEEP_LAST = "last"       # last value wins, first position kept


STRING_POLICIES = ("strict", "replace")


@dataclass(frozen=True, slots=True)
class ConvertOptions:
    cache_references: bool = True
    duplicate_keys: DuplicateKeys = DuplicateKeys.ERROR
    string_errors: str = "strict"  # "strict" -> EncodingError, "replace" -> U+FFFD

    def __post_init__(self) -> None:
        if self.string_errors not in STRING_POLICIES:
            raise ValueError(
                f"string_errors must be one of {STRING_POLICIES}, "
                f"got {self.string_errors!r}"
            )
        if not isinstance(self.duplicate_keys, DuplicateKeys):
            # Accept the CLI spelling ("error" / "last")
            object.__setattr__(self, "duplicate_keys", DuplicateKeys(self.duplicate_keys))


DEFAULT_OPTIONS = ConvertOptions()
