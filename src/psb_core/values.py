"""Value types for PSB Core."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union


@dataclass
class VBool:
    value: bool

    def __str__(self) -> str:
        return str(self.value).lower()


@dataclass
class VInt:
    value: int

    def __str__(self) -> str:
        return str(self.value)


@dataclass
class VFloat32:
    value: float

    def __str__(self) -> str:
        return repr(self.value)


@dataclass
class VFloat64:
    value: float

    def __str__(self) -> str:
        return repr(self.value)


@dataclass
class VBytes:
    value: bytes

    def __str__(self) -> str:
        return f"<{len(self.value)} bytes>"


@dataclass
class VText:
    value: str

    def __str__(self) -> str:
        return self.value


@dataclass
class VList:
    items: list["Value"] = field(default_factory=list)

    def __str__(self) -> str:
        return "[" + ", ".join(str(v) for v in self.items) + "]"


@dataclass
class VDict:
    """Insertion-ordered mapping; iteration follows archive order."""

    entries: dict[str, "Value"] = field(default_factory=dict)

    def __str__(self) -> str:
        return "{" + ", ".join(f"{k}: {v}" for k, v in self.entries.items()) + "}"


class _Null:
    """Singleton for the archive's null."""

    _instance: "_Null | None" = None

    def __new__(cls) -> "_Null":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "Null"

    def __bool__(self) -> bool:
        return False

    def __str__(self) -> str:
        return "null"


Null = _Null()

Value = Union[VBool, VInt, VFloat32, VFloat64, VBytes, VText, VList, VDict, _Null]
