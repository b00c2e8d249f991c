from __future__ import annotations

from enum import Enum

from fundflow.core.errors import InvalidInputError, UnsupportedFormatError


class Direction(str, Enum):
    IN = "in"
    OUT = "out"
    BOTH = "both"

    @classmethod
    def parse(cls, value: "Direction | str") -> "Direction":
        if isinstance(value, Direction):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise InvalidInputError(f"Unknown direction: {value!r} (expected in, out or both)") from None

    @property
    def follows_outgoing(self) -> bool:
        return self in (Direction.OUT, Direction.BOTH)

    @property
    def follows_incoming(self) -> bool:
        return self in (Direction.IN, Direction.BOTH)


class NodeKind(str, Enum):
    ORIGIN = "origin"
    INTERMEDIARY = "intermediary"


class TxClass(str, Enum):
    """Position of a transaction relative to the address being expanded."""

    OUTGOING = "outgoing"
    INCOMING = "incoming"
    BOTH = "both"          # self-transfer
    NEITHER = "neither"

    @property
    def is_outgoing(self) -> bool:
        return self in (TxClass.OUTGOING, TxClass.BOTH)

    @property
    def is_incoming(self) -> bool:
        return self in (TxClass.INCOMING, TxClass.BOTH)


class ExportFormat(str, Enum):
    JSON = "json"
    DOT = "dot"
    CSV = "csv"

    @classmethod
    def parse(cls, value: "ExportFormat | str") -> "ExportFormat":
        if isinstance(value, ExportFormat):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise UnsupportedFormatError(f"Unsupported format: {value}") from None
