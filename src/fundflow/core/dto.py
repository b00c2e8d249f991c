from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Optional


def parse_amount(value: Any) -> Decimal:
    """
    Best-effort decimal parsing: missing or unparsable amounts count as zero.
    """
    if value is None or isinstance(value, bool):
        return Decimal("0")
    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return Decimal("0")
    if not amount.is_finite():
        return Decimal("0")
    return amount


@dataclass(frozen=True)
class Transaction:
    tx_hash: str
    from_address: str
    to_address: str
    value: str              # amount as returned by the ledger source (raw text)
    timestamp: int
    block_number: Optional[int] = None

    @property
    def amount(self) -> Decimal:
        return parse_amount(self.value)


@dataclass(frozen=True)
class TransactionDetail:
    tx_hash: str
    from_address: str
    to_address: str
    value: str
    timestamp: int
    status: str
    block_number: Optional[int] = None
    gas_used: Optional[int] = None
    fee: Optional[str] = None
