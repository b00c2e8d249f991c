import json
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from fundflow.core.dto import Transaction, TransactionDetail
from fundflow.core.errors import FetchError, NotFoundError
from fundflow.core.models import classify, normalize_address
from fundflow.core.enums import TxClass
from fundflow.io.schemas import transaction_detail_from_dict, transaction_from_dict
from fundflow.ports.ledger_port import LedgerPort


class StaticLedgerAdapter(LedgerPort):
    def __init__(self,
                 transactions: Optional[List[Transaction]] = None,
                 by_address: Optional[Dict[str, List[Transaction]]] = None,
                 details: Optional[Iterable[TransactionDetail]] = None,
                 failing: Optional[Iterable[str]] = None,
                 ):
        self._txs = list(transactions or [])
        self._pages = {normalize_address(k): list(v) for k, v in (by_address or {}).items()}
        self._details = {d.tx_hash.lower(): d for d in (details or [])}
        self._failing = {normalize_address(a) for a in (failing or [])}
        self.calls: List[str] = []

    @classmethod
    def from_file(cls, path: str) -> "StaticLedgerAdapter":
        with Path(path).open("r", encoding="utf-8") as f:
            data = json.load(f)
        return cls(
            transactions=[transaction_from_dict(t) for t in data.get("transactions", [])],
            by_address={
                addr: [transaction_from_dict(t) for t in txs]
                for addr, txs in (data.get("by_address") or {}).items()
            },
            details=[transaction_detail_from_dict(d) for d in data.get("details", [])],
            failing=data.get("failing", []),
        )

    def fetch_transactions(self, address, limit):
        ad = normalize_address(address)
        self.calls.append(ad)
        if ad in self._failing:
            raise FetchError(f"Static ledger has no data for {address}")

        if ad in self._pages:
            items = self._pages[ad]
        else:
            # source order is authoritative: no sorting here
            items = [t for t in self._txs if classify(t, ad) is not TxClass.NEITHER]
        return items[:max(int(limit), 0)]

    def fetch_transaction_by_hash(self, tx_hash):
        detail = self._details.get(tx_hash.lower())
        if detail is None:
            raise NotFoundError(f"Transaction not found: {tx_hash}")
        return detail
