from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List

from fundflow.core.dto import Transaction, TransactionDetail


class LedgerPort(ABC):
    """
    Abstract source of transaction records for tracing.

    Implementations raise FetchError when data cannot be produced and
    NotFoundError when a hash lookup finds nothing.
    """

    # --- Transactions touching an address (single page, source order) ---

    @abstractmethod
    def fetch_transactions(self, address: str, limit: int) -> List[Transaction]:
        raise NotImplementedError

    # --- Single transaction lookup ---

    @abstractmethod
    def fetch_transaction_by_hash(self, tx_hash: str) -> TransactionDetail:
        raise NotImplementedError
