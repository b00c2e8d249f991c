from __future__ import annotations

import logging

from fundflow.config import settings
from fundflow.core.errors import FetchError, InvalidInputError
from fundflow.core.models import FlowSummary, classify, normalize_address
from fundflow.core.validation import validate_limit
from fundflow.ports.ledger_port import LedgerPort

logger = logging.getLogger(__name__)


class FlowAggregator:
    """
    Inbound / outbound totals for a single address. Best-effort: a failed fetch
    yields a zeroed summary instead of an error.
    """

    def __init__(self, ledger: LedgerPort) -> None:
        self.ledger = ledger

    def summarize(self, address: str, lookback_depth: int = settings.FLOW_LOOKBACK_DEPTH) -> FlowSummary:
        if not isinstance(address, str):
            raise InvalidInputError("Address must be a string")
        validate_limit("lookback_depth", lookback_depth, 0)

        addr = normalize_address(address)
        flow = FlowSummary(address=addr)
        if not addr:
            # e.g. the receiver of a contract creation
            return flow

        try:
            txs = self.ledger.fetch_transactions(addr, lookback_depth)
        except FetchError as e:
            logger.warning("Could not fetch flow for %s: %s", addr, e)
            return flow

        for tx in txs:
            tx_class = classify(tx, addr)
            # a self-transfer counts on both sides
            if tx_class.is_incoming:
                flow.incoming.append(tx)
                flow.total_in += tx.amount
            if tx_class.is_outgoing:
                flow.outgoing.append(tx)
                flow.total_out += tx.amount

        flow.transaction_count = len(txs)
        return flow
