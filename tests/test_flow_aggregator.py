import unittest
from decimal import Decimal

from fundflow.adapters.ledger.static_ledger_adapter import StaticLedgerAdapter
from fundflow.core.dto import Transaction
from fundflow.core.errors import InvalidInputError
from fundflow.ports.ledger_port import LedgerPort
from fundflow.services.flow_aggregator import FlowAggregator


def _tx(tx_hash, frm, to, value):
    return Transaction(tx_hash=tx_hash, from_address=frm, to_address=to, value=value, timestamp=1000)


class _RecordingLedger(LedgerPort):
    def __init__(self) -> None:
        self.limits = []

    def fetch_transactions(self, address, limit):
        self.limits.append(limit)
        return []

    def fetch_transaction_by_hash(self, tx_hash):
        raise NotImplementedError


class FlowAggregatorTests(unittest.TestCase):
    def test_partitions_and_totals(self) -> None:
        ledger = StaticLedgerAdapter(by_address={
            "0xa": [
                _tx("0x1", "0xb", "0xA", "3"),
                _tx("0x2", "0xa", "0xc", "1.25"),
                _tx("0x3", "0xd", "0xa", "garbage"),
                _tx("0x4", "0xm", "0xn", "7"),
            ],
        })

        flow = FlowAggregator(ledger).summarize("0xa", 10)

        self.assertEqual([t.tx_hash for t in flow.incoming], ["0x1", "0x3"])
        self.assertEqual([t.tx_hash for t in flow.outgoing], ["0x2"])
        self.assertEqual(flow.total_in, Decimal("3"))
        self.assertEqual(flow.total_out, Decimal("1.25"))
        self.assertEqual(flow.net_flow, Decimal("1.75"))
        self.assertEqual(flow.transaction_count, 4)

    def test_self_transfer_counts_both_ways(self) -> None:
        ledger = StaticLedgerAdapter(by_address={"0xa": [_tx("0x1", "0xa", "0xa", "2")]})

        flow = FlowAggregator(ledger).summarize("0xa", 1)

        self.assertEqual(len(flow.incoming), 1)
        self.assertEqual(len(flow.outgoing), 1)
        self.assertEqual(flow.net_flow, Decimal("0"))

    def test_fetch_failure_returns_zeroed_summary(self) -> None:
        ledger = StaticLedgerAdapter(failing=["0xa"])

        with self.assertLogs("fundflow.services.flow_aggregator", level="WARNING"):
            flow = FlowAggregator(ledger).summarize("0xA", 2)

        self.assertEqual(flow.address, "0xa")
        self.assertEqual(flow.incoming, [])
        self.assertEqual(flow.outgoing, [])
        self.assertEqual(flow.total_in, Decimal("0"))
        self.assertEqual(flow.total_out, Decimal("0"))
        self.assertEqual(flow.transaction_count, 0)

    def test_lookback_depth_is_the_fetch_limit(self) -> None:
        ledger = _RecordingLedger()

        FlowAggregator(ledger).summarize("0xa", 2)

        self.assertEqual(ledger.limits, [2])

    def test_lookback_depth_bounds_the_records_counted(self) -> None:
        ledger = StaticLedgerAdapter(by_address={
            "0xa": [_tx("0x1", "0xb", "0xa", "1"), _tx("0x2", "0xc", "0xa", "2"), _tx("0x3", "0xd", "0xa", "4")],
        })

        flow = FlowAggregator(ledger).summarize("0xa", 2)

        self.assertEqual(flow.transaction_count, 2)
        self.assertEqual(flow.total_in, Decimal("3"))

    def test_empty_address_is_not_fetched(self) -> None:
        ledger = _RecordingLedger()

        flow = FlowAggregator(ledger).summarize("", 2)

        self.assertEqual(ledger.limits, [])
        self.assertEqual(flow.transaction_count, 0)

    def test_non_string_address_is_rejected(self) -> None:
        ledger = _RecordingLedger()

        for bad in (None, 42, ["0xa"]):
            with self.assertRaises(InvalidInputError):
                FlowAggregator(ledger).summarize(bad, 2)

        self.assertEqual(ledger.limits, [])

    def test_negative_lookback_depth_is_rejected(self) -> None:
        with self.assertRaises(InvalidInputError):
            FlowAggregator(_RecordingLedger()).summarize("0xa", -1)


if __name__ == "__main__":
    unittest.main()
