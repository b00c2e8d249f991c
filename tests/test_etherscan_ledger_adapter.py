import unittest
from unittest import mock

import requests

from fundflow.adapters.ledger.etherscan_ledger_adapter import EtherscanLedgerAdapter
from fundflow.adapters.ledger.rate_limiter import SimpleRateLimiter, backoff_delay
from fundflow.core.errors import FetchError, InvalidInputError, NotFoundError, RateLimitError


def _response(payload):
    resp = mock.Mock()
    resp.json.return_value = payload
    resp.raise_for_status.return_value = None
    return resp


def _adapter(session, **kwargs):
    defaults = dict(
        network="ethereum",
        api_key="test-key",
        requests_per_sec=1000.0,
        max_retries=2,
        session=session,
        sleep=lambda attempt: None,
    )
    defaults.update(kwargs)
    return EtherscanLedgerAdapter(**defaults)


class EtherscanLedgerAdapterTests(unittest.TestCase):
    def test_txlist_rows_become_transactions(self) -> None:
        session = mock.Mock()
        session.get.return_value = _response({
            "status": "1",
            "message": "OK",
            "result": [
                {
                    "hash": "0xh1",
                    "from": "0xAAAA",
                    "to": "0xBBBB",
                    "value": "1500000000000000000",
                    "timeStamp": "1700000000",
                    "blockNumber": "19000000",
                },
                {
                    "hash": "0xh2",
                    "from": "0xaaaa",
                    "to": "",
                    "value": "0",
                    "timeStamp": "1700000001",
                    "blockNumber": "19000001",
                },
            ],
        })

        txs = _adapter(session).fetch_transactions("0xaaaa", 10)

        self.assertEqual(len(txs), 2)
        self.assertEqual(txs[0].tx_hash, "0xh1")
        self.assertEqual(txs[0].from_address, "0xaaaa")
        self.assertEqual(txs[0].to_address, "0xbbbb")
        self.assertEqual(txs[0].value, "1.5")
        self.assertEqual(txs[0].timestamp, 1700000000)
        self.assertEqual(txs[0].block_number, 19000000)
        self.assertEqual(txs[1].value, "0")
        self.assertEqual(txs[1].to_address, "")

        params = session.get.call_args.kwargs["params"]
        self.assertEqual(params["action"], "txlist")
        self.assertEqual(params["offset"], 10)
        self.assertEqual(params["chainid"], "1")
        self.assertEqual(params["apikey"], "test-key")

    def test_no_transactions_is_empty(self) -> None:
        session = mock.Mock()
        session.get.return_value = _response({"status": "0", "message": "No transactions found", "result": []})

        self.assertEqual(_adapter(session).fetch_transactions("0xaaaa", 10), [])

    def test_zero_limit_skips_request(self) -> None:
        session = mock.Mock()

        self.assertEqual(_adapter(session).fetch_transactions("0xaaaa", 0), [])
        session.get.assert_not_called()

    def test_api_error_raises_fetch_error(self) -> None:
        session = mock.Mock()
        session.get.return_value = _response({"status": "0", "message": "NOTOK", "result": "Invalid API Key"})

        with self.assertRaises(FetchError):
            _adapter(session).fetch_transactions("0xaaaa", 10)

    def test_network_errors_are_retried_then_raised(self) -> None:
        session = mock.Mock()
        session.get.side_effect = requests.ConnectionError("down")
        sleeps = []

        with self.assertRaises(FetchError):
            _adapter(session, max_retries=3, sleep=sleeps.append).fetch_transactions("0xaaaa", 10)

        self.assertEqual(session.get.call_count, 3)
        self.assertEqual(sleeps, [0, 1])

    def test_rate_limit_is_retried(self) -> None:
        session = mock.Mock()
        session.get.side_effect = [
            _response({"status": "0", "message": "NOTOK", "result": "Max rate limit reached"}),
            _response({"status": "1", "message": "OK", "result": []}),
        ]

        self.assertEqual(_adapter(session).fetch_transactions("0xaaaa", 5), [])
        self.assertEqual(session.get.call_count, 2)

    def test_persistent_rate_limit_raises_rate_limit_error(self) -> None:
        session = mock.Mock()
        session.get.return_value = _response({"status": "0", "message": "NOTOK", "result": "Max rate limit reached"})

        with self.assertRaises(RateLimitError):
            _adapter(session).fetch_transactions("0xaaaa", 5)

    def test_transaction_by_hash(self) -> None:
        session = mock.Mock()
        session.get.side_effect = [
            _response({"jsonrpc": "2.0", "id": 1, "result": {
                "hash": "0xhash",
                "from": "0xAAAA",
                "to": "0xBBBB",
                "value": hex(2 * 10**18),
                "blockNumber": hex(100),
                "gasPrice": hex(10**9),
            }}),
            _response({"jsonrpc": "2.0", "id": 1, "result": {
                "status": "0x1",
                "gasUsed": hex(21000),
                "effectiveGasPrice": hex(10**9),
            }}),
            _response({"jsonrpc": "2.0", "id": 1, "result": {"timestamp": hex(1700000000)}}),
        ]

        detail = _adapter(session).fetch_transaction_by_hash("0xhash")

        self.assertEqual(detail.from_address, "0xaaaa")
        self.assertEqual(detail.to_address, "0xbbbb")
        self.assertEqual(detail.value, "2")
        self.assertEqual(detail.block_number, 100)
        self.assertEqual(detail.timestamp, 1700000000)
        self.assertEqual(detail.status, "success")
        self.assertEqual(detail.gas_used, 21000)
        self.assertEqual(detail.fee, "0.000021")

    def test_unknown_hash_raises_not_found(self) -> None:
        session = mock.Mock()
        session.get.return_value = _response({"jsonrpc": "2.0", "id": 1, "result": None})

        with self.assertRaises(NotFoundError):
            _adapter(session).fetch_transaction_by_hash("0xmissing")

    def test_unknown_network_is_rejected(self) -> None:
        with self.assertRaises(InvalidInputError):
            _adapter(mock.Mock(), network="bitcoin")


class RateLimiterTests(unittest.TestCase):
    def test_waits_out_the_minimum_interval(self) -> None:
        now = [10.0]
        slept = []

        def fake_sleep(seconds):
            slept.append(seconds)
            now[0] += seconds

        rl = SimpleRateLimiter(2.0, clock=lambda: now[0], sleep=fake_sleep)
        rl.wait()
        now[0] += 0.1
        rl.wait()

        self.assertEqual(len(slept), 1)
        self.assertAlmostEqual(slept[0], 0.4)

    def test_backoff_is_capped(self) -> None:
        for attempt in range(10):
            delay = backoff_delay(attempt, base=0.5, cap=8.0, jitter=0.3)
            self.assertGreater(delay, 0)
            self.assertLessEqual(delay, 8.0 * 1.3)

    def test_rejects_non_positive_rate(self) -> None:
        with self.assertRaises(ValueError):
            SimpleRateLimiter(0)


if __name__ == "__main__":
    unittest.main()
