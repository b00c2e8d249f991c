import logging
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional
import requests

from fundflow.config import settings
from fundflow.adapters.ledger.rate_limiter import SimpleRateLimiter, backoff_sleep
from fundflow.core.dto import Transaction, TransactionDetail
from fundflow.core.errors import FetchError, InvalidInputError, NotFoundError, RateLimitError
from fundflow.ports.ledger_port import LedgerPort

logger = logging.getLogger(__name__)

WEI_PER_ETH = Decimal("1000000000000000000")


def _wei_to_eth(wei: int) -> str:
    return format((Decimal(wei) / WEI_PER_ETH).normalize(), "f")


def _hex_to_int(val: Any) -> Optional[int]:
    if val is None:
        return None
    try:
        return int(str(val), 16)
    except ValueError:
        return None


class EtherscanLedgerAdapter(LedgerPort):

    def __init__(
        self,
        network: str = settings.DEFAULT_NETWORK,
        api_key: Optional[str] = settings.ETHERSCAN_API_KEY,
        base_url: str = settings.ETHERSCAN_BASE_URL,
        timeout_sec: int = settings.ETHERSCAN_TIMEOUT_SEC,
        max_retries: int = settings.ETHERSCAN_MAX_RETRIES,
        requests_per_sec: float = settings.ETHERSCAN_REQUESTS_PER_SEC,
        session: Optional[requests.Session] = None,
        sleep: Callable[[int], None] = backoff_sleep,
    ) -> None:
        if network not in settings.NETWORK_CHAIN_IDS:
            raise InvalidInputError(
                f"Network {network!r} is not served by Etherscan "
                f"(supported: {', '.join(sorted(settings.NETWORK_CHAIN_IDS))})"
            )
        self._network = network
        self._api_key = api_key
        self._chainid = settings.NETWORK_CHAIN_IDS[network]
        self._base_url = base_url
        self._timeout = timeout_sec
        self._max_retries = max(1, max_retries)
        self._backoff = sleep

        self._rl = SimpleRateLimiter(requests_per_sec)
        self._session = session or requests.Session()

    # ---------- internal ----------

    @staticmethod
    def _is_rate_limited(data: Dict[str, Any]) -> bool:
        text = f"{data.get('message', '')} {data.get('result', '')}".lower()
        return str(data.get("status", "1")) == "0" and "rate limit" in text

    def _call(self, params: Dict[str, Any]) -> Dict[str, Any]:
        req = dict(params)
        req["apikey"] = self._api_key
        req["chainid"] = str(self._chainid)

        last_err: Optional[Exception] = None

        for attempt in range(self._max_retries):
            try:
                self._rl.wait()
                resp = self._session.get(
                    self._base_url,
                    params=req,
                    timeout=self._timeout,
                )
                resp.raise_for_status()
                data = resp.json()
                if not isinstance(data, dict):
                    raise FetchError(f"Invalid Etherscan response: {data!r}")

                if self._is_rate_limited(data):
                    last_err = RateLimitError(str(data.get("result") or data.get("message")))
                else:
                    return data

            except (requests.RequestException, ValueError, FetchError) as e:
                last_err = e

            logger.debug("Etherscan %s attempt %d failed: %s", params.get("action"), attempt + 1, last_err)
            if attempt + 1 < self._max_retries:
                self._backoff(attempt)

        if isinstance(last_err, RateLimitError):
            raise last_err
        raise FetchError(f"Etherscan failed after retries: {last_err}")

    def _proxy(self, action: str, **params: Any) -> Any:
        data = self._call({"module": "proxy", "action": action, **params})
        if "error" in data:
            err = data["error"]
            message = err.get("message") if isinstance(err, dict) else err
            raise FetchError(f"Etherscan {action} error: {message}")
        return data.get("result")

    # ---------- port methods ----------

    def fetch_transactions(self, address: str, limit: int) -> List[Transaction]:
        if limit <= 0:
            return []

        data = self._call({
            "module": "account",
            "action": "txlist",
            "address": address,
            "startblock": 0,
            "endblock": 99999999,
            "page": 1,
            "offset": int(limit),
            "sort": "desc",
        })

        rows = data.get("result")
        if not isinstance(rows, list):
            # status 0 + string result = an API-side error, not an empty history
            raise FetchError(f"Etherscan txlist failed for {address}: {rows}")

        out: List[Transaction] = []
        for r in rows[:limit]:
            try:
                value = _wei_to_eth(int(r.get("value") or 0))
            except ValueError:
                value = str(r.get("value") or "")
            out.append(
                Transaction(
                    tx_hash=r.get("hash", ""),
                    from_address=(r.get("from") or "").lower(),
                    to_address=(r.get("to") or "").lower(),
                    value=value,
                    timestamp=int(r.get("timeStamp") or 0),
                    block_number=int(r.get("blockNumber") or 0),
                )
            )
        return out

    def fetch_transaction_by_hash(self, tx_hash: str) -> TransactionDetail:
        tx = self._proxy("eth_getTransactionByHash", txhash=tx_hash)
        if not isinstance(tx, dict):
            raise NotFoundError(f"Transaction not found on {self._network}: {tx_hash}")

        receipt = self._proxy("eth_getTransactionReceipt", txhash=tx_hash)
        block_number = _hex_to_int(tx.get("blockNumber"))

        timestamp = 0
        if tx.get("blockNumber"):
            block = self._proxy("eth_getBlockByNumber", tag=tx["blockNumber"], boolean="false")
            if isinstance(block, dict):
                timestamp = _hex_to_int(block.get("timestamp")) or 0

        status = "pending"
        gas_used = None
        fee = None
        if isinstance(receipt, dict):
            status = "success" if receipt.get("status") == "0x1" else "failed"
            gas_used = _hex_to_int(receipt.get("gasUsed"))
            gas_price = _hex_to_int(receipt.get("effectiveGasPrice") or tx.get("gasPrice"))
            if gas_used is not None and gas_price is not None:
                fee = _wei_to_eth(gas_used * gas_price)

        return TransactionDetail(
            tx_hash=tx.get("hash") or tx_hash,
            from_address=(tx.get("from") or "").lower(),
            to_address=(tx.get("to") or "").lower(),
            value=_wei_to_eth(_hex_to_int(tx.get("value")) or 0),
            timestamp=timestamp,
            status=status,
            block_number=block_number,
            gas_used=gas_used,
            fee=fee,
        )
