from __future__ import annotations

import logging
from typing import List, Set

from fundflow.config import settings
from fundflow.core.errors import FetchError, InvalidInputError
from fundflow.core.models import PathSet, classify, normalize_address
from fundflow.core.validation import validate_address, validate_limit
from fundflow.ports.ledger_port import LedgerPort

logger = logging.getLogger(__name__)


class PathFinder:
    """
    Depth-first search for simple transfer paths between two addresses.

    Only outgoing transactions are followed. The result cap is global to the
    search, and an address never repeats within one path (it may appear again
    on a different branch).
    """

    def __init__(self, ledger: LedgerPort, network: str = settings.DEFAULT_NETWORK) -> None:
        self.ledger = ledger
        self.network = network

    def find_paths(
        self,
        source: str,
        target: str,
        max_depth: int = settings.PATH_MAX_DEPTH,
        max_paths: int = settings.MAX_PATHS,
        per_address_cap: int = settings.MAX_TX_FOR_PATHS,
    ) -> PathSet:
        validate_address(source, self.network)
        validate_address(target, self.network)
        validate_limit("max_depth", max_depth, 1)
        validate_limit("max_paths", max_paths, 1)
        validate_limit("per_address_cap", per_address_cap, 0)
        if max_depth > settings.MAX_TRACE_DEPTH:
            raise InvalidInputError(f"max_depth must be <= {settings.MAX_TRACE_DEPTH} (got {max_depth})")

        src = normalize_address(source)
        dst = normalize_address(target)
        result = PathSet(from_address=src, to_address=dst, network=self.network)

        self._search(src, dst, [src], set(), result.paths, 0, max_depth, max_paths, per_address_cap)
        logger.info("Found %d path(s) from %s to %s", len(result.paths), src, dst)
        return result

    def _search(
        self,
        current: str,
        target: str,
        path: List[str],
        on_path: Set[str],
        found: List[List[str]],
        depth: int,
        max_depth: int,
        max_paths: int,
        cap: int,
    ) -> None:
        if depth >= max_depth or len(found) >= max_paths:
            return

        if current == target:
            found.append(list(path))
            return

        on_path.add(current)
        try:
            try:
                txs = self.ledger.fetch_transactions(current, cap)
            except FetchError as e:
                logger.warning("Error finding paths from %s: %s", current, e)
                return

            for tx in list(txs)[:cap]:
                if not classify(tx, current).is_outgoing or not tx.to_address:
                    continue
                nxt = normalize_address(tx.to_address)
                if nxt in on_path:
                    continue
                self._search(nxt, target, path + [nxt], on_path, found, depth + 1, max_depth, max_paths, cap)
        finally:
            on_path.discard(current)
