from __future__ import annotations

import datetime as dt
import logging
from typing import Callable, List, Optional

from fundflow.config import settings
from fundflow.core.dto import Transaction
from fundflow.core.enums import Direction, NodeKind
from fundflow.core.errors import FetchError, InvalidInputError
from fundflow.core.models import Edge, Graph, GraphMetadata, Node, classify, normalize_address
from fundflow.core.validation import validate_address, validate_limit
from fundflow.ports.ledger_port import LedgerPort

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str, dict], None]


def _utc_now_iso() -> str:
    return dt.datetime.now(dt.timezone.utc).isoformat()


class GraphBuilder:
    """
    Bounded depth-first expansion of a seed address into a node/edge graph.

    - A node's depth is fixed by its first visit (later, shorter routes do not lower it)
    - Edges are one per qualifying transaction, never merged by (from, to)
    - Fetch failures degrade to "no transactions" for that address
    """

    def __init__(
        self,
        ledger: LedgerPort,
        network: str = settings.DEFAULT_NETWORK,
        clock: Callable[[], str] = _utc_now_iso,
    ) -> None:
        self.ledger = ledger
        self.network = network
        self._clock = clock

    def build(
        self,
        seed: str,
        max_depth: int,
        direction: Direction | str = Direction.BOTH,
        per_address_cap: int = settings.MAX_TX_PER_ADDRESS,
        on_progress: Optional[ProgressCallback] = None,
    ) -> Graph:
        validate_address(seed, self.network)
        validate_limit("max_depth", max_depth, 1)
        validate_limit("per_address_cap", per_address_cap, 0)
        if max_depth > settings.MAX_TRACE_DEPTH:
            raise InvalidInputError(f"max_depth must be <= {settings.MAX_TRACE_DEPTH} (got {max_depth})")
        direction = Direction.parse(direction)

        start = normalize_address(seed)
        graph = Graph(
            start_address=start,
            metadata=GraphMetadata(network=self.network, depth=max_depth, timestamp=self._clock()),
        )
        notify = on_progress or (lambda event, data: None)

        notify("start", {"address": start, "depth": max_depth, "direction": direction.value})
        self._visit(graph, start, 0, max_depth, direction, per_address_cap, notify)
        notify("done", {"nodes": len(graph.nodes), "edges": len(graph.edges)})

        return graph

    # -------------------------
    # Traversal
    # -------------------------

    def _visit(
        self,
        graph: Graph,
        address: str,
        depth: int,
        max_depth: int,
        direction: Direction,
        cap: int,
        notify: ProgressCallback,
    ) -> None:
        if depth >= max_depth:
            return

        addr = normalize_address(address)
        if addr in graph.nodes:
            return

        graph.nodes[addr] = Node(
            address=addr,
            depth=depth,
            kind=NodeKind.ORIGIN if depth == 0 else NodeKind.INTERMEDIARY,
        )
        notify("visit", {"address": addr, "depth": depth, "nodes": len(graph.nodes), "edges": len(graph.edges)})

        for tx in self._fetch(addr, cap, notify):
            tx_class = classify(tx, addr)

            # a counterparty is required on the far side (contract creations have no `to`)
            if tx_class.is_outgoing and direction.follows_outgoing and tx.to_address:
                self._add_edge(graph, tx)
                if depth + 1 < max_depth:
                    self._visit(graph, tx.to_address, depth + 1, max_depth, direction, cap, notify)

            if tx_class.is_incoming and direction.follows_incoming and tx.from_address:
                self._add_edge(graph, tx)
                if depth + 1 < max_depth:
                    self._visit(graph, tx.from_address, depth + 1, max_depth, direction, cap, notify)

    def _fetch(self, address: str, cap: int, notify: ProgressCallback) -> List[Transaction]:
        try:
            txs = self.ledger.fetch_transactions(address, cap)
        except FetchError as e:
            logger.warning("Could not trace address %s: %s", address, e)
            notify("fetch_failed", {"address": address, "message": str(e)})
            return []
        logger.debug("Fetched %d transaction(s) for %s", len(txs), address)
        return list(txs)[:cap]

    @staticmethod
    def _add_edge(graph: Graph, tx: Transaction) -> None:
        graph.edges.append(
            Edge(
                from_address=normalize_address(tx.from_address),
                to_address=normalize_address(tx.to_address),
                value=tx.value,
                tx_hash=tx.tx_hash,
                timestamp=tx.timestamp,
            )
        )
