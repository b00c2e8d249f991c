from __future__ import annotations

import logging
from typing import Any, Optional

from fundflow.config import settings
from fundflow.core.enums import ExportFormat
from fundflow.core.models import FlowSummary, Graph, PathConfig, PathSet, TraceConfig, TransactionTrace
from fundflow.core.validation import validate_address, validate_tx_hash
from fundflow.io.exporters import render
from fundflow.ports.ledger_port import LedgerPort
from fundflow.services.flow_aggregator import FlowAggregator
from fundflow.services.graph_builder import GraphBuilder, ProgressCallback
from fundflow.services.path_finder import PathFinder

logger = logging.getLogger(__name__)


class TracerService:
    """
    Entry point for fund-flow queries over a ledger source.

    - trace: bounded expansion of a seed address into a graph
    - trace_transaction: sender / receiver flow around one transaction
    - find_paths: simple transfer paths between two addresses

    Inputs are validated before any fetch; expansion errors are absorbed by
    the underlying services.
    """

    def __init__(self, ledger: LedgerPort, network: str = settings.DEFAULT_NETWORK) -> None:
        self.ledger = ledger
        self.network = network
        self.builder = GraphBuilder(ledger, network=network)
        self.path_finder = PathFinder(ledger, network=network)
        self.flows = FlowAggregator(ledger)

    def trace(self, cfg: TraceConfig, on_progress: Optional[ProgressCallback] = None) -> Graph:
        logger.info(
            "Tracing %s on %s (depth %s, direction %s)",
            cfg.address, self.network, cfg.depth, getattr(cfg.direction, "value", cfg.direction),
        )
        graph = self.builder.build(
            cfg.address,
            max_depth=cfg.depth,
            direction=cfg.direction,
            per_address_cap=cfg.max_tx_per_address,
            on_progress=on_progress,
        )
        logger.info("Trace done: %d nodes, %d edges", len(graph.nodes), len(graph.edges))
        return graph

    def trace_transaction(self, tx_hash: str) -> TransactionTrace:
        validate_tx_hash(tx_hash, self.network)
        logger.info("Tracing transaction %s on %s", tx_hash, self.network)

        # NotFoundError / FetchError propagate: there is nothing to build from
        detail = self.ledger.fetch_transaction_by_hash(tx_hash)

        return TransactionTrace(
            transaction=detail,
            network=self.network,
            from_flow=self.flows.summarize(detail.from_address, settings.FLOW_LOOKBACK_DEPTH),
            to_flow=self.flows.summarize(detail.to_address, settings.FLOW_LOOKBACK_DEPTH),
        )

    def find_paths(self, cfg: PathConfig) -> PathSet:
        logger.info("Finding paths from %s to %s", cfg.from_address, cfg.to_address)
        return self.path_finder.find_paths(
            cfg.from_address,
            cfg.to_address,
            max_depth=cfg.max_depth,
            max_paths=cfg.max_paths,
            per_address_cap=cfg.max_tx_per_address,
        )

    def address_flow(self, address: str, lookback_depth: int = settings.FLOW_LOOKBACK_DEPTH) -> FlowSummary:
        validate_address(address, self.network)
        return self.flows.summarize(address, lookback_depth)

    @staticmethod
    def export(obj: Any, fmt: ExportFormat | str = ExportFormat.JSON) -> str:
        return render(obj, fmt)
