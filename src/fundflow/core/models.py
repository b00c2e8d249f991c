from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, List

from fundflow.config import settings
from fundflow.core.dto import Transaction, TransactionDetail, parse_amount
from fundflow.core.enums import Direction, NodeKind, TxClass


def normalize_address(address: str) -> str:
    return address.strip().lower()


def classify(tx: Transaction, address: str) -> TxClass:
    """
    Tag a transaction as outgoing / incoming / both / neither relative to `address`.
    """
    addr = normalize_address(address)
    is_out = bool(tx.from_address) and normalize_address(tx.from_address) == addr
    is_in = bool(tx.to_address) and normalize_address(tx.to_address) == addr
    if is_out and is_in:
        return TxClass.BOTH
    if is_out:
        return TxClass.OUTGOING
    if is_in:
        return TxClass.INCOMING
    return TxClass.NEITHER



# Configuration models

@dataclass(frozen=True)
class TraceConfig:
    """
    User input / run configuration for address tracing.
    """

    address: str
    depth: int = settings.DEFAULT_MAX_DEPTH
    direction: Direction = Direction.BOTH
    max_tx_per_address: int = settings.MAX_TX_PER_ADDRESS


@dataclass(frozen=True)
class PathConfig:

    from_address: str
    to_address: str
    max_depth: int = settings.PATH_MAX_DEPTH
    max_paths: int = settings.MAX_PATHS
    max_tx_per_address: int = settings.MAX_TX_FOR_PATHS



# Graph models

@dataclass
class Node:

    address: str
    depth: int
    kind: NodeKind


@dataclass
class Edge:

    from_address: str
    to_address: str
    value: str
    tx_hash: str
    timestamp: int

    @property
    def amount(self) -> Decimal:
        return parse_amount(self.value)


@dataclass(frozen=True)
class GraphMetadata:

    network: str
    depth: int
    timestamp: str          # ISO-8601, UTC


@dataclass(frozen=True)
class GraphSummary:

    node_count: int
    edge_count: int
    total_value: Decimal


@dataclass
class Graph:

    start_address: str
    metadata: GraphMetadata
    nodes: Dict[str, Node] = field(default_factory=dict)
    edges: List[Edge] = field(default_factory=list)

    @property
    def summary(self) -> GraphSummary:
        return GraphSummary(
            node_count=len(self.nodes),
            edge_count=len(self.edges),
            total_value=sum((e.amount for e in self.edges), Decimal("0")),
        )



# Query results

@dataclass
class PathSet:

    from_address: str
    to_address: str
    network: str
    paths: List[List[str]] = field(default_factory=list)

    @property
    def path_count(self) -> int:
        return len(self.paths)


@dataclass
class FlowSummary:

    address: str
    incoming: List[Transaction] = field(default_factory=list)
    outgoing: List[Transaction] = field(default_factory=list)
    total_in: Decimal = Decimal("0")
    total_out: Decimal = Decimal("0")
    transaction_count: int = 0

    @property
    def net_flow(self) -> Decimal:
        return self.total_in - self.total_out


@dataclass
class TransactionTrace:

    transaction: TransactionDetail
    network: str
    from_flow: FlowSummary
    to_flow: FlowSummary
