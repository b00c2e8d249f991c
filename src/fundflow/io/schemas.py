from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, Optional

from fundflow.core.dto import Transaction, TransactionDetail
from fundflow.core.enums import NodeKind
from fundflow.core.models import (
    Edge,
    FlowSummary,
    Graph,
    GraphMetadata,
    Node,
    PathSet,
    TransactionTrace,
)


def _dec_to_str(x: Decimal) -> str:
    # keep as string for JSON precision safety
    return format(x, "f")


def _opt_int(val: Any) -> Optional[int]:
    if val is None or val == "":
        return None
    return int(val)


# -------------------------
# Transactions
# -------------------------

def transaction_to_dict(t: Transaction) -> Dict[str, Any]:
    return {
        "hash": t.tx_hash,
        "from": t.from_address,
        "to": t.to_address,
        "value": t.value,
        "timestamp": t.timestamp,
        "blockNumber": t.block_number,
    }


def transaction_from_dict(d: Dict[str, Any]) -> Transaction:
    value = d.get("value")
    return Transaction(
        tx_hash=str(d.get("hash") or d.get("tx_hash") or ""),
        from_address=str(d.get("from") or d.get("from_address") or ""),
        to_address=str(d.get("to") or d.get("to_address") or ""),
        value="" if value is None else str(value),
        timestamp=int(d.get("timestamp") or 0),
        block_number=_opt_int(d.get("blockNumber", d.get("block_number"))),
    )


def transaction_detail_to_dict(t: TransactionDetail) -> Dict[str, Any]:
    return {
        "hash": t.tx_hash,
        "from": t.from_address,
        "to": t.to_address,
        "value": t.value,
        "timestamp": t.timestamp,
        "status": t.status,
        "blockNumber": t.block_number,
        "gasUsed": t.gas_used,
        "fee": t.fee,
    }


def transaction_detail_from_dict(d: Dict[str, Any]) -> TransactionDetail:
    value = d.get("value")
    return TransactionDetail(
        tx_hash=str(d.get("hash") or d.get("tx_hash") or ""),
        from_address=str(d.get("from") or d.get("from_address") or ""),
        to_address=str(d.get("to") or d.get("to_address") or ""),
        value="" if value is None else str(value),
        timestamp=int(d.get("timestamp") or 0),
        status=str(d.get("status") or "unknown"),
        block_number=_opt_int(d.get("blockNumber", d.get("block_number"))),
        gas_used=_opt_int(d.get("gasUsed", d.get("gas_used"))),
        fee=None if d.get("fee") is None else str(d["fee"]),
    )


# -------------------------
# Graph
# -------------------------

def graph_to_dict(g: Graph) -> Dict[str, Any]:
    summary = g.summary
    return {
        "nodes": [
            {
                "address": n.address,
                "depth": n.depth,
                "kind": n.kind.value,
            }
            for n in g.nodes.values()
        ],
        "edges": [
            {
                "from": e.from_address,
                "to": e.to_address,
                "value": e.value,
                "hash": e.tx_hash,
                "timestamp": e.timestamp,
            }
            for e in g.edges
        ],
        "startAddress": g.start_address,
        "metadata": {
            "network": g.metadata.network,
            "depth": g.metadata.depth,
            "timestamp": g.metadata.timestamp,
        },
        "summary": {
            "nodeCount": summary.node_count,
            "edgeCount": summary.edge_count,
            "totalValue": _dec_to_str(summary.total_value),
        },
    }


def graph_from_dict(d: Dict[str, Any]) -> Graph:
    meta = d.get("metadata") or {}
    g = Graph(
        start_address=d["startAddress"],
        metadata=GraphMetadata(
            network=meta.get("network", ""),
            depth=int(meta.get("depth", 0)),
            timestamp=meta.get("timestamp", ""),
        ),
    )
    for n in d.get("nodes", []):
        g.nodes[n["address"]] = Node(address=n["address"], depth=int(n["depth"]), kind=NodeKind(n["kind"]))
    for e in d.get("edges", []):
        g.edges.append(
            Edge(
                from_address=e["from"],
                to_address=e["to"],
                value=e["value"],
                tx_hash=e["hash"],
                timestamp=e["timestamp"],
            )
        )
    return g


# -------------------------
# Query results
# -------------------------

def path_set_to_dict(p: PathSet) -> Dict[str, Any]:
    return {
        "from": p.from_address,
        "to": p.to_address,
        "paths": [list(path) for path in p.paths],
        "pathCount": p.path_count,
        "network": p.network,
    }


def flow_to_dict(f: FlowSummary) -> Dict[str, Any]:
    return {
        "address": f.address,
        "incoming": [transaction_to_dict(t) for t in f.incoming],
        "outgoing": [transaction_to_dict(t) for t in f.outgoing],
        "totalIn": _dec_to_str(f.total_in),
        "totalOut": _dec_to_str(f.total_out),
        "netFlow": _dec_to_str(f.net_flow),
        "transactionCount": f.transaction_count,
    }


def trace_to_dict(t: TransactionTrace) -> Dict[str, Any]:
    return {
        "transaction": {**transaction_detail_to_dict(t.transaction), "network": t.network},
        "fromAddressFlow": flow_to_dict(t.from_flow),
        "toAddressFlow": flow_to_dict(t.to_flow),
    }


def to_dict(obj: Any) -> Dict[str, Any]:
    if isinstance(obj, Graph):
        return graph_to_dict(obj)
    if isinstance(obj, PathSet):
        return path_set_to_dict(obj)
    if isinstance(obj, FlowSummary):
        return flow_to_dict(obj)
    if isinstance(obj, TransactionTrace):
        return trace_to_dict(obj)
    raise TypeError(f"Cannot serialize {type(obj).__name__}")
