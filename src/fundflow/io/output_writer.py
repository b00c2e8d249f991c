from __future__ import annotations

from decimal import Decimal
from pathlib import Path
from typing import Dict, List, Tuple

from fundflow.core.models import Edge, Graph


def write_text(content: str, out_path: str) -> str:
    """
    Write already-rendered output. Rendering happens first so that a format
    error never leaves a partial file behind.
    """
    p = Path(out_path)
    p.parent.mkdir(parents=True, exist_ok=True)

    with p.open("w", encoding="utf-8") as f:
        f.write(content)

    return str(p)


def render_summary_md(graph: Graph) -> str:
    """
    Minimal, investigator-friendly summary of a trace.
    """
    summary = graph.summary
    seed = graph.start_address

    def sum_by_address(edges: List[Edge], key) -> Dict[str, Decimal]:
        totals: Dict[str, Decimal] = {}
        for e in edges:
            addr = key(e)
            totals[addr] = totals.get(addr, Decimal("0")) + e.amount
        return totals

    inflow_edges = [e for e in graph.edges if e.to_address == seed]
    outflow_edges = [e for e in graph.edges if e.from_address == seed]

    inflow_totals = sum_by_address(inflow_edges, lambda e: e.from_address)
    outflow_totals = sum_by_address(outflow_edges, lambda e: e.to_address)

    def top_n(totals: Dict[str, Decimal], n: int = 10) -> List[Tuple[str, Decimal]]:
        return sorted(totals.items(), key=lambda x: x[1], reverse=True)[:n]

    total_in = sum(inflow_totals.values(), Decimal("0"))
    total_out = sum(outflow_totals.values(), Decimal("0"))

    def short(addr: str) -> str:
        return addr if len(addr) <= 14 else f"{addr[:10]}..."

    def interpretation() -> str:
        if not inflow_edges and not outflow_edges:
            return "No value movements touched the seed address."
        uniq_in = len(inflow_totals)
        uniq_out = len(outflow_totals)
        if uniq_out >= uniq_in * 2 and total_out > total_in:
            return (
                "This address looks like a distributor: many outbound destinations "
                "and higher outflow than inflow."
            )
        if uniq_in >= uniq_out * 2 and total_in > total_out:
            return (
                "This address looks like a collector: many inbound sources and "
                "higher inflow than outflow."
            )
        return (
            "Flows are mixed without a strong directional skew, which often matches "
            "an active address used for routine transfers."
        )

    lines = []
    lines.append("# Trace Summary\n")
    lines.append(f"- Seed: **{seed}**\n")
    lines.append(f"- Network: **{graph.metadata.network}**\n")
    lines.append(f"- Depth: **{graph.metadata.depth}**\n")
    lines.append(f"- Nodes: **{summary.node_count}**\n")
    lines.append(f"- Edges: **{summary.edge_count}**\n")
    lines.append(f"- Total value: **{summary.total_value:f}**\n")
    lines.append("\n")

    lines.append("## Top 10 Inflow Sources\n\n")
    if not inflow_totals:
        lines.append("_No inbound transfers to the seed were traced._\n\n")
    else:
        for addr, total in top_n(inflow_totals):
            lines.append(f"- **{total:f}** | {addr}\n")
        lines.append("\n")

    lines.append("## Top 10 Outflow Destinations\n\n")
    if not outflow_totals:
        lines.append("_No outbound transfers from the seed were traced._\n\n")
    else:
        for addr, total in top_n(outflow_totals):
            lines.append(f"- **{total:f}** | {addr}\n")
        lines.append("\n")

    lines.append("## Interpretation\n\n")
    lines.append(f"{interpretation()}\n\n")

    lines.append("## Top Transfers (by value)\n\n")
    top = sorted(graph.edges, key=lambda e: e.amount, reverse=True)[:15]
    if not top:
        lines.append("_No transfers found._\n")
    else:
        for e in top:
            lines.append(
                f"- **{e.value or '0'}** | {short(e.from_address)} -> {short(e.to_address)} "
                f"| tx: {e.tx_hash}\n"
            )

    return "".join(lines)


def write_summary_md(graph: Graph, out_path: str) -> str:
    return write_text(render_summary_md(graph), out_path)
