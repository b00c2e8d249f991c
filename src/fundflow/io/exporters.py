from __future__ import annotations

import json
from typing import Any, List, Union

from fundflow.core.enums import ExportFormat, NodeKind
from fundflow.core.errors import UnsupportedFormatError
from fundflow.core.models import Graph
from fundflow.io.schemas import to_dict

NODE_COLORS = {
    NodeKind.ORIGIN: "lightblue",
    NodeKind.INTERMEDIARY: "lightgray",
}


def render(obj: Any, fmt: Union[ExportFormat, str] = ExportFormat.JSON) -> str:
    """
    Render a graph (or any query result, for JSON) as text. Pure: no I/O.
    """
    fmt = ExportFormat.parse(fmt)

    if fmt is ExportFormat.JSON:
        return json.dumps(to_dict(obj), indent=2)

    if not isinstance(obj, Graph):
        raise UnsupportedFormatError(f"Format {fmt.value} is only available for address traces")
    if fmt is ExportFormat.DOT:
        return graph_to_dot(obj)
    return graph_to_csv(obj)


def _short_label(addr: str) -> str:
    return f"{addr[:10]}..."


def graph_to_dot(graph: Graph) -> str:
    lines: List[str] = [
        "digraph TransactionFlow {",
        "  rankdir=LR;",
        "  node [shape=box, style=rounded];",
        "",
    ]

    for n in graph.nodes.values():
        color = NODE_COLORS[n.kind]
        lines.append(f'  "{n.address}" [label="{_short_label(n.address)}", fillcolor={color}, style=filled];')

    lines.append("")

    for e in graph.edges:
        lines.append(f'  "{e.from_address}" -> "{e.to_address}" [label="{e.value}"];')

    lines.append("}")
    return "\n".join(lines) + "\n"


def graph_to_csv(graph: Graph) -> str:
    # no quoting: embedded commas are not escaped
    rows = ["From,To,Value,Hash,Timestamp"]
    for e in graph.edges:
        rows.append(f"{e.from_address},{e.to_address},{e.value},{e.tx_hash},{e.timestamp}")
    return "\n".join(rows) + "\n"
