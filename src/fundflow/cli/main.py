from __future__ import annotations

import argparse
import datetime as dt
import logging
import os
import sys
import time

from fundflow.config import settings
from fundflow.core.enums import Direction, ExportFormat
from fundflow.core.errors import TracerError
from fundflow.core.models import PathConfig, TraceConfig
from fundflow.services.tracer_service import TracerService
from fundflow.io.exporters import render
from fundflow.io.output_writer import write_summary_md, write_text
from fundflow.ports.ledger_port import LedgerPort

from fundflow.adapters.ledger.etherscan_ledger_adapter import EtherscanLedgerAdapter
from fundflow.adapters.ledger.static_ledger_adapter import StaticLedgerAdapter

VERSION = "1.0.0"


def build_arg_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--network", default=settings.DEFAULT_NETWORK, help="Blockchain network label")
    common.add_argument("--output", help="Save results to this file instead of printing them")
    common.add_argument("--fixture", help="JSON ledger fixture (static adapter, dev/testing)")

    p = argparse.ArgumentParser(prog="fundflow", description="Fund-flow tracer: graphs, paths and flows")
    sub = p.add_subparsers(dest="command", metavar="<command>")

    t = sub.add_parser("trace", parents=[common], help="Trace transactions from an address")
    t.add_argument("address", help="Seed address to trace")
    t.add_argument("--depth", type=int, default=settings.DEFAULT_MAX_DEPTH, help="Maximum trace depth")
    t.add_argument("--direction", default=Direction.BOTH.value, choices=[d.value for d in Direction], help="Trace direction")
    t.add_argument("--format", default=ExportFormat.JSON.value, help="Output format: json, dot, csv")
    t.add_argument("--max-tx-per-address", type=int, default=settings.MAX_TX_PER_ADDRESS, help="Transactions followed per address")
    t.add_argument("--summary", help="Also write a Markdown trace summary to this file")

    x = sub.add_parser("tx", parents=[common], help="Trace a specific transaction")
    x.add_argument("hash", help="Transaction hash")

    pa = sub.add_parser("path", parents=[common], help="Find transaction paths between addresses")
    pa.add_argument("from_address", metavar="from", help="Source address")
    pa.add_argument("to_address", metavar="to", help="Destination address")
    pa.add_argument("--max-depth", type=int, default=settings.PATH_MAX_DEPTH, help="Maximum path length")
    pa.add_argument("--max-paths", type=int, default=settings.MAX_PATHS, help="Stop after this many paths")

    sub.add_parser("version", help="Show version information")
    return p


def _make_progress_reporter():
    start_time = time.time()
    last_print = 0.0
    is_tty = sys.stdout.isatty()

    def _short_addr(addr: str) -> str:
        if not addr:
            return ""
        if len(addr) <= 12:
            return addr
        return f"{addr[:6]}...{addr[-4:]}"

    def _ts() -> str:
        return dt.datetime.now().strftime("%H:%M:%S")

    def _clear_line() -> None:
        if is_tty:
            sys.stdout.write("\r" + (" " * 88) + "\r")
            sys.stdout.flush()

    def progress(event: str, data: dict) -> None:
        nonlocal last_print
        now = time.time()
        if event == "start":
            print(f"[{_ts()}] Tracing {data['address']} • depth {data['depth']} • {data['direction']}")
            return
        if event == "visit":
            # only a live status line on terminals
            if not is_tty or now - last_print < 0.2:
                return
            msg = (
                f"Depth {data['depth']} • {_short_addr(data['address'])} • "
                f"nodes {data['nodes']} • edges {data['edges']}"
            )
            sys.stdout.write("\r" + msg.ljust(88))
            sys.stdout.flush()
            last_print = now
            return
        if event == "fetch_failed":
            _clear_line()
            print(f"[{_ts()}] Skipped {_short_addr(data['address'])}: {data['message']}", file=sys.stderr)
            return
        if event == "done":
            _clear_line()
            elapsed = time.time() - start_time
            print(
                f"[{_ts()}] Done in {elapsed:.1f}s • "
                f"{data['nodes']} nodes • {data['edges']} edges"
            )

    return progress


def _make_ledger(args) -> LedgerPort:
    if args.fixture:
        return StaticLedgerAdapter.from_file(args.fixture)
    return EtherscanLedgerAdapter(network=args.network, api_key=os.getenv("ETHERSCAN_API_KEY"))


def _emit(content: str, out_path) -> None:
    if out_path:
        path = write_text(content, out_path)
        print(f"Results saved to: {path}")
    else:
        print(content)


def _run_trace(svc: TracerService, args) -> None:
    fmt = ExportFormat.parse(args.format)   # fail before any fetch or write
    cfg = TraceConfig(
        address=args.address,
        depth=args.depth,
        direction=Direction.parse(args.direction),
        max_tx_per_address=args.max_tx_per_address,
    )
    graph = svc.trace(cfg, on_progress=_make_progress_reporter())
    summary = graph.summary

    print("\nTrace completed!\n")
    print(f"Nodes: {summary.node_count}")
    print(f"Transactions: {summary.edge_count}")
    print(f"Total value: {summary.total_value:.4f}\n")

    content = render(graph, fmt)
    _emit(content, args.output)
    if args.summary:
        print(f"Summary saved to: {write_summary_md(graph, args.summary)}")


def _run_tx(svc: TracerService, args) -> None:
    trace = svc.trace_transaction(args.hash)
    tx = trace.transaction

    print("\nTransaction traced!\n")
    print(f"Hash: {tx.tx_hash}")
    print(f"From: {tx.from_address}")
    print(f"To: {tx.to_address}")
    print(f"Value: {tx.value}")
    print(f"Status: {tx.status}\n")

    _emit(render(trace, ExportFormat.JSON), args.output)


def _run_path(svc: TracerService, args) -> None:
    result = svc.find_paths(
        PathConfig(
            from_address=args.from_address,
            to_address=args.to_address,
            max_depth=args.max_depth,
            max_paths=args.max_paths,
        )
    )

    print("\nPath search completed!\n")
    print(f"Paths found: {result.path_count}\n")

    _emit(render(result, ExportFormat.JSON), args.output)


COMMANDS = {
    "trace": _run_trace,
    "tx": _run_tx,
    "path": _run_path,
}


def main(argv=None) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(argv)

    log_level = logging.getLevelName(settings.LOG_LEVEL)
    if not isinstance(log_level, int):
        print(f"Error: Unknown FUNDFLOW_LOG_LEVEL '{settings.LOG_LEVEL}'", file=sys.stderr)
        return 2
    logging.basicConfig(level=log_level, format="%(levelname)s: %(message)s")

    if args.command is None:
        parser.print_help(sys.stderr)
        return 2
    if args.command == "version":
        print(f"fundflow {VERSION}")
        return 0

    # Ledger source
    if not args.fixture and not os.getenv("ETHERSCAN_API_KEY"):
        print("Error: Missing ETHERSCAN_API_KEY environment variable (or pass --fixture)", file=sys.stderr)
        return 2

    try:
        ledger = _make_ledger(args)
        svc = TracerService(ledger, network=args.network)
        COMMANDS[args.command](svc, args)
    except TracerError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    except (OSError, ValueError) as exc:
        print(f"Error: {exc.__class__.__name__}: {exc}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
