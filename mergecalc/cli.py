"""Command-line interface for the merger calculator."""
from __future__ import annotations

import argparse
import asyncio
import sys

from .config import AppConfig, load_config
from .logging_setup import configure_logging
from .services import AllocationView, DataLoader
from .web import run_server
from .web.render import COLUMNS, snapshot


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse CLI parser."""
    parser = argparse.ArgumentParser(
        prog="mergecalc",
        description="Token merger conversion calculator",
    )
    parser.add_argument(
        "--config",
        default=None,
        help=(
            "YAML file with tokens, sources and feed settings "
            "(default: config.yaml next to the package)"
        ),
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Root log level; aiohttp stays at WARNING (default: INFO)",
    )

    sub = parser.add_subparsers(dest="command")

    serve_parser = sub.add_parser("serve", help="Serve the calculator page")
    serve_parser.add_argument("--host", default=None, help="Bind address (overrides config)")
    serve_parser.add_argument("--port", type=int, default=None, help="Port (overrides config)")

    snapshot_parser = sub.add_parser(
        "snapshot", help="Fetch data once and print the allocation table"
    )
    snapshot_parser.add_argument(
        "--amount",
        default=None,
        help="Input amount of each existing token (default: from config)",
    )

    return parser


def format_table(state: dict) -> str:
    """Plain-text rendering of a view snapshot."""
    keys = ("symbol", "supply", "price", "exchange_ratio", "implied_price", "new_tokens")
    rows = [list(COLUMNS)] + [[str(r[k]) for k in keys] for r in state["rows"]]
    widths = [max(len(row[i]) for row in rows) for i in range(len(keys))]

    lines = ["  ".join(cell.ljust(w) for cell, w in zip(row, widths)) for row in rows]
    lines.insert(1, "  ".join("-" * w for w in widths))
    lines.append("")
    lines.append(f"Merger Allocations (Based on {state['total']} New Tokens)")
    lines.extend(line["text"] for line in state["allocations"])
    return "\n".join(lines)


async def _snapshot(config: AppConfig, amount: str | None) -> str:
    bundle = await DataLoader(config).load()
    view = AllocationView(config, bundle)
    if amount is not None:
        view.set_amount(amount)
    return format_table(snapshot(view))


def main(argv: list[str] | None = None) -> None:
    """Entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    configure_logging(args.log_level)
    config = load_config(args.config)

    if args.command == "serve":
        run_server(config, host=args.host, port=args.port)
    elif args.command == "snapshot":
        print(asyncio.run(_snapshot(config, args.amount)))
