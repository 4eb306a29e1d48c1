"""
Report CLI tool for the abattoir ledger.

This tool prints analytics for one slaughterhouse straight from the data
directory, without a running server:
- financials: revenue, costs and profit margin
- quality: inspection outcomes in a date range
- maintenance: maintenance spend and equipment reliability in a date range
- inventory: product counts, stock value and low-stock items
- stats: row counts per store and the next ID

Usage:
    abattoir-report financials 3 --data-dir /var/lib/abattoir
    abattoir-report quality 3 --start 1700000000000 --end 1710000000000
    abattoir-report stats

Invariants:
    - The tool never writes to the ledger
    - Output is deterministic JSON (sorted keys)
    - The database is opened read-only; a missing one is never created
    - Exit code 1 means the ledger or the slaughterhouse does not exist
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from dataclasses import replace
from typing import Any

from ..analytics import financial_metrics, inventory_analytics, maintenance_analytics, quality_metrics
from ..config import AnalyticsConfig, StorageConfig
from ..context import Ledger
from ..errors import NotFoundError, StorageError

MAX_TIMESTAMP = 2**63 - 1


class ReportCLI:
    """Runs analytics against a ledger and renders them as JSON.

    Example:
        >>> cli = ReportCLI(ledger)
        >>> print(await cli.render("inventory", slaughterhouse_id=3))
    """

    def __init__(self, ledger: Ledger) -> None:
        self.ledger = ledger

    async def collect(
        self,
        command: str,
        slaughterhouse_id: int | None = None,
        start: int = 0,
        end: int = MAX_TIMESTAMP,
    ) -> dict[str, Any]:
        """Compute the report for a command.

        Raises:
            NotFoundError: If the slaughterhouse does not exist
            ValueError: If the command is unknown or needs a slaughterhouse id
        """
        if command == "stats":
            return await self.ledger.stats()
        if slaughterhouse_id is None:
            raise ValueError(f"'{command}' needs a slaughterhouse id")

        if command == "financials":
            return (await financial_metrics(self.ledger, slaughterhouse_id)).to_dict()
        if command == "quality":
            metrics = await quality_metrics(self.ledger, slaughterhouse_id, start, end)
            return metrics.to_dict()
        if command == "maintenance":
            analytics = await maintenance_analytics(self.ledger, slaughterhouse_id, start, end)
            return analytics.to_dict()
        if command == "inventory":
            return (await inventory_analytics(self.ledger, slaughterhouse_id)).to_dict()
        raise ValueError(f"Unknown report '{command}'")

    async def render(self, command: str, **kwargs: Any) -> str:
        report = await self.collect(command, **kwargs)
        return json.dumps(report, indent=2, sort_keys=True)


async def _run(args: argparse.Namespace) -> int:
    storage = StorageConfig.from_env()
    if args.data_dir:
        storage = replace(storage, data_dir=args.data_dir)

    ledger = Ledger(storage=storage, analytics=AnalyticsConfig.from_env(), read_only=True)
    try:
        async with ledger:
            output = await ReportCLI(ledger).render(
                args.command,
                slaughterhouse_id=getattr(args, "slaughterhouse_id", None),
                start=getattr(args, "start", 0),
                end=getattr(args, "end", MAX_TIMESTAMP),
            )
    except (NotFoundError, StorageError) as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1

    print(output)
    return 0


def main() -> None:
    """CLI entry point for the report tool."""
    parser = argparse.ArgumentParser(description="Abattoir ledger report tool")
    parser.add_argument("--data-dir", help="Ledger data directory (default: $DATA_DIR)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    for name, help_text in (
        ("financials", "Revenue, costs and profit margin"),
        ("inventory", "Product counts, stock value and low-stock items"),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("slaughterhouse_id", type=int)

    for name, help_text in (
        ("quality", "Inspection outcomes in a date range"),
        ("maintenance", "Maintenance spend and equipment reliability"),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("slaughterhouse_id", type=int)
        sub.add_argument("--start", type=int, default=0, help="Range start (Unix ms)")
        sub.add_argument("--end", type=int, default=MAX_TIMESTAMP, help="Range end (Unix ms)")

    subparsers.add_parser("stats", help="Row counts per store")

    args = parser.parse_args()
    sys.exit(asyncio.run(_run(args)))


if __name__ == "__main__":
    main()
