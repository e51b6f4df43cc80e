"""Output formatting for rate quotes and status objects."""

from __future__ import annotations

import json
import sys
from enum import Enum
from typing import Any

from rich.console import Console
from rich.table import Table

from carrier_rates.models.domain import Money, RateResponse

console = Console(stderr=True)


class OutputFormat(str, Enum):
    TABLE = "table"
    JSON = "json"


def _fmt_money(money: Money | None) -> str:
    if money is None:
        return ""
    return f"{money.amount:.2f} {money.currency}"


def quote_rows(response: RateResponse) -> list[dict[str, Any]]:
    """Flatten quotes into display rows, cheapest first."""
    quotes = sorted(response.quotes, key=lambda q: q.total_cost.amount)
    return [
        {
            "service": q.service_name,
            "code": q.carrier_service_code,
            "total": _fmt_money(q.total_cost),
            "negotiated": _fmt_money(q.negotiated_cost),
            "days": q.business_days_in_transit if q.business_days_in_transit is not None else "",
            "warnings": "; ".join(q.warnings or []),
        }
        for q in quotes
    ]


def print_output(
    data: list[dict[str, Any]] | dict[str, Any],
    fmt: OutputFormat = OutputFormat.TABLE,
    title: str | None = None,
) -> None:
    """Print data as JSON to stdout or as a Rich table to stderr."""
    if fmt == OutputFormat.JSON:
        json.dump(data, sys.stdout, indent=2, default=str)
        sys.stdout.write("\n")
        return

    rows = [data] if isinstance(data, dict) else data
    if not rows:
        console.print("[dim]No results.[/dim]")
        return

    table = Table(title=title, show_lines=False)
    columns = list(rows[0].keys())
    for col in columns:
        table.add_column(col, overflow="fold")
    for row in rows:
        table.add_row(*[str(row.get(col, "")) for col in columns])
    console.print(table)


def print_rates(response: RateResponse, fmt: OutputFormat = OutputFormat.TABLE) -> None:
    """Print a rate response; JSON mode emits the full normalized model."""
    if fmt == OutputFormat.JSON:
        print_output(response.model_dump(mode="json", by_alias=True), fmt)
        return

    print_output(quote_rows(response), fmt, title=f"{response.carrier} rates ({response.request_id})")
    for alert in response.alerts:
        console.print(f"[yellow]Alert:[/yellow] {alert}")
