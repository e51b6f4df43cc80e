"""Carrier rates CLI: entry point.

Quote parcel shipping rates from carrier APIs through one normalized model.
"""

from __future__ import annotations

import logging
import os

import typer

from carrier_rates.commands.auth_cmd import app as auth_app
from carrier_rates.commands.rates_cmd import app as rates_app

app = typer.Typer(
    name="carrier-rates",
    help="CLI tool for quoting shipping rates from carrier APIs.",
    no_args_is_help=True,
)

app.add_typer(auth_app, name="auth")
app.add_typer(rates_app, name="rates")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
) -> None:
    """Carrier rates CLI: authenticate and quote rates."""
    level = "DEBUG" if verbose else os.environ.get("LOG_LEVEL", "WARNING").upper()
    logging.basicConfig(level=level, format="%(levelname)s: %(name)s: %(message)s")


if __name__ == "__main__":
    app()
