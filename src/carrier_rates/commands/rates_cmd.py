"""CLI commands for rate quoting."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Annotated, Any

import typer
from rich.console import Console

from carrier_rates.config import Config, load_config
from carrier_rates.errors import CarrierServiceError
from carrier_rates.models.domain import RateResponse
from carrier_rates.services.rating import UPSRateService
from carrier_rates.utils.errors import handle_error
from carrier_rates.utils.output import OutputFormat, print_output, print_rates

console = Console(stderr=True)
app = typer.Typer(name="rates", help="Quote shipping rates.")


def _load_config_or_exit() -> Config:
    try:
        return load_config()
    except CarrierServiceError as e:
        handle_error(e)
        raise typer.Exit(1)


async def _quote(config: Config, request: dict[str, Any], reference: str | None) -> RateResponse:
    async with UPSRateService(config) as service:
        return await service.get_rates(request, reference=reference)


async def _health(config: Config) -> bool:
    async with UPSRateService(config) as service:
        return await service.health_check()


@app.command()
def quote(
    request_file: Annotated[Path, typer.Argument(help="JSON file holding the rate request")],
    reference: Annotated[str | None, typer.Option("--reference", help="Tag echoed back by the carrier")] = None,
    output: Annotated[OutputFormat, typer.Option("--output", "-o", help="Output format")] = OutputFormat.TABLE,
) -> None:
    """Quote rates for the request in REQUEST_FILE."""
    try:
        request = json.loads(request_file.read_text())
    except (OSError, json.JSONDecodeError) as e:
        console.print(f"[red]Could not read {request_file}:[/red] {e}")
        raise typer.Exit(1)

    config = _load_config_or_exit()
    try:
        response = asyncio.run(_quote(config, request, reference))
    except CarrierServiceError as e:
        handle_error(e)
        raise typer.Exit(1)

    print_rates(response, output)


@app.command()
def routes(
    origin: Annotated[str, typer.Argument(help="Origin country code")],
    destination: Annotated[str, typer.Argument(help="Destination country code")],
    output: Annotated[OutputFormat, typer.Option("--output", "-o", help="Output format")] = OutputFormat.TABLE,
) -> None:
    """Check whether a route is served."""
    config = _load_config_or_exit()
    service = UPSRateService(config)
    result = {
        "carrier": service.carrier_id,
        "origin": origin.upper(),
        "destination": destination.upper(),
        "supported": service.supports_route(origin, destination),
    }
    asyncio.run(service.aclose())
    print_output(result, output, title="Route")


@app.command()
def health(
    output: Annotated[OutputFormat, typer.Option("--output", "-o", help="Output format")] = OutputFormat.TABLE,
) -> None:
    """Check that credentials are accepted by the carrier."""
    config = _load_config_or_exit()
    healthy = asyncio.run(_health(config))
    print_output({"carrier": config.ups.carrier_id, "healthy": healthy}, output, title="Health")
    if not healthy:
        raise typer.Exit(1)
