"""CLI commands for authentication management."""

from __future__ import annotations

import asyncio
from typing import Annotated

import typer
from rich.console import Console

from carrier_rates.auth import AuthManager
from carrier_rates.config import load_config, profile_summary
from carrier_rates.errors import CarrierServiceError
from carrier_rates.utils.errors import handle_error
from carrier_rates.utils.output import OutputFormat, print_output

console = Console(stderr=True)
app = typer.Typer(name="auth", help="Manage carrier authentication tokens.")


def _state_row(auth: AuthManager, status: str) -> dict[str, object]:
    state = auth.get_token_state()
    return {
        "status": status,
        "expires_at": str(state.expires_at) if state.expires_at else "N/A",
        "seconds_remaining": state.seconds_remaining or 0,
        "is_valid": state.is_valid,
    }


async def _acquire(auth: AuthManager, force: bool) -> None:
    try:
        if force:
            await auth.force_refresh()
        else:
            await auth.get_access_token()
    finally:
        await auth.aclose()


@app.command()
def login(
    output: Annotated[OutputFormat, typer.Option("--output", "-o", help="Output format")] = OutputFormat.TABLE,
) -> None:
    """Authenticate and display token status."""
    try:
        config = load_config()
        auth = AuthManager(config.ups)
        console.print(f"Authenticating against [bold]{config.ups.token_url}[/bold]...", style="yellow")
        asyncio.run(_acquire(auth, force=False))
    except CarrierServiceError as e:
        handle_error(e)
        raise typer.Exit(1)
    print_output(_state_row(auth, "authenticated"), output, title="Authentication")


@app.command()
def status(
    output: Annotated[OutputFormat, typer.Option("--output", "-o", help="Output format")] = OutputFormat.TABLE,
) -> None:
    """Show the active carrier profile.

    Tokens are cached in memory only, so use ``login`` to check that the
    credentials are accepted.
    """
    try:
        config = load_config()
    except CarrierServiceError as e:
        handle_error(e)
        raise typer.Exit(1)
    print_output(profile_summary(config), output, title="Carrier Profile")


@app.command()
def refresh(
    output: Annotated[OutputFormat, typer.Option("--output", "-o", help="Output format")] = OutputFormat.TABLE,
) -> None:
    """Force a fresh token request."""
    try:
        config = load_config()
        auth = AuthManager(config.ups)
        console.print("Force refreshing token...", style="yellow")
        asyncio.run(_acquire(auth, force=True))
    except CarrierServiceError as e:
        handle_error(e)
        raise typer.Exit(1)
    print_output(_state_row(auth, "refreshed"), output, title="Token Refreshed")
