"""Structured error output for the CLI."""

from __future__ import annotations

import json
import sys

from rich.console import Console

from carrier_rates.errors import CarrierServiceError, ErrorKind

console = Console(stderr=True)

_HINTS: dict[ErrorKind, str] = {
    ErrorKind.VALIDATION: "Fix the listed fields in the rate request and retry",
    ErrorKind.INVALID_CREDENTIALS: "Check UPS_CLIENT_ID and UPS_CLIENT_SECRET in your .env file",
    ErrorKind.AUTHENTICATION: "Authentication server rejected the request: try `carrier-rates auth refresh`",
    ErrorKind.TIMEOUT: "Request timed out: try again or raise UPS_TIMEOUT",
    ErrorKind.NETWORK: "Connection error: check network connectivity",
    ErrorKind.RATE_LIMIT: "Rate limited: wait a moment and retry",
    ErrorKind.RESPONSE_PARSING: "Carrier returned an unexpected response: retry later or report it",
    ErrorKind.CONFIGURATION: "Set the missing variables in your environment or .env file",
}


def get_hint(error: CarrierServiceError) -> str | None:
    """Match a classified error to an actionable hint."""
    if error.kind is ErrorKind.CARRIER_API:
        if error.retryable:
            return "Carrier server error: retry later"
        return None
    return _HINTS.get(error.kind)


def handle_error(error: Exception) -> None:
    """Print a JSON error object to stdout and a readable message to stderr.

    Classified errors render their full ``to_dict()``; anything else is
    reported as ``RUNTIME_ERROR``.
    """
    if isinstance(error, CarrierServiceError):
        error_obj: dict[str, object] = {"error": True, **error.to_dict()}
        hint = get_hint(error)
    else:
        error_obj = {"error": True, "code": "RUNTIME_ERROR", "message": str(error)}
        hint = None

    if hint:
        error_obj["hint"] = hint

    json.dump(error_obj, sys.stdout, default=str)
    sys.stdout.write("\n")

    console.print(f"[red]Error:[/red] {error_obj['message']}")
    if isinstance(error, CarrierServiceError) and error.kind is ErrorKind.VALIDATION:
        for issue in error.detail.issues:
            console.print(f"  [yellow]{issue.path}[/yellow]: {issue.message}")
    if hint:
        console.print(f"[dim]Hint: {hint}[/dim]")
