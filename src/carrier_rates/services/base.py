"""Interfaces every carrier integration implements."""

from __future__ import annotations

from typing import Any, Mapping, Protocol

from carrier_rates.models.domain import RateRequest, RateResponse


class CarrierRateService(Protocol):
    """Quotes shipping rates for one carrier.

    To add a carrier: give it a settings block in ``config.py`` and a profile
    in ``config/carriers.yaml``, write its mapper and transport, and expose a
    service satisfying this protocol.
    """

    carrier_id: str
    carrier_name: str

    async def get_rates(
        self,
        request: RateRequest | Mapping[str, Any],
        *,
        reference: str | None = None,
    ) -> RateResponse:
        """Quote the request, raising ``CarrierServiceError`` on failure."""

    def supports_route(self, origin_country: str, destination_country: str) -> bool:
        """Whether both countries are served."""

    async def health_check(self) -> bool:
        """Whether the carrier is reachable with the configured credentials."""
