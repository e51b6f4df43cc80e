"""UPS rate quoting service."""

from __future__ import annotations

import logging
import uuid
from typing import Any, Mapping

import httpx
from pydantic import ValidationError

from carrier_rates.auth import AuthManager
from carrier_rates.client import UPSClient
from carrier_rates.config import Config
from carrier_rates.errors import (
    CarrierServiceError,
    ValidationIssue,
    is_auth_failure,
    response_parsing_error,
    validation_error,
)
from carrier_rates.mapper import from_ups_rate_response, to_ups_rate_request
from carrier_rates.models.domain import RateRequest, RateResponse

logger = logging.getLogger(__name__)


class UPSRateService:
    """Validates, authenticates, calls UPS, and normalizes the result.

    A 401 or 403 from the rating call is retried exactly once with a
    force-refreshed token. Every other failure propagates as raised.
    """

    def __init__(
        self,
        config: Config,
        http: httpx.AsyncClient | None = None,
        auth: AuthManager | None = None,
    ) -> None:
        settings = config.ups
        self._settings = settings
        self.carrier_id = settings.carrier_id
        self.carrier_name = settings.carrier_name
        self._owns_http = http is None
        self._http = http or httpx.AsyncClient(timeout=settings.timeout)
        self._owns_auth = auth is None
        self._auth = auth or AuthManager(settings, self._http)
        self._client = UPSClient(settings, self._http, log_bodies=config.service.enable_request_logging)

    @property
    def auth(self) -> AuthManager:
        return self._auth

    async def get_rates(
        self,
        request: RateRequest | Mapping[str, Any],
        *,
        reference: str | None = None,
    ) -> RateResponse:
        """Quote a shipment.

        Args:
            request: Domain request, or a mapping in the same shape.
            reference: Optional tag echoed as the UPS transaction reference.

        Raises:
            CarrierServiceError: Classified failure; see ``errors.ErrorKind``.
        """
        request_id = str(uuid.uuid4())
        validated = self._validate(request)
        access_token = await self._auth.get_access_token()

        wire_request = to_ups_rate_request(validated, self._settings.account_number, reference)

        try:
            body = await self._client.rate(wire_request, access_token, request_id)
        except CarrierServiceError as e:
            if not is_auth_failure(e):
                raise
            logger.warning(
                "Got %s from %s, refreshing token and retrying once (transId=%s)",
                e.http_status, self.carrier_id, request_id,
            )
            fresh_token = await self._auth.force_refresh()
            body = await self._client.rate(wire_request, fresh_token, request_id)

        try:
            return from_ups_rate_response(body, request_id, validated)
        except (KeyError, AttributeError, TypeError, ValueError, ArithmeticError) as e:
            raise response_parsing_error(
                f"Could not parse {self.carrier_id} rated shipment: {e}",
                carrier=self.carrier_id, request_id=request_id,
                response_body=body, cause=e,
            ) from e

    def supports_route(self, origin_country: str, destination_country: str) -> bool:
        """Check both countries against the configured allow-list (case-insensitive)."""
        supported = {c.upper() for c in self._settings.supported_countries}
        return origin_country.upper() in supported and destination_country.upper() in supported

    async def health_check(self) -> bool:
        """Try to obtain a token. Never raises."""
        try:
            await self._auth.get_access_token()
        except Exception as e:
            logger.warning("%s health check failed: %s", self.carrier_id, e)
            return False
        return True

    def _validate(self, request: RateRequest | Mapping[str, Any]) -> RateRequest:
        data = request.model_dump(by_alias=True) if isinstance(request, RateRequest) else request
        try:
            return RateRequest.model_validate(data)
        except ValidationError as e:
            issues = [
                ValidationIssue(
                    path=".".join(str(part) for part in err["loc"]),
                    message=err["msg"],
                    code=err["type"],
                )
                for err in e.errors()
            ]
            raise validation_error(
                "Invalid rate request", issues, carrier=self.carrier_id,
            ) from e

    async def aclose(self) -> None:
        """Close owned HTTP resources."""
        if self._owns_auth:
            await self._auth.aclose()
        if self._owns_http:
            await self._http.aclose()

    async def __aenter__(self) -> UPSRateService:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
