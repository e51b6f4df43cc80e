"""HTTP transport for the UPS Rating API.

Handles header injection, response shape checks, and classification of
transport and HTTP failures into ``CarrierServiceError``. Retries are not
done here; the rating service owns the single auth retry.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from carrier_rates.config import UPSSettings
from carrier_rates.errors import (
    CarrierServiceError,
    error_from_http_response,
    network_error,
    response_parsing_error,
    timeout_error,
)

logger = logging.getLogger(__name__)


RATING_PATH = "/api/rating/v1/Rate"
TRANSACTION_SOURCE = "carrier-rates"


class UPSClient:
    """Posts rate requests to UPS with bearer auth."""

    def __init__(
        self,
        settings: UPSSettings,
        http: httpx.AsyncClient,
        log_bodies: bool = False,
    ) -> None:
        self._settings = settings
        self._http = http
        self._log_bodies = log_bodies

    @property
    def carrier(self) -> str:
        return self._settings.carrier_id

    async def rate(self, body: dict[str, Any], access_token: str, request_id: str) -> dict[str, Any]:
        """Call the rating endpoint and return the decoded response body.

        Args:
            body: UPS RateRequest wire body.
            access_token: Bearer token from the auth manager.
            request_id: Correlation id sent as ``transId``.

        Returns:
            The JSON body, guaranteed to contain a ``RateResponse.RatedShipment`` list.

        Raises:
            CarrierServiceError: On any transport, HTTP, or shape failure.
        """
        url = self._settings.base_url.rstrip("/") + RATING_PATH
        logger.info("POST %s (transId=%s)", url, request_id)
        if self._log_bodies:
            logger.debug("Body: %s", body)

        try:
            response = await self._http.post(
                url, json=body, headers=self._build_headers(access_token, request_id),
            )
        except httpx.TimeoutException as e:
            raise timeout_error(
                "Request timed out", self._settings.timeout,
                carrier=self.carrier, request_id=request_id, cause=e,
            ) from e
        except httpx.TransportError as e:
            raise network_error(
                "Could not connect to API",
                carrier=self.carrier, request_id=request_id, cause=e,
            ) from e
        except Exception as e:
            raise network_error(
                f"Unexpected error calling {self.carrier} Rating API",
                carrier=self.carrier, request_id=request_id, cause=e,
            ) from e

        logger.info("Response: %s (transId=%s)", response.status_code, request_id)

        if response.status_code >= 400:
            raise self._http_error(response, request_id)

        return self._parse_body(response, request_id)

    def _build_headers(self, access_token: str, request_id: str) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {access_token}",
            "transId": request_id,
            "transactionSrc": TRANSACTION_SOURCE,
        }

    def _http_error(self, response: httpx.Response, request_id: str) -> CarrierServiceError:
        try:
            error_body = response.json()
        except ValueError:
            error_body = response.text
        logger.warning(
            "%s Rating API error (HTTP %s, transId=%s)",
            self.carrier, response.status_code, request_id,
        )
        return error_from_http_response(
            response.status_code, error_body, self.carrier,
            request_id=request_id, headers=response.headers,
        )

    def _parse_body(self, response: httpx.Response, request_id: str) -> dict[str, Any]:
        try:
            data = response.json()
        except ValueError as e:
            raise response_parsing_error(
                f"{self.carrier} Rating API returned a non-JSON body",
                carrier=self.carrier, request_id=request_id,
                response_body=response.text, cause=e,
            ) from e

        rate_response = data.get("RateResponse") if isinstance(data, dict) else None
        shipments = rate_response.get("RatedShipment") if isinstance(rate_response, dict) else None
        if not isinstance(shipments, list):
            raise response_parsing_error(
                f"Invalid response structure from {self.carrier} Rating API",
                carrier=self.carrier, request_id=request_id, response_body=data,
            )
        return data
