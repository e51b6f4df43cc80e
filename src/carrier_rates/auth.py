"""OAuth2 client-credentials authentication for the UPS API.

Handles token caching, expiry tracking, and refresh deduplication.

At most one token request is outstanding per ``AuthManager``. Callers that
arrive while it is pending await the same task and observe the same token or
the same error. The slot is cleared as soon as the task settles, so a call
after a failure starts a new attempt.

``clear_cache()`` bumps a generation counter. A refresh that started under an
older generation still hands its token to the callers awaiting it, but does
not write it into the cache.
"""

from __future__ import annotations

import asyncio
import base64
import logging
from datetime import datetime, timedelta
from typing import Callable

import httpx
from pydantic import ValidationError

from carrier_rates.config import UPSSettings
from carrier_rates.errors import (
    CarrierServiceError,
    authentication_error,
    invalid_credentials_error,
    network_error,
    timeout_error,
)
from carrier_rates.models.auth import Credential, TokenResponse, TokenState

logger = logging.getLogger(__name__)


# Refresh this long before the carrier's stated expiry
EXPIRY_BUFFER = timedelta(minutes=5)


class AuthManager:
    """Manages the cached UPS access token."""

    def __init__(
        self,
        settings: UPSSettings,
        http: httpx.AsyncClient | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._settings = settings
        self._owns_http = http is None
        self._http = http or httpx.AsyncClient(timeout=settings.timeout)
        self._clock = clock
        self._credential: Credential | None = None
        self._refresh_task: asyncio.Task[str] | None = None
        self._generation = 0

    @property
    def carrier(self) -> str:
        return self._settings.carrier_id

    async def get_access_token(self) -> str:
        """Get a valid access token, refreshing if needed.

        Returns:
            A valid access token string.

        Raises:
            CarrierServiceError: If the token request fails.
        """
        credential = self._credential
        if credential is not None and self._is_valid(credential):
            return credential.access_token

        task = self._refresh_task
        if task is None:
            task = asyncio.ensure_future(self._run_refresh(self._generation))
            self._refresh_task = task
        else:
            logger.debug("Joining in-flight %s token refresh", self.carrier)

        # Shield so one caller being cancelled does not cancel the shared refresh
        return await asyncio.shield(task)

    async def force_refresh(self) -> str:
        """Discard the cached token and fetch a new one.

        Joins a refresh that is already in flight instead of starting another.
        """
        self._credential = None
        return await self.get_access_token()

    def get_token_state(self) -> TokenState:
        """Get the current token state."""
        credential = self._credential
        if credential is None:
            return TokenState(has_token=False, is_valid=False)

        is_valid = self._is_valid(credential)
        seconds_remaining = None
        remaining = credential.expires_at - self._clock()
        if remaining > timedelta(0):
            seconds_remaining = int(remaining.total_seconds())

        return TokenState(
            has_token=True,
            is_valid=is_valid,
            expires_at=credential.expires_at,
            seconds_remaining=seconds_remaining,
        )

    def clear_cache(self) -> None:
        """Drop the cached token and forget any in-flight refresh."""
        self._credential = None
        self._refresh_task = None
        self._generation += 1

    def _is_valid(self, credential: Credential) -> bool:
        """Check a credential against the expiry buffer."""
        return self._clock() < credential.expires_at - EXPIRY_BUFFER

    async def _run_refresh(self, generation: int) -> str:
        try:
            try:
                credential = await self._request_token()
            except CarrierServiceError:
                raise
            except Exception as e:
                raise authentication_error(
                    f"Failed to obtain {self.carrier} access token",
                    carrier=self.carrier, cause=e,
                ) from e
            if generation == self._generation:
                self._credential = credential
            else:
                logger.info("Discarding %s token from a cleared refresh", self.carrier)
            return credential.access_token
        finally:
            if self._refresh_task is asyncio.current_task():
                self._refresh_task = None

    async def _request_token(self) -> Credential:
        """Exchange client credentials for an access token."""
        client_id = self._settings.client_id
        client_secret = self._settings.client_secret
        if not client_id or not client_secret:
            raise invalid_credentials_error(self.carrier)

        basic = base64.b64encode(f"{client_id}:{client_secret}".encode()).decode()

        try:
            response = await self._http.post(
                self._settings.token_url,
                content="grant_type=client_credentials",
                headers={
                    "Content-Type": "application/x-www-form-urlencoded",
                    "Authorization": f"Basic {basic}",
                },
            )
        except httpx.TimeoutException as e:
            logger.warning("%s token request timed out", self.carrier)
            raise timeout_error(
                "Token request timed out", self._settings.timeout,
                carrier=self.carrier, cause=e,
            ) from e
        except httpx.TransportError as e:
            logger.warning("%s token request failed to connect: %s", self.carrier, e)
            raise network_error(
                f"Failed to connect to {self.carrier} authentication server",
                carrier=self.carrier, cause=e,
            ) from e

        if response.status_code in (401, 403):
            logger.warning("%s rejected client credentials (HTTP %s)", self.carrier, response.status_code)
            raise invalid_credentials_error(self.carrier)

        if response.status_code >= 400:
            logger.warning("%s token request failed (HTTP %s)", self.carrier, response.status_code)
            raise authentication_error(
                f"{self.carrier} authentication failed with status {response.status_code}",
                carrier=self.carrier,
                http_status=response.status_code,
            )

        try:
            token_data = TokenResponse(**response.json())
        except (ValueError, TypeError, ValidationError) as e:
            raise authentication_error(
                f"Failed to obtain {self.carrier} access token",
                carrier=self.carrier,
                http_status=response.status_code,
                cause=e,
            ) from e

        expires_at = self._clock() + timedelta(seconds=token_data.expires_in)
        logger.info("Obtained %s access token, expires at %s", self.carrier, expires_at)
        return Credential(
            access_token=token_data.access_token,
            expires_at=expires_at,
            token_type=token_data.token_type,
        )

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this manager created it."""
        if self._owns_http:
            await self._http.aclose()
