"""Shared fixtures for the carrier-rates test suite."""
from __future__ import annotations

from typing import Any

import httpx
import pytest

from carrier_rates.config import Config, ServiceSettings, UPSSettings
from stubs import BASE_URL, TOKEN_PATH, FakeClock, FakeUPS


# ── Fixtures ─────────────────────────────────────────────────────────

@pytest.fixture
def ups_settings() -> UPSSettings:
    return UPSSettings(
        client_id="test-client-id",
        client_secret="test-client-secret",
        account_number="test-account-123",
        base_url=BASE_URL,
        token_url=BASE_URL + TOKEN_PATH,
        timeout=30.0,
        supported_countries=["US", "CA", "MX"],
    )


@pytest.fixture
def fake_config(ups_settings) -> Config:
    return Config(service=ServiceSettings(), ups=ups_settings)


@pytest.fixture
def fake_ups() -> FakeUPS:
    return FakeUPS()


@pytest.fixture
def http(fake_ups) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(fake_ups))


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def rate_request() -> dict[str, Any]:
    """One 5.5 lb package, New York to Los Angeles, no service level."""
    return {
        "origin": {
            "addressLines": ["123 Sender Street"],
            "city": "New York",
            "stateProvinceCode": "NY",
            "postalCode": "10001",
            "countryCode": "US",
        },
        "destination": {
            "addressLines": ["456 Receiver Avenue"],
            "city": "Los Angeles",
            "stateProvinceCode": "CA",
            "postalCode": "90001",
            "countryCode": "US",
        },
        "shipper": {"name": "Test Shipper"},
        "packages": [
            {
                "weight": {"value": 5.5, "unit": "LB"},
                "dimensions": {"length": 12, "width": 8, "height": 6, "unit": "IN"},
            }
        ],
    }
