"""Configuration management for the carrier rates client.

Loads credentials from the environment (and .env) and carrier endpoint
profiles from config/carriers.yaml. ``load_config()`` builds a fresh value on
every call; callers construct it once at startup and pass it down.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError

from carrier_rates.errors import configuration_error

UPS_PRODUCTION_URL = "https://onlinetools.ups.com"
UPS_SANDBOX_URL = "https://wwwcie.ups.com"
UPS_TOKEN_PATH = "/security/v1/oauth/token"

DEFAULT_SUPPORTED_COUNTRIES = [
    "US", "CA", "MX", "GB", "DE", "FR", "IT", "ES", "NL", "BE",
    "AT", "CH", "AU", "JP", "CN", "KR", "SG", "HK", "TW", "IN",
    "BR", "AR", "CL", "CO", "PE", "ZA", "AE", "IL", "PL", "CZ",
    "HU", "RO", "NO", "SE", "DK", "FI", "IE", "PT", "GR", "NZ",
]


class CarrierProfile(BaseModel):
    """Endpoint profile for one carrier, as listed in carriers.yaml."""
    carrier_name: str
    base_url: str
    token_url: str
    sandbox_base_url: str
    sandbox_token_url: str
    supported_countries: list[str] = Field(default_factory=lambda: list(DEFAULT_SUPPORTED_COUNTRIES))


DEFAULT_UPS_PROFILE = CarrierProfile(
    carrier_name="United Parcel Service",
    base_url=UPS_PRODUCTION_URL,
    token_url=UPS_PRODUCTION_URL + UPS_TOKEN_PATH,
    sandbox_base_url=UPS_SANDBOX_URL,
    sandbox_token_url=UPS_SANDBOX_URL + UPS_TOKEN_PATH,
)


class UPSSettings(BaseModel):
    """Credentials and endpoints for the UPS rating integration."""
    client_id: str = Field(description="UPS OAuth client ID")
    client_secret: str = Field(description="UPS OAuth client secret")
    account_number: str = Field(description="UPS shipper account number")
    base_url: str = Field(default=UPS_PRODUCTION_URL)
    token_url: str = Field(default=UPS_PRODUCTION_URL + UPS_TOKEN_PATH)
    timeout: float = Field(default=30.0, gt=0, description="Request timeout in seconds")
    use_sandbox: bool = False
    supported_countries: list[str] = Field(default_factory=lambda: list(DEFAULT_SUPPORTED_COUNTRIES))
    carrier_id: str = "UPS"
    carrier_name: str = "United Parcel Service"


class ServiceSettings(BaseModel):
    """Process-level settings."""
    environment: str = "development"
    log_level: str = "INFO"
    enable_request_logging: bool = False


class Config(BaseModel):
    """Full application configuration."""
    service: ServiceSettings
    ups: UPSSettings


def _find_project_root() -> Path:
    """Walk up from this file to find the project root (where config/ lives)."""
    current = Path(__file__).resolve().parent
    for parent in [current, *current.parents]:
        if (parent / "config" / "carriers.yaml").exists():
            return parent
    return Path.cwd()


def _load_profiles(project_root: Path) -> dict[str, CarrierProfile]:
    """Load carrier profiles from carriers.yaml, falling back to built-in UPS defaults."""
    profiles_path = project_root / "config" / "carriers.yaml"
    if not profiles_path.exists():
        return {"UPS": DEFAULT_UPS_PROFILE}

    profiles = {"UPS": DEFAULT_UPS_PROFILE}
    try:
        with open(profiles_path) as f:
            data = yaml.safe_load(f) or {}
        for code, profile_data in (data.get("carriers") or {}).items():
            profiles[str(code).upper()] = CarrierProfile(**profile_data)
    except (yaml.YAMLError, ValidationError, AttributeError, TypeError) as e:
        raise configuration_error(f"Invalid carrier profiles in {profiles_path}: {e}") from e
    return profiles


def _env(*keys: str, default: str = "") -> str:
    """Try multiple env var names, return the first one found."""
    for key in keys:
        val = os.environ.get(key, "")
        if val:
            return val.strip().strip('"')
    return default


def _flag(value: str) -> bool:
    return value.lower() in ("true", "1", "yes")


def _load_timeout() -> float:
    seconds = _env("UPS_TIMEOUT")
    millis = _env("UPS_TIMEOUT_MS")
    if seconds:
        timeout = float(seconds)
    elif millis:
        timeout = int(millis) / 1000
    else:
        return 30.0
    if timeout <= 0:
        raise ValueError(f"timeout must be positive, got {timeout}")
    return timeout


def _load_ups_settings(profile: CarrierProfile) -> UPSSettings:
    """Load UPS settings from environment variables.

    Raises a configuration error naming every missing variable.
    """
    required = {
        "client_id": "UPS_CLIENT_ID",
        "client_secret": "UPS_CLIENT_SECRET",
        "account_number": "UPS_ACCOUNT_NUMBER",
    }
    values = {field: _env(env_name) for field, env_name in required.items()}
    missing = [required[field] for field, value in values.items() if not value]
    if missing:
        raise configuration_error(
            "Invalid UPS configuration. Please check your environment variables.",
            carrier="UPS",
            missing_fields=missing,
        )

    use_sandbox = _flag(_env("UPS_USE_SANDBOX", default="false"))
    if use_sandbox:
        base_url = profile.sandbox_base_url
        token_url = profile.sandbox_token_url
    else:
        base_url = _env("UPS_BASE_URL", default=profile.base_url)
        token_url = _env("UPS_TOKEN_URL", default=profile.token_url)

    try:
        timeout = _load_timeout()
    except ValueError as e:
        raise configuration_error(
            f"Invalid UPS timeout: {e}", carrier="UPS", missing_fields=["UPS_TIMEOUT"],
        ) from e

    return UPSSettings(
        **values,
        base_url=base_url,
        token_url=token_url,
        timeout=timeout,
        use_sandbox=use_sandbox,
        supported_countries=[c.upper() for c in profile.supported_countries],
        carrier_name=profile.carrier_name,
    )


def _load_service_settings() -> ServiceSettings:
    return ServiceSettings(
        environment=_env("SERVICE_ENVIRONMENT", "ENVIRONMENT", default="development"),
        log_level=_env("LOG_LEVEL", default="INFO").upper(),
        enable_request_logging=_flag(_env("ENABLE_REQUEST_LOGGING", default="false")),
    )


def load_config(project_root: Path | None = None) -> Config:
    """Load the full application configuration.

    Reads ``.env`` from the project root when present. Environment variables
    already set take precedence over ``.env`` entries.
    """
    root = project_root or _find_project_root()

    env_path = root / ".env"
    if env_path.exists():
        load_dotenv(env_path)

    profiles = _load_profiles(root)
    return Config(
        service=_load_service_settings(),
        ups=_load_ups_settings(profiles["UPS"]),
    )


def profile_summary(config: Config) -> dict[str, Any]:
    """Non-secret view of the active UPS settings, for CLI display."""
    ups = config.ups
    return {
        "carrier": ups.carrier_id,
        "base_url": ups.base_url,
        "token_url": ups.token_url,
        "sandbox": ups.use_sandbox,
        "timeout_seconds": ups.timeout,
        "supported_countries": len(ups.supported_countries),
    }
