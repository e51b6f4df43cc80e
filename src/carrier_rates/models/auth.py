"""Auth-related data models."""

from __future__ import annotations

from datetime import datetime
from pydantic import BaseModel, Field


class TokenResponse(BaseModel):
    """Response from the UPS OAuth client-credentials endpoint."""
    access_token: str = Field(min_length=1)
    token_type: str = "Bearer"
    expires_in: int
    issued_at: str | None = None
    status: str | None = None


class Credential(BaseModel):
    """Cached bearer token. Replaced wholesale on refresh, never mutated."""
    access_token: str
    expires_at: datetime
    token_type: str = "Bearer"

    model_config = {"frozen": True}


class TokenState(BaseModel):
    """Read-only view of the token cache."""
    has_token: bool
    is_valid: bool
    expires_at: datetime | None = None
    seconds_remaining: int | None = None
