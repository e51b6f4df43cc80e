"""Classified errors raised by the carrier rating core.

Every failure observed at a boundary the core controls is raised as a
``CarrierServiceError``. The error is a tagged variant: ``kind`` names the
failure, ``detail`` holds the fields that belong to that kind only. Callers
switch on ``kind`` rather than on exception subclasses.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Mapping

from pydantic import BaseModel


class ErrorKind(str, Enum):
    VALIDATION = "VALIDATION_ERROR"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    AUTHENTICATION = "AUTHENTICATION_ERROR"
    TIMEOUT = "TIMEOUT_ERROR"
    NETWORK = "NETWORK_ERROR"
    CARRIER_API = "CARRIER_API_ERROR"
    RATE_LIMIT = "RATE_LIMIT_ERROR"
    RESPONSE_PARSING = "RESPONSE_PARSING_ERROR"
    CONFIGURATION = "CONFIGURATION_ERROR"


# ── Kind-specific details ────────────────────────────────────────────

class ValidationIssue(BaseModel):
    path: str
    message: str
    code: str | None = None

    model_config = {"frozen": True}


class NoDetail(BaseModel):
    model_config = {"frozen": True}


class ValidationDetail(BaseModel):
    issues: list[ValidationIssue]

    model_config = {"frozen": True}


class AuthenticationDetail(BaseModel):
    http_status: int | None = None

    model_config = {"frozen": True}


class TimeoutDetail(BaseModel):
    timeout_seconds: float

    model_config = {"frozen": True}


class CarrierApiDetail(BaseModel):
    http_status: int
    carrier_error_code: str | None = None
    carrier_error_message: str | None = None

    model_config = {"frozen": True}


class RateLimitDetail(BaseModel):
    retry_after_seconds: int | None = None

    model_config = {"frozen": True}


class ResponseParsingDetail(BaseModel):
    response_body: Any = None

    model_config = {"frozen": True}


class ConfigurationDetail(BaseModel):
    missing_fields: list[str] | None = None

    model_config = {"frozen": True}


class CarrierServiceError(Exception):
    """A classified failure from the rating core."""

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        *,
        retryable: bool,
        detail: BaseModel | None = None,
        carrier: str | None = None,
        request_id: str | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.retryable = retryable
        self.detail = detail if detail is not None else NoDetail()
        self.carrier = carrier
        self.request_id = request_id
        self.cause = cause
        self.timestamp = datetime.now(timezone.utc)

    @property
    def code(self) -> str:
        return self.kind.value

    @property
    def http_status(self) -> int | None:
        """HTTP status carried by the detail, if this kind has one."""
        return getattr(self.detail, "http_status", None)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "code": self.code,
            "message": self.message,
            "retryable": self.retryable,
            "carrier": self.carrier,
            "request_id": self.request_id,
            "timestamp": self.timestamp.isoformat(),
        }
        data.update(self.detail.model_dump(mode="json", exclude={"response_body"}))
        return data

    def __repr__(self) -> str:
        return f"CarrierServiceError({self.code}, {self.message!r})"


# ── Factories ────────────────────────────────────────────────────────

def validation_error(
    message: str,
    issues: list[ValidationIssue],
    *,
    carrier: str | None = None,
) -> CarrierServiceError:
    return CarrierServiceError(
        ErrorKind.VALIDATION, message, retryable=False,
        detail=ValidationDetail(issues=issues), carrier=carrier,
    )


def invalid_credentials_error(carrier: str) -> CarrierServiceError:
    return CarrierServiceError(
        ErrorKind.INVALID_CREDENTIALS,
        f"Invalid or missing credentials for {carrier}",
        retryable=False, carrier=carrier,
    )


def authentication_error(
    message: str,
    *,
    carrier: str | None = None,
    http_status: int | None = None,
    cause: BaseException | None = None,
) -> CarrierServiceError:
    return CarrierServiceError(
        ErrorKind.AUTHENTICATION, message, retryable=False,
        detail=AuthenticationDetail(http_status=http_status),
        carrier=carrier, cause=cause,
    )


def timeout_error(
    message: str,
    timeout_seconds: float,
    *,
    carrier: str | None = None,
    request_id: str | None = None,
    cause: BaseException | None = None,
) -> CarrierServiceError:
    return CarrierServiceError(
        ErrorKind.TIMEOUT, message, retryable=True,
        detail=TimeoutDetail(timeout_seconds=timeout_seconds),
        carrier=carrier, request_id=request_id, cause=cause,
    )


def network_error(
    message: str,
    *,
    carrier: str | None = None,
    request_id: str | None = None,
    cause: BaseException | None = None,
) -> CarrierServiceError:
    return CarrierServiceError(
        ErrorKind.NETWORK, message, retryable=True,
        carrier=carrier, request_id=request_id, cause=cause,
    )


def carrier_api_error(
    message: str,
    http_status: int,
    *,
    carrier: str | None = None,
    request_id: str | None = None,
    carrier_error_code: str | None = None,
    carrier_error_message: str | None = None,
    cause: BaseException | None = None,
) -> CarrierServiceError:
    return CarrierServiceError(
        ErrorKind.CARRIER_API, message,
        retryable=http_status >= 500 or http_status == 429,
        detail=CarrierApiDetail(
            http_status=http_status,
            carrier_error_code=carrier_error_code,
            carrier_error_message=carrier_error_message,
        ),
        carrier=carrier, request_id=request_id, cause=cause,
    )


def rate_limit_error(
    carrier: str,
    *,
    retry_after_seconds: int | None = None,
    request_id: str | None = None,
) -> CarrierServiceError:
    return CarrierServiceError(
        ErrorKind.RATE_LIMIT, f"Rate limit exceeded for {carrier}", retryable=True,
        detail=RateLimitDetail(retry_after_seconds=retry_after_seconds),
        carrier=carrier, request_id=request_id,
    )


def response_parsing_error(
    message: str,
    *,
    carrier: str | None = None,
    request_id: str | None = None,
    response_body: Any = None,
    cause: BaseException | None = None,
) -> CarrierServiceError:
    return CarrierServiceError(
        ErrorKind.RESPONSE_PARSING, message, retryable=False,
        detail=ResponseParsingDetail(response_body=response_body),
        carrier=carrier, request_id=request_id, cause=cause,
    )


def configuration_error(
    message: str,
    *,
    carrier: str | None = None,
    missing_fields: list[str] | None = None,
) -> CarrierServiceError:
    return CarrierServiceError(
        ErrorKind.CONFIGURATION, message, retryable=False,
        detail=ConfigurationDetail(missing_fields=missing_fields or None),
        carrier=carrier,
    )


# ── Helpers ──────────────────────────────────────────────────────────

def is_retryable(error: BaseException) -> bool:
    return isinstance(error, CarrierServiceError) and error.retryable


def is_auth_failure(error: BaseException) -> bool:
    """True for a rating-call rejection that a fresh token may cure."""
    return (
        isinstance(error, CarrierServiceError)
        and error.kind is ErrorKind.CARRIER_API
        and error.http_status in (401, 403)
    )


def _parse_retry_after(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return None


def error_from_http_response(
    http_status: int,
    body: Any,
    carrier: str,
    *,
    request_id: str | None = None,
    headers: Mapping[str, str] | None = None,
    cause: BaseException | None = None,
) -> CarrierServiceError:
    """Classify a non-success HTTP response from a carrier API.

    429 becomes a rate-limit error whose retry-after comes from the body's
    ``retryAfter`` or, failing that, the ``Retry-After`` header. Any other
    status becomes a carrier API error carrying the first error code and
    message the carrier reported under ``response.errors``.
    """
    if http_status == 429:
        retry_after = None
        if isinstance(body, Mapping):
            retry_after = _parse_retry_after(body.get("retryAfter"))
        if retry_after is None and headers is not None:
            retry_after = _parse_retry_after(headers.get("retry-after"))
        return rate_limit_error(carrier, retry_after_seconds=retry_after, request_id=request_id)

    error_code = None
    error_message = None
    if isinstance(body, Mapping):
        response = body.get("response")
        if isinstance(response, Mapping):
            errors = response.get("errors")
            if isinstance(errors, list) and errors and isinstance(errors[0], Mapping):
                error_code = str(errors[0].get("code", "")) or None
                error_message = str(errors[0].get("message", "")) or None

    return carrier_api_error(
        error_message or f"{carrier} API returned HTTP {http_status}",
        http_status,
        carrier=carrier,
        request_id=request_id,
        carrier_error_code=error_code,
        carrier_error_message=error_message,
        cause=cause,
    )
