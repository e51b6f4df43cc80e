"""Carrier-agnostic rate request and response models.

These are the only shapes callers see; nothing carrier-specific leaks into
them. All models are frozen.
"""

from __future__ import annotations

from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, Field


class WeightUnit(str, Enum):
    LB = "LB"
    KG = "KG"


class DimensionUnit(str, Enum):
    IN = "IN"
    CM = "CM"


class ServiceLevel(str, Enum):
    GROUND = "GROUND"
    EXPRESS = "EXPRESS"
    STANDARD = "STANDARD"


_FROZEN = {"frozen": True, "populate_by_name": True}


class Money(BaseModel):
    amount: Decimal = Field(ge=0)
    currency: str = Field(min_length=3, max_length=3)

    model_config = _FROZEN


class Weight(BaseModel):
    value: float = Field(gt=0, le=150)
    unit: WeightUnit

    model_config = _FROZEN


class Dimensions(BaseModel):
    length: float = Field(gt=0)
    width: float = Field(gt=0)
    height: float = Field(gt=0)
    unit: DimensionUnit

    model_config = _FROZEN


class Address(BaseModel):
    address_lines: list[str] = Field(alias="addressLines", min_length=1, max_length=2)
    city: str
    state_province_code: str = Field(alias="stateProvinceCode")
    postal_code: str = Field(alias="postalCode")
    country_code: str = Field(alias="countryCode", min_length=2, max_length=2)

    model_config = _FROZEN


class Contact(BaseModel):
    name: str

    model_config = _FROZEN


class Package(BaseModel):
    weight: Weight
    dimensions: Dimensions | None = None

    model_config = _FROZEN


class RateRequest(BaseModel):
    origin: Address
    destination: Address
    shipper: Contact
    packages: list[Package] = Field(min_length=1)
    service_level: ServiceLevel | None = Field(default=None, alias="serviceLevel")

    model_config = _FROZEN


class BillingWeight(BaseModel):
    value: float
    unit: WeightUnit | str

    model_config = _FROZEN


class RateQuote(BaseModel):
    service_level: str = Field(alias="serviceLevel")
    service_name: str = Field(alias="serviceName")
    carrier_service_code: str = Field(alias="carrierServiceCode")
    total_cost: Money = Field(alias="totalCost")
    transportation_cost: Money | None = Field(default=None, alias="transportationCost")
    service_options_cost: Money | None = Field(default=None, alias="serviceOptionsCost")
    negotiated_cost: Money | None = Field(default=None, alias="negotiatedCost")
    billing_weight: BillingWeight | None = Field(default=None, alias="billingWeight")
    business_days_in_transit: int | None = Field(default=None, alias="businessDaysInTransit")
    warnings: list[str] | None = None

    model_config = _FROZEN


class RateResponse(BaseModel):
    carrier: str
    request_id: str = Field(alias="requestId")
    quotes: list[RateQuote] = Field(default_factory=list)
    alerts: list[str] = Field(default_factory=list)
    requested_service_level: ServiceLevel | None = Field(default=None, alias="requestedServiceLevel")

    model_config = _FROZEN
