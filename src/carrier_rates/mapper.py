"""Mapping between the domain rate models and the UPS Rating API wire format.

Both directions are pure functions with no I/O.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from carrier_rates.models.domain import (
    Address,
    BillingWeight,
    Money,
    Package,
    RateQuote,
    RateRequest,
    RateResponse,
    ServiceLevel,
)

CARRIER_ID = "UPS"

# Customer supplied package
PACKAGING_TYPE_CODE = "02"

SERVICE_CODES = {
    ServiceLevel.GROUND: "03",
    ServiceLevel.EXPRESS: "01",
    ServiceLevel.STANDARD: "11",
}

WEIGHT_UNIT_CODES = {"LB": "LBS", "KG": "KGS"}
_DOMAIN_WEIGHT_UNITS = {v: k for k, v in WEIGHT_UNIT_CODES.items()}

FALLBACK_SERVICE_LEVEL = "STANDARD"
FALLBACK_SERVICE_NAME = "UPS Service"


def _number(value: float) -> str:
    """Render a dimension as a whole number when it has no fraction."""
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return str(value)


def _address(address: Address) -> dict[str, Any]:
    return {
        "AddressLine": list(address.address_lines),
        "City": address.city,
        "StateProvinceCode": address.state_province_code,
        "PostalCode": address.postal_code,
        "CountryCode": address.country_code.upper(),
    }


def _package(package: Package) -> dict[str, Any]:
    unit = package.weight.unit.value
    wire: dict[str, Any] = {
        "PackagingType": {"Code": PACKAGING_TYPE_CODE, "Description": "Your Packaging"},
        "PackageWeight": {
            "UnitOfMeasurement": {"Code": WEIGHT_UNIT_CODES.get(unit, unit)},
            "Weight": f"{package.weight.value:.1f}",
        },
    }
    dims = package.dimensions
    if dims is not None:
        wire["Dimensions"] = {
            "UnitOfMeasurement": {"Code": dims.unit.value},
            "Length": _number(dims.length),
            "Width": _number(dims.width),
            "Height": _number(dims.height),
        }
    return wire


def to_ups_rate_request(
    request: RateRequest,
    shipper_number: str,
    customer_context: str | None = None,
) -> dict[str, Any]:
    """Build a UPS Rate request body.

    A named service level produces a single-service ``Rate`` request; without
    one the request asks UPS to ``Shop`` every available service. Negotiated
    rates are always requested.
    """
    request_block: dict[str, Any] = {
        "RequestOption": "Rate" if request.service_level else "Shop",
    }
    if customer_context:
        request_block["TransactionReference"] = {"CustomerContext": customer_context}

    shipment: dict[str, Any] = {
        "Shipper": {
            "Name": request.shipper.name,
            "ShipperNumber": shipper_number,
            "Address": _address(request.origin),
        },
        "ShipTo": {"Name": "Recipient", "Address": _address(request.destination)},
        "ShipFrom": {"Name": request.shipper.name, "Address": _address(request.origin)},
        "Package": [_package(pkg) for pkg in request.packages],
        "ShipmentRatingOptions": {"NegotiatedRatesIndicator": "Y"},
    }
    if request.service_level:
        shipment["Service"] = {
            "Code": SERVICE_CODES[request.service_level],
            "Description": request.service_level.value,
        }

    return {"RateRequest": {"Request": request_block, "Shipment": shipment}}


def _money(charge: dict[str, Any] | None) -> Money | None:
    if not charge:
        return None
    return Money(amount=Decimal(str(charge["MonetaryValue"])), currency=charge["CurrencyCode"])


def _billing_weight(weight: dict[str, Any] | None) -> BillingWeight | None:
    if not weight:
        return None
    code = weight.get("UnitOfMeasurement", {}).get("Code", "")
    return BillingWeight(value=float(weight["Weight"]), unit=_DOMAIN_WEIGHT_UNITS.get(code, code))


def _transit_days(guaranteed: dict[str, Any] | None) -> int | None:
    if not guaranteed:
        return None
    raw = guaranteed.get("BusinessDaysInTransit")
    if raw is None or raw == "":
        return None
    try:
        return int(float(raw))
    except (TypeError, ValueError, OverflowError):
        return None


def _descriptions(alerts: list[dict[str, Any]] | dict[str, Any] | None) -> list[str]:
    # UPS sends a bare object when there is a single alert
    if isinstance(alerts, dict):
        alerts = [alerts]
    descriptions = (a.get("Description") for a in alerts or [])
    return [d for d in descriptions if d]


def _quote(rated: dict[str, Any]) -> RateQuote:
    service = rated.get("Service", {})
    description = service.get("Description")
    negotiated = rated.get("NegotiatedRateCharges") or {}
    warnings = _descriptions(rated.get("RatedShipmentAlert"))

    return RateQuote(
        service_level=description or FALLBACK_SERVICE_LEVEL,
        service_name=description or FALLBACK_SERVICE_NAME,
        carrier_service_code=service["Code"],
        total_cost=_money(rated["TotalCharges"]),
        transportation_cost=_money(rated.get("TransportationCharges")),
        service_options_cost=_money(rated.get("ServiceOptionsCharges")),
        negotiated_cost=_money(negotiated.get("TotalCharge")),
        billing_weight=_billing_weight(rated.get("BillingWeight")),
        business_days_in_transit=_transit_days(rated.get("GuaranteedDelivery")),
        warnings=warnings or None,
    )


def from_ups_rate_response(
    body: dict[str, Any],
    request_id: str,
    request: RateRequest | None = None,
) -> RateResponse:
    """Normalize a UPS Rate response into a carrier-agnostic ``RateResponse``.

    An empty ``RatedShipment`` list yields a response with no quotes.
    """
    rate_response = body["RateResponse"]
    response_block = rate_response.get("Response") or {}

    return RateResponse(
        carrier=CARRIER_ID,
        request_id=request_id,
        quotes=[_quote(rated) for rated in rate_response["RatedShipment"]],
        alerts=_descriptions(response_block.get("Alert")),
        requested_service_level=request.service_level if request else None,
    )
