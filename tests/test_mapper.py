"""Tests for mapper.py: domain to UPS wire and back."""
import copy
from decimal import Decimal

import pytest

from carrier_rates.mapper import (
    FALLBACK_SERVICE_LEVEL,
    FALLBACK_SERVICE_NAME,
    from_ups_rate_response,
    to_ups_rate_request,
)
from carrier_rates.models.domain import RateRequest, ServiceLevel
from stubs import SHOP_RESPONSE


@pytest.fixture
def domain_request(rate_request) -> RateRequest:
    return RateRequest.model_validate(rate_request)


def _body(*rated):
    return {"RateResponse": {"Response": {"ResponseStatus": {"Code": "1"}}, "RatedShipment": list(rated)}}


def _rated(**overrides):
    rated = {
        "Service": {"Code": "03", "Description": "UPS Ground"},
        "TotalCharges": {"CurrencyCode": "USD", "MonetaryValue": "12.50"},
    }
    rated.update(overrides)
    return rated


# ── Domain → wire ────────────────────────────────────────────────────

def test_shop_mode_without_service_level(domain_request):
    wire = to_ups_rate_request(domain_request, "ACCT1")
    assert wire["RateRequest"]["Request"]["RequestOption"] == "Shop"
    assert "Service" not in wire["RateRequest"]["Shipment"]


def test_rate_mode_with_service_level(rate_request):
    request = RateRequest.model_validate({**rate_request, "serviceLevel": "GROUND"})
    wire = to_ups_rate_request(request, "ACCT1")

    assert wire["RateRequest"]["Request"]["RequestOption"] == "Rate"
    assert wire["RateRequest"]["Shipment"]["Service"]["Code"] == "03"


@pytest.mark.parametrize("level,code", [
    (ServiceLevel.GROUND, "03"),
    (ServiceLevel.EXPRESS, "01"),
    (ServiceLevel.STANDARD, "11"),
])
def test_service_codes(domain_request, level, code):
    request = domain_request.model_copy(update={"service_level": level})
    wire = to_ups_rate_request(request, "ACCT1")
    assert wire["RateRequest"]["Shipment"]["Service"]["Code"] == code


def test_customer_context_verbatim(domain_request):
    wire = to_ups_rate_request(domain_request, "ACCT1", "order #42 / batch-7")
    ref = wire["RateRequest"]["Request"]["TransactionReference"]
    assert ref == {"CustomerContext": "order #42 / batch-7"}


def test_no_transaction_reference_without_context(domain_request):
    wire = to_ups_rate_request(domain_request, "ACCT1")
    assert "TransactionReference" not in wire["RateRequest"]["Request"]


def test_negotiated_rates_always_requested(domain_request):
    wire = to_ups_rate_request(domain_request, "ACCT1")
    options = wire["RateRequest"]["Shipment"]["ShipmentRatingOptions"]
    assert options == {"NegotiatedRatesIndicator": "Y"}


def test_shipper_number_and_addresses(domain_request):
    shipment = to_ups_rate_request(domain_request, "ACCT1")["RateRequest"]["Shipment"]

    assert shipment["Shipper"]["ShipperNumber"] == "ACCT1"
    assert shipment["Shipper"]["Name"] == "Test Shipper"
    assert shipment["ShipFrom"]["Address"]["City"] == "New York"
    assert shipment["ShipTo"]["Name"] == "Recipient"
    assert shipment["ShipTo"]["Address"] == {
        "AddressLine": ["456 Receiver Avenue"],
        "City": "Los Angeles",
        "StateProvinceCode": "CA",
        "PostalCode": "90001",
        "CountryCode": "US",
    }


def test_package_weight_and_dimensions(domain_request):
    package = to_ups_rate_request(domain_request, "ACCT1")["RateRequest"]["Shipment"]["Package"][0]

    assert package["PackagingType"]["Code"] == "02"
    assert package["PackageWeight"] == {"UnitOfMeasurement": {"Code": "LBS"}, "Weight": "5.5"}
    assert package["Dimensions"] == {
        "UnitOfMeasurement": {"Code": "IN"},
        "Length": "12",
        "Width": "8",
        "Height": "6",
    }


def test_weight_rounded_to_one_decimal(rate_request):
    rate_request["packages"][0]["weight"] = {"value": 3.14159, "unit": "KG"}
    rate_request["packages"][0]["dimensions"] = {"length": 10.5, "width": 8, "height": 4.25, "unit": "CM"}
    package = to_ups_rate_request(RateRequest.model_validate(rate_request), "A")["RateRequest"]["Shipment"]["Package"][0]

    assert package["PackageWeight"]["Weight"] == "3.1"
    assert package["PackageWeight"]["UnitOfMeasurement"]["Code"] == "KGS"
    assert package["Dimensions"]["Length"] == "10.5"
    assert package["Dimensions"]["Height"] == "4.25"
    assert package["Dimensions"]["UnitOfMeasurement"]["Code"] == "CM"


def test_package_without_dimensions(rate_request):
    del rate_request["packages"][0]["dimensions"]
    package = to_ups_rate_request(RateRequest.model_validate(rate_request), "A")["RateRequest"]["Shipment"]["Package"][0]
    assert "Dimensions" not in package


def test_one_wire_package_per_domain_package(rate_request):
    rate_request["packages"] = [
        {"weight": {"value": 5, "unit": "LB"}},
        {"weight": {"value": 3, "unit": "LB"}},
    ]
    shipment = to_ups_rate_request(RateRequest.model_validate(rate_request), "A")["RateRequest"]["Shipment"]
    assert [p["PackageWeight"]["Weight"] for p in shipment["Package"]] == ["5.0", "3.0"]


# ── Wire → domain ────────────────────────────────────────────────────

def test_empty_rated_shipments_map_to_no_quotes():
    response = from_ups_rate_response(_body(), "req-1")
    assert response.quotes == []
    assert response.request_id == "req-1"
    assert response.carrier == "UPS"


def test_total_charge_parsed_as_decimal():
    rated = _rated(TotalCharges={"CurrencyCode": "USD", "MonetaryValue": "500"})
    quote = from_ups_rate_response(_body(rated), "req-1").quotes[0]
    assert quote.total_cost.amount == 500
    assert quote.total_cost.currency == "USD"


def test_shop_response_maps_every_service(domain_request):
    response = from_ups_rate_response(copy.deepcopy(SHOP_RESPONSE), "req-1", domain_request)

    assert [q.carrier_service_code for q in response.quotes] == ["03", "02", "01"]
    assert [q.total_cost.amount for q in response.quotes] == [
        Decimal("12.50"), Decimal("35.75"), Decimal("58.25"),
    ]
    ground = response.quotes[0]
    assert ground.service_level == "UPS Ground"
    assert ground.business_days_in_transit == 5
    assert ground.billing_weight.value == 5.5
    assert ground.billing_weight.unit == "LB"
    assert ground.transportation_cost.amount == Decimal("12.50")
    assert ground.service_options_cost.amount == Decimal("0.00")


def test_missing_description_uses_fallback():
    quote = from_ups_rate_response(_body(_rated(Service={"Code": "03"})), "r").quotes[0]
    assert quote.service_level == FALLBACK_SERVICE_LEVEL
    assert quote.service_name == FALLBACK_SERVICE_NAME
    assert quote.carrier_service_code == "03"


def test_missing_transit_days_is_omitted():
    quote = from_ups_rate_response(_body(_rated()), "r").quotes[0]
    assert quote.business_days_in_transit is None


@pytest.mark.parametrize("raw", ["abc", "", "N/A"])
def test_non_numeric_transit_days_is_omitted(raw):
    rated = _rated(GuaranteedDelivery={"BusinessDaysInTransit": raw})
    quote = from_ups_rate_response(_body(rated), "r").quotes[0]
    assert quote.business_days_in_transit is None


def test_alerts_become_warnings():
    rated = _rated(RatedShipmentAlert=[
        {"Code": "110971", "Description": "Your invoice may vary from the displayed reference rates"},
    ])
    quote = from_ups_rate_response(_body(rated), "r").quotes[0]
    assert quote.warnings == ["Your invoice may vary from the displayed reference rates"]


def test_no_alerts_means_no_warnings():
    quote = from_ups_rate_response(_body(_rated()), "r").quotes[0]
    assert quote.warnings is None


def test_negotiated_total():
    rated = _rated(NegotiatedRateCharges={"TotalCharge": {"CurrencyCode": "USD", "MonetaryValue": "12.00"}})
    quote = from_ups_rate_response(_body(rated), "r").quotes[0]
    assert quote.negotiated_cost.amount == Decimal("12.00")


def test_response_level_alerts():
    body = _body(_rated())
    body["RateResponse"]["Response"]["Alert"] = [{"Code": "1", "Description": "Heads up"}]
    assert from_ups_rate_response(body, "r").alerts == ["Heads up"]


def test_alert_without_description_is_dropped():
    rated = _rated(RatedShipmentAlert=[{"Code": "110971"}, {"Code": "110920", "Description": "Rates may vary"}])
    body = _body(rated)
    body["RateResponse"]["Response"]["Alert"] = {"Code": "1"}
    response = from_ups_rate_response(body, "r")
    assert response.alerts == []
    assert response.quotes[0].warnings == ["Rates may vary"]


def test_single_alert_object():
    rated = _rated(RatedShipmentAlert={"Code": "110971", "Description": "Rates may vary"})
    body = _body(rated)
    body["RateResponse"]["Response"]["Alert"] = {"Code": "1", "Description": "Heads up"}
    response = from_ups_rate_response(body, "r")
    assert response.alerts == ["Heads up"]
    assert response.quotes[0].warnings == ["Rates may vary"]


def test_requested_service_level_carried(rate_request):
    request = RateRequest.model_validate({**rate_request, "serviceLevel": "EXPRESS"})
    response = from_ups_rate_response(_body(_rated()), "r", request)
    assert response.requested_service_level is ServiceLevel.EXPRESS


def test_optional_charges_absent():
    quote = from_ups_rate_response(_body(_rated()), "r").quotes[0]
    assert quote.transportation_cost is None
    assert quote.service_options_cost is None
    assert quote.negotiated_cost is None
    assert quote.billing_weight is None
