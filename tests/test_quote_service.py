from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Dict, List

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

import shipcalc.quote_service as quote_service
from shipcalc.errors import (
    InvalidDimensions,
    InvalidPackageType,
    MissingSelection,
    RouteUnavailable,
)
from shipcalc.locations import Coordinates
from shipcalc.pricing import ShipmentInput, compute_quote
from shipcalc.quote_service import (
    QuoteRequest,
    breakdown_rows,
    build_summary,
    calculate_quote,
    format_currency,
)

COLOMBO = Coordinates(lat=6.9271, lon=79.8612)
KANDY = Coordinates(lat=7.2906, lon=80.6337)


class FakeDirectionsClient:
    def __init__(self, meters: Any = 100_000.0) -> None:
        self.meters = meters
        self.calls: List[Dict[str, Any]] = []

    def directions(self, **kwargs: Any) -> Dict[str, Any]:
        self.calls.append(kwargs)
        if isinstance(self.meters, Exception):
            raise self.meters
        return {"routes": [{"summary": {"distance": self.meters}}]}


@pytest.fixture(autouse=True)
def _rupee_label(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(quote_service, "CURRENCY_LABEL", "Rs.")


def _request(**overrides: Any) -> QuoteRequest:
    values: Dict[str, Any] = dict(
        pickup=COLOMBO,
        delivery=KANDY,
        pickup_label="Colombo, Western Province, Sri Lanka",
        delivery_label="Kandy, Central Province, Sri Lanka",
    )
    values.update(overrides)
    return QuoteRequest(**values)


def test_format_currency_uses_two_decimals_and_label() -> None:
    assert format_currency(380) == "Rs. 380.00"
    assert format_currency(57.000000001) == "Rs. 57.00"


def test_breakdown_rows_hide_terms_that_do_not_change_price() -> None:
    breakdown = compute_quote(
        ShipmentInput(10, 10, 10, "standard", False, distance_km=100.0)
    )

    assert breakdown_rows(breakdown) == [
        ("Distance", "100.00 km"),
        ("Base Rate", "Rs. 80.00"),
        ("Distance Cost", "Rs. 200.00"),
        ("Service Charge", "Rs. 50.00"),
        ("Fuel Surcharge", "Rs. 50.00"),
        ("Total Cost", "Rs. 380.00"),
    ]


def test_breakdown_rows_itemise_volume_multiplier_and_insurance() -> None:
    breakdown = compute_quote(
        ShipmentInput(60, 50, 50, "fragile", True, distance_km=100.0)
    )
    rows = dict(breakdown_rows(breakdown))

    assert rows["Volume Charge"] == "Rs. 15.00"
    assert rows["Package Type Multiplier"] == "1.5x"
    assert rows["Insurance"] == "Rs. 59.25"
    assert rows["Total Cost"] == "Rs. 651.75"
    assert list(rows)[-1] == "Total Cost"


def test_document_multiplier_row() -> None:
    breakdown = compute_quote(ShipmentInput(10, 10, 10, "document", False, 0.0))
    assert ("Package Type Multiplier", "0.8x") in breakdown_rows(breakdown)


def test_calculate_quote_routes_and_prices() -> None:
    client = FakeDirectionsClient(meters=100_000.0)

    result = calculate_quote(
        _request(package_type="fragile", insurance_required=True), client=client
    )

    assert result.breakdown.distance_km == pytest.approx(100.0)
    assert result.breakdown.total_price == pytest.approx(627.0)
    assert result.rows[-1] == ("Total Cost", "Rs. 627.00")
    assert client.calls[0]["coordinates"] == [[79.8612, 6.9271], [80.6337, 7.2906]]
    assert "Route: Colombo, Western Province, Sri Lanka → Kandy" in result.summary_text
    assert "Fragile (+50%)" in result.summary_text
    assert "Insurance: yes" in result.summary_text


def test_calculate_quote_accepts_numeric_strings() -> None:
    result = calculate_quote(
        _request(length_cm="10", width_cm="10", height_cm="10"),
        client=FakeDirectionsClient(),
    )

    assert result.request.length_cm == 10.0
    assert "Package: 10 x 10 x 10 cm, Standard" in result.summary_text


@pytest.mark.parametrize("missing", ["pickup", "delivery"])
def test_missing_location_rejected_before_routing(missing: str) -> None:
    client = FakeDirectionsClient()

    with pytest.raises(MissingSelection, match="Please select valid pickup and delivery locations"):
        calculate_quote(_request(**{missing: None}), client=client)

    assert client.calls == []


def test_bad_package_details_rejected_before_routing() -> None:
    client = FakeDirectionsClient()

    with pytest.raises(InvalidDimensions):
        calculate_quote(_request(length_cm=5), client=client)
    with pytest.raises(InvalidPackageType):
        calculate_quote(_request(package_type="express"), client=client)

    assert client.calls == []


def test_route_failure_propagates() -> None:
    client = FakeDirectionsClient(meters=RuntimeError("timeout"))

    with pytest.raises(RouteUnavailable, match="Error calculating distance: timeout"):
        calculate_quote(_request(), client=client)


def test_build_summary_lists_rows_after_header() -> None:
    request = _request()
    breakdown = compute_quote(ShipmentInput(10, 10, 10, "standard", False, 100.0))

    lines = build_summary(request, breakdown).splitlines()

    assert lines[0].startswith("Route: ")
    assert lines[2] == "Insurance: no"
    assert lines[3] == ""
    assert lines[-1].startswith("Total Cost")
    assert lines[-1].endswith("Rs. 380.00")
