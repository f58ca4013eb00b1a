"""Quote calculation helpers shared by the Streamlit form and the CLI."""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, replace
from typing import List, Optional, Tuple, TYPE_CHECKING

from shipcalc.errors import MissingSelection
from shipcalc.locations import Coordinates, route_distance_km
from shipcalc.pricing import (
    DEFAULT_DIMENSION_CM,
    DEFAULT_PACKAGE_TYPE,
    PriceBreakdown,
    ShipmentInput,
    choose_package_option,
    compute_quote,
    package_label,
    validate_dimensions,
)

if TYPE_CHECKING:  # pragma: no cover - hints for type-checkers only
    from openrouteservice import Client

logger = logging.getLogger(__name__)

CURRENCY_LABEL = os.environ.get("QUOTE_CURRENCY_LABEL", "Rs.")
MISSING_SELECTION_MESSAGE = "Please select valid pickup and delivery locations"


@dataclass
class QuoteRequest:
    pickup: Optional[Coordinates]
    delivery: Optional[Coordinates]
    length_cm: float = DEFAULT_DIMENSION_CM
    width_cm: float = DEFAULT_DIMENSION_CM
    height_cm: float = DEFAULT_DIMENSION_CM
    package_type: str = DEFAULT_PACKAGE_TYPE
    insurance_required: bool = False
    pickup_label: str = ""
    delivery_label: str = ""


@dataclass
class QuoteResult:
    request: QuoteRequest
    breakdown: PriceBreakdown
    rows: List[Tuple[str, str]] = field(default_factory=list)
    summary_text: str = ""


def format_currency(amount: float) -> str:
    return f"{CURRENCY_LABEL} {amount:.2f}"


def format_multiplier(multiplier: float) -> str:
    return f"{multiplier:g}x"


def breakdown_rows(breakdown: PriceBreakdown) -> List[Tuple[str, str]]:
    """Return ``(label, value)`` rows for display, total last.

    Volume charge, multiplier and insurance only appear when they change the
    price.
    """

    rows = [
        ("Distance", f"{breakdown.distance_km:.2f} km"),
        ("Base Rate", format_currency(breakdown.base_rate)),
        ("Distance Cost", format_currency(breakdown.distance_cost)),
        ("Service Charge", format_currency(breakdown.service_charge)),
        ("Fuel Surcharge", format_currency(breakdown.fuel_surcharge)),
    ]
    if breakdown.volume_charge > 0:
        rows.append(("Volume Charge", format_currency(breakdown.volume_charge)))
    if breakdown.package_multiplier != 1:
        rows.append(
            ("Package Type Multiplier", format_multiplier(breakdown.package_multiplier))
        )
    if breakdown.insurance_cost > 0:
        rows.append(("Insurance", format_currency(breakdown.insurance_cost)))
    rows.append(("Total Cost", format_currency(breakdown.total_price)))
    return rows


def build_summary(request: QuoteRequest, breakdown: PriceBreakdown) -> str:
    pickup = request.pickup_label or str(request.pickup)
    delivery = request.delivery_label or str(request.delivery)
    lines = [
        f"Route: {pickup} → {delivery}",
        (
            f"Package: {request.length_cm:g} x {request.width_cm:g} x "
            f"{request.height_cm:g} cm, "
            f"{package_label(request.package_type) or request.package_type}"
        ),
        f"Insurance: {'yes' if request.insurance_required else 'no'}",
        "",
    ]
    width = max(len(label) for label, _ in breakdown_rows(breakdown))
    for label, value in breakdown_rows(breakdown):
        lines.append(f"{label:<{width}}  {value}")
    return "\n".join(lines)


def calculate_quote(
    request: QuoteRequest,
    *,
    client: Optional["Client"] = None,
) -> QuoteResult:
    """Fetch the driving distance for *request* and price it.

    Raises ``MissingSelection`` before any provider call when either location
    is unresolved, ``InvalidDimensions`` / ``InvalidPackageType`` for bad
    package details and ``RouteUnavailable`` when no distance is available.
    """

    if request.pickup is None or request.delivery is None:
        raise MissingSelection(MISSING_SELECTION_MESSAGE)

    length_cm, width_cm, height_cm = validate_dimensions(
        request.length_cm, request.width_cm, request.height_cm
    )

    choose_package_option(request.package_type)
    request = replace(
        request, length_cm=length_cm, width_cm=width_cm, height_cm=height_cm
    )

    distance_km = route_distance_km(request.pickup, request.delivery, client=client)
    logger.info(
        "Routed %s → %s: %.2f km", request.pickup, request.delivery, distance_km
    )

    breakdown = compute_quote(
        ShipmentInput(
            length_cm=length_cm,
            width_cm=width_cm,
            height_cm=height_cm,
            package_type=request.package_type,
            insurance_required=bool(request.insurance_required),
            distance_km=distance_km,
        )
    )
    return QuoteResult(
        request=request,
        breakdown=breakdown,
        rows=breakdown_rows(breakdown),
        summary_text=build_summary(request, breakdown),
    )


__all__ = [
    "CURRENCY_LABEL",
    "MISSING_SELECTION_MESSAGE",
    "QuoteRequest",
    "QuoteResult",
    "breakdown_rows",
    "build_summary",
    "calculate_quote",
    "format_currency",
    "format_multiplier",
]
