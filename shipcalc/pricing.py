"""Shipping price formula, package options and the itemised price breakdown."""
from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from typing import Dict, Optional, Sequence

from shipcalc.errors import InvalidDimensions, InvalidPackageType

BASE_RATE = 80.0
RATE_PER_KM = 2.0
SERVICE_CHARGE = 50.0
FUEL_SURCHARGE_PER_KM = 0.5
INSURANCE_RATE = 0.1

CM3_PER_M3 = 1_000_000
VOLUME_THRESHOLD_M3 = 0.01
VOLUME_RATE_PER_M3 = 100.0

MIN_DIMENSION_CM = 10.0
MAX_DIMENSION_CM = 1000.0
DEFAULT_DIMENSION_CM = 10.0


@dataclass(frozen=True)
class PackageOption:
    id: str
    label: str
    multiplier: float


PACKAGE_OPTIONS: Sequence[PackageOption] = (
    PackageOption(id="standard", label="Standard", multiplier=1.0),
    PackageOption(id="fragile", label="Fragile (+50%)", multiplier=1.5),
    PackageOption(id="document", label="Document (-20%)", multiplier=0.8),
)

DEFAULT_PACKAGE_TYPE = "standard"


@dataclass(frozen=True)
class ShipmentInput:
    length_cm: float
    width_cm: float
    height_cm: float
    package_type: str
    insurance_required: bool
    distance_km: float


@dataclass(frozen=True)
class PriceBreakdown:
    """Every term of a quote, kept so the presentation layer can itemise it."""

    base_rate: float
    distance_cost: float
    service_charge: float
    fuel_surcharge: float
    volume_charge: float
    package_multiplier: float
    insurance_cost: float
    total_price: float
    distance_km: float

    @property
    def subtotal(self) -> float:
        return (
            self.base_rate
            + self.distance_cost
            + self.service_charge
            + self.fuel_surcharge
            + self.volume_charge
        )

    @property
    def pre_insurance_total(self) -> float:
        return self.subtotal * self.package_multiplier

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, float]) -> "PriceBreakdown":
        return cls(**{key: float(data[key]) for key in cls.__dataclass_fields__})


def choose_package_option(package_type: str) -> PackageOption:
    for option in PACKAGE_OPTIONS:
        if option.id == package_type:
            return option
    raise InvalidPackageType(package_type)


def package_multiplier(package_type: str) -> float:
    return choose_package_option(package_type).multiplier


def volume_m3(length_cm: float, width_cm: float, height_cm: float) -> float:
    return (length_cm * width_cm * height_cm) / CM3_PER_M3


def compute_volume_charge(volume: float) -> float:
    # Step function: nothing at or below the threshold, full rate above it.
    if volume > VOLUME_THRESHOLD_M3:
        return volume * VOLUME_RATE_PER_M3
    return 0.0


def _coerce_dimension(name: str, value: object) -> float:
    if isinstance(value, bool):
        raise InvalidDimensions(f"{name.capitalize()} must be a number")
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        raise InvalidDimensions(f"{name.capitalize()} must be a number") from None
    if math.isnan(number) or not MIN_DIMENSION_CM <= number <= MAX_DIMENSION_CM:
        raise InvalidDimensions(
            f"{name.capitalize()} must be between {MIN_DIMENSION_CM:g} and "
            f"{MAX_DIMENSION_CM:g} cm"
        )
    return number


def validate_dimensions(
    length_cm: object, width_cm: object, height_cm: object
) -> tuple[float, float, float]:
    """Return the dimensions as floats, raising ``InvalidDimensions`` when any
    of them is not a number in the accepted range."""

    return (
        _coerce_dimension("length", length_cm),
        _coerce_dimension("width", width_cm),
        _coerce_dimension("height", height_cm),
    )


def compute_quote(shipment: ShipmentInput) -> PriceBreakdown:
    """Price *shipment*.

    The package multiplier is applied to the subtotal as a whole and insurance
    is charged on the multiplied amount. Dimension ranges are the caller's
    responsibility; an unknown package type raises ``InvalidPackageType``.
    """

    multiplier = package_multiplier(shipment.package_type)
    distance_km = float(shipment.distance_km)

    distance_cost = distance_km * RATE_PER_KM
    fuel_surcharge = distance_km * FUEL_SURCHARGE_PER_KM
    volume_charge = compute_volume_charge(
        volume_m3(shipment.length_cm, shipment.width_cm, shipment.height_cm)
    )

    subtotal = (
        BASE_RATE + distance_cost + SERVICE_CHARGE + fuel_surcharge + volume_charge
    )
    pre_insurance_total = subtotal * multiplier
    insurance_cost = (
        pre_insurance_total * INSURANCE_RATE if shipment.insurance_required else 0.0
    )

    return PriceBreakdown(
        base_rate=BASE_RATE,
        distance_cost=distance_cost,
        service_charge=SERVICE_CHARGE,
        fuel_surcharge=fuel_surcharge,
        volume_charge=volume_charge,
        package_multiplier=multiplier,
        insurance_cost=insurance_cost,
        total_price=pre_insurance_total + insurance_cost,
        distance_km=distance_km,
    )


def package_label(package_type: str) -> Optional[str]:
    for option in PACKAGE_OPTIONS:
        if option.id == package_type:
            return option.label
    return None


__all__ = [
    "BASE_RATE",
    "DEFAULT_DIMENSION_CM",
    "DEFAULT_PACKAGE_TYPE",
    "FUEL_SURCHARGE_PER_KM",
    "INSURANCE_RATE",
    "MAX_DIMENSION_CM",
    "MIN_DIMENSION_CM",
    "PACKAGE_OPTIONS",
    "PackageOption",
    "PriceBreakdown",
    "RATE_PER_KM",
    "SERVICE_CHARGE",
    "ShipmentInput",
    "VOLUME_THRESHOLD_M3",
    "choose_package_option",
    "compute_quote",
    "compute_volume_charge",
    "package_label",
    "package_multiplier",
    "validate_dimensions",
    "volume_m3",
]
