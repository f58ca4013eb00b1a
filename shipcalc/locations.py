"""Address autocomplete and driving distance built around OpenRouteService."""
from __future__ import annotations

import logging
import math
import os
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional, Sequence, TYPE_CHECKING

import openrouteservice as ors

from shipcalc.errors import ProviderConfigurationError, RouteUnavailable

if TYPE_CHECKING:  # pragma: no cover - hints for type-checkers only
    from openrouteservice import Client

logger = logging.getLogger(__name__)

SUGGEST_COUNTRY = os.environ.get("SUGGEST_COUNTRY") or None
SUGGESTION_LIMIT = 5
MIN_SUGGEST_LENGTH = 2
ROUTE_PROFILE = "driving-car"

_ORS_CLIENT: Optional["Client"] = None


@dataclass(frozen=True)
class Coordinates:
    lat: float
    lon: float

    def as_lon_lat(self) -> List[float]:
        """ORS expects ``[lon, lat]`` pairs."""
        return [float(self.lon), float(self.lat)]


@dataclass(frozen=True)
class LocationSuggestion:
    label: str
    lat: float
    lon: float

    @property
    def coordinates(self) -> Coordinates:
        return Coordinates(lat=self.lat, lon=self.lon)


def get_ors_client(client: Optional["Client"] = None) -> "Client":
    """Return an OpenRouteService client."""

    if client is not None:
        return client

    global _ORS_CLIENT
    if _ORS_CLIENT is None:
        api_key = os.environ.get("ORS_API_KEY")
        if not api_key:
            raise ProviderConfigurationError(
                "Set ORS_API_KEY env var (export ORS_API_KEY=YOUR_KEY)"
            )
        _ORS_CLIENT = ors.Client(key=api_key)
    return _ORS_CLIENT


def normalize_place(place: str) -> str:
    """Return a whitespace-normalised version of *place*."""

    return " ".join(place.strip().split())


def _parse_suggestion(feature: Mapping[str, Any]) -> Optional[LocationSuggestion]:
    geometry = feature.get("geometry") or {}
    coords = geometry.get("coordinates") if isinstance(geometry, Mapping) else None
    if not isinstance(coords, Sequence) or len(coords) < 2:
        return None
    try:
        lon, lat = float(coords[0]), float(coords[1])
    except (TypeError, ValueError):
        return None
    if not (math.isfinite(lon) and math.isfinite(lat)):
        return None

    props = feature.get("properties") or {}
    label = props.get("label") or props.get("name")
    if not label:
        return None
    return LocationSuggestion(label=normalize_place(str(label)), lat=lat, lon=lon)


def suggest(
    text: str,
    *,
    client: Optional["Client"] = None,
    limit: int = SUGGESTION_LIMIT,
    country: Optional[str] = SUGGEST_COUNTRY,
) -> List[LocationSuggestion]:
    """Return up to *limit* ranked address candidates for partial *text*.

    Suggestions are best effort: short input returns an empty list without
    contacting the provider and any provider failure is logged and reported
    as no suggestions.
    """

    query = normalize_place(text)
    if len(query) <= MIN_SUGGEST_LENGTH:
        return []

    params: dict[str, Any] = {"text": query}
    if country:
        params["country"] = country

    try:
        resolved_client = get_ors_client(client)
        response = resolved_client.pelias_autocomplete(**params)
        features = response.get("features") or []
        suggestions: List[LocationSuggestion] = []
        for feature in features:
            parsed = _parse_suggestion(feature) if isinstance(feature, Mapping) else None
            if parsed is None:
                continue
            suggestions.append(parsed)
            if len(suggestions) >= limit:
                break
    except Exception as exc:
        logger.warning("Suggestion lookup failed for %r: %s", query, exc)
        return []
    return suggestions


def _extract_distance_m(route: object) -> float:
    if not isinstance(route, Mapping):
        raise ValueError("route response is not an object")
    routes = route.get("routes")
    if not routes:
        raise ValueError("route response contains no routes")
    summary = routes[0]["summary"]
    if not isinstance(summary, Mapping):
        raise ValueError("route summary is not an object")
    # ORS leaves zero values out of the summary.
    meters = float(summary.get("distance", 0.0))
    if not math.isfinite(meters) or meters < 0:
        raise ValueError(f"invalid route distance {meters!r}")
    return meters


def route_distance_km(
    origin: Coordinates,
    destination: Coordinates,
    *,
    client: Optional["Client"] = None,
    profile: str = ROUTE_PROFILE,
) -> float:
    """Return the driving distance between *origin* and *destination* in km."""

    resolved_client = get_ors_client(client)
    coordinates = [origin.as_lon_lat(), destination.as_lon_lat()]

    try:
        route = resolved_client.directions(
            coordinates=coordinates,
            profile=profile,
            format="json",
        )
    except Exception as exc:
        logger.warning(
            "Routing request failed for %s → %s: %s", origin, destination, exc
        )
        raise RouteUnavailable(f"Error calculating distance: {exc}") from exc

    try:
        meters = _extract_distance_m(route)
    except (KeyError, IndexError, TypeError, ValueError) as exc:
        logger.warning(
            "Malformed routing response for %s → %s: %s", origin, destination, exc
        )
        raise RouteUnavailable(
            "Error calculating distance: Failed to calculate route distance"
        ) from exc
    return meters / 1000.0


__all__ = [
    "Coordinates",
    "LocationSuggestion",
    "MIN_SUGGEST_LENGTH",
    "ROUTE_PROFILE",
    "SUGGESTION_LIMIT",
    "get_ors_client",
    "normalize_place",
    "route_distance_km",
    "suggest",
]
