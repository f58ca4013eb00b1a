"""Shipping form state, its transitions and the controller that owns it.

``FormState`` is an immutable, JSON-friendly snapshot of everything the form
shows. Each user action is a pure function from one state to the next; the
``FormController`` is the only place that holds the current state, talks to
the location provider and runs submissions.
"""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field, replace
from functools import partial
from typing import (
    Any,
    Callable,
    Dict,
    List,
    Optional,
    Sequence,
    Tuple,
    TYPE_CHECKING,
    Union,
)

from shipcalc.errors import QuoteError
from shipcalc.locations import (
    MIN_SUGGEST_LENGTH,
    Coordinates,
    LocationSuggestion,
    normalize_place,
    suggest,
)
from shipcalc.pricing import DEFAULT_DIMENSION_CM, DEFAULT_PACKAGE_TYPE, PriceBreakdown
from shipcalc.quote_service import QuoteRequest, QuoteResult, calculate_quote
from shipcalc.search import (
    SUGGEST_DEBOUNCE_SECONDS,
    DebouncedSuggestionSearch,
    TimerFactory,
    _thread_timer,
)

if TYPE_CHECKING:  # pragma: no cover - hints for type-checkers only
    from openrouteservice import Client

logger = logging.getLogger(__name__)

PICKUP = "pickup"
DELIVERY = "delivery"
LOCATION_FIELDS: Tuple[str, ...] = (PICKUP, DELIVERY)
DIMENSION_FIELDS: Tuple[str, ...] = ("length_cm", "width_cm", "height_cm")
MAX_LOCATION_LENGTH = 100

Dimension = Union[float, str]


@dataclass(frozen=True)
class LocationField:
    text: str = ""
    coordinates: Optional[Coordinates] = None
    suggestions: Tuple[LocationSuggestion, ...] = ()
    show_suggestions: bool = False

    @property
    def resolved(self) -> bool:
        return self.coordinates is not None

    @property
    def visible_suggestions(self) -> Tuple[LocationSuggestion, ...]:
        return self.suggestions if self.show_suggestions else ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "text": self.text,
            "coordinates": (
                {"lat": self.coordinates.lat, "lon": self.coordinates.lon}
                if self.coordinates is not None
                else None
            ),
            "suggestions": [
                {"label": s.label, "lat": s.lat, "lon": s.lon} for s in self.suggestions
            ],
            "show_suggestions": self.show_suggestions,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LocationField":
        coords = data.get("coordinates")
        return cls(
            text=str(data.get("text") or ""),
            coordinates=(
                Coordinates(lat=float(coords["lat"]), lon=float(coords["lon"]))
                if coords
                else None
            ),
            suggestions=tuple(
                LocationSuggestion(
                    label=str(item["label"]),
                    lat=float(item["lat"]),
                    lon=float(item["lon"]),
                )
                for item in data.get("suggestions") or []
            ),
            show_suggestions=bool(data.get("show_suggestions", False)),
        )


@dataclass(frozen=True)
class FormState:
    pickup: LocationField = field(default_factory=LocationField)
    delivery: LocationField = field(default_factory=LocationField)
    length_cm: Dimension = DEFAULT_DIMENSION_CM
    width_cm: Dimension = DEFAULT_DIMENSION_CM
    height_cm: Dimension = DEFAULT_DIMENSION_CM
    package_type: str = DEFAULT_PACKAGE_TYPE
    insurance_required: bool = False
    loading: bool = False
    error: Optional[str] = None
    result: Optional[PriceBreakdown] = None

    def location(self, name: str) -> LocationField:
        _check_location_field(name)
        return getattr(self, name)

    def to_dict(self) -> Dict[str, Any]:
        return {
            PICKUP: self.pickup.to_dict(),
            DELIVERY: self.delivery.to_dict(),
            "length_cm": self.length_cm,
            "width_cm": self.width_cm,
            "height_cm": self.height_cm,
            "package_type": self.package_type,
            "insurance_required": self.insurance_required,
            "loading": self.loading,
            "error": self.error,
            "result": self.result.to_dict() if self.result is not None else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FormState":
        result = data.get("result")
        return cls(
            pickup=LocationField.from_dict(data.get(PICKUP) or {}),
            delivery=LocationField.from_dict(data.get(DELIVERY) or {}),
            length_cm=data.get("length_cm", DEFAULT_DIMENSION_CM),
            width_cm=data.get("width_cm", DEFAULT_DIMENSION_CM),
            height_cm=data.get("height_cm", DEFAULT_DIMENSION_CM),
            package_type=str(data.get("package_type") or DEFAULT_PACKAGE_TYPE),
            insurance_required=bool(data.get("insurance_required", False)),
            loading=bool(data.get("loading", False)),
            error=data.get("error"),
            result=PriceBreakdown.from_dict(result) if result else None,
        )


def _check_location_field(name: str) -> None:
    if name not in LOCATION_FIELDS:
        raise ValueError(f"Unknown location field: {name!r}")


def _with_location(state: FormState, name: str, location: LocationField) -> FormState:
    _check_location_field(name)
    return replace(state, **{name: location})


# ----------------------------------------------------------------------
# Transitions
# ----------------------------------------------------------------------
def edit_location_text(state: FormState, name: str, text: str) -> FormState:
    """Typing into a location box drops any previous selection."""

    text = text[:MAX_LOCATION_LENGTH]
    current = state.location(name)
    too_short = len(normalize_place(text)) <= MIN_SUGGEST_LENGTH
    return _with_location(
        state,
        name,
        LocationField(
            text=text,
            coordinates=None,
            suggestions=() if too_short else current.suggestions,
            show_suggestions=not too_short,
        ),
    )


def receive_suggestions(
    state: FormState,
    name: str,
    query: str,
    suggestions: Sequence[LocationSuggestion],
) -> FormState:
    current = state.location(name)
    if current.resolved or current.text != query:
        return state
    return _with_location(state, name, replace(current, suggestions=tuple(suggestions)))


def select_suggestion(
    state: FormState, name: str, suggestion: LocationSuggestion
) -> FormState:
    return _with_location(
        state,
        name,
        LocationField(
            text=suggestion.label[:MAX_LOCATION_LENGTH],
            coordinates=suggestion.coordinates,
            suggestions=(),
            show_suggestions=False,
        ),
    )


def set_dimension(state: FormState, name: str, value: object) -> FormState:
    if name not in DIMENSION_FIELDS:
        raise ValueError(f"Unknown dimension: {name!r}")
    try:
        stored: Dimension = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        stored = str(value)
    return replace(state, **{name: stored})


def set_package_type(state: FormState, package_type: str) -> FormState:
    return replace(state, package_type=package_type)


def set_insurance(state: FormState, required: bool) -> FormState:
    return replace(state, insurance_required=bool(required))


def start_submission(state: FormState) -> FormState:
    return replace(state, loading=True, error=None, result=None)


def complete_submission(state: FormState, breakdown: PriceBreakdown) -> FormState:
    return replace(state, loading=False, error=None, result=breakdown)


def fail_submission(state: FormState, message: str) -> FormState:
    return replace(state, loading=False, error=message, result=None)


def request_from_state(state: FormState) -> QuoteRequest:
    return QuoteRequest(
        pickup=state.pickup.coordinates,
        delivery=state.delivery.coordinates,
        length_cm=state.length_cm,  # type: ignore[arg-type]
        width_cm=state.width_cm,  # type: ignore[arg-type]
        height_cm=state.height_cm,  # type: ignore[arg-type]
        package_type=state.package_type,
        insurance_required=state.insurance_required,
        pickup_label=state.pickup.text,
        delivery_label=state.delivery.text,
    )


# ----------------------------------------------------------------------
# Controller
# ----------------------------------------------------------------------
class FormController:
    """Own a ``FormState`` and drive it from user actions."""

    def __init__(
        self,
        state: Optional[FormState] = None,
        *,
        client: Optional["Client"] = None,
        delay: float = SUGGEST_DEBOUNCE_SECONDS,
        timer_factory: TimerFactory = _thread_timer,
        on_change: Optional[Callable[[FormState], None]] = None,
    ) -> None:
        self._state = state or FormState()
        self._client = client
        self._on_change = on_change
        self._lock = threading.Lock()
        self._last_result: Optional[QuoteResult] = None
        self._searches: Dict[str, DebouncedSuggestionSearch] = {
            name: DebouncedSuggestionSearch(
                self._fetch_suggestions,
                partial(self._receive_suggestions, name),
                delay=delay,
                timer_factory=timer_factory,
            )
            for name in LOCATION_FIELDS
        }

    @property
    def state(self) -> FormState:
        return self._state

    @property
    def last_result(self) -> Optional[QuoteResult]:
        """The full result of the latest successful submission, if any."""
        return self._last_result

    def _apply(self, transition: Callable[..., FormState], *args: Any) -> FormState:
        with self._lock:
            self._state = transition(self._state, *args)
            state = self._state
        if self._on_change is not None:
            self._on_change(state)
        return state

    def _fetch_suggestions(self, text: str) -> List[LocationSuggestion]:
        return suggest(text, client=self._client)

    def _receive_suggestions(
        self, name: str, query: str, suggestions: List[LocationSuggestion]
    ) -> None:
        self._apply(receive_suggestions, name, query, suggestions)

    def edit_location(self, name: str, text: str) -> FormState:
        state = self._apply(edit_location_text, name, text)
        # Search is scheduled outside the controller lock; results re-enter via _apply.
        self._searches[name].update(state.location(name).text)
        return self._state

    def flush_suggestions(self) -> FormState:
        for search in self._searches.values():
            search.flush()
        return self._state

    def select_suggestion(
        self, name: str, suggestion: Union[int, LocationSuggestion]
    ) -> FormState:
        if isinstance(suggestion, int):
            suggestion = self._state.location(name).suggestions[suggestion]
        self._searches[name].cancel()
        return self._apply(select_suggestion, name, suggestion)

    def set_dimension(self, name: str, value: object) -> FormState:
        return self._apply(set_dimension, name, value)

    def set_package_type(self, package_type: str) -> FormState:
        return self._apply(set_package_type, package_type)

    def set_insurance(self, required: bool) -> FormState:
        return self._apply(set_insurance, required)

    def submit(self) -> FormState:
        """Price the current form; errors end up on ``state.error``."""

        self._last_result = None
        state = self._apply(start_submission)
        try:
            result = calculate_quote(request_from_state(state), client=self._client)
        except QuoteError as exc:
            logger.info("Quote submission rejected: %s", exc)
            return self._apply(fail_submission, str(exc))
        self._last_result = result
        return self._apply(complete_submission, result.breakdown)

    def close(self) -> None:
        for search in self._searches.values():
            search.cancel()


__all__ = [
    "DELIVERY",
    "DIMENSION_FIELDS",
    "FormController",
    "FormState",
    "LOCATION_FIELDS",
    "LocationField",
    "MAX_LOCATION_LENGTH",
    "PICKUP",
    "complete_submission",
    "edit_location_text",
    "fail_submission",
    "receive_suggestions",
    "request_from_state",
    "select_suggestion",
    "set_dimension",
    "set_insurance",
    "set_package_type",
    "start_submission",
]
