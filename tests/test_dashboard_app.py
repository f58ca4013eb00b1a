"""Smoke tests for the Streamlit dashboard package."""
from __future__ import annotations

import importlib
import sys
from pathlib import Path
from typing import Any, Dict, List

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

import folium
import pytest

from dashboard.components.maps import build_location_map, selected_points
import dashboard.components.quote_form as quote_form
from dashboard.components.quote_form import breakdown_table
from dashboard.state import FORM_STATE_KEY, build_controller, load_form_state, save_form_state
from shipcalc.form_state import (
    DELIVERY,
    PICKUP,
    FormState,
    edit_location_text,
    receive_suggestions,
    select_suggestion,
)
from shipcalc.locations import LocationSuggestion
from shipcalc.pricing import ShipmentInput, compute_quote

COLOMBO = LocationSuggestion(label="Colombo", lat=6.9271, lon=79.8612)
KANDY = LocationSuggestion(label="Kandy", lat=7.2906, lon=80.6337)


def test_dashboard_app_module_importable() -> None:
    module = importlib.import_module("dashboard.app")
    assert hasattr(module, "render_shipping_calculator")
    sections = getattr(module, "CALCULATOR_SECTIONS", [])
    assert "Cost Breakdown" in sections


def test_streamlit_entrypoint_exposed() -> None:
    module = importlib.import_module("streamlit_shipping_calculator")
    assert callable(getattr(module, "main", None))


def test_form_state_persists_in_session_mapping() -> None:
    session: Dict[str, Any] = {}
    assert load_form_state(session) == FormState()

    state = select_suggestion(FormState(), PICKUP, COLOMBO)
    save_form_state(state, session)

    assert session[FORM_STATE_KEY]["pickup"]["text"] == "Colombo"
    assert load_form_state(session) == state


def test_controller_writes_back_to_session() -> None:
    session: Dict[str, Any] = {}
    controller = build_controller(session)

    controller.set_package_type("document")
    controller.select_suggestion(DELIVERY, KANDY)

    restored = load_form_state(session)
    assert restored.package_type == "document"
    assert restored.delivery.coordinates == KANDY.coordinates


def test_location_map_only_for_selected_points() -> None:
    assert build_location_map(FormState()) is None

    state = select_suggestion(FormState(), PICKUP, COLOMBO)
    assert selected_points(state) == [("Pickup", "Colombo", 6.9271, 79.8612)]
    assert isinstance(build_location_map(state), folium.Map)

    state = select_suggestion(state, DELIVERY, KANDY)
    assert [role for role, *_ in selected_points(state)] == ["Pickup", "Delivery"]
    assert isinstance(build_location_map(state), folium.Map)


def test_breakdown_table_has_item_rows() -> None:
    breakdown = compute_quote(ShipmentInput(10, 10, 10, "standard", False, 100.0))
    table = breakdown_table(breakdown)

    assert list(table.columns) == ["Item", "Amount"]
    assert table.iloc[-1]["Item"] == "Total Cost"


class _FakeStreamlit:
    def __init__(self) -> None:
        self.session_state: Dict[str, Any] = {}
        self.buttons: List[Dict[str, Any]] = []

    def subheader(self, *args: Any, **kwargs: Any) -> None:
        pass

    def caption(self, *args: Any, **kwargs: Any) -> None:
        pass

    def text_input(self, *args: Any, **kwargs: Any) -> None:
        pass

    def button(self, label: str, **kwargs: Any) -> bool:
        self.buttons.append({"label": label, **kwargs})
        return False


def test_suggestion_buttons_stretch_to_column(monkeypatch: pytest.MonkeyPatch) -> None:
    fake = _FakeStreamlit()
    monkeypatch.setattr(quote_form, "st", fake)
    state = edit_location_text(FormState(), PICKUP, "Colombo")
    state = receive_suggestions(state, PICKUP, "Colombo", [COLOMBO, KANDY])

    quote_form.render_shipment_details(state)

    assert [button["label"] for button in fake.buttons] == ["Colombo", "Kandy"]
    assert all(button["width"] == "stretch" for button in fake.buttons)
    assert all("use_container_width" not in button for button in fake.buttons)
    assert fake.buttons[1]["args"] == (PICKUP, 1)
