"""Streamlit shipment form and cost breakdown."""

from __future__ import annotations

import os
from typing import Any

import pandas as pd
import streamlit as st

from dashboard.state import build_controller, load_form_state, location_widget_key
from shipcalc.form_state import DELIVERY, MAX_LOCATION_LENGTH, PICKUP, FormState
from shipcalc.pricing import (
    MAX_DIMENSION_CM,
    MIN_DIMENSION_CM,
    PACKAGE_OPTIONS,
    PriceBreakdown,
    package_label,
)
from shipcalc.quote_service import breakdown_rows, format_currency

__all__ = [
    "breakdown_table",
    "render_breakdown",
    "render_package_details",
    "render_quote_form",
    "render_shipment_details",
]

_DIMENSION_LABELS = (
    ("length_cm", "Length (cm)"),
    ("width_cm", "Width (cm)"),
    ("height_cm", "Height (cm)"),
)
_PACKAGE_TYPE_KEY = "shipping_package_type"
_INSURANCE_KEY = "shipping_insurance_required"


def _dimension_key(name: str) -> str:
    return f"shipping_{name}_input"


# ----------------------------------------------------------------------
# Widget callbacks
# ----------------------------------------------------------------------
def _on_location_edit(name: str) -> None:
    controller = build_controller()
    controller.edit_location(name, st.session_state[location_widget_key(name)])
    controller.flush_suggestions()


def _on_suggestion_pick(name: str, index: int) -> None:
    controller = build_controller()
    state = controller.select_suggestion(name, index)
    st.session_state[location_widget_key(name)] = state.location(name).text


def _on_dimension_edit(name: str) -> None:
    build_controller().set_dimension(name, st.session_state[_dimension_key(name)])


def _on_package_type_edit() -> None:
    build_controller().set_package_type(st.session_state[_PACKAGE_TYPE_KEY])


def _on_insurance_edit() -> None:
    build_controller().set_insurance(st.session_state[_INSURANCE_KEY])


def _seed_widget(key: str, value: Any) -> None:
    if key not in st.session_state:
        st.session_state[key] = value


# ----------------------------------------------------------------------
# Rendering
# ----------------------------------------------------------------------
def _render_location_input(state: FormState, name: str, label: str) -> None:
    key = location_widget_key(name)
    _seed_widget(key, state.location(name).text)
    st.text_input(
        label,
        key=key,
        max_chars=MAX_LOCATION_LENGTH,
        placeholder=f"Search for {name} location...",
        on_change=_on_location_edit,
        args=(name,),
    )
    for index, suggestion in enumerate(state.location(name).visible_suggestions):
        st.button(
            suggestion.label,
            key=f"{key}_suggestion_{index}",
            on_click=_on_suggestion_pick,
            args=(name, index),
            width="stretch",
        )


def render_shipment_details(state: FormState) -> None:
    st.subheader("Shipment Details")
    st.caption("Enter your pickup and delivery information")
    _render_location_input(state, PICKUP, "Pickup Location")
    _render_location_input(state, DELIVERY, "Delivery Location")


def render_package_details(state: FormState) -> None:
    st.subheader("Package Information")
    st.caption("Specify dimensions and type")

    dimension_cols = st.columns(len(_DIMENSION_LABELS))
    for column, (name, label) in zip(dimension_cols, _DIMENSION_LABELS):
        key = _dimension_key(name)
        value = getattr(state, name)
        seed = float(value) if isinstance(value, (int, float)) else MIN_DIMENSION_CM
        _seed_widget(key, min(max(seed, MIN_DIMENSION_CM), MAX_DIMENSION_CM))
        with column:
            st.number_input(
                label,
                min_value=MIN_DIMENSION_CM,
                max_value=MAX_DIMENSION_CM,
                step=1.0,
                key=key,
                on_change=_on_dimension_edit,
                args=(name,),
            )

    _seed_widget(_PACKAGE_TYPE_KEY, state.package_type)
    st.selectbox(
        "Package Type",
        options=[option.id for option in PACKAGE_OPTIONS],
        format_func=lambda value: package_label(value) or value,
        key=_PACKAGE_TYPE_KEY,
        on_change=_on_package_type_edit,
    )

    _seed_widget(_INSURANCE_KEY, state.insurance_required)
    st.checkbox(
        "Add insurance coverage (+10%)",
        key=_INSURANCE_KEY,
        on_change=_on_insurance_edit,
    )


def breakdown_table(breakdown: PriceBreakdown) -> pd.DataFrame:
    return pd.DataFrame(breakdown_rows(breakdown), columns=["Item", "Amount"])


def render_breakdown(state: FormState) -> None:
    if state.error:
        st.error(f"Error: {state.error}")

    breakdown = state.result
    if breakdown is None:
        return

    st.subheader("Cost Breakdown")
    st.caption("Detailed pricing information")
    metric_cols = st.columns(2)
    metric_cols[0].metric("Total Cost", format_currency(breakdown.total_price))
    metric_cols[1].metric("Distance", f"{breakdown.distance_km:.2f} km")
    st.table(breakdown_table(breakdown).set_index("Item"))


def _api_key_configured() -> bool:
    return bool(os.environ.get("ORS_API_KEY"))


def render_quote_form() -> FormState:
    """Render the full calculator and return the state it was drawn from."""

    if not _api_key_configured():
        st.warning(
            "ORS_API_KEY is not set. Address suggestions and distance lookups "
            "will be unavailable."
        )

    state = load_form_state()
    render_shipment_details(state)
    render_package_details(state)

    st.button(
        "Calculating..." if state.loading else "Calculate Shipping Cost",
        key="shipping_submit",
        type="primary",
        disabled=state.loading,
        on_click=lambda: build_controller().submit(),
    )
    return load_form_state()
