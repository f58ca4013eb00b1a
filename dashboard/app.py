"""Streamlit layout for the shipping cost calculator."""
from __future__ import annotations

import streamlit as st

from dashboard.components.maps import render_location_map
from dashboard.components.quote_form import render_breakdown, render_quote_form

CALCULATOR_SECTIONS = ["Shipment Details", "Package Information", "Cost Breakdown"]

__all__ = ["CALCULATOR_SECTIONS", "render_shipping_calculator"]


def render_shipping_calculator() -> None:
    """Render the form on the left and the results on the right."""

    st.title("Logistics Calculator")
    st.caption("Calculate shipping costs based on distance and package details")

    form_col, results_col = st.columns([3, 2])
    with form_col:
        state = render_quote_form()
    with results_col:
        render_breakdown(state)
        render_location_map(state)
