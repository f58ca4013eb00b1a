"""Map of the selected pickup and delivery locations."""
from __future__ import annotations

from typing import List, Optional, Tuple

import folium
import streamlit as st
from streamlit_folium import st_folium

from shipcalc.form_state import FormState

__all__ = ["build_location_map", "render_location_map", "selected_points"]

_MARKER_COLOURS = {"Pickup": "blue", "Delivery": "red"}


def selected_points(state: FormState) -> List[Tuple[str, str, float, float]]:
    """Return ``(role, label, lat, lon)`` for every resolved location."""

    points = []
    for role, location in (("Pickup", state.pickup), ("Delivery", state.delivery)):
        if location.coordinates is None:
            continue
        points.append(
            (role, location.text, location.coordinates.lat, location.coordinates.lon)
        )
    return points


def build_location_map(state: FormState) -> Optional[folium.Map]:
    points = selected_points(state)
    if not points:
        return None

    first_lat, first_lon = points[0][2], points[0][3]
    map_obj = folium.Map(location=[first_lat, first_lon], zoom_start=12)
    for role, label, lat, lon in points:
        folium.Marker(
            [lat, lon],
            tooltip=f"{role}: {label}",
            icon=folium.Icon(color=_MARKER_COLOURS[role]),
        ).add_to(map_obj)

    if len(points) == 2:
        line = [[lat, lon] for _role, _label, lat, lon in points]
        # Straight connector only; the priced distance comes from the road route.
        folium.PolyLine(line, color="#555555", weight=2, dash_array="6").add_to(map_obj)
        map_obj.fit_bounds(line)
    return map_obj


def render_location_map(state: FormState) -> None:
    map_obj = build_location_map(state)
    if map_obj is None:
        st.caption("Select a pickup or delivery location to see it on the map.")
        return
    st_folium(map_obj, height=320, key="shipping_location_map", returned_objects=[])
