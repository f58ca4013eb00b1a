"""Streamlit entrypoint for the shipping cost calculator."""
from __future__ import annotations

import streamlit as st

from dashboard.app import render_shipping_calculator


def main() -> None:
    """Configure the Streamlit page and render the calculator."""
    st.set_page_config(
        page_title="Logistics Calculator",
        layout="wide",
    )
    render_shipping_calculator()


if __name__ == "__main__":
    main()
