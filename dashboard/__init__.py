"""Dashboard package exposing the shipping calculator UI."""

from .app import CALCULATOR_SECTIONS, render_shipping_calculator

__all__ = ["CALCULATOR_SECTIONS", "render_shipping_calculator"]
