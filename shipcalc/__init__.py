"""Shipping cost calculator: pricing, location lookup and form state."""
