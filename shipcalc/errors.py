"""Error types raised while building a shipping quote."""
from __future__ import annotations


class QuoteError(Exception):
    """Base class for errors recoverable at the level of one submission."""


class InvalidPackageType(QuoteError, ValueError):
    def __init__(self, package_type: object) -> None:
        self.package_type = package_type
        super().__init__(f"Unknown package type: {package_type!r}")


class InvalidDimensions(QuoteError, ValueError):
    """Raised when a package dimension is missing or outside the allowed range."""


class MissingSelection(QuoteError):
    """Raised when a quote is requested before both locations are resolved."""


class RouteUnavailable(QuoteError):
    """Raised when the routing provider cannot supply a driving distance."""


class ProviderConfigurationError(QuoteError, RuntimeError):
    """Raised when the location provider client cannot be constructed."""


__all__ = [
    "InvalidDimensions",
    "InvalidPackageType",
    "MissingSelection",
    "ProviderConfigurationError",
    "QuoteError",
    "RouteUnavailable",
]
