"""
Tract Lookup - Exception Classes

Only ConfigurationError escapes a run. The per-coordinate errors are raised
while resolving a single coordinate and absorbed by the lookup coordinator
into the null shape of that coordinate's result.
"""

from __future__ import annotations

from typing import Any


class TractLookupError(Exception):
    """Base class for tract lookup errors."""


class ConfigurationError(TractLookupError):
    """Raised when a run is configured with an unusable schema or parameter."""

    def __init__(self, message: str, year: Any = None):
        self.year = year
        super().__init__(message)


class MissingCoordinateError(TractLookupError):
    """Raised when a coordinate lacks its latitude or longitude."""

    def __init__(self, position: int, latitude: Any, longitude: Any):
        self.position = position
        self.latitude = latitude
        self.longitude = longitude
        super().__init__(
            f"Coordinate #{position} is incomplete: latitude={latitude}, longitude={longitude}"
        )


class NoRegionMatchError(TractLookupError):
    """Raised when a coordinate falls outside every known tract."""

    def __init__(self, position: int, latitude: float, longitude: float):
        self.position = position
        self.latitude = latitude
        self.longitude = longitude
        super().__init__(
            f"Coordinate #{position} ({latitude}, {longitude}) is outside all census tracts"
        )
