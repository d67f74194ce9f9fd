"""
Tract Lookup - Coordinate Lookup

Components:
    - LookupSession: read-only per-batch state
    - LookupCoordinator: ordered, per-coordinate tract resolution
    - read_coordinates: CSV ingestion
"""

from tract_lookup.lookup.coordinator import (
    RESULT_COLUMNS,
    GeoCoordinate,
    LookupCoordinator,
    LookupResult,
    LookupSession,
    lookup_tracts,
    results_to_frame,
    to_coordinates,
)
from tract_lookup.lookup.ingest import read_coordinates, standardize_coordinates

__all__ = [
    "RESULT_COLUMNS",
    "GeoCoordinate",
    "LookupResult",
    "LookupSession",
    "LookupCoordinator",
    "lookup_tracts",
    "results_to_frame",
    "to_coordinates",
    "read_coordinates",
    "standardize_coordinates",
]
