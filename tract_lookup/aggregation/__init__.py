"""
Tract Lookup - Aggregation and Classification

Components:
    - Aggregator: per-tract tallies attached to the tract table
    - Classifier: quantile / equal-interval class breaks and fill colours
"""

from tract_lookup.aggregation.aggregator import AggregationResult, Aggregator, RegionTally
from tract_lookup.aggregation.classifier import (
    NO_DATA_LABEL,
    PALETTES,
    ClassificationBreaks,
    Classifier,
    palette_colors,
)

__all__ = [
    "Aggregator",
    "AggregationResult",
    "RegionTally",
    "Classifier",
    "ClassificationBreaks",
    "NO_DATA_LABEL",
    "PALETTES",
    "palette_colors",
]
