"""
Tract Lookup - Tract Mapping Pipeline

Runs a full batch:
    1. Resolve the shapefile schema (fails before any lookup)
    2. Build the lookup session (polygons + spatial index)
    3. Resolve every coordinate to a tract
    4. Tally coordinates per tract and attach counts to the tract table
    5. Classify the counts for choropleth shading

Usage:
    from tract_lookup.pipeline import run_tract_mapping

    result = run_tract_mapping(cases, tracts, year=2010, verbose=True)
    result.results      # one row per case
    result.tract_table  # tracts with ncases, class and fill colour
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any

import pandas as pd

from tract_lookup.aggregation.aggregator import Aggregator, RegionTally
from tract_lookup.aggregation.classifier import ClassificationBreaks, Classifier
from tract_lookup.lookup.coordinator import (
    LookupCoordinator,
    LookupSession,
    ProgressObserver,
    results_to_frame,
)
from tract_lookup.shared.config import Settings, get_config

logger = logging.getLogger(__name__)

CASE_TRACT_COLUMN = "census_tract"


@dataclass
class TractMappingResult:
    """Result of a tract mapping run."""

    year: int
    schema_version: str
    results: pd.DataFrame
    cases: pd.DataFrame
    tract_table: pd.DataFrame
    tally: RegionTally
    breaks: ClassificationBreaks
    rows_input: int
    rows_matched: int
    rows_unmatched: int
    rows_missing: int
    duration_seconds: float = 0.0
    unmatched_names: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert result to dictionary for logging."""
        return {
            "year": self.year,
            "schema_version": self.schema_version,
            "rows_input": self.rows_input,
            "rows_matched": self.rows_matched,
            "rows_unmatched": self.rows_unmatched,
            "rows_missing": self.rows_missing,
            "tracts": len(self.tract_table),
            "tracts_with_counts": len(self.tally),
            "breaks": self.breaks.to_dict(),
            "duration_seconds": self.duration_seconds,
            "unmatched_names": self.unmatched_names,
        }


def run_tract_mapping(
    coordinates: pd.DataFrame,
    tracts: pd.DataFrame,
    year: int,
    verbose: bool | None = None,
    config: Settings | None = None,
    progress: ProgressObserver | None = None,
) -> TractMappingResult:
    """
    Map coordinates to census tracts and classify tract counts.

    Args:
        coordinates: Cases with latitude and longitude columns
        tracts: Tract GeoDataFrame with raw TIGER attributes
        year: Shapefile year
        verbose: Log every coordinate (defaults to config)
        config: Configuration object (uses default if not provided)
        progress: Optional per-coordinate observer

    Returns:
        TractMappingResult

    Raises:
        ConfigurationError: If the year or tract attributes are unusable;
            raised before any coordinate is resolved
    """
    config = config or get_config()
    start_time = time.time()

    # Every configuration check runs before the first lookup
    session = LookupSession.from_frame(tracts, year, verbose=verbose, config=config)
    aggregator = Aggregator(config)
    classifier = Classifier(config)

    results = LookupCoordinator(session, progress=progress).run(coordinates)
    results_df = results_to_frame(results)

    # Aggregation needs the complete result set
    aggregation = aggregator.aggregate(results, tracts, session.fields)
    tract_table, breaks = classifier.classify_table(
        aggregation.table, value_column=aggregation.count_column
    )

    cases = coordinates.copy()
    cases[CASE_TRACT_COLUMN] = results_df["TRACT_NAME"].to_numpy()

    rows_missing = int(results_df["INPUT_LAT"].isna().sum())
    rows_matched = sum(1 for result in results if result.is_resolved)

    result = TractMappingResult(
        year=year,
        schema_version=session.fields.version.value,
        results=results_df,
        cases=cases,
        tract_table=tract_table,
        tally=aggregation.tally,
        breaks=breaks,
        rows_input=len(results),
        rows_matched=rows_matched,
        rows_unmatched=len(results) - rows_matched - rows_missing,
        rows_missing=rows_missing,
        duration_seconds=time.time() - start_time,
        unmatched_names=aggregation.unmatched_names,
    )
    logger.info(
        f"Tract mapping complete: {rows_matched} of {len(results)} coordinates resolved",
        extra=result.to_dict(),
    )

    return result
