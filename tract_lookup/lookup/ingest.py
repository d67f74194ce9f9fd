"""
Tract Lookup - Coordinate Ingestion

Reads input coordinates from CSV. Unlike a cleaning step, nothing is dropped:
every row must produce a lookup result, so invalid values are only coerced to
missing and counted.

Usage:
    cases = read_coordinates("data/cases.csv")
"""

from __future__ import annotations

import logging
from pathlib import Path

import pandas as pd

from tract_lookup.shared.config import Settings, get_config
from tract_lookup.shared.errors import ConfigurationError

logger = logging.getLogger(__name__)


def standardize_coordinates(
    df: pd.DataFrame,
    lat_col: str = "latitude",
    lon_col: str = "longitude",
) -> pd.DataFrame:
    """
    Convert coordinate columns to numeric, keeping every row.

    Raises:
        ConfigurationError: If either coordinate column is absent
    """
    missing = {lat_col, lon_col} - set(df.columns)
    if missing:
        raise ConfigurationError(f"Coordinates are missing required columns: {missing}")

    df = df.copy()
    df[lat_col] = pd.to_numeric(df[lat_col], errors="coerce")
    df[lon_col] = pd.to_numeric(df[lon_col], errors="coerce")

    incomplete = int((df[lat_col].isna() | df[lon_col].isna()).sum())
    if incomplete > 0:
        logger.warning(
            f"Found {incomplete} records with missing or invalid coordinates",
            extra={"incomplete": incomplete, "rows": len(df)},
        )

    return df


def read_coordinates(path: str | Path, config: Settings | None = None) -> pd.DataFrame:
    """
    Load a coordinate CSV.

    Args:
        path: CSV with latitude and longitude columns
        config: Configuration object (uses default if not provided)

    Returns:
        DataFrame in file order with numeric (or NaN) coordinates
    """
    config = config or get_config()
    df = pd.read_csv(path)
    logger.info(f"Loaded {len(df)} records from {path}")

    return standardize_coordinates(
        df,
        lat_col=config.lookup.latitude_column,
        lon_col=config.lookup.longitude_column,
    )
