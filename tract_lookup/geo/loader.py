"""
Tract Lookup - Tract Shapefile Loader

Reads TIGER/Line census tract shapefiles with GeoPandas and converts each
feature into an immutable TractPolygon carrying canonical attributes.

TIGER/Line files are downloaded from
https://www.census.gov/geo/maps-data/data/tiger-line.html and passed here by
path, e.g. "tl_2010_42101_tract10.shp".

Usage:
    tracts = load_tracts("data/tl_2010_42101_tract10.shp")
    polygons = polygons_from_frame(tracts, resolve_schema(2010))
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import geopandas as gpd
import pandas as pd
from shapely.geometry import MultiPolygon, Polygon
from shapely.geometry.base import BaseGeometry

from tract_lookup.geo.geometry import TractPolygon
from tract_lookup.geo.schema import SchemaFields

logger = logging.getLogger(__name__)


def load_tracts(path: str | Path) -> gpd.GeoDataFrame:
    """
    Read a tract shapefile.

    Args:
        path: Shapefile path (with or without the .shp extension)

    Returns:
        GeoDataFrame with one row per tract
    """
    path = Path(path)
    if path.suffix == "":
        path = path.with_suffix(".shp")

    logger.info(f"Reading shapefile from path: {path}")
    tracts = gpd.read_file(path)
    logger.info(f"Loaded {len(tracts)} tracts from {path}", extra={"rows": len(tracts)})

    return tracts


def _xy(coords) -> list[tuple[float, float]]:
    """Drop Z values some shapefiles carry."""
    return [(x, y) for x, y, *_ in coords]


def geometry_rings(geometry: BaseGeometry) -> list[list[tuple[float, float]]]:
    """
    Flatten a (Multi)Polygon into its rings.

    Exterior and interior rings of every part are returned together; the
    even-odd containment test needs no distinction between them.
    """
    if isinstance(geometry, Polygon):
        parts = [geometry]
    elif isinstance(geometry, MultiPolygon):
        parts = list(geometry.geoms)
    else:
        raise ValueError(f"Unsupported geometry type: {geometry.geom_type}")

    rings = []
    for part in parts:
        if part.is_empty:
            continue
        rings.append(_xy(part.exterior.coords))
        rings.extend(_xy(interior.coords) for interior in part.interiors)
    return rings


def _attribute(value: Any) -> str | None:
    """Attribute values are carried as text, missing values as None."""
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return None
    return str(value)


def _reference_point(value: Any) -> float | None:
    """Parse an internal point coordinate such as "+39.9522792"."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return None if pd.isna(number) else number


def _usable_rings(geometry: BaseGeometry) -> tuple[list[list[tuple[float, float]]], int]:
    """Split rings into those that bound an area and a count of degenerate ones."""
    rings = geometry_rings(geometry)
    usable = [ring for ring in rings if len(set(ring)) >= 3]
    return usable, len(rings) - len(usable)


def polygons_from_frame(tracts: pd.DataFrame, fields: SchemaFields) -> list[TractPolygon]:
    """
    Convert tract features into TractPolygons.

    Rows without geometry are skipped. Rings with fewer than 3 distinct
    vertices are dropped from their tract; the rest of the tract is kept.

    Args:
        tracts: GeoDataFrame with a geometry column and raw TIGER attributes
        fields: Attribute names for the shapefile's vintage

    Returns:
        Polygons in the row order of the frame

    Raises:
        ConfigurationError: If the attributes do not match the schema
    """
    fields.validate_columns(tracts.columns)
    geometry_column = tracts.geometry.name if isinstance(tracts, gpd.GeoDataFrame) else "geometry"
    geometries = gpd.GeoSeries(tracts[geometry_column], index=tracts.index)
    missing = geometries.isna() | geometries.is_empty

    polygons = []
    skipped = 0
    dropped_rings = 0
    for (_, row), geometry, is_missing in zip(tracts.iterrows(), geometries, missing, strict=True):
        if is_missing:
            skipped += 1
            continue
        try:
            rings, degenerate = _usable_rings(geometry)
            polygon = TractPolygon(
                rings=tuple(rings),
                attributes={
                    "GEOID": _attribute(row[fields.geoid]),
                    "STATE": _attribute(row[fields.state]),
                    "COUNTY": _attribute(row[fields.county]),
                    "TRACT_NUM": _attribute(row[fields.tract_num]),
                    "TRACT_NAME": _attribute(row[fields.tract_name]),
                    "ref_lat": _reference_point(row.get(fields.ref_lat)),
                    "ref_lon": _reference_point(row.get(fields.ref_lon)),
                },
            )
        except ValueError as e:
            logger.warning(f"Skipping tract {row[fields.geoid]}: {e}")
            skipped += 1
            continue

        if degenerate:
            logger.debug(f"Dropped {degenerate} degenerate rings from tract {polygon.geoid}")
            dropped_rings += degenerate
        polygons.append(polygon)

    if skipped > 0:
        logger.warning(f"Skipped {skipped} tracts without polygon geometry")
    if dropped_rings > 0:
        logger.warning(f"Dropped {dropped_rings} degenerate rings")
    logger.info(
        f"Converted {len(polygons)} tract polygons using schema {fields.version.value}",
        extra={"polygons": len(polygons), "skipped": skipped, "dropped_rings": dropped_rings},
    )

    return polygons
