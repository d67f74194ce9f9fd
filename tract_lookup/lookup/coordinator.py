"""
Tract Lookup - Lookup Coordinator

Resolves every input coordinate to a census tract and returns one result per
input, in input order.

Result shapes:
    - Matched: all fields populated, INPUT_LAT/INPUT_LON echo the input
    - No match (shape A): geographic fields None, INPUT_LAT/INPUT_LON kept
    - Missing coordinate (shape B): every field None, never tested

Usage:
    session = LookupSession.from_frame(tracts, year=2010)
    results = LookupCoordinator(session).run(cases)
    results_df = results_to_frame(results)
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable, Iterable, Mapping, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import asdict, dataclass
from typing import Any

import pandas as pd

from tract_lookup.geo.geometry import TractPolygon
from tract_lookup.geo.loader import polygons_from_frame
from tract_lookup.geo.schema import SchemaFields, SchemaResolver
from tract_lookup.geo.spatial_index import PointInPolygonEngine, SpatialIndex
from tract_lookup.shared.config import Settings, get_config
from tract_lookup.shared.errors import (
    ConfigurationError,
    MissingCoordinateError,
    NoRegionMatchError,
)

logger = logging.getLogger(__name__)

RESULT_COLUMNS = ["GEOID", "STATE", "COUNTY", "TRACT_NUM", "TRACT_NAME", "INPUT_LAT", "INPUT_LON"]

# Called with (1-based position, total, coordinate) before each lookup
ProgressObserver = Callable[[int, int, "GeoCoordinate"], None]


def _coerce(value: Any) -> float | None:
    """Convert a raw coordinate value to float, or None when missing."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return None if math.isnan(number) else number


@dataclass(frozen=True)
class GeoCoordinate:
    """A latitude/longitude pair; either value may be missing."""

    latitude: float | None
    longitude: float | None

    @classmethod
    def from_values(cls, latitude: Any, longitude: Any) -> GeoCoordinate:
        return cls(latitude=_coerce(latitude), longitude=_coerce(longitude))

    @property
    def is_complete(self) -> bool:
        return self.latitude is not None and self.longitude is not None


@dataclass(frozen=True)
class LookupResult:
    """Tract resolution for one input coordinate."""

    GEOID: str | None = None
    STATE: str | None = None
    COUNTY: str | None = None
    TRACT_NUM: str | None = None
    TRACT_NAME: str | None = None
    INPUT_LAT: float | None = None
    INPUT_LON: float | None = None

    @classmethod
    def matched(cls, polygon: TractPolygon, coordinate: GeoCoordinate) -> LookupResult:
        attributes = polygon.attributes
        return cls(
            GEOID=attributes.get("GEOID"),
            STATE=attributes.get("STATE"),
            COUNTY=attributes.get("COUNTY"),
            TRACT_NUM=attributes.get("TRACT_NUM"),
            TRACT_NAME=attributes.get("TRACT_NAME"),
            INPUT_LAT=coordinate.latitude,
            INPUT_LON=coordinate.longitude,
        )

    @classmethod
    def unmatched(cls, coordinate: GeoCoordinate) -> LookupResult:
        """Shape A: outside every tract, input coordinates kept."""
        return cls(INPUT_LAT=coordinate.latitude, INPUT_LON=coordinate.longitude)

    @classmethod
    def missing(cls) -> LookupResult:
        """Shape B: incomplete input, every field empty."""
        return cls()

    @property
    def is_resolved(self) -> bool:
        return self.TRACT_NAME is not None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class LookupSession:
    """
    Read-only state shared by every lookup of a batch.

    Built once from the tract geometry; the schema is resolved before any
    coordinate is looked at.
    """

    year: int
    fields: SchemaFields
    index: SpatialIndex
    engine: PointInPolygonEngine
    verbose: bool = False
    max_workers: int = 1
    latitude_column: str = "latitude"
    longitude_column: str = "longitude"

    @classmethod
    def from_polygons(
        cls,
        polygons: Sequence[TractPolygon],
        year: int,
        verbose: bool | None = None,
        config: Settings | None = None,
    ) -> LookupSession:
        """
        Create a session from polygons that already carry canonical attributes.

        Raises:
            ConfigurationError: If the year is not a supported vintage
        """
        config = config or get_config()
        fields = SchemaResolver(config).resolve(year)
        return cls._build(polygons, year, fields, verbose, config)

    @classmethod
    def from_frame(
        cls,
        tracts: pd.DataFrame,
        year: int,
        verbose: bool | None = None,
        config: Settings | None = None,
    ) -> LookupSession:
        """
        Create a session from a tract GeoDataFrame with raw TIGER attributes.

        Raises:
            ConfigurationError: If the year is unsupported or the attributes
                do not match its schema
        """
        config = config or get_config()
        fields = SchemaResolver(config).resolve(year)
        polygons = polygons_from_frame(tracts, fields)
        return cls._build(polygons, year, fields, verbose, config)

    @classmethod
    def _build(
        cls,
        polygons: Sequence[TractPolygon],
        year: int,
        fields: SchemaFields,
        verbose: bool | None,
        config: Settings,
    ) -> LookupSession:
        index = SpatialIndex(polygons, node_capacity=config.index.node_capacity)
        return cls(
            year=year,
            fields=fields,
            index=index,
            engine=PointInPolygonEngine(index),
            verbose=config.lookup.verbose if verbose is None else verbose,
            max_workers=config.lookup.max_workers,
            latitude_column=config.lookup.latitude_column,
            longitude_column=config.lookup.longitude_column,
        )


def to_coordinates(
    data: pd.DataFrame | Iterable[Any],
    latitude_column: str = "latitude",
    longitude_column: str = "longitude",
) -> list[GeoCoordinate]:
    """
    Normalize input records to GeoCoordinates, preserving order.

    Accepts a DataFrame with latitude/longitude columns, or an iterable of
    GeoCoordinates, mappings with those keys, or (latitude, longitude) pairs.

    Raises:
        ConfigurationError: If a DataFrame lacks the coordinate columns
    """
    if isinstance(data, pd.DataFrame):
        missing = {latitude_column, longitude_column} - set(data.columns)
        if missing:
            raise ConfigurationError(f"Coordinates are missing required columns: {missing}")
        return [
            GeoCoordinate.from_values(lat, lon)
            for lat, lon in zip(data[latitude_column], data[longitude_column], strict=True)
        ]

    coordinates = []
    for record in data:
        if isinstance(record, GeoCoordinate):
            coordinates.append(record)
        elif isinstance(record, Mapping):
            coordinates.append(
                GeoCoordinate.from_values(record.get(latitude_column), record.get(longitude_column))
            )
        else:
            latitude, longitude = record
            coordinates.append(GeoCoordinate.from_values(latitude, longitude))
    return coordinates


class LookupCoordinator:
    """
    Resolve a batch of coordinates against a lookup session.

    Results are stored by input position, so the output order does not depend
    on the order in which workers finish.
    """

    def __init__(self, session: LookupSession, progress: ProgressObserver | None = None):
        """
        Initialize the coordinator.

        Args:
            session: Shared read-only lookup state
            progress: Optional observer notified before each coordinate
        """
        self.session = session
        self.progress = progress

    def resolve(self, position: int, coordinate: GeoCoordinate) -> LookupResult:
        """
        Resolve a single coordinate.

        Raises:
            MissingCoordinateError: If latitude or longitude is missing
            NoRegionMatchError: If no tract contains the coordinate
        """
        if not coordinate.is_complete:
            raise MissingCoordinateError(position, coordinate.latitude, coordinate.longitude)

        polygon = self.session.engine.locate(coordinate.longitude, coordinate.latitude)
        if polygon is None:
            raise NoRegionMatchError(position, coordinate.latitude, coordinate.longitude)

        return LookupResult.matched(polygon, coordinate)

    def resolve_one(self, position: int, total: int, coordinate: GeoCoordinate) -> LookupResult:
        """Resolve a single coordinate, folding failures into the result shape."""
        self._report(position, total, coordinate)
        try:
            return self.resolve(position, coordinate)
        except MissingCoordinateError as e:
            logger.debug(str(e))
            return LookupResult.missing()
        except NoRegionMatchError as e:
            logger.debug(str(e))
            return LookupResult.unmatched(coordinate)

    def _report(self, position: int, total: int, coordinate: GeoCoordinate) -> None:
        if self.session.verbose:
            logger.info(
                f"Resolving census tract for coordinate #{position} of {total}: "
                f"Latitude = {coordinate.latitude} Longitude = {coordinate.longitude}"
            )
        if self.progress is not None:
            self.progress(position, total, coordinate)

    def run(self, coordinates: pd.DataFrame | Iterable[Any]) -> list[LookupResult]:
        """
        Resolve every coordinate.

        Args:
            coordinates: DataFrame or iterable of coordinate records

        Returns:
            One LookupResult per input record, in input order
        """
        records = to_coordinates(
            coordinates, self.session.latitude_column, self.session.longitude_column
        )
        total = len(records)
        logger.info(f"Resolving census tracts, n = {total}")

        results: list[LookupResult | None] = [None] * total
        workers = min(self.session.max_workers, total)

        if workers > 1:
            with ThreadPoolExecutor(max_workers=workers) as pool:
                futures = {
                    pool.submit(self.resolve_one, position + 1, total, record): position
                    for position, record in enumerate(records)
                }
                for future, position in futures.items():
                    results[position] = future.result()
        else:
            for position, record in enumerate(records):
                results[position] = self.resolve_one(position + 1, total, record)

        matched = sum(1 for result in results if result.is_resolved)
        missing = sum(1 for record in records if not record.is_complete)
        logger.info(
            f"Resolved {matched} of {total} coordinates",
            extra={
                "total": total,
                "matched": matched,
                "unmatched": total - matched - missing,
                "missing_coordinates": missing,
            },
        )

        return results


def results_to_frame(results: Sequence[LookupResult]) -> pd.DataFrame:
    """Convert lookup results to the output table."""
    return pd.DataFrame([result.to_dict() for result in results], columns=RESULT_COLUMNS)


def lookup_tracts(
    coordinates: pd.DataFrame | Iterable[Any],
    tracts: pd.DataFrame,
    year: int,
    verbose: bool = False,
    config: Settings | None = None,
) -> pd.DataFrame:
    """
    Convenience function to resolve coordinates against a tract table.

    Args:
        coordinates: Records with latitude and longitude
        tracts: Tract GeoDataFrame with raw TIGER attributes
        year: Shapefile year
        verbose: Log every coordinate as it is resolved
        config: Configuration object

    Returns:
        DataFrame with columns GEOID, STATE, COUNTY, TRACT_NUM, TRACT_NAME,
        INPUT_LAT, INPUT_LON; one row per input record

    Raises:
        ConfigurationError: If the year or tract attributes are unusable
    """
    session = LookupSession.from_frame(tracts, year, verbose=verbose, config=config)
    return results_to_frame(LookupCoordinator(session).run(coordinates))
