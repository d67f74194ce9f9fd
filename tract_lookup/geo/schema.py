"""
Tract Lookup - Schema Resolver

Maps a TIGER/Line shapefile year to the attribute names used by that vintage.
The Census Bureau suffixed tract fields with the decennial year until 2010
(CTIDFP00, GEOID10) and dropped the suffix from 2011 onward (GEOID).

Usage:
    resolver = SchemaResolver(config)
    fields = resolver.resolve(2010)

    fields.tract_name  # "NAME10"
    fields.validate_columns(tracts.columns)
"""

from __future__ import annotations

import logging
import numbers
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

from tract_lookup.shared.config import Settings, get_config
from tract_lookup.shared.errors import ConfigurationError

logger = logging.getLogger(__name__)


class SchemaVersion(str, Enum):
    """Attribute naming conventions of the tract shapefile vintages."""

    PRE_2010 = "pre-2010"
    YEAR_2010 = "year-2010"
    POST_2010 = "2011-and-later"


@dataclass(frozen=True)
class SchemaFields:
    """Raw attribute names of one schema version, keyed by canonical field."""

    version: SchemaVersion
    geoid: str
    state: str
    county: str
    tract_num: str
    tract_name: str
    ref_lat: str
    ref_lon: str

    @property
    def required_columns(self) -> list[str]:
        """Raw columns needed to populate a lookup result."""
        return [self.geoid, self.state, self.county, self.tract_num, self.tract_name]

    def validate_columns(self, columns: Iterable[str]) -> None:
        """
        Check that an attribute table carries this version's fields.

        Raises:
            ConfigurationError: If any required column is absent
        """
        present = set(columns)
        missing = [col for col in self.required_columns if col not in present]
        if missing:
            raise ConfigurationError(
                f"Tract attributes do not match schema {self.version.value}: "
                f"missing columns {missing}"
            )


SCHEMA_FIELDS: dict[SchemaVersion, SchemaFields] = {
    SchemaVersion.PRE_2010: SchemaFields(
        version=SchemaVersion.PRE_2010,
        geoid="CTIDFP00",
        state="STATEFP00",
        county="COUNTYFP00",
        tract_num="TRACTCE00",
        tract_name="NAME00",
        ref_lat="INTPTLAT00",
        ref_lon="INTPTLON00",
    ),
    SchemaVersion.YEAR_2010: SchemaFields(
        version=SchemaVersion.YEAR_2010,
        geoid="GEOID10",
        state="STATEFP10",
        county="COUNTYFP10",
        tract_num="TRACTCE10",
        tract_name="NAME10",
        ref_lat="INTPTLAT10",
        ref_lon="INTPTLON10",
    ),
    SchemaVersion.POST_2010: SchemaFields(
        version=SchemaVersion.POST_2010,
        geoid="GEOID",
        state="STATEFP",
        county="COUNTYFP",
        tract_num="TRACTCE",
        tract_name="NAME",
        ref_lat="INTPTLAT",
        ref_lon="INTPTLON",
    ),
}


class SchemaResolver:
    """
    Select the attribute naming for a shapefile year.

    Resolution happens once per session; the returned SchemaFields is reused
    for every coordinate.
    """

    def __init__(self, config: Settings | None = None):
        """
        Initialize schema resolver.

        Args:
            config: Configuration object (uses default if not provided)
        """
        self.config = config or get_config()
        self.min_year = self.config.vintages.min_year
        self.max_year = self.config.vintages.max_year

    def version_for(self, year: int) -> SchemaVersion:
        """
        Get the schema version for a shapefile year.

        Raises:
            ConfigurationError: If the year is not a supported vintage
        """
        # bool is an int subclass but never a valid year
        if isinstance(year, bool) or not isinstance(year, numbers.Integral):
            raise ConfigurationError(f"Unrecognized census year: {year!r}", year=year)
        year = int(year)
        if year < self.min_year:
            raise ConfigurationError(
                f"Unrecognized census year: {year} (earliest supported is {self.min_year})",
                year=year,
            )
        if self.max_year is not None and year > self.max_year:
            raise ConfigurationError(
                f"Unrecognized census year: {year} (latest supported is {self.max_year})",
                year=year,
            )

        if year <= 2009:
            return SchemaVersion.PRE_2010
        if year == 2010:
            return SchemaVersion.YEAR_2010
        return SchemaVersion.POST_2010

    def resolve(self, year: int) -> SchemaFields:
        """Get the attribute names for a shapefile year."""
        version = self.version_for(year)
        fields = SCHEMA_FIELDS[version]
        logger.info(
            f"Resolved census year {year} to schema {version.value}",
            extra={"year": year, "schema_version": version.value},
        )
        return fields


def resolve_schema(year: int, config: Settings | None = None) -> SchemaFields:
    """Convenience function to resolve a shapefile year."""
    return SchemaResolver(config).resolve(year)
