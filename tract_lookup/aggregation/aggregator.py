"""
Tract Lookup - Tract Aggregator

Counts resolved coordinates per census tract and attaches the counts to the
tract attribute table for choropleth rendering.

Tracts without any resolved coordinate get no count (<NA>) rather than 0, so
a renderer draws them as "no data". Set `aggregation.zero_fill` to draw them
as zero instead.

Usage:
    aggregator = Aggregator(config)
    result = aggregator.aggregate(results, tracts, fields)
    result.table["ncases"]
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

import pandas as pd

from tract_lookup.geo.schema import SchemaFields
from tract_lookup.lookup.coordinator import LookupResult
from tract_lookup.shared.config import Settings, get_config

logger = logging.getLogger(__name__)


def _as_key(value: Any) -> str | None:
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return None
    return str(value)


@dataclass(frozen=True)
class RegionTally(Mapping[str, int]):
    """Read-only tract name -> count mapping; absent tracts have no count."""

    counts: Mapping[str, int] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "counts", MappingProxyType(dict(self.counts)))

    def __getitem__(self, name: str) -> int:
        return self.counts[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self.counts)

    def __len__(self) -> int:
        return len(self.counts)

    @property
    def total(self) -> int:
        return sum(self.counts.values())

    def to_series(self, name: str = "ncases") -> pd.Series:
        return pd.Series(dict(self.counts), name=name, dtype="int64")


@dataclass
class AggregationResult:
    """Result of attaching tallies to the tract table."""

    table: pd.DataFrame
    tally: RegionTally
    count_column: str
    regions_total: int
    regions_with_counts: int
    unmatched_names: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert result to dictionary for logging."""
        return {
            "count_column": self.count_column,
            "regions_total": self.regions_total,
            "regions_with_counts": self.regions_with_counts,
            "points_tallied": self.tally.total,
            "unmatched_names": self.unmatched_names,
        }


class Aggregator:
    """
    Tally lookup results by tract name.

    Tract name is the join key, exactly as the original TIGER attribute
    (NAME00/NAME10/NAME) spells it.
    """

    def __init__(self, config: Settings | None = None):
        """
        Initialize aggregator.

        Args:
            config: Configuration object (uses default if not provided)
        """
        self.config = config or get_config()
        self.count_column = self.config.aggregation.count_column
        self.zero_fill = self.config.aggregation.zero_fill

    def tally(self, results: Sequence[LookupResult] | pd.DataFrame) -> RegionTally:
        """
        Count resolved results per tract name.

        Args:
            results: LookupResults or the lookup output table

        Returns:
            RegionTally containing only tracts with at least one result
        """
        if isinstance(results, pd.DataFrame):
            names = [_as_key(name) for name in results["TRACT_NAME"]]
        else:
            names = [result.TRACT_NAME for result in results if result.is_resolved]
        names = [name for name in names if name is not None]

        counts = pd.Series(names, dtype=object).value_counts().sort_index()
        return RegionTally({str(name): int(count) for name, count in counts.items()})

    def attach(
        self,
        table: pd.DataFrame,
        tally: RegionTally,
        fields: SchemaFields,
    ) -> pd.DataFrame:
        """
        Add the count column to a copy of the tract table.

        Args:
            table: Tract attribute table (or GeoDataFrame) with raw TIGER names
            tally: Counts per tract name
            fields: Schema of the table

        Returns:
            Copy of the table with the count column as nullable Int64
        """
        table = table.copy()
        keys = table[fields.tract_name].map(_as_key)
        counts = pd.to_numeric(keys.map(dict(tally.counts)), errors="coerce").astype("Int64")
        if self.zero_fill:
            counts = counts.fillna(0)
        table[self.count_column] = counts
        return table

    def aggregate(
        self,
        results: Sequence[LookupResult] | pd.DataFrame,
        table: pd.DataFrame,
        fields: SchemaFields,
    ) -> AggregationResult:
        """Tally results and attach the counts to the tract table."""
        tally = self.tally(results)
        counted = self.attach(table, tally, fields)

        known = set(table[fields.tract_name].map(_as_key).dropna())
        unmatched = sorted(name for name in tally if name not in known)
        if unmatched:
            logger.warning(
                f"{len(unmatched)} tallied tract names are not in the tract table",
                extra={"unmatched_names": unmatched},
            )

        result = AggregationResult(
            table=counted,
            tally=tally,
            count_column=self.count_column,
            regions_total=len(counted),
            regions_with_counts=int(counted[self.count_column].gt(0).sum()),
            unmatched_names=unmatched,
        )
        logger.info(
            f"Tallied {tally.total} coordinates into {len(tally)} tracts",
            extra=result.to_dict(),
        )
        return result
