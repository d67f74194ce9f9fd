"""
Tract Lookup - Choropleth Classifier

Splits tract counts into k ordinal classes for thematic shading:
- Quantile binning (default): breaks at the 1/k, 2/k, ... quantiles
- Equal-interval binning: k equal-width bins over [min, max]

Intervals are closed on the right, so a value equal to a break falls in the
lower class. Tracts without a count are left out of the breaks and get the
"no data" class (<NA>) and the no-data fill colour.

Usage:
    classifier = Classifier(config)
    classified, breaks = classifier.classify_table(counted_tracts)
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any, Literal

import numpy as np
import pandas as pd

from tract_lookup.shared.config import Settings, get_config
from tract_lookup.shared.errors import ConfigurationError

logger = logging.getLogger(__name__)

NO_DATA_LABEL = "no data"

# ColorBrewer sequential schemes (colorbrewer2.org), keyed by class count
PALETTES: dict[str, dict[int, list[str]]] = {
    "Reds": {
        3: ["#fee0d2", "#fc9272", "#de2d26"],
        4: ["#fee5d9", "#fcae91", "#fb6a4a", "#cb181d"],
        5: ["#fee5d9", "#fcae91", "#fb6a4a", "#de2d26", "#a50f15"],
        6: ["#fee5d9", "#fcbba1", "#fc9272", "#fb6a4a", "#de2d26", "#a50f15"],
        7: ["#fee5d9", "#fcbba1", "#fc9272", "#fb6a4a", "#ef3b2c", "#cb181d", "#99000d"],
        8: ["#fff5f0", "#fee0d2", "#fcbba1", "#fc9272", "#fb6a4a", "#ef3b2c", "#cb181d", "#99000d"],
        9: [
            "#fff5f0", "#fee0d2", "#fcbba1", "#fc9272", "#fb6a4a",
            "#ef3b2c", "#cb181d", "#a50f15", "#67000d",
        ],
    },
    "Blues": {
        3: ["#deebf7", "#9ecae1", "#3182bd"],
        4: ["#eff3ff", "#bdd7e7", "#6baed6", "#2171b5"],
        5: ["#eff3ff", "#bdd7e7", "#6baed6", "#3182bd", "#08519c"],
        6: ["#eff3ff", "#c6dbef", "#9ecae1", "#6baed6", "#3182bd", "#08519c"],
        7: ["#eff3ff", "#c6dbef", "#9ecae1", "#6baed6", "#4292c6", "#2171b5", "#084594"],
        8: ["#f7fbff", "#deebf7", "#c6dbef", "#9ecae1", "#6baed6", "#4292c6", "#2171b5", "#084594"],
        9: [
            "#f7fbff", "#deebf7", "#c6dbef", "#9ecae1", "#6baed6",
            "#4292c6", "#2171b5", "#08519c", "#08306b",
        ],
    },
}


def palette_colors(name: str, num_classes: int) -> list[str]:
    """
    Get the fill colours of a sequential palette.

    Raises:
        ConfigurationError: If the palette is unknown or has no k-class variant
    """
    if name not in PALETTES:
        raise ConfigurationError(f"Unknown palette: {name}. Must be one of: {sorted(PALETTES)}")
    schemes = PALETTES[name]
    if num_classes == 2:
        lightest, _, darkest = schemes[3]
        return [lightest, darkest]
    if num_classes not in schemes:
        raise ConfigurationError(
            f"Palette {name} supports 2 to {max(schemes)} classes, got {num_classes}"
        )
    return list(schemes[num_classes])


@dataclass(frozen=True)
class ClassificationBreaks:
    """
    Ascending breakpoints partitioning values into ordinal classes.

    Class i covers (breaks[i-1], breaks[i]]; class 0 also includes everything
    below breaks[0]. With no values the breaks are empty and every value is
    "no data".
    """

    breaks: tuple[float, ...]
    num_classes: int
    method: str
    minimum: float | None = None
    maximum: float | None = None

    @property
    def has_data(self) -> bool:
        return self.minimum is not None

    def classify(self, value: Any) -> int | None:
        """Get the class of a value (None for missing values)."""
        if value is None or pd.isna(value) or not self.has_data:
            return None
        return int(np.searchsorted(self.breaks, float(value), side="left"))

    def labels(self) -> list[str]:
        """Legend labels, one per class."""
        if not self.has_data:
            return []
        edges = [self.minimum, *self.breaks, self.maximum]
        labels = [f"[{edges[0]:g}, {edges[1]:g}]"]
        labels.extend(f"({edges[i]:g}, {edges[i + 1]:g}]" for i in range(1, len(edges) - 1))
        return labels

    def label_for(self, value: Any) -> str:
        """Legend label of the class a value falls in."""
        cls = self.classify(value)
        return NO_DATA_LABEL if cls is None else self.labels()[cls]

    def to_dict(self) -> dict[str, Any]:
        return {
            "breaks": list(self.breaks),
            "num_classes": self.num_classes,
            "method": self.method,
            "minimum": self.minimum,
            "maximum": self.maximum,
        }


class Classifier:
    """Compute class breaks over tract counts and shade the tract table."""

    def __init__(
        self,
        config: Settings | None = None,
        num_classes: int | None = None,
        method: Literal["quantile", "equal_interval"] | None = None,
    ):
        """
        Initialize classifier.

        Args:
            config: Configuration object (uses default if not provided)
            num_classes: Number of classes k (overrides config)
            method: Binning method (overrides config)
        """
        self.config = config or get_config()
        settings = self.config.classification
        self.num_classes = num_classes or settings.num_classes
        self.method = method or settings.method

        if self.num_classes < 2:
            raise ConfigurationError(f"At least 2 classes are required, got {self.num_classes}")
        if self.method not in ("quantile", "equal_interval"):
            raise ConfigurationError(f"Unknown classification method: {self.method}")
        self.colors = palette_colors(settings.palette, self.num_classes)

    def compute_breaks(self, values: Iterable[Any]) -> ClassificationBreaks:
        """
        Compute k-1 ascending breakpoints, ignoring missing values.

        Args:
            values: Tally values (None/NaN/<NA> are skipped)

        Returns:
            ClassificationBreaks for the present values
        """
        series = pd.to_numeric(pd.Series(list(values), dtype=object), errors="coerce")
        data = series.dropna().to_numpy(dtype=float)

        if data.size == 0:
            logger.warning("No values to classify; all tracts are no data")
            return ClassificationBreaks(breaks=(), num_classes=self.num_classes, method=self.method)

        k = self.num_classes
        if self.method == "quantile":
            breaks = np.quantile(data, np.arange(1, k) / k)
        else:
            low, high = data.min(), data.max()
            breaks = low + (high - low) * np.arange(1, k) / k
        breaks = np.maximum.accumulate(breaks)

        result = ClassificationBreaks(
            breaks=tuple(float(b) for b in breaks),
            num_classes=k,
            method=self.method,
            minimum=float(data.min()),
            maximum=float(data.max()),
        )
        logger.info(f"Computed {self.method} breaks: {list(result.breaks)}", extra=result.to_dict())
        return result

    def classify_table(
        self,
        table: pd.DataFrame,
        value_column: str | None = None,
        breaks: ClassificationBreaks | None = None,
    ) -> tuple[pd.DataFrame, ClassificationBreaks]:
        """
        Add class, fill colour and legend label columns to a copy of the tract table.

        Args:
            table: Tract table with a count column
            value_column: Column to classify (defaults to the configured count column)
            breaks: Precomputed breaks (computed from the column if not provided)

        Returns:
            (classified table, breaks used)
        """
        settings = self.config.classification
        value_column = value_column or self.config.aggregation.count_column
        if breaks is None:
            breaks = self.compute_breaks(table[value_column])

        colors = (
            self.colors
            if breaks.num_classes == self.num_classes
            else palette_colors(settings.palette, breaks.num_classes)
        )
        classes = [breaks.classify(value) for value in table[value_column]]

        table = table.copy()
        table[settings.class_column] = pd.array(classes, dtype="Int64")
        table[settings.color_column] = [
            settings.no_data_color if cls is None else colors[cls] for cls in classes
        ]
        table[settings.label_column] = [breaks.label_for(value) for value in table[value_column]]

        no_data = sum(1 for cls in classes if cls is None)
        logger.info(
            f"Classified {len(classes) - no_data} tracts into {breaks.num_classes} classes",
            extra={"no_data": no_data, "method": breaks.method},
        )
        return table, breaks
