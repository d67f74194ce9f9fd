"""
Tract Lookup - Spatial Index and Point-in-Polygon Engine

Two-phase point lookup:
1. STR-packed R-tree over polygon bounding boxes returns candidate polygons
2. Exact ray casting test on each candidate

The index is built once per session and never mutated, so concurrent
queries need no locking.

Usage:
    index = SpatialIndex(polygons)
    engine = PointInPolygonEngine(index)

    tract = engine.locate(-75.16, 39.95)  # x = longitude, y = latitude
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

import numpy as np
import shapely
from shapely import STRtree

from tract_lookup.geo.geometry import TractPolygon

logger = logging.getLogger(__name__)

DEFAULT_NODE_CAPACITY = 10


class SpatialIndex:
    """
    Bounding-box index over tract polygons.

    The tree only holds bounding boxes; ring geometry stays on the
    TractPolygon. Candidate positions are returned in ascending polygon order.
    """

    def __init__(self, polygons: Sequence[TractPolygon], node_capacity: int | None = None):
        """
        Build the index.

        Args:
            polygons: Tract polygons; their order fixes candidate order
            node_capacity: Maximum children per tree node
        """
        self._polygons = tuple(polygons)
        self.node_capacity = node_capacity or DEFAULT_NODE_CAPACITY

        if not self._polygons:
            self._bounds = np.empty((0, 4))
            self.extent: tuple[float, float, float, float] | None = None
            self._tree = STRtree([], node_capacity=self.node_capacity)
            logger.warning("Spatial index built with no polygons")
            return

        self._bounds = np.array([polygon.bbox for polygon in self._polygons], dtype=float)
        self._bounds.flags.writeable = False
        self.extent = (
            float(self._bounds[:, 0].min()),
            float(self._bounds[:, 1].min()),
            float(self._bounds[:, 2].max()),
            float(self._bounds[:, 3].max()),
        )

        boxes = shapely.box(
            self._bounds[:, 0], self._bounds[:, 1], self._bounds[:, 2], self._bounds[:, 3]
        )
        self._tree = STRtree(boxes, node_capacity=self.node_capacity)

        logger.debug(
            f"Spatial index built: {len(self._polygons)} polygons",
            extra=self.stats(),
        )

    @property
    def polygons(self) -> tuple[TractPolygon, ...]:
        return self._polygons

    def __len__(self) -> int:
        return len(self._polygons)

    def candidates(self, x: float, y: float) -> list[int]:
        """
        Get positions of polygons whose bounding box contains (x, y).

        Args:
            x: Longitude
            y: Latitude

        Returns:
            Ascending polygon positions (empty if the point is off the extent)
        """
        if self.extent is None:
            return []
        min_x, min_y, max_x, max_y = self.extent
        if not (min_x <= x <= max_x and min_y <= y <= max_y):
            return []

        hits = np.sort(self._tree.query(shapely.Point(x, y)))

        # Tree hits are envelope matches; keep exact inclusive bbox containment
        bounds = self._bounds[hits]
        inside = (
            (bounds[:, 0] <= x) & (x <= bounds[:, 2]) & (bounds[:, 1] <= y) & (y <= bounds[:, 3])
        )
        return hits[inside].tolist()

    def stats(self) -> dict[str, int]:
        """Index statistics for logging."""
        return {
            "polygons": len(self._polygons),
            "node_capacity": self.node_capacity,
        }


class PointInPolygonEngine:
    """
    Resolve a coordinate to the tract polygon containing it.

    Tracts are assumed not to overlap. A point on an edge shared by two
    tracts goes to the candidate that comes first in polygon order.
    """

    def __init__(self, index: SpatialIndex):
        self.index = index

    def locate(self, x: float, y: float) -> TractPolygon | None:
        """
        Find the polygon containing (x, y).

        Args:
            x: Longitude
            y: Latitude

        Returns:
            Matching TractPolygon, or None if no polygon contains the point
        """
        polygons = self.index.polygons
        for position in self.index.candidates(x, y):
            polygon = polygons[position]
            if polygon.contains(x, y):
                return polygon
        return None
