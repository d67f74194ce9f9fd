"""
Tract Lookup - Polygon Geometry

Immutable tract polygons and the even-odd (ray casting) containment test.

Coordinates are planar (x, y) = (longitude, latitude); no projection is
applied. A polygon is any number of rings; a point is inside when a ray cast
from it crosses the polygon's rings an odd number of times, so hole rings
exclude their interior and islands inside holes are included again.

Boundary rule: a point lying exactly on an edge or vertex of any ring is
inside. Collinearity is tested exactly, with no tolerance.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

import numpy as np


def _as_ring(vertices: Iterable[Sequence[float]] | np.ndarray) -> np.ndarray:
    """Convert vertices to a read-only Nx2 float array."""
    ring = np.array(vertices, dtype=float)
    if ring.ndim != 2 or ring.shape[1] != 2:
        raise ValueError(f"Ring vertices must be Nx2, got shape {ring.shape}")
    if len(np.unique(ring, axis=0)) < 3:
        raise ValueError(f"Ring must have at least 3 distinct vertices, got {len(ring)}")
    ring.flags.writeable = False
    return ring


def point_on_ring(x: float, y: float, ring: np.ndarray) -> bool:
    """Check whether (x, y) lies exactly on an edge or vertex of a ring."""
    xs, ys = ring[:, 0], ring[:, 1]
    xp, yp = np.roll(xs, 1), np.roll(ys, 1)

    cross = (xp - xs) * (y - ys) - (yp - ys) * (x - xs)
    within_x = (np.minimum(xs, xp) <= x) & (x <= np.maximum(xs, xp))
    within_y = (np.minimum(ys, yp) <= y) & (y <= np.maximum(ys, yp))

    return bool(np.any((cross == 0) & within_x & within_y))


def ray_crossings(x: float, y: float, ring: np.ndarray) -> int:
    """
    Count edges of a ring crossed by a ray cast from (x, y) towards +x.

    Edges are half-open in y, so a ray through a vertex is counted once.
    """
    xs, ys = ring[:, 0], ring[:, 1]
    xp, yp = np.roll(xs, 1), np.roll(ys, 1)

    straddles = (ys > y) != (yp > y)
    # Horizontal edges never straddle; mask their zero denominators
    dy = np.where(straddles, yp - ys, 1.0)
    x_cross = (xp - xs) * (y - ys) / dy + xs

    return int(np.count_nonzero(straddles & (x < x_cross)))


@dataclass(frozen=True, eq=False)
class TractPolygon:
    """
    Immutable census tract geometry with canonical attributes.

    Attributes:
        rings: Closed rings as read-only Nx2 arrays (outer boundaries and holes)
        attributes: Canonical fields (GEOID, STATE, COUNTY, TRACT_NUM,
            TRACT_NAME, ref_lat, ref_lon)
    """

    rings: tuple[np.ndarray, ...]
    attributes: Mapping[str, Any] = field(default_factory=dict)
    bbox: tuple[float, float, float, float] = field(init=False)

    def __post_init__(self):
        """Freeze rings and attributes, compute the bounding box."""
        rings = tuple(_as_ring(ring) for ring in self.rings)
        if not rings:
            raise ValueError("Polygon must have at least one ring")
        object.__setattr__(self, "rings", rings)
        object.__setattr__(self, "attributes", MappingProxyType(dict(self.attributes)))

        stacked = np.vstack(rings)
        mins = stacked.min(axis=0)
        maxs = stacked.max(axis=0)
        object.__setattr__(
            self, "bbox", (float(mins[0]), float(mins[1]), float(maxs[0]), float(maxs[1]))
        )

    @classmethod
    def from_rings(
        cls,
        rings: Iterable[Iterable[Sequence[float]]],
        **attributes: Any,
    ) -> TractPolygon:
        """Build a polygon from plain (x, y) vertex sequences."""
        return cls(rings=tuple(rings), attributes=attributes)

    @property
    def geoid(self) -> Any:
        return self.attributes.get("GEOID")

    @property
    def tract_name(self) -> Any:
        return self.attributes.get("TRACT_NAME")

    def bbox_contains(self, x: float, y: float) -> bool:
        """Check whether (x, y) is inside the bounding box, edges included."""
        min_x, min_y, max_x, max_y = self.bbox
        return min_x <= x <= max_x and min_y <= y <= max_y

    def contains(self, x: float, y: float) -> bool:
        """
        Test whether (x, y) is inside the polygon.

        Returns:
            True if the point is on a ring or crosses the rings an odd number
            of times, False otherwise
        """
        if not self.bbox_contains(x, y):
            return False
        if any(point_on_ring(x, y, ring) for ring in self.rings):
            return True
        crossings = sum(ray_crossings(x, y, ring) for ring in self.rings)
        return crossings % 2 == 1

    def __repr__(self) -> str:
        return f"TractPolygon(GEOID={self.geoid!r}, rings={len(self.rings)}, bbox={self.bbox})"
