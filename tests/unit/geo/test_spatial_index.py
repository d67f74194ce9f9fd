"""
Tests for Spatial Index and Point-in-Polygon Engine

Tests bounding-box candidate retrieval and point resolution.
"""

import pytest

from tract_lookup.geo.geometry import TractPolygon
from tract_lookup.geo.spatial_index import PointInPolygonEngine, SpatialIndex


@pytest.fixture
def index(tract_grid):
    """Spatial index over the 3x3 tract grid."""
    return SpatialIndex(tract_grid)


@pytest.fixture
def engine(index):
    """Engine over the 3x3 tract grid."""
    return PointInPolygonEngine(index)


class TestSpatialIndex:
    """Test cases for SpatialIndex."""

    def test_defaults(self, index):
        """Test default node capacity and extent."""
        assert index.node_capacity == 10
        assert len(index) == 9
        assert index.extent == (0.0, 0.0, 3.0, 3.0)

    def test_candidates_interior_point(self, index):
        """Test an interior point yields only its own tract."""
        assert index.candidates(1.5, 1.5) == [4]

    def test_candidates_on_shared_corner(self, index):
        """Test a shared corner yields every touching tract in order."""
        assert index.candidates(1.0, 1.0) == [0, 1, 3, 4]

    def test_candidates_outside_extent(self, index):
        """Test points off the grid have no candidates."""
        assert index.candidates(-1.0, 1.0) == []
        assert index.candidates(1.0, 3.5) == []

    def test_candidates_on_extent_edge(self, index):
        """Test the far corner of the extent is inclusive."""
        assert index.candidates(3.0, 3.0) == [8]

    @pytest.mark.parametrize("capacity", [2, 4, 16])
    def test_candidates_independent_of_node_capacity(self, tract_grid, capacity):
        """Test candidate sets do not depend on tree shape."""
        index = SpatialIndex(tract_grid, node_capacity=capacity)

        assert index.candidates(2.5, 0.5) == [2]
        assert index.candidates(2.0, 1.5) == [4, 5]

    def test_empty_index(self):
        """Test an index without polygons returns no candidates."""
        index = SpatialIndex([])

        assert index.extent is None
        assert index.candidates(0.0, 0.0) == []

    def test_degenerate_extent(self):
        """Test polygons lying on a single vertical line still index."""
        sliver = TractPolygon.from_rings([[(1, 0), (1, 1), (1, 2)]], TRACT_NAME="line")
        index = SpatialIndex([sliver])

        assert index.candidates(1.0, 1.0) == [0]

    def test_stats(self, index):
        """Test index statistics."""
        assert index.stats() == {"polygons": 9, "node_capacity": 10}


class TestPointInPolygonEngine:
    """Test cases for PointInPolygonEngine."""

    def test_locate_unit_square(self, unit_square):
        """Test a point inside the unit square resolves to it."""
        engine = PointInPolygonEngine(SpatialIndex([unit_square]))

        assert engine.locate(0.1, 0.1).geoid == "42101000100"

    def test_locate_outside_unit_square(self, unit_square):
        """Test (2, 2) against the unit square is no match."""
        engine = PointInPolygonEngine(SpatialIndex([unit_square]))

        assert engine.locate(2.0, 2.0) is None

    @pytest.mark.parametrize(
        "x,y,name",
        [(0.5, 0.5, "1"), (2.5, 0.5, "3"), (1.5, 1.5, "5"), (0.5, 2.5, "7"), (2.9, 2.9, "9")],
    )
    def test_locate_grid(self, engine, x, y, name):
        """Test interior points resolve to their tract."""
        assert engine.locate(x, y).tract_name == name

    def test_shared_edge_goes_to_first_tract(self, engine):
        """Test a point on a shared edge resolves to the earlier tract."""
        assert engine.locate(1.0, 0.5).tract_name == "1"
        assert engine.locate(1.5, 2.0).tract_name == "5"

    def test_locate_outside_grid(self, engine):
        """Test points outside every tract are no match."""
        assert engine.locate(4.0, 1.0) is None
        assert engine.locate(-0.1, -0.1) is None

    def test_bbox_candidate_that_does_not_contain(self):
        """Test a candidate whose bbox matches but polygon does not is skipped."""
        triangle = TractPolygon.from_rings([[(0, 0), (2, 0), (0, 2)]], TRACT_NAME="tri")
        engine = PointInPolygonEngine(SpatialIndex([triangle]))

        assert engine.locate(0.5, 0.5).tract_name == "tri"
        assert engine.locate(1.8, 1.8) is None

    def test_repeated_lookups_identical(self, engine):
        """Test lookups are deterministic."""
        first = [engine.locate(x / 10, y / 10) for x in range(31) for y in range(31)]
        second = [engine.locate(x / 10, y / 10) for x in range(31) for y in range(31)]

        assert first == second
