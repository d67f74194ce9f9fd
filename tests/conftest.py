"""
Tract Lookup - Pytest Configuration and Fixtures

Shared fixtures for all tests:
- Configuration fixtures
- Synthetic tract geometry (unit square, 3x3 grid, TIGER-style frames)
"""

import os
from collections.abc import Generator
from pathlib import Path
from typing import Any

import geopandas as gpd
import pytest
from shapely.geometry import box

from tract_lookup.geo.geometry import TractPolygon

# Set test environment
os.environ["TL_ENVIRONMENT"] = "dev"

# =============================================================================
# Path Fixtures
# =============================================================================


@pytest.fixture
def project_root() -> Path:
    """Get the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def configs_dir(project_root: Path) -> Path:
    """Get the configs directory."""
    return project_root / "configs"


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture
def test_config() -> Any:
    """Get test configuration."""
    from tract_lookup.shared.config import get_config, reload_config

    # Ensure fresh config for tests
    reload_config("dev")
    return get_config("dev")


# =============================================================================
# Geometry Fixtures
# =============================================================================


@pytest.fixture
def unit_square() -> TractPolygon:
    """Unit square centered at the origin."""
    return TractPolygon.from_rings(
        [[(-0.5, -0.5), (0.5, -0.5), (0.5, 0.5), (-0.5, 0.5), (-0.5, -0.5)]],
        GEOID="42101000100",
        STATE="42",
        COUNTY="101",
        TRACT_NUM="000100",
        TRACT_NAME="1",
        ref_lat=0.0,
        ref_lon=0.0,
    )


@pytest.fixture
def tract_grid() -> list[TractPolygon]:
    """3x3 grid of unit-square tracts covering [0, 3] x [0, 3], named "1" to "9"."""
    polygons = []
    for row in range(3):
        for col in range(3):
            number = row * 3 + col + 1
            polygons.append(
                TractPolygon.from_rings(
                    [[(col, row), (col + 1, row), (col + 1, row + 1), (col, row + 1)]],
                    GEOID=f"4210100{number:02d}00",
                    STATE="42",
                    COUNTY="101",
                    TRACT_NUM=f"00{number:02d}00",
                    TRACT_NAME=str(number),
                    ref_lat=row + 0.5,
                    ref_lon=col + 0.5,
                )
            )
    return polygons


@pytest.fixture
def tracts_2010() -> gpd.GeoDataFrame:
    """TIGER 2010-style tract table: a 2x2 grid over lon [-75.2, -75.0], lat [39.9, 40.1]."""
    records = []
    geometries = []
    cells = [
        ("1", -75.2, 39.9),
        ("2", -75.1, 39.9),
        ("3", -75.2, 40.0),
        ("4", -75.1, 40.0),
    ]
    for name, min_lon, min_lat in cells:
        records.append(
            {
                "STATEFP10": "42",
                "COUNTYFP10": "101",
                "TRACTCE10": f"000{name}00",
                "GEOID10": f"42101000{name}00",
                "NAME10": name,
                "INTPTLAT10": f"+{min_lat + 0.05:.7f}",
                "INTPTLON10": f"{min_lon + 0.05:.7f}",
            }
        )
        geometries.append(box(min_lon, min_lat, min_lon + 0.1, min_lat + 0.1))
    return gpd.GeoDataFrame(records, geometry=geometries)


# =============================================================================
# Cleanup Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def cleanup_env() -> Generator[None, None, None]:
    """Clean up environment variables after each test."""
    original_env = os.environ.copy()
    yield
    # Restore original environment
    os.environ.clear()
    os.environ.update(original_env)
