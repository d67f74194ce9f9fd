"""
Unit tests for coordinate ingestion.
"""

import pandas as pd
import pytest

from tract_lookup.lookup.ingest import read_coordinates, standardize_coordinates
from tract_lookup.shared.errors import ConfigurationError


class TestStandardizeCoordinates:
    """Test cases for standardize_coordinates."""

    def test_keeps_every_row(self):
        """Test invalid values become NaN without dropping rows."""
        df = pd.DataFrame(
            {
                "case_id": [1, 2, 3, 4],
                "latitude": ["39.95", "bad", None, 40.01],
                "longitude": [-75.16, -75.10, -75.12, ""],
            }
        )

        result = standardize_coordinates(df)

        assert len(result) == 4
        assert list(result["case_id"]) == [1, 2, 3, 4]
        assert result["latitude"][0] == 39.95
        assert result["latitude"][1:3].isna().all()
        assert pd.isna(result["longitude"][3])

    def test_does_not_modify_input(self):
        """Test the input frame is left as-is."""
        df = pd.DataFrame({"latitude": ["1.5"], "longitude": ["2.5"]})

        standardize_coordinates(df)

        assert df["latitude"][0] == "1.5"

    def test_warns_on_incomplete_rows(self, caplog):
        """Test incomplete rows are counted in a warning."""
        df = pd.DataFrame({"latitude": [1.0, None], "longitude": [None, 2.0]})

        with caplog.at_level("WARNING", logger="tract_lookup.lookup.ingest"):
            standardize_coordinates(df)

        assert "Found 2 records" in caplog.text

    def test_missing_column(self):
        """Test a missing coordinate column is a configuration error."""
        with pytest.raises(ConfigurationError):
            standardize_coordinates(pd.DataFrame({"latitude": [1.0]}))

    def test_custom_columns(self):
        """Test alternative column names."""
        df = pd.DataFrame({"lat": ["1"], "lon": ["2"]})

        result = standardize_coordinates(df, lat_col="lat", lon_col="lon")

        assert result["lat"][0] == 1.0
        assert result["lon"][0] == 2.0


def test_read_coordinates(tmp_path, test_config):
    """Test reading a cases CSV in file order."""
    path = tmp_path / "cases.csv"
    path.write_text("id,latitude,longitude\n7,39.95,-75.15\n3,,-75.05\n5,40.05,-75.05\n")

    cases = read_coordinates(path, config=test_config)

    assert list(cases["id"]) == [7, 3, 5]
    assert pd.isna(cases["latitude"][1])
    assert cases["longitude"][2] == -75.05
