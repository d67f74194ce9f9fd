"""
Unit tests for the choropleth Classifier.
"""

import pandas as pd
import pytest

from tract_lookup.aggregation.classifier import (
    NO_DATA_LABEL,
    ClassificationBreaks,
    Classifier,
    palette_colors,
)
from tract_lookup.shared.config import ClassificationConfig
from tract_lookup.shared.errors import ConfigurationError


class TestPalettes:
    """Test cases for palette_colors."""

    def test_five_reds(self):
        colors = palette_colors("Reds", 5)

        assert len(colors) == 5
        assert colors[0] == "#fee5d9"
        assert colors[-1] == "#a50f15"

    def test_two_classes(self):
        assert palette_colors("Blues", 2) == ["#deebf7", "#3182bd"]

    def test_unknown_palette(self):
        with pytest.raises(ConfigurationError):
            palette_colors("Greens", 5)

    def test_too_many_classes(self):
        with pytest.raises(ConfigurationError):
            palette_colors("Reds", 10)


class TestClassificationBreaks:
    """Test cases for ClassificationBreaks."""

    @pytest.fixture
    def breaks(self):
        return ClassificationBreaks(
            breaks=(2.0, 4.0, 6.0, 8.0),
            num_classes=5,
            method="equal_interval",
            minimum=0.0,
            maximum=10.0,
        )

    def test_upper_inclusive(self, breaks):
        """Test a value equal to a break falls in the lower class."""
        assert breaks.classify(0) == 0
        assert breaks.classify(2) == 0
        assert breaks.classify(2.5) == 1
        assert breaks.classify(8) == 3
        assert breaks.classify(10) == 4

    def test_missing_value(self, breaks):
        assert breaks.classify(None) is None
        assert breaks.classify(pd.NA) is None
        assert breaks.label_for(None) == NO_DATA_LABEL

    def test_labels(self, breaks):
        assert breaks.labels() == ["[0, 2]", "(2, 4]", "(4, 6]", "(6, 8]", "(8, 10]"]
        assert breaks.label_for(5) == "(4, 6]"

    def test_no_data(self):
        breaks = ClassificationBreaks(breaks=(), num_classes=5, method="quantile")

        assert not breaks.has_data
        assert breaks.classify(3) is None
        assert breaks.labels() == []


class TestClassifier:
    """Test cases for Classifier."""

    def test_quantile_breaks(self, test_config):
        """Test quantile breaks split five values into five classes."""
        values = [1, 2, 5, 9, 20]

        breaks = Classifier(test_config, num_classes=5).compute_breaks(values)

        assert len(breaks.breaks) == 4
        assert breaks.breaks == pytest.approx((1.8, 3.8, 6.6, 11.2))
        assert list(breaks.breaks) == sorted(breaks.breaks)
        assert [breaks.classify(v) for v in values] == [0, 1, 2, 3, 4]

    def test_equal_interval_breaks(self, test_config):
        breaks = Classifier(test_config, num_classes=4, method="equal_interval").compute_breaks(
            [0, 3, 10, 20]
        )

        assert breaks.breaks == pytest.approx((5.0, 10.0, 15.0))
        assert breaks.method == "equal_interval"
        assert (breaks.minimum, breaks.maximum) == (0.0, 20.0)

    def test_missing_values_ignored(self, test_config):
        """Test missing counts do not shift the breaks."""
        classifier = Classifier(test_config, num_classes=5)

        with_missing = classifier.compute_breaks([1, None, 2, pd.NA, 5, 9, float("nan"), 20])
        without = classifier.compute_breaks([1, 2, 5, 9, 20])

        assert with_missing.breaks == without.breaks

    def test_identical_values(self, test_config):
        """Test constant values give non-decreasing breaks."""
        breaks = Classifier(test_config, num_classes=3).compute_breaks([4, 4, 4])

        assert breaks.breaks == (4.0, 4.0)
        assert breaks.classify(4) == 0

    def test_no_values(self, test_config):
        breaks = Classifier(test_config).compute_breaks([None, None])

        assert breaks.breaks == ()
        assert not breaks.has_data

    def test_defaults_from_config(self, test_config):
        classifier = Classifier(test_config)

        assert classifier.num_classes == test_config.classification.num_classes
        assert classifier.method == "quantile"

    @pytest.mark.parametrize("kwargs", [{"num_classes": 1}, {"method": "jenks"}])
    def test_invalid_parameters(self, test_config, kwargs):
        with pytest.raises(ConfigurationError):
            Classifier(test_config, **kwargs)

    @pytest.mark.parametrize(
        "settings",
        [{"num_classes": 10}, {"palette": "Greens"}],
    )
    def test_palette_checked_on_construction(self, test_config, settings):
        """Test a palette without a k-class scheme is rejected up front."""
        config = test_config.model_copy(
            update={"classification": ClassificationConfig(**settings)}
        )

        with pytest.raises(ConfigurationError):
            Classifier(config)

    def test_classify_table(self, test_config):
        """Test class and colour columns, with no data for missing counts."""
        table = pd.DataFrame(
            {
                "NAME10": ["1", "2", "3", "4", "5", "6"],
                "ncases": pd.array([1, 2, None, 5, 9, 20], dtype="Int64"),
            }
        )

        classified, breaks = Classifier(test_config).classify_table(table)

        classes = classified["ncases_class"]
        assert str(classes.dtype) == "Int64"
        assert list(classes.dropna()) == [0, 1, 2, 3, 4]
        assert pd.isna(classes[2])
        assert classified["fill_color"][2] == "#ffffff"
        assert classified["fill_color"][5] == "#a50f15"
        assert classified["ncases_label"][2] == NO_DATA_LABEL
        assert classified["ncases_label"][0] == "[1, 1.8]"
        assert breaks.breaks == pytest.approx((1.8, 3.8, 6.6, 11.2))
        assert "ncases_class" not in table.columns

    def test_classify_table_with_given_breaks(self, test_config):
        table = pd.DataFrame({"count": [1, 50]})
        breaks = ClassificationBreaks(
            breaks=(10.0,), num_classes=2, method="equal_interval", minimum=0.0, maximum=20.0
        )

        classified, used = Classifier(test_config, num_classes=2).classify_table(
            table, value_column="count", breaks=breaks
        )

        assert used is breaks
        assert list(classified["ncases_class"]) == [0, 1]
