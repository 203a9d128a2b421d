"""Tests for percentage and absolute HLE series."""

import math

from services.percentages import (
    calculate_percentage,
    derive_hle_series,
    derive_percentages,
    simple_mean,
    weighted_average_percentage,
)

CATEGORIES = ["Excluded", "Maintenance", "Bug", "Product"]


def _cells(excluded=0, maintenance=0, bug=0, product=0):
    return {"Excluded": excluded, "Maintenance": maintenance, "Bug": bug, "Product": product}


class TestCalculatePercentage:
    """Test one-decimal percentages."""

    def test_rounds_to_one_decimal(self):
        assert calculate_percentage(1, 3) == 33.3
        assert calculate_percentage(2, 3) == 66.7

    def test_zero_total(self):
        assert calculate_percentage(0, 0) == 0
        assert calculate_percentage(5, 0) == 0


class TestDerivePercentages:
    """Test per-group breakdowns with the Excluded category removed."""

    def test_excluded_does_not_dilute(self):
        """Excluded effort is out of both numerator and denominator."""
        hle = {"6.1": _cells(excluded=100, maintenance=1, bug=1, product=2)}
        result = derive_percentages(["6.1"], CATEGORIES, hle)

        assert "Excluded" not in result
        assert result["Maintenance"][0] == 25.0
        assert result["Bug"][0] == 25.0
        assert result["Product"][0] == 50.0

    def test_group_percentages_sum_to_100(self):
        hle = {
            "6.1": _cells(maintenance=1.3, bug=2.2, product=3.1),
            "6.2": _cells(maintenance=7, bug=0, product=0.5),
        }
        result = derive_percentages(["6.1", "6.2"], CATEGORIES, hle)

        for index in range(2):
            total = sum(result[c][index] for c in ("Maintenance", "Bug", "Product"))
            assert abs(total - 100.0) <= 0.5

    def test_zero_total_group_is_all_zero(self):
        """No NaN or exception for a group with only excluded effort."""
        hle = {"6.1": _cells(excluded=4), "6.2": _cells(product=2)}
        result = derive_percentages(["6.1", "6.2"], CATEGORIES, hle)

        for category in ("Maintenance", "Bug", "Product"):
            assert result[category][0] == 0
            assert not math.isnan(result[category][-1])
        assert result["Product"][1] == 100.0

    def test_trailing_value_is_effort_weighted(self):
        """The average weights groups by effort, unlike a mean of percentages."""
        hle = {
            "6.1": _cells(bug=1, product=0),   # Bug 100%
            "6.2": _cells(bug=0, product=9),   # Bug 0%
        }
        result = derive_percentages(["6.1", "6.2"], CATEGORIES, hle)

        assert result["Bug"] == [100.0, 0.0, 10.0]
        assert result["Product"] == [0.0, 100.0, 90.0]

    def test_no_groups(self):
        result = derive_percentages([], CATEGORIES, {})
        assert result == {"Maintenance": [0], "Bug": [0], "Product": [0]}

    def test_custom_exclusion(self):
        hle = {"1.0": _cells(excluded=1, maintenance=1, bug=2)}
        result = derive_percentages(["1.0"], CATEGORIES, hle, excluded=("Bug",))
        assert result["Excluded"][0] == 50.0
        assert "Bug" not in result


class TestWeightedAverage:
    """Test the effort-weighted average directly."""

    def test_weighted_by_volume(self):
        hle = {"a": _cells(bug=3, product=1), "b": _cells(bug=0, product=6)}
        assert weighted_average_percentage(["a", "b"], "Bug", ["Bug", "Product"], hle) == 30.0


class TestDeriveHleSeries:
    """Test absolute HLE series with a plain mean."""

    def test_appends_simple_mean(self):
        hle = {"6.1": _cells(bug=1, product=0), "6.2": _cells(bug=0, product=9)}
        series = derive_hle_series(["6.1", "6.2"], CATEGORIES, hle)

        assert series["Bug"] == [1, 0, 0.5]
        assert series["Product"] == [0, 9, 4.5]
        assert series["Excluded"] == [0, 0, 0]

    def test_mean_rounded_to_two_decimals(self):
        assert simple_mean([1, 1, 2]) == 1.33

    def test_empty(self):
        assert simple_mean([]) == 0
        assert derive_hle_series([], ["Bug"], {}) == {"Bug": [0]}
