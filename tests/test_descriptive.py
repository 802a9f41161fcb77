from __future__ import annotations

import math

import pytest

from budget_analytics.descriptive import mean, nearest_rank, remove_outliers, safe_div, sample_standard_deviation


def test_sample_standard_deviation_uses_n_minus_one():
    assert sample_standard_deviation([2, 4, 4, 4, 5, 5, 7, 9]) == pytest.approx(math.sqrt(32 / 7))


def test_sample_standard_deviation_is_zero_for_short_inputs():
    assert sample_standard_deviation([]) == 0.0
    assert sample_standard_deviation([42.0]) == 0.0


def test_mean_and_safe_div_handle_empty_and_zero():
    assert mean([]) == 0.0
    assert mean([1, 2, 3]) == 2.0
    assert safe_div(1.0, 0.0) == 0.0
    assert safe_div(3.0, 2.0) == 1.5


def test_nearest_rank_uses_floor_index_without_interpolation():
    ordered = [float(v) for v in range(1, 101)]
    assert nearest_rank(ordered, 0.05) == 6.0
    assert nearest_rank(ordered, 0.5) == 51.0
    assert nearest_rank(ordered, 0.95) == 96.0
    assert nearest_rank([7.0], 0.95) == 7.0


def test_nearest_rank_rejects_empty_input():
    with pytest.raises(ValueError):
        nearest_rank([], 0.5)


def test_remove_outliers_drops_extremes_and_keeps_order():
    assert remove_outliers([3, 1, 2, 100, 4]) == [3.0, 1.0, 2.0, 4.0]


def test_remove_outliers_skips_short_series():
    assert remove_outliers([1, 2, 1000]) == [1.0, 2.0, 1000.0]
