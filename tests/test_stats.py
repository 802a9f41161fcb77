from __future__ import annotations

import math

import pytest

from budget_analytics.stats import (
    EMPTY_STATS,
    analyze_budget_trend,
    calculate_stats,
    compute_yoy_metrics,
    growth_rate,
    yoy_metric_key,
)


def test_calculate_stats_empty_returns_zero_summary():
    assert calculate_stats([]) == EMPTY_STATS
    assert calculate_stats([]).to_dict() == {
        "total": 0.0,
        "average": 0.0,
        "min": 0.0,
        "max": 0.0,
        "growth_rate": 0.0,
        "standard_deviation": 0.0,
    }


def test_calculate_stats_reference_series():
    stats = calculate_stats([2, 4, 4, 4, 5, 5, 7, 9])
    assert stats.total == 40.0
    assert stats.average == 5.0
    assert stats.min == 2.0
    assert stats.max == 9.0
    assert stats.standard_deviation == pytest.approx(2.13809, abs=1e-5)
    assert stats.growth_rate == pytest.approx((4.5 ** (1 / 7) - 1) * 100)


def test_single_value_has_no_growth_or_spread():
    stats = calculate_stats([250.0])
    assert stats.total == 250.0
    assert stats.growth_rate == 0.0
    assert stats.standard_deviation == 0.0


def test_growth_rate_compounds_per_period():
    assert growth_rate([100.0, 121.0]) == pytest.approx(21.0)
    assert growth_rate([100.0, 110.0, 121.0]) == pytest.approx(10.0)


def test_growth_rate_zero_base():
    assert growth_rate([0.0, 10.0]) == 100.0
    assert growth_rate([0.0, -5.0]) == 0.0
    assert growth_rate([0.0, 0.0]) == 0.0


def test_growth_rate_sign_flip_is_negative():
    assert growth_rate([10.0, -20.0]) == pytest.approx(-100.0)
    assert growth_rate([-10.0, -20.0]) == pytest.approx(100.0)


def test_stats_are_always_finite():
    stats = calculate_stats([-5.0, 0.0, 12.5, -3.25])
    assert all(math.isfinite(v) for v in stats.to_dict().values())


def test_yoy_metric_key_format():
    assert yoy_metric_key("03", "2023", "2024") == "03 (2023 vs 2024)"


def test_compute_yoy_metrics_against_previous_year():
    grouped = {
        "2023": {"A": {"01": 100.0, "02": 50.0}},
        "2024": {"A": {"01": 110.0, "03": 30.0}},
    }
    metrics = compute_yoy_metrics(grouped, ["A"], ["2024", "2023"])
    assert set(metrics["A"]) == {"01 (2023 vs 2024)", "03 (2023 vs 2024)"}
    jan = metrics["A"]["01 (2023 vs 2024)"]
    assert jan.delta == pytest.approx(10.0)
    assert jan.percent_change == pytest.approx(10.0)
    mar = metrics["A"]["03 (2023 vs 2024)"]
    assert mar.delta == pytest.approx(30.0)
    assert mar.percent_change == 0.0


def test_compute_yoy_metrics_only_pairs_consecutive_selected_years():
    grouped = {
        "2022": {"A": {"01": 10.0}},
        "2023": {"A": {"01": 20.0}},
        "2024": {"A": {"01": 40.0}},
    }
    metrics = compute_yoy_metrics(grouped, ["A"], ["2022", "2024", "2023"])
    assert set(metrics["A"]) == {"01 (2022 vs 2023)", "01 (2023 vs 2024)"}
    assert metrics["A"]["01 (2023 vs 2024)"].percent_change == pytest.approx(100.0)


def test_compute_yoy_metrics_needs_two_years():
    assert compute_yoy_metrics({"2024": {"A": {"01": 1.0}}}, ["A"], ["2024"]) == {}


def test_compute_yoy_metrics_lists_every_indicator(sample_grouped):
    metrics = compute_yoy_metrics(sample_grouped, ["Ukupni Prihodi, Euro", "Missing"], ["2023", "2024"])
    assert metrics["Missing"] == {}
    assert "02 (2023 vs 2024)" not in metrics["Ukupni Prihodi, Euro"]


def test_analyze_budget_trend_short_series_defaults():
    trend = analyze_budget_trend([1.0] * 11)
    assert (trend.trend, trend.volatility, trend.seasonality) == ("stable", "low", False)


def test_analyze_budget_trend_detects_rise_and_fall():
    rising = [100 * 1.1**i for i in range(12)]
    assert analyze_budget_trend(rising).trend == "rising"
    assert analyze_budget_trend(list(reversed(rising))).trend == "falling"


def test_analyze_budget_trend_flat_series():
    trend = analyze_budget_trend([100.0] * 24)
    assert (trend.trend, trend.volatility, trend.seasonality) == ("stable", "low", False)


def test_analyze_budget_trend_detects_quarterly_seasonality():
    values = [130.0 if i % 12 < 3 else 100.0 for i in range(24)]
    trend = analyze_budget_trend(values)
    assert trend.seasonality is True
    assert trend.volatility == "low"
    assert trend.trend == "stable"


def test_analyze_budget_trend_zero_average_is_low_volatility():
    values = [1.0, -1.0] * 6
    assert analyze_budget_trend(values).volatility == "low"
    assert analyze_budget_trend([0.0] * 12).volatility == "low"


def test_calculate_stats_skips_unparsed_amounts(sample_data):
    raw = list(sample_data["Porezi, Euro"].values())
    stats = calculate_stats(raw)
    assert stats.total == pytest.approx(1270.0)
    assert stats.average == pytest.approx(1270.0 / 3)
    assert (stats.min, stats.max) == (400.0, 450.0)
    assert calculate_stats([float("nan"), float("inf")]) == EMPTY_STATS
