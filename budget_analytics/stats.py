"""Summary statistics and year-over-year comparisons for budget indicators."""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from typing import Iterable, Mapping, Sequence

from budget_analytics.descriptive import mean, safe_div, sample_standard_deviation


GroupedByYear = Mapping[str, Mapping[str, Mapping[str, float]]]


@dataclass(frozen=True)
class StatsSummary:
    """Aggregate statistics for one indicator's ordered values."""

    total: float
    average: float
    min: float
    max: float
    growth_rate: float
    standard_deviation: float

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class YoYMetric:
    delta: float
    percent_change: float

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class BudgetTrend:
    trend: str
    volatility: str
    seasonality: bool


EMPTY_STATS = StatsSummary(
    total=0.0,
    average=0.0,
    min=0.0,
    max=0.0,
    growth_rate=0.0,
    standard_deviation=0.0,
)


def growth_rate(values: Sequence[float]) -> float:
    """Compound per-period growth between first and last value, in percent.

    A zero base reports 100 when the series ends positive, otherwise 0. The
    magnitude is taken from |last / first| and flipped negative when the two
    endpoints have different signs.
    """
    if len(values) < 2:
        return 0.0
    first = float(values[0])
    last = float(values[-1])
    if first == 0:
        return 100.0 if last > 0 else 0.0

    periods = len(values) - 1
    rate = ((abs(last) / abs(first)) ** (1 / periods) - 1) * 100
    same_sign = (last >= 0 and first >= 0) or (last < 0 and first < 0)
    trend_multiplier = 1.0 if same_sign else -1.0
    return rate * trend_multiplier if math.isfinite(rate) else 0.0


def calculate_stats(values: Sequence[float]) -> StatsSummary:
    """Summary of the finite values; an empty or all-missing series gives EMPTY_STATS."""
    values = [float(v) for v in values if math.isfinite(float(v))]
    if not values:
        return EMPTY_STATS

    total = float(sum(values))
    average = total / len(values)
    return StatsSummary(
        total=total,
        average=average,
        min=min(values),
        max=max(values),
        growth_rate=growth_rate(values),
        standard_deviation=sample_standard_deviation(values, average),
    )


def yoy_metric_key(month: str, prev_year: str, curr_year: str) -> str:
    return f"{month} ({prev_year} vs {curr_year})"


def compute_yoy_metrics(
    grouped_data_by_year: GroupedByYear,
    selected_indicators: Iterable[str],
    selected_years: Iterable[str],
) -> dict[str, dict[str, YoYMetric]]:
    """Compare each month of a selected year against the previous selected year.

    Only consecutive pairs of the ascending year selection are compared. A
    month missing from the previous year counts as a zero baseline.
    """
    years = sorted(str(y) for y in selected_years)
    metrics: dict[str, dict[str, YoYMetric]] = {}
    if len(years) < 2:
        return metrics

    for indicator in selected_indicators:
        metrics[indicator] = {}
        for i in range(1, len(years)):
            prev_year = years[i - 1]
            curr_year = years[i]
            curr_months = grouped_data_by_year.get(curr_year, {}).get(indicator, {})
            prev_months = grouped_data_by_year.get(prev_year, {}).get(indicator, {})
            for month, curr_value in curr_months.items():
                prev_value = float(prev_months.get(month, 0.0) or 0.0)
                curr_value = float(curr_value or 0.0)
                delta = curr_value - prev_value
                percent_change = (delta / prev_value) * 100 if prev_value != 0 else 0.0
                metrics[indicator][yoy_metric_key(month, prev_year, curr_year)] = YoYMetric(
                    delta=delta,
                    percent_change=percent_change,
                )
    return metrics


def _detect_seasonality(values: Sequence[float]) -> bool:
    quarter_averages = []
    for q in range(4):
        quarter_values = [v for idx, v in enumerate(values) if q * 3 <= idx % 12 < (q + 1) * 3]
        if quarter_values:
            quarter_averages.append(mean(quarter_values))
    if len(quarter_averages) < 4:
        return False
    lowest = min(quarter_averages)
    if lowest == 0:
        return False
    return (max(quarter_averages) - lowest) / lowest > 0.2


def analyze_budget_trend(values: Sequence[float]) -> BudgetTrend:
    """Classify direction, volatility and seasonality of a monthly series."""
    if len(values) < 12:
        return BudgetTrend(trend="stable", volatility="low", seasonality=False)

    stats = calculate_stats(values)
    cv = safe_div(stats.standard_deviation, abs(stats.average))

    if abs(stats.growth_rate) > 5:
        trend = "rising" if stats.growth_rate > 0 else "falling"
    else:
        trend = "stable"

    if cv > 0.3:
        volatility = "high"
    elif cv > 0.15:
        volatility = "moderate"
    else:
        volatility = "low"

    seasonality = _detect_seasonality(values) if len(values) >= 24 else False
    return BudgetTrend(trend=trend, volatility=volatility, seasonality=seasonality)
