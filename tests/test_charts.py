from __future__ import annotations

import numpy as np

from budget_analytics.charts import comparison_figure, distribution_figure, time_series_figure
from budget_analytics.monte_carlo import run_monte_carlo_simulation


def test_time_series_figure_has_trace_per_indicator(sample_data):
    fig = time_series_figure(sample_data, ["Ukupni Prihodi, Euro", "Ukupni Rashodi, Euro"])
    assert fig is not None
    assert {trace.name for trace in fig.data} == {"Ukupni Prihodi, Euro", "Ukupni Rashodi, Euro"}


def test_time_series_figure_none_without_selection(sample_data):
    assert time_series_figure(sample_data, []) is None
    assert time_series_figure(sample_data, ["Unknown"]) is None


def test_comparison_figure_needs_two_years(sample_data, sample_grouped):
    assert comparison_figure({"2024": sample_grouped["2024"]}, ["Ukupni Prihodi, Euro"]) is None
    fig = comparison_figure(sample_grouped, ["Ukupni Prihodi, Euro"])
    assert fig is not None
    assert len(fig.data) == 2


def test_distribution_figure_marks_percentiles():
    result = run_monte_carlo_simulation([100.0, 104.0, 99.0, 110.0, 115.0], 6, 500, rng=np.random.default_rng(3))
    fig = distribution_figure(result)
    assert fig is not None
    assert len(fig.data[0].x) == 50
    assert len(fig.layout.shapes) == 3
