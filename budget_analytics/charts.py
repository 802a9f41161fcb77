"""Plotly figures shared by the dashboard page and the PDF report."""

from __future__ import annotations

from typing import Mapping, Sequence

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

from budget_analytics.dataset import comparison_chart_rows, to_long_frame
from budget_analytics.monte_carlo import MonteCarloResult, distribution_histogram


SERIES_COLORS = ["#3b82f6", "#10b981", "#ef4444", "#f59e0b", "#8b5cf6", "#06b6d4", "#84cc16", "#f97316"]


def time_series_figure(
    data: Mapping[str, Mapping[str, float]],
    indicators: Sequence[str],
    title: str = "Monthly Indicator Trends",
) -> go.Figure | None:
    frame = to_long_frame(data, indicators)
    if frame.empty:
        return None
    fig = px.line(
        frame,
        x="Date",
        y="Value",
        color="Indicator",
        markers=True,
        title=title,
        color_discrete_sequence=SERIES_COLORS,
    )
    fig.update_layout(legend_title_text="", yaxis_title="EUR")
    return fig


def comparison_figure(
    grouped_data_by_year: Mapping[str, Mapping[str, Mapping[str, float]]],
    indicators: Sequence[str],
    title: str = "Year-over-Year Comparison by Month",
) -> go.Figure | None:
    if len(grouped_data_by_year) < 2 or not indicators:
        return None
    chart = pd.DataFrame(comparison_chart_rows(grouped_data_by_year, indicators))
    melt = chart.melt("month", var_name="Series", value_name="Value")
    fig = px.bar(
        melt,
        x="month",
        y="Value",
        color="Series",
        barmode="group",
        title=title,
        color_discrete_sequence=SERIES_COLORS,
    )
    fig.update_layout(xaxis_title="Month", yaxis_title="EUR", legend_title_text="")
    return fig


def distribution_figure(result: MonteCarloResult, title: str = "Simulated Terminal Value Distribution") -> go.Figure | None:
    rows = distribution_histogram(result.simulations)
    if not rows:
        return None
    hist = pd.DataFrame(rows)
    fig = go.Figure(go.Bar(x=hist["value"], y=hist["frequency"], marker_color=SERIES_COLORS[0], name="Frequency"))
    for label, value, dash in [
        ("P5", result.percentile5, "dot"),
        ("P50", result.percentile50, "solid"),
        ("P95", result.percentile95, "dot"),
    ]:
        fig.add_vline(x=value, line_dash=dash, line_color="#ef4444", annotation_text=label)
    fig.update_layout(title=title, xaxis_title="Value (EUR)", yaxis_title="Frequency", showlegend=False)
    return fig
