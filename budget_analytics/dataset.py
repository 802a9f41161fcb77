"""Loading and slicing of the monthly budget execution dataset."""

from __future__ import annotations

import json
import math
from pathlib import Path
from typing import Any, Iterable, Mapping, Sequence

import numpy as np
import pandas as pd


INDICATOR_NAME_FIELD = "INDICATOR Name"
MONTHS = [f"{m:02d}" for m in range(1, 13)]

FinancialData = dict[str, dict[str, float]]

INDICATOR_CATEGORIES: list[dict[str, Any]] = [
    {
        "name": "Revenue",
        "indicators": [
            "Ukupni Prihodi, Euro",
            "Porezi, Euro",
            "Doprinosi, Euro",
            "Carine, Euro",
            "Takse, Euro",
            "Ostali prihodi, Euro",
            "Grantovi i transferi, Euro",
        ],
        "color": "#10b981",
    },
    {
        "name": "Taxes - Detail",
        "indicators": [
            "Porez na lična primanja, Euro",
            "Porez na dobit preduzeća, Euro",
            "Porez na dodatu vrijednost, Euro",
            "Akcize, Euro",
            "Porez na međunarodnu trgovinu i transakcije, Euro",
            "Ostali republikanski porezi, Euro",
        ],
        "color": "#3b82f6",
    },
    {
        "name": "Expenditure",
        "indicators": [
            "Ukupni Rashodi, Euro",
            "Tekući rashodi, Euro",
            "Kapitalni rashodi, Euro",
            "Transferi za socijalno osiguranje, Euro",
        ],
        "color": "#ef4444",
    },
    {
        "name": "Expenditure - Detail",
        "indicators": [
            "Bruto plate i doprinosi, Euro",
            "Rashodi za usluge, Euro",
            "Rashodi za materijal, Euro",
            "Tekuće održavanje, Euro",
            "Kamata, Euro",
            "Subvencije, Euro",
        ],
        "color": "#f59e0b",
    },
    {
        "name": "Balance and Financing",
        "indicators": [
            "Suficit / deficit, Euro",
            "Primarni bilans, Euro",
            "Finansiranje, Euro",
            "Potrebe za finansiranjem, Euro",
        ],
        "color": "#8b5cf6",
    },
]


def category_indicators(data: Mapping[str, Any], category_name: str) -> list[str]:
    """Indicators of a named category that exist in ``data``; every indicator for an unknown name."""
    for category in INDICATOR_CATEGORIES:
        if category["name"] == category_name:
            return [name for name in category["indicators"] if name in data]
    return list(data.keys())


def _parse_amount(value: Any) -> float:
    if value is None:
        return float("nan")
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    text = str(value).replace(",", "").strip()
    try:
        return float(text)
    except ValueError:
        return float("nan")


def parse_financial_records(records: Iterable[Mapping[str, Any]]) -> FinancialData:
    """Turn raw resource rows into indicator -> period -> value."""
    data: FinancialData = {}
    for item in records:
        indicator = item.get(INDICATOR_NAME_FIELD)
        if indicator is None:
            continue
        data[str(indicator)] = {
            str(period): _parse_amount(raw) for period, raw in item.items() if period != INDICATOR_NAME_FIELD
        }
    return data


def load_financial_data(path: str | Path) -> FinancialData:
    records = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(records, list):
        raise ValueError("Budget data resource must be a JSON list of indicator rows.")
    return parse_financial_records(records)


def available_months(data: Mapping[str, Mapping[str, float]]) -> list[str]:
    months: set[str] = set()
    for monthly in data.values():
        months.update(monthly.keys())
    return sorted(months)


def available_years(data: Mapping[str, Mapping[str, float]]) -> list[str]:
    """Years present in the data, newest first."""
    years = {month.split("-")[0] for month in available_months(data)}
    return sorted(years, key=int, reverse=True)


def latest_year_months(data: Mapping[str, Mapping[str, float]]) -> list[str]:
    months = available_months(data)
    if not months:
        return []
    latest = max(int(m.split("-")[0]) for m in months)
    return [m for m in months if m.startswith(str(latest))]


def get_available_date_range(data: Mapping[str, Mapping[str, float]]) -> tuple[str, str]:
    months = available_months(data)
    if not months:
        return "", ""
    return months[0], months[-1]


def filter_data_by_date_range(data: Mapping[str, Mapping[str, float]], start: str, end: str) -> FinancialData:
    """Keep periods in [start, end] and drop indicators left empty."""
    filtered: FinancialData = {}
    for indicator, monthly in data.items():
        kept = {month: value for month, value in monthly.items() if start <= month <= end}
        if kept:
            filtered[indicator] = kept
    return filtered


def indicator_values(data: Mapping[str, Mapping[str, float]], indicator: str) -> list[float]:
    """Finite values of one indicator in period order; unparsed amounts are skipped."""
    monthly = data.get(indicator, {})
    values = (float(monthly[k]) for k in sorted(monthly.keys()))
    return [v for v in values if math.isfinite(v)]


def resolve_indicator_key(data: Mapping[str, Any], candidate_names: Sequence[str]) -> str | None:
    for name in candidate_names:
        if name in data:
            return name
    return None


def _is_present(value: Any) -> bool:
    if value is None:
        return False
    try:
        if np.isnan(value):
            return False
    except TypeError:
        pass
    return bool(value)


def group_by_year(
    data: Mapping[str, Mapping[str, float]],
    selected_indicators: Iterable[str],
    selected_years: Iterable[str],
) -> dict[str, dict[str, dict[str, float]]]:
    """Partition periods into year -> indicator -> two-digit month -> value.

    Zero and missing values are left out, so a month absent here reads as a
    zero baseline in year-over-year comparisons.
    """
    months = available_months(data)
    indicators = list(selected_indicators)
    grouped: dict[str, dict[str, dict[str, float]]] = {}
    for year in selected_years:
        year = str(year)
        grouped[year] = {}
        for indicator in indicators:
            grouped[year][indicator] = {}
            monthly = data.get(indicator, {})
            for month in months:
                if not month.startswith(year):
                    continue
                value = monthly.get(month)
                if _is_present(value):
                    grouped[year][indicator][month.split("-")[1]] = float(value)
    return grouped


def clean_indicator_name(indicator: str) -> str:
    name = indicator[: -len(" Euros")] if indicator.endswith(" Euros") else indicator
    if name[:1] in (" ", "="):
        name = name[1:]
    return name


def comparison_chart_rows(
    grouped_data_by_year: Mapping[str, Mapping[str, Mapping[str, float]]],
    selected_indicators: Sequence[str],
) -> list[dict[str, Any]]:
    """One row per calendar month with a "<indicator> (<year>)" column per series."""
    rows: list[dict[str, Any]] = []
    for month in MONTHS:
        row: dict[str, Any] = {"month": month}
        for year, indicators in grouped_data_by_year.items():
            for indicator in selected_indicators:
                row[f"{clean_indicator_name(indicator)} ({year})"] = indicators.get(indicator, {}).get(month, 0) or 0
        rows.append(row)
    return rows


def to_long_frame(data: Mapping[str, Mapping[str, float]], indicators: Iterable[str] | None = None) -> pd.DataFrame:
    """Long table with Period, Date, Indicator and Value columns."""
    wanted = list(data.keys()) if indicators is None else [i for i in indicators if i in data]
    rows = [
        {"Period": period, "Indicator": indicator, "Value": float(value)}
        for indicator in wanted
        for period, value in data[indicator].items()
    ]
    frame = pd.DataFrame(rows, columns=["Period", "Indicator", "Value"])
    frame["Date"] = pd.to_datetime(frame["Period"], format="%Y-%m", errors="coerce")
    return frame.sort_values(["Indicator", "Period"]).reset_index(drop=True)
