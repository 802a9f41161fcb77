"""Dataset shape and grouping integrity checks."""

from __future__ import annotations

import re
from typing import Any, Mapping

import numpy as np


PERIOD_KEY_PATTERN = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")


def _finding(check: str, indicator: str, period: str, detail: str) -> dict[str, Any]:
    return {
        "Check": check,
        "Indicator": indicator,
        "Period": period,
        "Detail": detail,
    }


def _check_period_keys(findings: list[dict[str, Any]], data: Mapping[str, Mapping[str, float]]) -> None:
    for indicator, monthly in data.items():
        for period in monthly:
            if not PERIOD_KEY_PATTERN.match(str(period)):
                findings.append(_finding("Period key format", indicator, str(period), "Expected YYYY-MM with month 01-12."))


def _check_finite_values(findings: list[dict[str, Any]], data: Mapping[str, Mapping[str, float]]) -> None:
    for indicator, monthly in data.items():
        if not monthly:
            continue
        periods = list(monthly.keys())
        values = np.asarray([monthly[p] for p in periods], dtype=float)
        for idx in np.flatnonzero(~np.isfinite(values)):
            findings.append(_finding("Non-finite value", indicator, periods[int(idx)], f"Value is {values[idx]!r}."))


def _check_grouping(
    findings: list[dict[str, Any]],
    data: Mapping[str, Mapping[str, float]],
    grouped: Mapping[str, Mapping[str, Mapping[str, float]]],
) -> None:
    for year, indicators in grouped.items():
        for indicator, months in indicators.items():
            source = data.get(indicator, {})
            for month, value in months.items():
                period = f"{year}-{month}"
                if period not in source:
                    findings.append(_finding("Grouped value without source", indicator, period, "No matching source period."))
                elif not np.isclose(float(source[period]), float(value), rtol=0.0, atol=1e-9):
                    findings.append(
                        _finding(
                            "Grouped value mismatch",
                            indicator,
                            period,
                            f"Grouped {value!r} differs from source {source[period]!r}.",
                        )
                    )


def run_integrity_checks(
    data: Mapping[str, Mapping[str, float]],
    grouped: Mapping[str, Mapping[str, Mapping[str, float]]] | None = None,
) -> list[dict[str, Any]]:
    """Return integrity findings (empty list means all checks passed)."""
    if not data:
        return [_finding("Dataset not available", "", "", "No indicators were loaded.")]

    findings: list[dict[str, Any]] = []
    _check_period_keys(findings, data)
    _check_finite_values(findings, data)
    if grouped is not None:
        _check_grouping(findings, data, grouped)
    return findings
