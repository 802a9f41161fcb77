"""Descriptive statistics primitives shared by the stats and simulation engines."""

from __future__ import annotations

import math
from typing import Sequence


def safe_div(a: float, b: float) -> float:
    return float(a / b) if b else 0.0


def mean(values: Sequence[float]) -> float:
    if len(values) == 0:
        return 0.0
    return float(sum(values)) / len(values)


def sample_standard_deviation(values: Sequence[float], center: float | None = None) -> float:
    """Sample standard deviation (divisor n-1); 0.0 when fewer than two values."""
    n = len(values)
    if n < 2:
        return 0.0
    mu = mean(values) if center is None else float(center)
    deviations = [float(v) - mu for v in values]
    variance = sum(d * d for d in deviations) / (n - 1)
    result = math.sqrt(variance)
    return result if math.isfinite(result) else 0.0


def nearest_rank(sorted_values: Sequence[float], p: float) -> float:
    """Element at index floor(n * p) of an ascending sequence (no interpolation)."""
    if len(sorted_values) == 0:
        raise ValueError("Cannot take a percentile of an empty sequence.")
    idx = min(int(math.floor(len(sorted_values) * p)), len(sorted_values) - 1)
    return float(sorted_values[idx])


def remove_outliers(values: Sequence[float]) -> list[float]:
    """Drop values outside [Q1 - 1.5 IQR, Q3 + 1.5 IQR]; order of kept values is preserved."""
    if len(values) < 4:
        return [float(v) for v in values]
    ordered = sorted(float(v) for v in values)
    q1 = nearest_rank(ordered, 0.25)
    q3 = nearest_rank(ordered, 0.75)
    iqr = q3 - q1
    lower = q1 - 1.5 * iqr
    upper = q3 + 1.5 * iqr
    return [float(v) for v in values if lower <= v <= upper]
