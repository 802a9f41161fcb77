"""Guidance ranges and advisory checks for simulation controls."""

from __future__ import annotations

from typing import Any


INPUT_GUIDANCE: dict[str, dict[str, Any]] = {
    "simulation_periods": {
        "min": 1,
        "max": 60,
        "typical_max": 24,
        "note": "Months projected forward from the last clean historical value.",
    },
    "simulation_count": {
        "min": 100,
        "max": 100000,
        "typical_max": 20000,
        "note": "Independent trials; percentiles stabilise above a few thousand.",
    },
    "selected_years": {
        "min": 2,
        "max": None,
        "typical_max": None,
        "note": "Year-over-year comparisons pair each selected year with the previous selected one.",
    },
}


def help_with_guidance(key: str, base_help: str = "") -> str:
    meta = INPUT_GUIDANCE.get(key)
    if not meta:
        return base_help
    bounds = []
    if meta.get("min") is not None:
        bounds.append(f"min {meta['min']:,}")
    if meta.get("max") is not None:
        bounds.append(f"max {meta['max']:,}")
    parts = [p for p in [base_help, meta.get("note", ""), ", ".join(bounds)] if p]
    return " ".join(parts)


def advisory_warnings(inputs: dict[str, Any]) -> list[str]:
    """Return non-blocking warnings for values outside typical ranges."""
    warnings: list[str] = []
    periods = inputs.get("simulation_periods")
    if isinstance(periods, (int, float)) and periods > INPUT_GUIDANCE["simulation_periods"]["typical_max"]:
        warnings.append(
            f"Projection horizon of {int(periods)} months compounds volatility; long-range percentiles widen quickly."
        )
    count = inputs.get("simulation_count")
    if isinstance(count, (int, float)) and count > INPUT_GUIDANCE["simulation_count"]["typical_max"]:
        warnings.append(f"{int(count):,} trials may take noticeably longer to run.")
    if isinstance(count, (int, float)) and count < 1000:
        warnings.append("Fewer than 1,000 trials gives unstable tail percentiles.")
    years = inputs.get("selected_years")
    if isinstance(years, (list, tuple)) and len(years) < INPUT_GUIDANCE["selected_years"]["min"]:
        warnings.append("Select at least 2 years for year-over-year comparison.")
    return warnings
