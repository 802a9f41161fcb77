"""Monte Carlo forecasting of a budget indicator from its historical returns."""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field
from typing import Sequence

import numpy as np

from budget_analytics.descriptive import mean, nearest_rank, remove_outliers, sample_standard_deviation


MIN_HISTORY = 3
RETURN_EPSILON = 0.01
VOLATILITY_CAP = 0.5
MIN_PERIOD_RETURN = -0.8
MAX_PERIOD_RETURN = 2.0
RETURNED_SAMPLE_SIZE = 1000
PERCENTILES = {
    "percentile5": 0.05,
    "percentile25": 0.25,
    "percentile50": 0.50,
    "percentile75": 0.75,
    "percentile95": 0.95,
}


class InsufficientDataError(ValueError):
    """Historical data cannot support a simulation."""


@dataclass(frozen=True)
class ReturnStatistics:
    mean_return: float
    std_dev: float


@dataclass
class MonteCarloResult:
    """Terminal-value distribution of a simulation run.

    ``simulations`` holds at most the first 1000 ascending terminal values;
    the other fields are computed over every trial.
    """

    mean: float
    standard_deviation: float
    percentile5: float
    percentile25: float
    percentile50: float
    percentile75: float
    percentile95: float
    simulations: list[float] = field(default_factory=list)

    def to_dict(self) -> dict:
        return asdict(self)


def calculate_returns(values: Sequence[float]) -> list[float]:
    returns: list[float] = []
    for prev_value, value in zip(values[:-1], values[1:]):
        if abs(prev_value) > RETURN_EPSILON:
            rate = (value - prev_value) / abs(prev_value)
            if math.isfinite(rate):
                returns.append(float(rate))
    return returns


def return_statistics(returns: Sequence[float]) -> ReturnStatistics:
    mean_return = mean(returns)
    return ReturnStatistics(mean_return=mean_return, std_dev=sample_standard_deviation(returns, mean_return))


def _nonzero_uniform(rng: np.random.Generator, size: int) -> np.ndarray:
    u = rng.random(size)
    zeros = u == 0.0
    while zeros.any():
        u[zeros] = rng.random(int(zeros.sum()))
        zeros = u == 0.0
    return u


def random_normal(rng: np.random.Generator, size: int, mu: float = 0.0, sigma: float = 1.0) -> np.ndarray:
    """Box-Muller normal draws from two uniforms in (0, 1)."""
    u1 = _nonzero_uniform(rng, size)
    u2 = _nonzero_uniform(rng, size)
    z = np.sqrt(-2.0 * np.log(u1)) * np.cos(2.0 * np.pi * u2)
    return z * sigma + mu


def _finite(value: float) -> float:
    value = float(value)
    return value if math.isfinite(value) else 0.0


def _validate_count(name: str, value: int) -> int:
    if isinstance(value, bool) or int(value) != value or int(value) < 1:
        raise ValueError(f"{name} must be a positive integer, got {value!r}.")
    return int(value)


def run_monte_carlo_simulation(
    historical_values: Sequence[float],
    periods: int = 12,
    simulations: int = 10000,
    rng: np.random.Generator | None = None,
) -> MonteCarloResult:
    """Simulate ``simulations`` trajectories of ``periods`` steps from the last clean value.

    Raises InsufficientDataError with fewer than three historical values or
    when no usable period return can be derived.
    """
    if len(historical_values) < MIN_HISTORY:
        raise InsufficientDataError(
            f"At least {MIN_HISTORY} historical values are required for simulation, got {len(historical_values)}."
        )
    periods = _validate_count("periods", periods)
    simulations = _validate_count("simulations", simulations)
    rng = rng if rng is not None else np.random.default_rng()

    cleaned = remove_outliers(historical_values)
    returns = calculate_returns(cleaned)
    if not returns:
        raise InsufficientDataError("No usable returns could be derived from the historical values.")

    stats = return_statistics(returns)
    adjusted_std = min(stats.std_dev, VOLATILITY_CAP)

    # One draw per trial per period; trials are independent rows of the vector.
    values = np.full(simulations, cleaned[-1], dtype=float)
    with np.errstate(over="ignore", invalid="ignore"):
        for _ in range(periods):
            drawn = random_normal(rng, simulations, stats.mean_return, adjusted_std)
            bounded = np.clip(drawn, MIN_PERIOD_RETURN, MAX_PERIOD_RETURN)
            values = np.maximum(0.0, values * (1.0 + bounded))
        # Trajectories that overflowed count as 0.
        values[~np.isfinite(values)] = 0.0
        final_values = np.sort(values)
        final_mean = _finite(final_values.mean())

    final_list = final_values.tolist()
    percentiles = {name: nearest_rank(final_list, p) for name, p in PERCENTILES.items()}
    return MonteCarloResult(
        mean=final_mean,
        standard_deviation=sample_standard_deviation(final_list, final_mean),
        simulations=final_list[:RETURNED_SAMPLE_SIZE],
        **percentiles,
    )


def distribution_histogram(values: Sequence[float], bins: int = 50) -> list[dict]:
    """Equal-width frequency bins over the returned simulation sample."""
    if len(values) == 0 or bins < 1:
        return []
    low = float(min(values))
    high = float(max(values))
    bin_size = (high - low) / bins
    rows = [{"value": low + i * bin_size, "frequency": 0} for i in range(bins)]
    for v in values:
        idx = int(math.floor((v - low) / bin_size)) if bin_size > 0 else 0
        rows[min(idx, bins - 1)]["frequency"] += 1
    return rows


def simulation_summary(result: MonteCarloResult, sample_size: int = 10) -> dict:
    """Compact result payload for the narrative text service."""
    sample = result.simulations
    return {
        "mean": result.mean,
        "percentile5": result.percentile5,
        "percentile25": result.percentile25,
        "percentile75": result.percentile75,
        "percentile95": result.percentile95,
        "min": min(sample) if sample else 0.0,
        "max": max(sample) if sample else 0.0,
        "sample_simulations": list(sample[:sample_size]),
    }
