"""Monte Carlo bootstrap of historical trade returns.

Each run starts at the initial balance and, for every step, draws one
historical return uniformly at random with replacement and compounds it:

    balance *= 1 + r / 100

Draws are independent across steps and runs. This is a historical bootstrap;
no distribution is fitted to the returns.

Reproducibility: pass a seeded numpy Generator (or an integer seed) as rng.

Usage:
    >>> import numpy as np
    >>> result = simulate(returns, 10_000.0, rng=np.random.default_rng(42))
    >>> result.p5 <= result.p50 <= result.p95
    True
"""

import math
from typing import Sequence

import numpy as np
import structlog

from qmetrics.libraries.performance.models import SimulationResult

logger = structlog.get_logger(__name__)

PERCENTILES = (0.05, 0.25, 0.50, 0.75, 0.95)


def nearest_rank_percentile(sorted_values: Sequence[float], quantile: float) -> float:
    """
    Value at index floor(n * quantile) of an ascending sequence.

    The index is clamped to the last element.
    """
    index = min(math.floor(len(sorted_values) * quantile), len(sorted_values) - 1)
    return float(sorted_values[index])


def simulate(
    historical_returns: Sequence[float],
    initial_balance: float,
    periods: int = 252,
    simulations: int = 100,
    rng: np.random.Generator | int | None = None,
    sample_paths: int = 5,
) -> SimulationResult:
    """
    Run a bootstrap simulation of terminal balances.

    Args:
        historical_returns: Per-trade returns (percent) to resample
        initial_balance: Starting balance of every run
        periods: Steps per run
        simulations: Number of independent runs
        rng: numpy Generator, integer seed, or None for fresh entropy
        sample_paths: Number of leading runs whose trajectory is retained

    Returns:
        SimulationResult with p5/p25/p50/p75/p95 of terminal balances.
        With no runs (simulations <= 0 or periods <= 0) every percentile
        equals the initial balance. An empty history keeps balances flat.
    """
    initial = float(initial_balance)

    if simulations <= 0 or periods <= 0:
        return SimulationResult(
            initial_balance=initial,
            simulations=max(simulations, 0),
            periods=max(periods, 0),
            p5=initial,
            p25=initial,
            p50=initial,
            p75=initial,
            p95=initial,
        )

    generator = np.random.default_rng(rng)

    if len(historical_returns) > 0:
        pool = np.asarray(historical_returns, dtype=float)
        draws = pool[generator.integers(0, len(pool), size=(simulations, periods))]
    else:
        draws = np.zeros((simulations, periods))

    paths = initial * np.cumprod(1.0 + draws / 100.0, axis=1)
    terminal = paths[:, -1]

    ordered = np.sort(terminal)
    p5, p25, p50, p75, p95 = (nearest_rank_percentile(ordered, q) for q in PERCENTILES)

    kept = min(sample_paths, simulations)
    retained = [[initial, *path.tolist()] for path in paths[:kept]]

    logger.debug(
        "monte_carlo.completed",
        simulations=simulations,
        periods=periods,
        p50=round(p50, 2),
    )

    return SimulationResult(
        initial_balance=initial,
        simulations=simulations,
        periods=periods,
        p5=p5,
        p25=p25,
        p50=p50,
        p75=p75,
        p95=p95,
        terminal_balances=terminal.tolist(),
        sample_paths=retained,
    )
