"""Drawdown path analysis of an equity curve.

Walks the curve once with a running peak. Drawdown at each point is

    drawdown_i = (peak_i - equity_i) / peak_i * 100

which is non-negative and zero at every new peak. A drawdown episode is a
maximal run of consecutive points with drawdown > 0; an episode still open
at the end of the curve is closed at the series end.

Reported drawdown levels (max, average) are negative percentages; depths,
deviation and the Ulcer Index are positive.
"""

import math
from typing import Sequence

from qmetrics.libraries.performance.models import DrawdownEpisode, DrawdownMetrics


def calculate_drawdown_series(equity_curve: Sequence[float]) -> list[float]:
    """
    Percent drawdown from the running peak at each curve point.

    A running peak that is not positive (only possible with a non-positive
    starting balance) yields a drawdown of 0 for that point.

    Example:
        >>> calculate_drawdown_series([1000.0, 1100.0, 800.0, 850.0])
        [0.0, 0.0, 27.27..., 22.72...]
    """
    series: list[float] = []
    if not equity_curve:
        return series

    peak = equity_curve[0]
    for equity in equity_curve:
        if equity > peak:
            peak = equity
        if peak > 0 and equity < peak:
            series.append((peak - equity) / peak * 100)
        else:
            series.append(0.0)

    return series


def find_drawdown_episodes(drawdowns: Sequence[float]) -> list[DrawdownEpisode]:
    """
    Identify maximal runs of strictly positive drawdown.

    Args:
        drawdowns: Output of calculate_drawdown_series

    Returns:
        Episodes in order of occurrence
    """
    episodes: list[DrawdownEpisode] = []
    start: int | None = None
    depth = 0.0

    for i, dd in enumerate(drawdowns):
        if dd > 0:
            if start is None:
                start = i
                depth = dd
            else:
                depth = max(depth, dd)
        elif start is not None:
            episodes.append(
                DrawdownEpisode(start_index=start, end_index=i - 1, length=i - start, depth_pct=depth, recovered=True)
            )
            start = None

    # Handle ongoing drawdown at end
    if start is not None:
        end = len(drawdowns) - 1
        episodes.append(
            DrawdownEpisode(start_index=start, end_index=end, length=end - start + 1, depth_pct=depth, recovered=False)
        )

    return episodes


def calculate_ulcer_index(drawdowns: Sequence[float]) -> float:
    """Root-mean-square drawdown over every curve point."""
    if not drawdowns:
        return 0.0
    return math.sqrt(sum(dd * dd for dd in drawdowns) / len(drawdowns))


def calculate_recovery_factor(total_return_pct: float, max_drawdown: float) -> float:
    """|total return / max drawdown|, with the denominator floored to 1 when it is 0."""
    return abs(total_return_pct / (max_drawdown if max_drawdown != 0 else 1.0))


def analyze_drawdowns(equity_curve: Sequence[float], total_return_pct: float = 0.0) -> DrawdownMetrics:
    """
    Compute all drawdown metrics for an equity curve.

    Args:
        equity_curve: Balances starting with the initial balance
        total_return_pct: Total return used for the recovery factor

    Returns:
        DrawdownMetrics; a curve of length <= 1 yields all zeros
    """
    drawdowns = calculate_drawdown_series(equity_curve)
    if len(drawdowns) <= 1:
        return DrawdownMetrics(
            recovery_factor=calculate_recovery_factor(total_return_pct, 0.0),
            drawdown_series=drawdowns,
        )

    underwater = [dd for dd in drawdowns if dd > 0]
    episodes = find_drawdown_episodes(drawdowns)
    durations = [episode.length for episode in episodes]

    max_drawdown = -max(underwater) if underwater else 0.0

    if underwater:
        dd_mean = sum(underwater) / len(underwater)
        average_drawdown = -dd_mean
        deviation = math.sqrt(sum((dd - dd_mean) ** 2 for dd in underwater) / len(underwater))
    else:
        average_drawdown = 0.0
        deviation = 0.0

    return DrawdownMetrics(
        max_drawdown=max_drawdown,
        average_drawdown=average_drawdown,
        max_drawdown_duration=max(durations) if durations else 0,
        average_drawdown_duration=sum(durations) / len(durations) if durations else 0.0,
        drawdown_deviation=deviation,
        ulcer_index=calculate_ulcer_index(drawdowns),
        recovery_factor=calculate_recovery_factor(total_return_pct, max_drawdown),
        drawdown_series=drawdowns,
        episodes=episodes,
    )
