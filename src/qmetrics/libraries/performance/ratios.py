"""Composite return-to-risk ratios.

Combines the total return, elapsed time, distribution metrics and drawdown
metrics into the ratio family reported by the engine.

Denominator policy: wherever a ratio divides by a risk measure that can be
zero (drawdown deviation, Ulcer Index, average drawdown, standard deviation)
the denominator is floored to 1 instead of producing infinity.

Sharpe and Sortino use calendar-day returns (see calculate_daily_returns) and
take the risk-free rate as an annual decimal (0.02 = 2%), converted to
percentage points before it is subtracted from the annual return. Their
denominator is not floored: a zero deviation gives 0.

Market model: no benchmark return series is part of the input, so beta is
fixed at 1. Under that model Treynor and Jensen alpha both reduce to
annual_return - risk_free_rate.
"""

from typing import Sequence

from qmetrics.libraries.performance.distribution import calculate_std_dev
from qmetrics.libraries.performance.models import DrawdownMetrics, RatioMetrics, RiskMetrics

# Sterling adjustment: percentage points added to the max drawdown.
STERLING_ADJUSTMENT = 10.0

FIXED_BETA = 1.0


def _floor_one(value: float) -> float:
    return value if value != 0 else 1.0


def calculate_annual_return(total_return_pct: float, years_elapsed: float) -> float:
    """Total return spread linearly over elapsed years; 0 when no time elapsed."""
    if years_elapsed == 0:
        return 0.0
    return total_return_pct / years_elapsed


def calculate_calmar_ratio(total_return_pct: float, max_drawdown_pct: float, years_elapsed: float) -> float:
    """|annual return / max drawdown|; 0 when either drawdown or time is 0."""
    if max_drawdown_pct == 0 or years_elapsed == 0:
        return 0.0
    return abs(calculate_annual_return(total_return_pct, years_elapsed) / max_drawdown_pct)


def calculate_sterling_ratio(total_return_pct: float, max_drawdown_pct: float, years_elapsed: float) -> float:
    """Annual return / (|max drawdown| + 10)."""
    if years_elapsed == 0:
        return 0.0
    return calculate_annual_return(total_return_pct, years_elapsed) / (abs(max_drawdown_pct) + STERLING_ADJUSTMENT)


def calculate_sharpe_ratio(annual_return: float, daily_returns: Sequence[float], risk_free_rate: float) -> float:
    """
    Excess annual return per unit of daily return volatility.

    Sharpe = (annual_return - risk_free_rate * 100) / std(daily_returns)

    Returns:
        0 when the daily returns have no dispersion (including a single day)
    """
    volatility = calculate_std_dev(daily_returns)
    if volatility == 0:
        return 0.0
    return (annual_return - risk_free_rate * 100) / volatility


def calculate_sortino_ratio(annual_return: float, daily_returns: Sequence[float], risk_free_rate: float) -> float:
    """
    Sharpe variant that only counts losing days as risk.

    The denominator is the standard deviation of the negative daily returns
    among themselves. Returns 0 with fewer than two distinct losing days.
    """
    downside = calculate_std_dev([r for r in daily_returns if r < 0])
    if downside == 0:
        return 0.0
    return (annual_return - risk_free_rate * 100) / downside


def calculate_trend_strength(equity_curve: Sequence[float]) -> float:
    """
    Linearity and direction of the equity curve.

    Fits an ordinary least-squares line of equity against index and returns
    R^2 * sign(slope). A flat curve (no variance) has no trend and yields 0.

    Returns:
        Value in [-1, 1]; 0 for fewer than two points
    """
    n = len(equity_curve)
    if n < 2:
        return 0.0

    sum_x = n * (n - 1) / 2
    sum_x2 = (n - 1) * n * (2 * n - 1) / 6
    sum_y = sum(equity_curve)
    sum_xy = sum(i * y for i, y in enumerate(equity_curve))

    slope = (n * sum_xy - sum_x * sum_y) / (n * sum_x2 - sum_x * sum_x)
    intercept = (sum_y - slope * sum_x) / n

    y_mean = sum_y / n
    ss_total = sum((y - y_mean) ** 2 for y in equity_curve)
    if ss_total == 0:
        return 0.0

    ss_residual = sum((y - (slope * i + intercept)) ** 2 for i, y in enumerate(equity_curve))
    r_squared = 1 - ss_residual / ss_total

    return r_squared if slope > 0 else -r_squared


def calculate_risk_parity_score(returns: Sequence[float]) -> float:
    """
    Balance between average gain size and average loss size.

    1 means winners and losers have the same average magnitude; 0 when
    either side is empty.
    """
    positive = [r for r in returns if r > 0]
    negative = [r for r in returns if r < 0]

    if not positive or not negative:
        return 0.0

    avg_positive = sum(positive) / len(positive)
    avg_negative = abs(sum(negative) / len(negative))

    return 1 - abs(avg_positive - avg_negative) / (avg_positive + avg_negative)


def compute_ratio_metrics(
    total_return_pct: float,
    max_drawdown_pct: float,
    years_elapsed: float,
    risk_metrics: RiskMetrics,
    drawdown_metrics: DrawdownMetrics,
    equity_curve: Sequence[float],
    returns: Sequence[float] = (),
    risk_free_rate: float = 0.0,
    daily_returns: Sequence[float] = (),
) -> RatioMetrics:
    """
    Compute every composite ratio.

    Args:
        total_return_pct: Sum of per-trade returns (percent)
        max_drawdown_pct: Max drawdown (negative percent)
        years_elapsed: Length of the trade history in years
        risk_metrics: Output of compute_risk_metrics (supplies std_dev)
        drawdown_metrics: Output of analyze_drawdowns
        equity_curve: Equity curve for the trend regression
        returns: Per-trade returns for the risk parity score
        risk_free_rate: Annual risk-free rate
        daily_returns: Per-day returns for Sharpe and Sortino

    Returns:
        RatioMetrics with every field populated
    """
    annual_return = calculate_annual_return(total_return_pct, years_elapsed)
    std_dev = _floor_one(risk_metrics.std_dev)
    excess_return = annual_return - risk_free_rate

    return RatioMetrics(
        annual_return=annual_return,
        sharpe_ratio=calculate_sharpe_ratio(annual_return, daily_returns, risk_free_rate),
        sortino_ratio=calculate_sortino_ratio(annual_return, daily_returns, risk_free_rate),
        calmar_ratio=calculate_calmar_ratio(total_return_pct, max_drawdown_pct, years_elapsed),
        sterling_ratio=calculate_sterling_ratio(total_return_pct, max_drawdown_pct, years_elapsed),
        burke_ratio=total_return_pct / _floor_one(drawdown_metrics.drawdown_deviation),
        martin_ratio=annual_return / _floor_one(drawdown_metrics.ulcer_index),
        pain_index=drawdown_metrics.average_drawdown,
        pain_ratio=total_return_pct / abs(_floor_one(drawdown_metrics.average_drawdown)),
        treynor_ratio=excess_return / FIXED_BETA,
        information_ratio=annual_return / std_dev,
        jensen_alpha=excess_return,
        beta=FIXED_BETA,
        efficiency_ratio=abs(total_return_pct) / std_dev,
        volatility_adjusted_return=total_return_pct / std_dev,
        trend_strength=calculate_trend_strength(equity_curve),
        risk_parity_score=calculate_risk_parity_score(returns),
    )
