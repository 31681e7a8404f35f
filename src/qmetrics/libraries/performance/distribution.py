"""Distribution and tail-risk statistics of a return series.

Pure functions over per-trade percentage returns. Every function returns a
defined value for empty or too-short input instead of raising, and moments
use population formulas (divide by n).

Boundary policies:
- VaR / CVaR of an empty series is 0
- Skewness needs n >= 3, kurtosis n >= 4, both are 0 for zero variance
  (all values equal, or variance negligible relative to the squared mean)
- Omega with no losses is +inf if there are gains, otherwise exactly 1
- Gain/loss ratio with no losers is +inf if there are winners, otherwise 0
"""

import math
from typing import Sequence

from qmetrics.libraries.performance.models import RiskMetrics

ZERO_VARIANCE_TOLERANCE = 1e-12


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values)


def _central_moment(values: Sequence[float], mean: float, order: int) -> float:
    return sum((v - mean) ** order for v in values) / len(values)


def _is_zero_variance(values: Sequence[float], mean: float, m2: float) -> bool:
    # A float mean of a constant series leaves m2 at rounding noise, not 0
    return max(values) == min(values) or m2 <= ZERO_VARIANCE_TOLERANCE * mean * mean


def calculate_std_dev(values: Sequence[float]) -> float:
    """Population standard deviation; exactly 0 for an empty or flat series."""
    if not values:
        return 0.0
    mean = _mean(values)
    m2 = _central_moment(values, mean, 2)
    if _is_zero_variance(values, mean, m2):
        return 0.0
    return math.sqrt(m2)


def calculate_var(returns: Sequence[float], confidence: float = 0.95) -> float:
    """
    Historical Value at Risk.

    Args:
        returns: Per-trade returns (percent)
        confidence: Confidence level, e.g. 0.95

    Returns:
        The return at index floor((1 - confidence) * n) of the ascending
        sorted series. Negative values denote a loss threshold.

    Example:
        >>> calculate_var([-5.0, -1.0, 2.0, 3.0], 0.95)
        -5.0
    """
    if not returns:
        return 0.0

    ordered = sorted(returns)
    index = math.floor((1 - confidence) * len(ordered))
    return float(ordered[min(index, len(ordered) - 1)])


def calculate_expected_shortfall(returns: Sequence[float], confidence: float = 0.95) -> float:
    """
    Expected shortfall (CVaR): mean of all returns at or below VaR.

    Falls back to VaR itself when no return qualifies.
    """
    if not returns:
        return 0.0

    var = calculate_var(returns, confidence)
    tail = [r for r in returns if r <= var]
    if not tail:
        return var
    return _mean(tail)


def calculate_skewness(returns: Sequence[float]) -> float:
    """Third standardised moment m3 / m2^1.5 (population)."""
    if len(returns) < 3:
        return 0.0

    mean = _mean(returns)
    m2 = _central_moment(returns, mean, 2)
    if _is_zero_variance(returns, mean, m2):
        return 0.0

    m3 = _central_moment(returns, mean, 3)
    return m3 / m2**1.5


def calculate_kurtosis(returns: Sequence[float]) -> float:
    """Excess kurtosis m4 / m2^2 - 3 (population)."""
    if len(returns) < 4:
        return 0.0

    mean = _mean(returns)
    m2 = _central_moment(returns, mean, 2)
    if _is_zero_variance(returns, mean, m2):
        return 0.0

    m4 = _central_moment(returns, mean, 4)
    return m4 / m2**2 - 3


def calculate_downside_deviation(returns: Sequence[float], threshold: float = 0.0) -> float:
    """Root-mean-square distance below threshold, over returns strictly below it."""
    below = [r - threshold for r in returns if r < threshold]
    if not below:
        return 0.0
    return math.sqrt(sum(d * d for d in below) / len(below))


def calculate_upside_deviation(returns: Sequence[float], threshold: float = 0.0) -> float:
    """Root-mean-square distance above threshold, over returns strictly above it."""
    above = [r - threshold for r in returns if r > threshold]
    if not above:
        return 0.0
    return math.sqrt(sum(d * d for d in above) / len(above))


def calculate_omega(returns: Sequence[float], threshold: float = 0.0) -> float:
    """
    Omega ratio: 1 + sum(gains above threshold) / sum(losses below threshold).

    Returns:
        +inf when there are gains but no losses, exactly 1.0 when there are
        neither (including an empty series).
    """
    gains = sum(r - threshold for r in returns if r > threshold)
    losses = sum(threshold - r for r in returns if r < threshold)

    if losses == 0:
        return math.inf if gains > 0 else 1.0
    return 1 + gains / losses


def calculate_gain_loss_ratio(pnls: Sequence[float]) -> float:
    """
    Mean winning amount divided by mean absolute losing amount.

    Args:
        pnls: Per-trade profit values

    Returns:
        Ratio, +inf with winners but no losers, 0 with neither
    """
    gains = [p for p in pnls if p > 0]
    losses = [abs(p) for p in pnls if p < 0]

    avg_gain = _mean(gains) if gains else 0.0
    avg_loss = _mean(losses) if losses else 0.0

    if avg_loss > 0:
        return avg_gain / avg_loss
    return math.inf if avg_gain > 0 else 0.0


def compute_risk_metrics(
    returns: Sequence[float],
    pnls: Sequence[float] = (),
    threshold: float = 0.0,
    var_confidence: float = 0.95,
    cvar_confidence: float = 0.99,
) -> RiskMetrics:
    """
    Compute the full distribution metric set.

    Args:
        returns: Per-trade returns (percent), chronological
        pnls: Per-trade profit values for the gain/loss ratio
        threshold: Threshold for Omega and the deviations
        var_confidence: Primary confidence (VaR 95 / expected shortfall)
        cvar_confidence: Tail confidence (VaR 99 / conditional VaR)

    Returns:
        RiskMetrics with every field populated
    """
    return RiskMetrics(
        value_at_risk_95=calculate_var(returns, var_confidence),
        value_at_risk_99=calculate_var(returns, cvar_confidence),
        expected_shortfall=calculate_expected_shortfall(returns, var_confidence),
        conditional_value_at_risk=calculate_expected_shortfall(returns, cvar_confidence),
        skewness=calculate_skewness(returns),
        kurtosis=calculate_kurtosis(returns),
        downside_deviation=calculate_downside_deviation(returns, threshold),
        upside_deviation=calculate_upside_deviation(returns, threshold),
        omega=calculate_omega(returns, threshold),
        gain_loss_ratio=calculate_gain_loss_ratio(pnls),
        std_dev=calculate_std_dev(returns),
    )
