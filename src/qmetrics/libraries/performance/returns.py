"""Return series and equity curve construction.

Every other stage consumes the output of this module. Trades are ordered by
effective time (close time, falling back to open time) with a stable sort,
then replayed against a running balance.

Usage:
    >>> from qmetrics.libraries.performance.returns import build_return_series
    >>> returns, equity_curve = build_return_series(trades, initial_balance=10_000.0)
"""

from datetime import date
from typing import Sequence

from qmetrics.libraries.performance.models import Trade

SECONDS_PER_YEAR = 365.25 * 24 * 60 * 60


def sort_trades(trades: Sequence[Trade]) -> list[Trade]:
    """
    Order trades chronologically by effective time.

    Python's sort is stable, so trades sharing a timestamp keep their input
    order. The input sequence is not modified.

    Args:
        trades: Trades in any order

    Returns:
        New list sorted ascending by effective time
    """
    return sorted(trades, key=lambda t: t.effective_time)


def build_return_series(trades: Sequence[Trade], initial_balance: float) -> tuple[list[float], list[float]]:
    """
    Build the per-trade return series and the equity curve.

    For each trade in chronological order:
        return_pct = total_pnl / running_balance * 100
        running_balance += total_pnl

    A running balance of exactly zero yields a 0 return for that trade.
    Balances are not clamped; a curve may go negative.

    Args:
        trades: Closed trades in any order
        initial_balance: Balance before the first trade

    Returns:
        (returns, equity_curve) where len(returns) == len(trades) and
        len(equity_curve) == len(trades) + 1

    Example:
        >>> returns, curve = build_return_series([trade_with_pnl_98], 10_000.0)
        >>> returns
        [0.98]
        >>> curve
        [10000.0, 10098.0]
    """
    balance = float(initial_balance)
    returns: list[float] = []
    equity_curve: list[float] = [balance]

    for trade in sort_trades(trades):
        pnl = trade.total_pnl
        returns.append(pnl / balance * 100 if balance != 0 else 0.0)
        balance += pnl
        equity_curve.append(balance)

    return returns, equity_curve


def calculate_total_return_pct(returns: Sequence[float]) -> float:
    """
    Total return as the sum of per-trade percentage returns.

    This is additive, not compounded, and is what every ratio in the report
    is based on.
    """
    return float(sum(returns))


def calculate_years_elapsed(trades: Sequence[Trade]) -> float:
    """
    Time covered by the trade history, in years of 365.25 days.

    Measured from the open time of the chronologically first trade to the
    effective time of the last one. An empty history spans 1.0 year so that
    annualisation leaves totals unchanged.

    Args:
        trades: Closed trades in any order

    Returns:
        Elapsed years (0.0 when all trades share one instant)
    """
    if not trades:
        return 1.0

    ordered = sort_trades(trades)
    elapsed = (ordered[-1].effective_time - ordered[0].open_time).total_seconds()
    return elapsed / SECONDS_PER_YEAR


def calculate_daily_returns(trades: Sequence[Trade], initial_balance: float) -> list[float]:
    """
    Percentage return of each calendar day that has trades.

    Total P&L is summed per date of the effective time (in each timestamp's
    own timezone) and replayed in chronological order against the running
    balance, the same way build_return_series treats single trades. Days
    without trades are skipped.

    Args:
        trades: Closed trades in any order
        initial_balance: Balance before the first trade

    Returns:
        One return per traded day, chronological

    Example:
        >>> calculate_daily_returns([+100 on Jan 2, +50 on Jan 2, -115 on Jan 3], 1_000.0)
        [15.0, -10.0]
    """
    daily_pnl: dict[date, float] = {}
    for trade in sort_trades(trades):
        day = trade.effective_time.date()
        daily_pnl[day] = daily_pnl.get(day, 0.0) + trade.total_pnl

    balance = float(initial_balance)
    returns: list[float] = []
    for pnl in daily_pnl.values():
        returns.append(pnl / balance * 100 if balance != 0 else 0.0)
        balance += pnl

    return returns
