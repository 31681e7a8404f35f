"""Calendar-period views of a trade history.

- calculate_monthly_returns: P&L, return and intra-month drawdown per month
- calculate_trading_frequency: trade counts per day/week/month and the mean
  gap between consecutive trades

Months are keyed "YYYY-MM" from each trade's effective time and replayed
against a running balance carried over from the previous month.
"""

from typing import Sequence

from qmetrics.libraries.performance.models import MonthlyReturn, Trade, TradingFrequency
from qmetrics.libraries.performance.returns import sort_trades

SECONDS_PER_DAY = 24 * 60 * 60
AVERAGE_DAYS_PER_MONTH = 30.44


def calculate_monthly_returns(trades: Sequence[Trade], initial_balance: float) -> list[MonthlyReturn]:
    """
    Per-month performance in chronological order.

    Each month starts from the balance the previous month ended on. The
    drawdown is measured against a peak that starts at the month-start
    balance, so a month that opens underwater only counts new losses.

    Args:
        trades: Closed trades in any order
        initial_balance: Balance before the first trade

    Returns:
        One MonthlyReturn per month that has trades (empty for no trades)
    """
    months: dict[str, list[Trade]] = {}
    for trade in sort_trades(trades):
        months.setdefault(trade.effective_time.strftime("%Y-%m"), []).append(trade)

    balance = float(initial_balance)
    results: list[MonthlyReturn] = []

    for month in sorted(months):
        month_trades = months[month]
        start = balance
        peak = start
        deepest = 0.0

        for trade in month_trades:
            balance += trade.total_pnl
            peak = max(peak, balance)
            if peak > 0:
                deepest = max(deepest, (peak - balance) / peak * 100)

        pnl = sum(trade.total_pnl for trade in month_trades)
        results.append(
            MonthlyReturn(
                month=month,
                trade_count=len(month_trades),
                pnl=pnl,
                return_pct=pnl / start * 100 if start != 0 else 0.0,
                max_drawdown=-deepest if deepest > 0 else 0.0,
            )
        )

    return results


def calculate_trading_frequency(trades: Sequence[Trade]) -> TradingFrequency:
    """
    Trading activity rates.

    The span runs from the open of the chronologically first trade to the
    effective time of the last one and is at least one day. The gap between
    two consecutive trades is next open minus previous effective time, in
    hours; overlapping positions make it negative.

    Returns:
        TradingFrequency (all zeros for an empty history)
    """
    if not trades:
        return TradingFrequency()

    ordered = sort_trades(trades)
    count = len(ordered)
    span_days = max(1.0, (ordered[-1].effective_time - ordered[0].open_time).total_seconds() / SECONDS_PER_DAY)

    gaps = [
        (current.open_time - previous.effective_time).total_seconds() / 3600
        for previous, current in zip(ordered, ordered[1:])
    ]

    return TradingFrequency(
        trades_per_day=count / span_days,
        trades_per_week=count / (span_days / 7),
        trades_per_month=count / (span_days / AVERAGE_DAYS_PER_MONTH),
        average_hours_between_trades=sum(gaps) / len(gaps) if gaps else 0.0,
    )
