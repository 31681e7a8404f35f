"""Time-of-trade performance buckets.

Two composable stages:

1. aggregate_time_buckets: group total P&L by hour of day, day of week and
   calendar month of each trade's effective time
2. select_best_worst: pick the buckets with the highest and lowest mean P&L

analyze_sessions groups separately by the UTC hour each trade opened in
(asian 00-08, european 08-16, american 16-24).

Bucket ordering is deterministic: hour and day keys ascend numerically,
month keys appear in order of first occurrence in the chronological trade
list. Ties in mean P&L go to the first key in that order.

Timestamps are bucketed by their own wall clock (the timezone they carry).
"""

from datetime import datetime, timezone
from typing import Hashable, Mapping, Sequence, TypeVar

from qmetrics.libraries.performance.models import SessionPerformance, TimeBucketMetrics, Trade
from qmetrics.libraries.performance.returns import sort_trades

K = TypeVar("K", bound=Hashable)

MONTH_NAMES = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")
DAY_NAMES = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")


def day_of_week(timestamp: datetime) -> int:
    """Day of week with Sunday=0 ... Saturday=6."""
    return timestamp.isoweekday() % 7


def month_name(timestamp: datetime) -> str:
    """Short English month name, independent of the process locale."""
    return MONTH_NAMES[timestamp.month - 1]


def aggregate_time_buckets(
    trades: Sequence[Trade],
) -> tuple[dict[int, list[float]], dict[int, list[float]], dict[str, list[float]]]:
    """
    Group total P&L into hour, weekday and month buckets.

    Args:
        trades: Trades in any order

    Returns:
        (hourly, daily, monthly) maps of bucket -> list of P&L values.
        Buckets without trades are absent.
    """
    hourly: dict[int, list[float]] = {}
    daily: dict[int, list[float]] = {}
    monthly: dict[str, list[float]] = {}

    for trade in sort_trades(trades):
        when = trade.effective_time
        pnl = trade.total_pnl
        hourly.setdefault(when.hour, []).append(pnl)
        daily.setdefault(day_of_week(when), []).append(pnl)
        monthly.setdefault(month_name(when), []).append(pnl)

    return (
        {hour: hourly[hour] for hour in sorted(hourly)},
        {day: daily[day] for day in sorted(daily)},
        monthly,
    )


def select_best_worst(buckets: Mapping[K, Sequence[float]], default: K) -> tuple[K, K]:
    """
    Select the buckets with the highest and lowest mean P&L.

    Args:
        buckets: Bucket -> P&L values, in iteration order used for tie-breaks
        default: Returned for both when there are no buckets

    Returns:
        (best_key, worst_key)
    """
    best_key = worst_key = default
    best_avg = float("-inf")
    worst_avg = float("inf")

    for key, pnls in buckets.items():
        if not pnls:
            continue
        avg = sum(pnls) / len(pnls)
        if avg > best_avg:
            best_avg = avg
            best_key = key
        if avg < worst_avg:
            worst_avg = avg
            worst_key = key

    return best_key, worst_key


def bucket_means(buckets: Mapping[K, Sequence[float]]) -> dict[K, float]:
    """Mean P&L per populated bucket."""
    return {key: sum(pnls) / len(pnls) for key, pnls in buckets.items() if pnls}


def analyze_time_buckets(trades: Sequence[Trade]) -> TimeBucketMetrics:
    """Aggregate trades into time buckets and select the best and worst of each."""
    hourly, daily, monthly = aggregate_time_buckets(trades)

    best_hour, worst_hour = select_best_worst(hourly, 0)
    best_day, worst_day = select_best_worst(daily, 0)
    best_month, worst_month = select_best_worst(monthly, "")

    return TimeBucketMetrics(
        hourly_pnl=hourly,
        daily_pnl=daily,
        monthly_pnl=monthly,
        best_hour=best_hour,
        worst_hour=worst_hour,
        best_day_of_week=best_day,
        worst_day_of_week=worst_day,
        best_month=best_month,
        worst_month=worst_month,
    )


# (name, first hour, end hour) in UTC
SESSIONS = (("asian", 0, 8), ("european", 8, 16), ("american", 16, 24))


def session_of(timestamp: datetime) -> str:
    """Market session of a timestamp by its UTC hour."""
    hour = timestamp.astimezone(timezone.utc).hour
    for name, start, end in SESSIONS:
        if start <= hour < end:
            return name
    return SESSIONS[-1][0]


def analyze_sessions(trades: Sequence[Trade]) -> list[SessionPerformance]:
    """
    Performance per market session, keyed by each trade's UTC open hour.

    Always returns the asian, european and american entries in that order;
    a session without trades reports zeros.
    """
    pnls: dict[str, list[float]] = {name: [] for name, _, _ in SESSIONS}
    for trade in trades:
        pnls[session_of(trade.open_time)].append(trade.total_pnl)

    results = []
    for name, values in pnls.items():
        count = len(values)
        total = sum(values)
        results.append(
            SessionPerformance(
                session=name,
                trade_count=count,
                total_pnl=total,
                average_pnl=total / count if count else 0.0,
                win_rate=sum(1 for pnl in values if pnl > 0) / count * 100 if count else 0.0,
            )
        )
    return results
