"""Trade outcome statistics and per-symbol breakdown.

All statistics classify trades by total P&L (profit + commission + swap):
winners > 0, losers < 0, break-even == 0.
"""

import math
from collections import defaultdict
from typing import Sequence

from qmetrics.libraries.performance.models import SymbolPerformance, Trade, TradeStatistics
from qmetrics.libraries.performance.returns import sort_trades

KELLY_CAP = 0.25
PROFIT_FACTOR_CAP = 999.0
TAIL_FRACTION = 0.1
TAIL_MIN_TRADES = 10


def calculate_profit_factor(pnls: Sequence[float]) -> float:
    """
    Gross profit / gross loss.

    Returns:
        +inf with profit but no losses, 0 with neither
    """
    gross_profit = sum(p for p in pnls if p > 0)
    gross_loss = abs(sum(p for p in pnls if p < 0))

    if gross_loss > 0:
        return gross_profit / gross_loss
    return math.inf if gross_profit > 0 else 0.0


def calculate_average_rrr(pnls: Sequence[float]) -> float:
    """
    Average realised reward-to-risk: mean win / mean absolute loss.

    Break-even trades are ignored. Returns +inf with winners but no losers,
    0 with no decisive trades.
    """
    winners = [p for p in pnls if p > 0]
    losers = [p for p in pnls if p < 0]

    if not winners and not losers:
        return 0.0
    if not losers:
        return math.inf

    avg_win = sum(winners) / len(winners) if winners else 0.0
    avg_loss = abs(sum(losers) / len(losers))
    return avg_win / avg_loss


def calculate_tail_ratio(pnls: Sequence[float]) -> float:
    """
    Mean of the best 10% of trades / |mean of the worst 10%|.

    Requires at least 10 trades, otherwise 0.
    """
    if len(pnls) < TAIL_MIN_TRADES:
        return 0.0

    ordered = sorted(pnls, reverse=True)
    count = max(1, math.floor(len(ordered) * TAIL_FRACTION))

    avg_top = sum(ordered[:count]) / count
    avg_bottom = abs(sum(ordered[-count:]) / count)

    return avg_top / avg_bottom if avg_bottom > 0 else 0.0


def calculate_kelly_percent(pnls: Sequence[float]) -> float:
    """
    Kelly criterion position size in percent, capped at 25%.

    kelly = win_rate - (1 - win_rate) / payoff_ratio, clamped to [0, 0.25].
    Win rate is taken over decisive (non break-even) trades.
    """
    winners = [p for p in pnls if p > 0]
    losers = [p for p in pnls if p < 0]

    if not winners or not losers:
        return 0.0

    win_rate = len(winners) / (len(winners) + len(losers))
    avg_win = sum(winners) / len(winners)
    avg_loss = abs(sum(losers) / len(losers))

    payoff_ratio = avg_win / avg_loss
    kelly = win_rate - (1 - win_rate) / payoff_ratio

    return max(0.0, min(KELLY_CAP, kelly)) * 100


def calculate_average_duration_hours(trades: Sequence[Trade]) -> float:
    """Mean duration of trades with a positive duration, converted from minutes to hours."""
    durations = [t.duration for t in trades if t.duration is not None and t.duration > 0]
    if not durations:
        return 0.0
    return sum(durations) / len(durations) / 60


def calculate_monthly_win_rate(trades: Sequence[Trade]) -> float:
    """Mean of per calendar-month (year and month) win rates, in percent."""
    months: dict[tuple[int, int], list[int]] = {}

    for trade in trades:
        when = trade.effective_time
        wins_total = months.setdefault((when.year, when.month), [0, 0])
        wins_total[1] += 1
        if trade.total_pnl > 0:
            wins_total[0] += 1

    if not months:
        return 0.0

    rates = [wins / total * 100 for wins, total in months.values()]
    return sum(rates) / len(rates)


def compute_trade_statistics(trades: Sequence[Trade]) -> TradeStatistics:
    """
    Aggregate trade outcome statistics.

    Args:
        trades: Trades in any order

    Returns:
        TradeStatistics; an empty list yields all zeros
    """
    if not trades:
        return TradeStatistics()

    ordered = sort_trades(trades)
    pnls = [t.total_pnl for t in ordered]
    winners = [p for p in pnls if p > 0]
    losers = [p for p in pnls if p < 0]

    gross_profit = sum(winners)
    gross_loss = abs(sum(losers))

    return TradeStatistics(
        total_trades=len(pnls),
        winning_trades=len(winners),
        losing_trades=len(losers),
        breakeven_trades=len(pnls) - len(winners) - len(losers),
        win_rate=len(winners) / len(pnls) * 100,
        gross_profit=gross_profit,
        gross_loss=gross_loss,
        profit_factor=calculate_profit_factor(pnls),
        expectancy=sum(pnls) / len(pnls),
        average_win=gross_profit / len(winners) if winners else 0.0,
        average_loss=gross_loss / len(losers) if losers else 0.0,
        average_rrr=calculate_average_rrr(pnls),
        largest_win=max(pnls),
        largest_loss=min(pnls),
        tail_ratio=calculate_tail_ratio(pnls),
        kelly_percent=calculate_kelly_percent(pnls),
        average_trade_duration_hours=calculate_average_duration_hours(ordered),
        monthly_win_rate=calculate_monthly_win_rate(ordered),
        total_commission=sum(t.commission for t in ordered),
        total_swap=sum(t.swap for t in ordered),
    )


def compute_symbol_breakdown(trades: Sequence[Trade]) -> list[SymbolPerformance]:
    """
    Per-symbol performance, sorted by total P&L descending.

    Profit factor is capped at 999 so symbols without losses stay finite.
    """
    by_symbol: dict[str, list[Trade]] = defaultdict(list)
    for trade in sort_trades(trades):
        by_symbol[trade.symbol].append(trade)

    results: list[SymbolPerformance] = []
    for symbol, symbol_trades in by_symbol.items():
        pnls = [t.total_pnl for t in symbol_trades]
        total = sum(pnls)
        winners = sum(1 for p in pnls if p > 0)

        results.append(
            SymbolPerformance(
                symbol=symbol,
                trade_count=len(pnls),
                total_pnl=total,
                average_pnl=total / len(pnls),
                win_rate=winners / len(pnls) * 100,
                average_hold_time_hours=calculate_average_duration_hours(symbol_trades),
                profit_factor=min(calculate_profit_factor(pnls), PROFIT_FACTOR_CAP),
            )
        )

    # Stable sort keeps first-seen order among equal totals
    return sorted(results, key=lambda s: s.total_pnl, reverse=True)
