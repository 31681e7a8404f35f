"""Consecutive win/loss streak analysis.

Streaks are measured on total P&L in chronological order:
- P&L > 0 extends the win streak and closes any open loss streak
- P&L < 0 extends the loss streak and closes any open win streak
- P&L == 0 (break-even) resets both counters without recording either

The current streak is the one the last trade belongs to; a break-even last
trade leaves no current streak.
"""

from typing import Sequence

from qmetrics.libraries.performance.models import StreakMetrics, Trade
from qmetrics.libraries.performance.returns import sort_trades


def calculate_streaks(pnls: Sequence[float]) -> StreakMetrics:
    """
    Compute streak statistics from an ordered P&L sequence.

    Args:
        pnls: Per-trade total P&L, chronological

    Returns:
        StreakMetrics including every completed streak length (a streak
        still open at the end counts as completed)

    Example:
        >>> calculate_streaks([10, 20, -5, 30]).max_consecutive_wins
        2
    """
    current_wins = 0
    current_losses = 0
    max_wins = 0
    max_losses = 0
    win_streaks: list[int] = []
    loss_streaks: list[int] = []

    for pnl in pnls:
        if pnl > 0:
            current_wins += 1
            if current_losses > 0:
                loss_streaks.append(current_losses)
                current_losses = 0
            max_wins = max(max_wins, current_wins)
        elif pnl < 0:
            current_losses += 1
            if current_wins > 0:
                win_streaks.append(current_wins)
                current_wins = 0
            max_losses = max(max_losses, current_losses)
        else:
            current_wins = 0
            current_losses = 0

    # Add final streaks; at most one of them is open
    current_type, current_length = "none", 0
    if current_wins > 0:
        win_streaks.append(current_wins)
        current_type, current_length = "win", current_wins
    if current_losses > 0:
        loss_streaks.append(current_losses)
        current_type, current_length = "loss", current_losses

    return StreakMetrics(
        max_consecutive_wins=max_wins,
        max_consecutive_losses=max_losses,
        average_win_streak=sum(win_streaks) / len(win_streaks) if win_streaks else 0.0,
        average_loss_streak=sum(loss_streaks) / len(loss_streaks) if loss_streaks else 0.0,
        win_streaks=win_streaks,
        loss_streaks=loss_streaks,
        current_streak_type=current_type,
        current_streak=current_length,
    )


def analyze_streaks(trades: Sequence[Trade]) -> StreakMetrics:
    """Streak statistics for trades in any order (sorted by effective time first)."""
    return calculate_streaks([trade.total_pnl for trade in sort_trades(trades)])
