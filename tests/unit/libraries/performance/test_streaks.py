"""Tests for consecutive win/loss streak analysis."""

import pytest

from qmetrics.libraries.performance.streaks import analyze_streaks, calculate_streaks


class TestCalculateStreaks:
    """Test calculate_streaks() on ordered P&L values."""

    def test_alternating_runs(self):
        """Test streak lists, maxima and means for mixed runs."""
        # Act
        streaks = calculate_streaks([10, 20, -5, 30, -1, -2, -3, 4])

        # Assert
        assert streaks.win_streaks == [2, 1, 1]
        assert streaks.loss_streaks == [1, 3]
        assert streaks.max_consecutive_wins == 2
        assert streaks.max_consecutive_losses == 3
        assert streaks.average_win_streak == pytest.approx(4 / 3)
        assert streaks.average_loss_streak == pytest.approx(2.0)

    def test_open_streak_at_end_is_counted(self):
        """Test a streak still running at the end is recorded."""
        streaks = calculate_streaks([-1, 5, 6, 7])
        assert streaks.win_streaks == [3]
        assert streaks.loss_streaks == [1]

    def test_break_even_resets_without_recording(self):
        """Test a zero P&L trade drops the open streak."""
        # Act
        streaks = calculate_streaks([5, 5, 0, 5, -1])

        # Assert
        assert streaks.win_streaks == [1]
        assert streaks.loss_streaks == [1]
        assert streaks.max_consecutive_wins == 2

    def test_empty(self):
        """Test no trades gives all zeros."""
        # Act
        streaks = calculate_streaks([])

        # Assert
        assert streaks.max_consecutive_wins == 0
        assert streaks.max_consecutive_losses == 0
        assert streaks.average_win_streak == 0.0
        assert streaks.win_streaks == []
        assert streaks.current_streak_type == "none"
        assert streaks.current_streak == 0

    @pytest.mark.parametrize(
        ("pnls", "expected_type", "expected_length"),
        [
            ([5, -1, -2, -3], "loss", 3),
            ([-1, 2, 2], "win", 2),
            ([4, 4, 0], "none", 0),
            ([-1, 0, 7], "win", 1),
        ],
    )
    def test_current_streak_follows_last_trade(self, pnls, expected_type, expected_length):
        """Test the current streak is the run the last trade belongs to."""
        # Act
        streaks = calculate_streaks(pnls)

        # Assert
        assert streaks.current_streak_type == expected_type
        assert streaks.current_streak == expected_length

    @pytest.mark.parametrize(
        "pnls",
        [
            [1, 1, 1, -1, -1],
            [0, 0, 0],
            [1, -1, 1, -1],
            [-5] * 7,
            [3, 0, -2, -2, 0, 4, 4, 4],
        ],
    )
    def test_maxima_never_exceed_trade_count(self, pnls):
        """Test max wins + max losses <= number of trades."""
        streaks = calculate_streaks(pnls)
        assert streaks.max_consecutive_wins + streaks.max_consecutive_losses <= len(pnls)


class TestAnalyzeStreaks:
    """Test analyze_streaks() on trades."""

    def test_uses_chronological_order_and_costs(self, make_trade):
        """Test trades are sorted and classified by total P&L."""
        # Arrange - second trade is a loser after commission
        trades = [
            make_trade(10.0, index=2),
            make_trade(1.0, index=1, commission=-3.0),
            make_trade(10.0, index=0),
        ]

        # Act
        streaks = analyze_streaks(trades)

        # Assert
        assert streaks.win_streaks == [1, 1]
        assert streaks.loss_streaks == [1]
