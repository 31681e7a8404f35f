"""Tests for monthly returns and trading frequency."""

from datetime import datetime, timedelta, timezone

import pytest

from qmetrics.libraries.performance.periods import (
    AVERAGE_DAYS_PER_MONTH,
    calculate_monthly_returns,
    calculate_trading_frequency,
)

START = datetime(2024, 1, 10, 9, tzinfo=timezone.utc)


def _at(month, day, hour=9):
    return datetime(2024, month, day, hour, tzinfo=timezone.utc)


class TestMonthlyReturns:
    """Test calculate_monthly_returns()."""

    def test_balance_carries_across_months(self, make_trade):
        """Test each month's return is measured against the balance it started with."""
        # Arrange
        trades = [
            make_trade(100.0, open_time=_at(1, 10)),
            make_trade(100.0, open_time=_at(2, 5)),
            make_trade(-300.0, open_time=_at(2, 6)),
        ]

        # Act
        months = calculate_monthly_returns(trades, 1_000.0)

        # Assert
        assert [m.month for m in months] == ["2024-01", "2024-02"]
        january, february = months
        assert january.trade_count == 1
        assert january.return_pct == pytest.approx(10.0)
        assert january.max_drawdown == 0.0
        assert february.trade_count == 2
        assert february.pnl == -200.0
        assert february.return_pct == pytest.approx(-200.0 / 1_100.0 * 100)
        assert february.max_drawdown == pytest.approx(-25.0)

    def test_month_follows_close_time(self, make_trade):
        """Test a trade closing after midnight on the 1st counts in the new month."""
        # Arrange
        trade = make_trade(5.0, open_time=_at(1, 31, 23), close_time=_at(2, 1, 0) + timedelta(minutes=30))

        # Act
        months = calculate_monthly_returns([trade], 100.0)

        # Assert
        assert [m.month for m in months] == ["2024-02"]

    def test_underwater_month_counts_only_new_losses(self, make_trade):
        """Test the drawdown peak starts at the month-start balance."""
        # Arrange
        trades = [
            make_trade(-500.0, open_time=_at(1, 10)),
            make_trade(50.0, open_time=_at(2, 3)),
            make_trade(-55.0, open_time=_at(2, 4)),
        ]

        # Act
        february = calculate_monthly_returns(trades, 1_000.0)[1]

        # Assert
        assert february.max_drawdown == pytest.approx(-10.0)

    def test_zero_start_balance(self, make_trade):
        """Test a zero start balance gives a 0 return and no drawdown."""
        # Act
        (month,) = calculate_monthly_returns([make_trade(-10.0, open_time=_at(3, 1))], 0.0)

        # Assert
        assert month.pnl == -10.0
        assert month.return_pct == 0.0
        assert month.max_drawdown == 0.0

    def test_empty(self):
        """Test no trades gives no months."""
        assert calculate_monthly_returns([], 1_000.0) == []


class TestTradingFrequency:
    """Test calculate_trading_frequency()."""

    def test_rates_over_span(self, make_trade):
        """Test rates divide by the first-open to last-close span in days."""
        # Arrange
        trades = [
            make_trade(1.0, open_time=START, close_time=START + timedelta(hours=1)),
            make_trade(1.0, open_time=START + timedelta(hours=5), close_time=START + timedelta(days=10)),
        ]

        # Act
        frequency = calculate_trading_frequency(trades)

        # Assert
        assert frequency.trades_per_day == pytest.approx(0.2)
        assert frequency.trades_per_week == pytest.approx(1.4)
        assert frequency.trades_per_month == pytest.approx(0.2 * AVERAGE_DAYS_PER_MONTH)
        assert frequency.average_hours_between_trades == pytest.approx(4.0)

    def test_span_is_at_least_one_day(self, make_trade):
        """Test a short history is rated as if it spanned one day."""
        # Act
        frequency = calculate_trading_frequency([make_trade(1.0), make_trade(2.0, index=1)])

        # Assert
        assert frequency.trades_per_day == 2.0
        assert frequency.trades_per_week == pytest.approx(14.0)

    def test_overlapping_positions_give_negative_gap(self, make_trade):
        """Test a trade opened before the previous one closed has a negative gap."""
        # Arrange
        trades = [
            make_trade(1.0, open_time=START, close_time=START + timedelta(hours=10)),
            make_trade(1.0, open_time=START + timedelta(hours=2), close_time=START + timedelta(hours=12)),
        ]

        # Act
        frequency = calculate_trading_frequency(trades)

        # Assert
        assert frequency.average_hours_between_trades == pytest.approx(-8.0)

    def test_single_trade_has_no_gap(self, make_trade):
        """Test one trade gives a zero average gap."""
        assert calculate_trading_frequency([make_trade(1.0)]).average_hours_between_trades == 0.0

    def test_empty(self):
        """Test no trades gives all-zero rates."""
        # Act
        frequency = calculate_trading_frequency([])

        # Assert
        assert frequency.trades_per_day == 0.0
        assert frequency.trades_per_month == 0.0
        assert frequency.average_hours_between_trades == 0.0
