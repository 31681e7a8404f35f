"""Tests for time-of-trade performance buckets."""

from datetime import datetime, timedelta, timezone

import pytest

from qmetrics.libraries.performance.time_buckets import (
    aggregate_time_buckets,
    analyze_sessions,
    analyze_time_buckets,
    day_of_week,
    month_name,
    select_best_worst,
    session_of,
)


def _at(year, month, day, hour):
    return datetime(year, month, day, hour, tzinfo=timezone.utc)


class TestCalendarHelpers:
    """Test day_of_week() and month_name()."""

    def test_sunday_is_zero(self):
        """Test weekday numbering starts at Sunday."""
        # 2024-01-07 was a Sunday, 2024-01-13 a Saturday
        assert day_of_week(_at(2024, 1, 7, 12)) == 0
        assert day_of_week(_at(2024, 1, 8, 12)) == 1
        assert day_of_week(_at(2024, 1, 13, 12)) == 6

    def test_month_name(self):
        """Test short English month names."""
        assert month_name(_at(2024, 3, 1, 0)) == "Mar"
        assert month_name(_at(2024, 12, 1, 0)) == "Dec"


class TestAggregateTimeBuckets:
    """Test aggregate_time_buckets()."""

    def test_groups_total_pnl_by_effective_time(self, make_trade):
        """Test P&L lands in hour, weekday and month buckets of the close time."""
        # Arrange
        trades = [
            make_trade(100.0, open_time=_at(2024, 1, 8, 9), close_time=_at(2024, 1, 8, 14)),
            make_trade(-40.0, commission=-10.0, open_time=_at(2024, 2, 6, 9), close_time=_at(2024, 2, 6, 9)),
            make_trade(20.0, open_time=_at(2024, 2, 7, 13), close_time=_at(2024, 2, 8, 14)),
        ]

        # Act
        hourly, daily, monthly = aggregate_time_buckets(trades)

        # Assert
        assert hourly == {9: [-50.0], 14: [100.0, 20.0]}
        assert daily == {1: [100.0], 2: [-50.0], 4: [20.0]}
        assert monthly == {"Jan": [100.0], "Feb": [-50.0, 20.0]}

    def test_empty_buckets_are_absent(self, make_trade):
        """Test only populated buckets appear."""
        # Act
        hourly, _, _ = aggregate_time_buckets([make_trade(1.0, open_time=_at(2024, 1, 1, 3))])

        # Assert
        assert list(hourly) == [3]

    def test_numeric_keys_ascend(self, make_trade):
        """Test hour keys are ordered numerically regardless of trade order."""
        # Arrange
        trades = [
            make_trade(1.0, open_time=_at(2024, 1, 1, 20), close_time=_at(2024, 1, 1, 20)),
            make_trade(1.0, open_time=_at(2024, 1, 2, 5), close_time=_at(2024, 1, 2, 5)),
        ]

        # Act
        hourly, _, _ = aggregate_time_buckets(trades)

        # Assert
        assert list(hourly) == [5, 20]


class TestSelectBestWorst:
    """Test select_best_worst()."""

    def test_by_mean(self):
        """Test selection uses the mean, not the total."""
        # Arrange - hour 1 has the largest total but hour 2 the largest mean
        buckets = {1: [10.0, 10.0, 10.0], 2: [25.0], 3: [-5.0, 1.0]}

        # Act & Assert
        assert select_best_worst(buckets, 0) == (2, 3)

    def test_ties_go_to_first_key(self):
        """Test equal means resolve to the first key in iteration order."""
        assert select_best_worst({"Mar": [5.0], "Jan": [5.0]}, "") == ("Mar", "Mar")

    def test_empty_returns_default(self):
        """Test no buckets returns the default for both."""
        assert select_best_worst({}, 0) == (0, 0)


class TestAnalyzeTimeBuckets:
    """Test analyze_time_buckets()."""

    def test_best_and_worst(self, make_trade):
        """Test best/worst hour, weekday and month are selected."""
        # Arrange
        trades = [
            make_trade(100.0, open_time=_at(2024, 1, 8, 14), close_time=_at(2024, 1, 8, 14)),
            make_trade(-50.0, open_time=_at(2024, 2, 6, 9), close_time=_at(2024, 2, 6, 9)),
        ]

        # Act
        metrics = analyze_time_buckets(trades)

        # Assert
        assert (metrics.best_hour, metrics.worst_hour) == (14, 9)
        assert (metrics.best_day_of_week, metrics.worst_day_of_week) == (1, 2)
        assert (metrics.best_month, metrics.worst_month) == ("Jan", "Feb")

    def test_empty(self):
        """Test no trades yields empty maps and default selections."""
        # Act
        metrics = analyze_time_buckets([])

        # Assert
        assert metrics.hourly_pnl == {}
        assert metrics.best_hour == 0
        assert metrics.best_month == ""


class TestSessions:
    """Test market session classification and aggregation."""

    @pytest.mark.parametrize(
        "hour, expected",
        [(0, "asian"), (7, "asian"), (8, "european"), (15, "european"), (16, "american"), (23, "american")],
    )
    def test_session_boundaries(self, hour, expected):
        """Test UTC hours map to sessions with half-open bounds."""
        assert session_of(_at(2024, 3, 4, hour)) == expected

    def test_session_uses_utc_hour(self):
        """Test a non-UTC timestamp is converted before classification."""
        # Arrange
        tokyo = timezone(timedelta(hours=9))

        # Act / Assert
        assert session_of(datetime(2024, 3, 4, 10, tzinfo=tokyo)) == "asian"
        assert session_of(datetime(2024, 3, 4, 1, tzinfo=tokyo)) == "american"

    def test_groups_by_open_hour(self, make_trade):
        """Test trades are grouped by when they opened, not when they closed."""
        # Arrange
        trades = [
            make_trade(30.0, open_time=_at(2024, 3, 4, 2), close_time=_at(2024, 3, 4, 18)),
            make_trade(-10.0, open_time=_at(2024, 3, 4, 5)),
            make_trade(40.0, open_time=_at(2024, 3, 4, 17)),
        ]

        # Act
        sessions = analyze_sessions(trades)

        # Assert
        asian, european, american = sessions
        assert (asian.session, european.session, american.session) == ("asian", "european", "american")
        assert asian.trade_count == 2
        assert asian.total_pnl == 20.0
        assert asian.average_pnl == 10.0
        assert asian.win_rate == 50.0
        assert european.trade_count == 0
        assert american.win_rate == 100.0

    def test_empty_sessions_report_zeros(self):
        """Test all three sessions are present with no trades."""
        # Act
        sessions = analyze_sessions([])

        # Assert
        assert [s.session for s in sessions] == ["asian", "european", "american"]
        assert all(s.trade_count == 0 and s.average_pnl == 0.0 and s.win_rate == 0.0 for s in sessions)
