"""
Full Pipeline Integration Test.

Tests the complete analysis path:
    trades.json → load_trades → analyze_trades → write_json_report → JSON on disk

Verifies:
- Storage-format records (camelCase keys, string ids) survive the boundary
- Report sections agree with each other (balances, curve, trade counts)
- The JSON written to disk carries the same numbers as the in-memory report
- Non-finite ratios are encoded as strings rather than invalid JSON
"""

import json
import math

import pytest

from qmetrics.libraries.performance import AnalyticsConfig, analyze_many, analyze_trades, load_trades
from qmetrics.services.reporting import write_json_report


@pytest.fixture
def storage_records():
    """Two weeks of trades as exported by the trade storage layer."""
    pnls = [250.0, -120.0, 80.0, -60.0, 0.0, 310.0, -200.0, 45.0, 95.0, -35.0, 150.0, -90.0]
    records = []
    for i, pnl in enumerate(pnls):
        day = 1 + i
        records.append(
            {
                "id": 1000 + i,
                "openTime": f"2024-03-{day:02d}T08:00:00Z",
                "closeTime": f"2024-03-{day:02d}T{10 + i % 6:02d}:30:00Z",
                "symbol": "XAUUSD" if i % 3 == 0 else "EURUSD",
                "type": "BUY" if i % 2 == 0 else "SELL",
                "volume": 0.5,
                "openPrice": 1.1,
                "closePrice": 1.2,
                "profit": pnl,
                "commission": -1.5,
                "swap": 0.0,
                "duration": 150 + 60 * (i % 6),
            }
        )
    return records


@pytest.fixture
def trades_path(tmp_path, storage_records):
    path = tmp_path / "trades.json"
    path.write_text(json.dumps({"trades": storage_records}))
    return path


@pytest.fixture
def config():
    return AnalyticsConfig(initial_balance=5_000.0, simulations=50, periods=30, seed=11)


class TestFullPipeline:
    """Load, analyse and persist a trade history end to end."""

    def test_report_is_internally_consistent(self, trades_path, config):
        """Test balances, curve and statistics agree across sections."""
        # Arrange
        trades = load_trades(trades_path)

        # Act
        report = analyze_trades(trades, config)

        # Assert - Series shape
        assert report.trade_count == 12
        assert len(report.returns) == 12
        assert len(report.equity_curve) == 13
        assert len(report.drawdown.drawdown_series) == 13

        # Assert - Balances
        net = sum(t.total_pnl for t in trades)
        assert report.equity_curve[0] == 5_000.0
        assert report.final_balance == pytest.approx(5_000.0 + net)
        assert report.total_return_pct == pytest.approx(sum(report.returns))

        # Assert - Trade outcomes (every trade pays 1.5 commission, so none break even)
        stats = report.trade_stats
        assert stats.total_trades == 12
        assert stats.winning_trades + stats.losing_trades + stats.breakeven_trades == 12
        assert stats.losing_trades == 6
        assert stats.total_commission == pytest.approx(-18.0)
        assert sum(s.trade_count for s in report.symbols) == 12

        # Assert - Drawdown and simulation
        assert report.drawdown.max_drawdown <= 0.0
        assert report.simulation is not None
        assert report.simulation.p5 <= report.simulation.p50 <= report.simulation.p95

    def test_json_report_matches_memory(self, trades_path, tmp_path, config):
        """Test the persisted report carries the in-memory values."""
        # Arrange
        report = analyze_trades(load_trades(trades_path), config)
        output = tmp_path / "reports" / "latest.json"

        # Act
        written = write_json_report(report, output)
        data = json.loads(written.read_text())

        # Assert
        assert written == output
        assert data["trade_count"] == report.trade_count
        assert data["final_balance"] == pytest.approx(report.final_balance)
        assert data["equity_curve"] == pytest.approx(report.equity_curve)
        assert data["trade_stats"]["win_rate"] == pytest.approx(report.trade_stats.win_rate)
        assert data["simulation"]["p50"] == pytest.approx(report.simulation.p50)
        assert [s["symbol"] for s in data["symbols"]] == [s.symbol for s in report.symbols]

    def test_seeded_pipeline_is_reproducible(self, trades_path, config):
        """Test two runs with the same seed give identical reports."""
        # Act
        first = analyze_trades(load_trades(trades_path), config)
        second = analyze_trades(load_trades(trades_path), config)

        # Assert
        assert first == second

    def test_all_winning_history_writes_valid_json(self, tmp_path):
        """Test infinite ratios round-trip through JSON as strings."""
        # Arrange
        records = [
            {"id": i, "openTime": f"2024-05-0{i + 1}T09:00:00Z", "closeTime": f"2024-05-0{i + 1}T11:00:00Z",
             "profit": 100.0 + i, "symbol": "EURUSD"}
            for i in range(4)
        ]
        path = tmp_path / "winners.json"
        path.write_text(json.dumps(records))
        report = analyze_trades(load_trades(path), AnalyticsConfig(run_simulation=False))

        # Act
        data = json.loads(write_json_report(report, tmp_path / "winners_report.json").read_text())

        # Assert
        assert math.isinf(report.trade_stats.profit_factor)
        assert data["trade_stats"]["profit_factor"] == "Infinity"
        assert data["simulation"] is None

    def test_analyze_many_matches_single_runs(self, trades_path, config):
        """Test concurrent analysis gives the same reports as sequential calls."""
        # Arrange
        trades = load_trades(trades_path)
        histories = {"full": trades, "first_half": trades[:6]}

        # Act
        reports = analyze_many(histories, config, max_workers=2)

        # Assert
        assert list(reports) == ["full", "first_half"]
        assert reports["full"] == analyze_trades(trades, config)
        assert reports["first_half"] == analyze_trades(trades[:6], config)
