"""Tests for trade record parsing and validation."""

import json
import math
from datetime import datetime, timezone

import pytest

from qmetrics.libraries.performance.errors import InvalidTradeRecord
from qmetrics.libraries.performance.models import Trade
from qmetrics.libraries.performance.parsing import load_trades, parse_trade, parse_trades


@pytest.fixture
def storage_record():
    """Record in the camelCase shape used by trade storage."""
    return {
        "id": 42,
        "openTime": "2024-03-04T09:15:00Z",
        "closeTime": "2024-03-04T11:45:00Z",
        "profit": 125.5,
        "commission": -3.5,
        "swap": -0.75,
        "type": "SELL",
        "symbol": "EURUSD",
        "volume": 0.5,
        "openPrice": 1.0912,
        "closePrice": 1.0887,
        "duration": 150,
    }


class TestParseTrade:
    """Test parse_trade()."""

    def test_storage_record(self, storage_record):
        """Test camelCase keys are mapped onto Trade fields."""
        # Act
        trade = parse_trade(storage_record)

        # Assert
        assert trade.trade_id == "42"
        assert trade.open_time == datetime(2024, 3, 4, 9, 15, tzinfo=timezone.utc)
        assert trade.close_time == datetime(2024, 3, 4, 11, 45, tzinfo=timezone.utc)
        assert trade.side == "sell"
        assert trade.size == 0.5
        assert trade.open_price == 1.0912
        assert trade.total_pnl == pytest.approx(121.25)

    def test_snake_case_record(self):
        """Test snake_case field names are accepted directly."""
        # Act
        trade = parse_trade({"trade_id": "a", "open_time": "2024-01-01T00:00:00", "profit": 1})

        # Assert
        assert trade.profit == 1.0
        assert trade.side == "buy"

    def test_naive_timestamps_are_utc(self):
        """Test timestamps without an offset are treated as UTC."""
        trade = parse_trade({"id": "x", "openTime": "2024-01-01T10:00:00", "profit": 0})
        assert trade.open_time.tzinfo == timezone.utc

    def test_empty_close_time_means_open(self, storage_record):
        """Test an empty close time string becomes None."""
        # Arrange
        storage_record["closeTime"] = ""

        # Act
        trade = parse_trade(storage_record)

        # Assert
        assert trade.close_time is None
        assert trade.effective_time == trade.open_time

    def test_trade_passes_through(self, make_trade):
        """Test an existing Trade is returned unchanged."""
        trade = make_trade(1.0)
        assert parse_trade(trade) is trade

    @pytest.mark.parametrize("field", ["profit", "commission", "swap"])
    @pytest.mark.parametrize("value", [math.nan, math.inf, -math.inf])
    def test_non_finite_amounts_rejected(self, storage_record, field, value):
        """Test NaN and infinite amounts raise InvalidTradeRecord."""
        # Arrange
        storage_record[field] = value

        # Act & Assert
        with pytest.raises(InvalidTradeRecord, match=field):
            parse_trade(storage_record, index=3)

    def test_missing_profit_rejected(self, storage_record):
        """Test a record without profit is rejected with its location."""
        # Arrange
        del storage_record["profit"]

        # Act
        with pytest.raises(InvalidTradeRecord) as exc_info:
            parse_trade(storage_record, index=7)

        # Assert
        assert exc_info.value.index == 7
        assert exc_info.value.trade_id == "42"
        assert "index=7" in str(exc_info.value)

    def test_non_mapping_rejected(self):
        """Test non-mapping input is rejected."""
        with pytest.raises(InvalidTradeRecord, match="expected a mapping"):
            parse_trade(["not", "a", "record"], index=0)  # type: ignore[arg-type]

    def test_invalid_side_rejected(self, storage_record):
        """Test an unknown direction is rejected."""
        storage_record["type"] = "hold"
        with pytest.raises(InvalidTradeRecord):
            parse_trade(storage_record)

    def test_close_before_open_rejected(self, storage_record):
        """Test a record that closes before it opens is rejected."""
        # Arrange
        storage_record["openTime"] = "2024-06-01T00:00:00Z"
        storage_record["closeTime"] = "2024-01-01T00:00:00Z"

        # Act & Assert
        with pytest.raises(InvalidTradeRecord, match="before open_time") as exc_info:
            parse_trade(storage_record, index=2)
        assert exc_info.value.index == 2

    def test_close_at_open_accepted(self, storage_record):
        """Test a zero-length trade is valid."""
        # Arrange
        storage_record["closeTime"] = storage_record["openTime"]

        # Act
        trade = parse_trade(storage_record)

        # Assert
        assert trade.close_time == trade.open_time

    def test_negative_duration_rejected(self, storage_record):
        """Test a negative holding duration is rejected."""
        storage_record["duration"] = -5
        with pytest.raises(InvalidTradeRecord, match="duration"):
            parse_trade(storage_record)


class TestParseTrades:
    """Test parse_trades()."""

    def test_preserves_order(self, storage_record):
        """Test records are validated in input order."""
        # Arrange
        second = dict(storage_record, id=43)

        # Act
        trades = parse_trades([storage_record, second])

        # Assert
        assert [t.trade_id for t in trades] == ["42", "43"]
        assert all(isinstance(t, Trade) for t in trades)

    def test_reports_failing_index(self, storage_record):
        """Test the index of the first bad record is reported."""
        # Arrange
        bad = dict(storage_record, profit="lots")

        # Act & Assert
        with pytest.raises(InvalidTradeRecord) as exc_info:
            parse_trades([storage_record, bad])
        assert exc_info.value.index == 1


class TestLoadTrades:
    """Test load_trades() from JSON files."""

    def test_list_payload(self, tmp_path, storage_record):
        """Test a top-level list of records."""
        # Arrange
        path = tmp_path / "trades.json"
        path.write_text(json.dumps([storage_record]))

        # Act
        trades = load_trades(path)

        # Assert
        assert len(trades) == 1

    def test_object_payload(self, tmp_path, storage_record):
        """Test an object with a trades list."""
        # Arrange
        path = tmp_path / "export.json"
        path.write_text(json.dumps({"account": "demo", "trades": [storage_record, storage_record]}))

        # Act & Assert
        assert len(load_trades(path)) == 2

    def test_invalid_json(self, tmp_path):
        """Test malformed JSON raises InvalidTradeRecord."""
        # Arrange
        path = tmp_path / "broken.json"
        path.write_text("{not json")

        # Act & Assert
        with pytest.raises(InvalidTradeRecord, match="not valid JSON"):
            load_trades(path)

    def test_wrong_shape(self, tmp_path):
        """Test an object without a trades list is rejected."""
        # Arrange
        path = tmp_path / "wrong.json"
        path.write_text(json.dumps({"rows": []}))

        # Act & Assert
        with pytest.raises(InvalidTradeRecord, match="list of trades"):
            load_trades(path)

    def test_missing_file(self, tmp_path):
        """Test a missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_trades(tmp_path / "missing.json")
