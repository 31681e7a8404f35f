"""Root conftest for all tests - shared trade fixtures."""

from datetime import datetime, timedelta, timezone

import pytest

from qmetrics.libraries.performance.models import Trade

BASE_TIME = datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc)


def build_trade(
    profit: float,
    index: int = 0,
    commission: float = 0.0,
    swap: float = 0.0,
    step: timedelta = timedelta(hours=1),
    **fields,
) -> Trade:
    """Trade opened at BASE_TIME + index * step and closed 30 minutes later."""
    open_time = fields.pop("open_time", BASE_TIME + index * step)
    close_time = fields.pop("close_time", open_time + timedelta(minutes=30))
    return Trade(
        trade_id=fields.pop("trade_id", f"T{index}"),
        open_time=open_time,
        close_time=close_time,
        profit=profit,
        commission=commission,
        swap=swap,
        **fields,
    )


def build_trades(pnls: list[float], step: timedelta = timedelta(hours=1), **fields) -> list[Trade]:
    """One trade per P&L value, spaced `step` apart in list order."""
    return [build_trade(pnl, index=i, step=step, **fields) for i, pnl in enumerate(pnls)]


@pytest.fixture
def make_trade():
    """Factory fixture for single trades."""
    return build_trade


@pytest.fixture
def make_trades():
    """Factory fixture for evenly spaced trade lists."""
    return build_trades


@pytest.fixture
def mixed_trades() -> list[Trade]:
    """Ten trades across two symbols with wins, losses and one break-even."""
    pnls = [120.0, -80.0, 45.0, 0.0, -150.0, 210.0, 35.0, -20.0, 90.0, -60.0]
    return [
        build_trade(
            pnl,
            index=i,
            step=timedelta(days=3),
            symbol="EURUSD" if i % 2 == 0 else "GBPUSD",
            duration=30.0,
        )
        for i, pnl in enumerate(pnls)
    ]
