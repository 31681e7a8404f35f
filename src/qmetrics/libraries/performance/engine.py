"""Analytics engine: composes every stage into one MetricsReport.

Stage order (leaves first):
1. Return/equity builder
2. Distribution and risk metrics
3. Drawdown analyzer
4. Ratio engine
5. Streaks, time buckets, sessions, monthly returns and trade statistics
6. Monte Carlo simulator

Each call is independent and touches no shared state, so independent trade
histories can be analysed concurrently (see analyze_many).

Usage:
    >>> from qmetrics.libraries.performance.engine import analyze_trades
    >>> from qmetrics.libraries.performance.config import AnalyticsConfig
    >>> report = analyze_trades(trades, AnalyticsConfig(initial_balance=10_000.0, seed=7))
    >>> report.drawdown.max_drawdown
    -27.27
"""

from concurrent.futures import ThreadPoolExecutor
from typing import Any, Mapping, Sequence

import numpy as np
import structlog

from qmetrics.libraries.performance.config import AnalyticsConfig
from qmetrics.libraries.performance.distribution import compute_risk_metrics
from qmetrics.libraries.performance.drawdown import analyze_drawdowns
from qmetrics.libraries.performance.models import MetricsReport, Trade
from qmetrics.libraries.performance.monte_carlo import simulate
from qmetrics.libraries.performance.parsing import parse_trades
from qmetrics.libraries.performance.periods import calculate_monthly_returns, calculate_trading_frequency
from qmetrics.libraries.performance.ratios import compute_ratio_metrics
from qmetrics.libraries.performance.returns import (
    build_return_series,
    calculate_daily_returns,
    calculate_total_return_pct,
    calculate_years_elapsed,
    sort_trades,
)
from qmetrics.libraries.performance.streaks import analyze_streaks
from qmetrics.libraries.performance.time_buckets import analyze_sessions, analyze_time_buckets
from qmetrics.libraries.performance.trade_stats import compute_symbol_breakdown, compute_trade_statistics

logger = structlog.get_logger(__name__)

TradeInput = Trade | Mapping[str, Any]


def analyze_trades(
    trades: Sequence[TradeInput],
    config: AnalyticsConfig | None = None,
    rng: np.random.Generator | None = None,
) -> MetricsReport:
    """
    Compute the complete metrics report for one trade history.

    Args:
        trades: Trade objects or raw records (validated at this boundary)
        config: Analytics parameters (defaults to AnalyticsConfig())
        rng: Generator for the Monte Carlo stage; overrides config.seed

    Returns:
        Fully populated MetricsReport

    Raises:
        InvalidTradeRecord: If a raw record fails validation
    """
    if config is None:
        config = AnalyticsConfig()

    parsed = parse_trades(trades)
    logger.debug("analytics.started", trade_count=len(parsed), initial_balance=config.initial_balance)

    ordered = sort_trades(parsed)
    returns, equity_curve = build_return_series(ordered, config.initial_balance)
    total_return_pct = calculate_total_return_pct(returns)
    years_elapsed = calculate_years_elapsed(ordered)

    risk = compute_risk_metrics(
        returns,
        pnls=[t.profit for t in ordered],
        threshold=config.threshold,
        var_confidence=config.var_confidence,
        cvar_confidence=config.cvar_confidence,
    )
    drawdown = analyze_drawdowns(equity_curve, total_return_pct)
    ratios = compute_ratio_metrics(
        total_return_pct=total_return_pct,
        max_drawdown_pct=drawdown.max_drawdown,
        years_elapsed=years_elapsed,
        risk_metrics=risk,
        drawdown_metrics=drawdown,
        equity_curve=equity_curve,
        returns=returns,
        risk_free_rate=config.risk_free_rate,
        daily_returns=calculate_daily_returns(ordered, config.initial_balance),
    )

    simulation = None
    if config.run_simulation:
        simulation = simulate(
            returns,
            config.initial_balance,
            periods=config.periods,
            simulations=config.simulations,
            rng=rng if rng is not None else config.seed,
            sample_paths=config.sample_paths,
        )

    report = MetricsReport(
        trade_count=len(ordered),
        initial_balance=config.initial_balance,
        final_balance=equity_curve[-1],
        total_return_pct=total_return_pct,
        years_elapsed=years_elapsed,
        risk_free_rate=config.risk_free_rate,
        returns=returns,
        equity_curve=equity_curve,
        risk=risk,
        drawdown=drawdown,
        ratios=ratios,
        streaks=analyze_streaks(ordered),
        time_buckets=analyze_time_buckets(ordered),
        monthly_returns=calculate_monthly_returns(ordered, config.initial_balance),
        frequency=calculate_trading_frequency(ordered),
        sessions=analyze_sessions(ordered),
        trade_stats=compute_trade_statistics(ordered),
        symbols=compute_symbol_breakdown(ordered),
        simulation=simulation,
    )

    logger.info(
        "analytics.completed",
        trade_count=report.trade_count,
        total_return_pct=round(total_return_pct, 2),
        max_drawdown=round(drawdown.max_drawdown, 2),
    )
    return report


def analyze_many(
    histories: Mapping[str, Sequence[TradeInput]],
    config: AnalyticsConfig | None = None,
    max_workers: int | None = None,
) -> dict[str, MetricsReport]:
    """
    Analyse several independent trade histories concurrently.

    Args:
        histories: Strategy identifier -> trades
        config: Shared analytics parameters
        max_workers: Thread pool size (None = executor default)

    Returns:
        Strategy identifier -> report, in the input key order

    Raises:
        InvalidTradeRecord: If any history contains an invalid record
    """
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = {key: executor.submit(analyze_trades, trades, config) for key, trades in histories.items()}
        return {key: future.result() for key, future in futures.items()}
