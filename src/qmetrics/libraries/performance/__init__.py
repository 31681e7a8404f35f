"""Performance analytics library for closed trade histories.

This library turns a list of closed trades into a full metrics report:

1. **Models** (`models.py`): Pydantic data structures
   - Trade: Validated, immutable closed position
   - RiskMetrics, DrawdownMetrics, RatioMetrics: Per-stage outputs
   - StreakMetrics, TimeBucketMetrics, TradeStatistics: Trade-level analysis
   - MonthlyReturn, TradingFrequency, SessionPerformance: Calendar views
   - SimulationResult: Monte Carlo percentile bands
   - MetricsReport: Complete report

2. **Stages** (pure functions, composable)
   - returns: Return series and equity curve
   - distribution: VaR, CVaR, moments, deviations, Omega
   - drawdown: Drawdown series, episodes, Ulcer Index
   - ratios: Sharpe, Sortino, Calmar, Sterling, Burke, Martin, Pain, ...
   - streaks / time_buckets / trade_stats: Trade outcome analysis
   - periods: Monthly returns and trading frequency
   - monte_carlo: Historical bootstrap simulation

3. **Engine** (`engine.py`): analyze_trades / analyze_many

Usage:
    >>> from qmetrics.libraries.performance import AnalyticsConfig, analyze_trades
    >>> report = analyze_trades(trades, AnalyticsConfig(initial_balance=10_000.0))
    >>> print(f"Max DD: {report.drawdown.max_drawdown:.2f}%")

Design Principles:
    - Pure functions: identical inputs give identical outputs
    - Explicit edge case handling (empty input, zero variance, no losses)
    - Validation once at the boundary (parse_trades), floats afterwards
"""

from qmetrics.libraries.performance.config import AnalyticsConfig
from qmetrics.libraries.performance.distribution import (
    calculate_downside_deviation,
    calculate_expected_shortfall,
    calculate_gain_loss_ratio,
    calculate_kurtosis,
    calculate_omega,
    calculate_skewness,
    calculate_upside_deviation,
    calculate_var,
    compute_risk_metrics,
)
from qmetrics.libraries.performance.drawdown import analyze_drawdowns, calculate_drawdown_series
from qmetrics.libraries.performance.engine import analyze_many, analyze_trades
from qmetrics.libraries.performance.errors import AnalyticsError, ConfigurationError, InvalidTradeRecord
from qmetrics.libraries.performance.models import (
    DrawdownEpisode,
    DrawdownMetrics,
    MetricsReport,
    MonthlyReturn,
    RatioMetrics,
    RiskMetrics,
    SessionPerformance,
    SimulationResult,
    StreakMetrics,
    SymbolPerformance,
    TimeBucketMetrics,
    Trade,
    TradeStatistics,
    TradingFrequency,
)
from qmetrics.libraries.performance.monte_carlo import simulate
from qmetrics.libraries.performance.parsing import load_trades, parse_trade, parse_trades
from qmetrics.libraries.performance.periods import calculate_monthly_returns, calculate_trading_frequency
from qmetrics.libraries.performance.ratios import calculate_sharpe_ratio, calculate_sortino_ratio, compute_ratio_metrics
from qmetrics.libraries.performance.returns import build_return_series, calculate_daily_returns
from qmetrics.libraries.performance.streaks import analyze_streaks
from qmetrics.libraries.performance.time_buckets import (
    aggregate_time_buckets,
    analyze_sessions,
    analyze_time_buckets,
    select_best_worst,
)
from qmetrics.libraries.performance.trade_stats import compute_symbol_breakdown, compute_trade_statistics

__all__ = [
    # Models
    "Trade",
    "RiskMetrics",
    "DrawdownEpisode",
    "DrawdownMetrics",
    "RatioMetrics",
    "StreakMetrics",
    "TimeBucketMetrics",
    "TradeStatistics",
    "SymbolPerformance",
    "MonthlyReturn",
    "TradingFrequency",
    "SessionPerformance",
    "SimulationResult",
    "MetricsReport",
    # Configuration and errors
    "AnalyticsConfig",
    "AnalyticsError",
    "ConfigurationError",
    "InvalidTradeRecord",
    # Boundary
    "parse_trade",
    "parse_trades",
    "load_trades",
    # Stages
    "build_return_series",
    "calculate_daily_returns",
    "calculate_var",
    "calculate_expected_shortfall",
    "calculate_skewness",
    "calculate_kurtosis",
    "calculate_downside_deviation",
    "calculate_upside_deviation",
    "calculate_omega",
    "calculate_gain_loss_ratio",
    "compute_risk_metrics",
    "calculate_drawdown_series",
    "analyze_drawdowns",
    "calculate_sharpe_ratio",
    "calculate_sortino_ratio",
    "compute_ratio_metrics",
    "analyze_streaks",
    "aggregate_time_buckets",
    "select_best_worst",
    "analyze_time_buckets",
    "analyze_sessions",
    "calculate_monthly_returns",
    "calculate_trading_frequency",
    "compute_trade_statistics",
    "compute_symbol_breakdown",
    "simulate",
    # Engine
    "analyze_trades",
    "analyze_many",
]
