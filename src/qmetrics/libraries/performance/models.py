"""Performance analytics data models.

Pydantic models for the trade input record and every structure the
analytics stages produce. These models are consumed by the reporting
formatters, the JSON writer and external chart renderers.

Units:
- Percentages are whole numbers (12.5 means 12.5%)
- Balances and P&L are in account currency
- Durations of drawdown episodes and streaks are in trade counts

Report models serialise infinite ratios (no losses, no drawdown) to JSON as
the strings "Infinity" / "-Infinity" (NaN as "NaN").
"""

from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class Trade(BaseModel):
    """
    A single closed position.

    Trades are immutable once constructed. Numeric fields are validated to be
    finite so downstream stages never see NaN or infinity, and a trade never
    closes before it opens. Naive timestamps are interpreted as UTC; their
    wall-clock value is kept unchanged.
    """

    model_config = ConfigDict(frozen=True)

    trade_id: str
    open_time: datetime
    close_time: datetime | None = None
    profit: float = Field(allow_inf_nan=False)  # Excludes commission and swap
    commission: float = Field(default=0.0, allow_inf_nan=False)
    swap: float = Field(default=0.0, allow_inf_nan=False)
    side: Literal["buy", "sell"] = "buy"
    symbol: str = ""
    size: float = Field(default=1.0, gt=0, allow_inf_nan=False)
    open_price: float | None = Field(default=None, allow_inf_nan=False)
    close_price: float | None = Field(default=None, allow_inf_nan=False)
    duration: float | None = Field(default=None, ge=0, allow_inf_nan=False)  # Minutes

    @field_validator("open_time", "close_time")
    @classmethod
    def _assume_utc(cls, value: datetime | None) -> datetime | None:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @model_validator(mode="after")
    def _check_chronology(self) -> "Trade":
        if self.close_time is not None and self.close_time < self.open_time:
            raise ValueError(
                f"close_time {self.close_time.isoformat()} is before open_time {self.open_time.isoformat()}"
            )
        return self

    @property
    def total_pnl(self) -> float:
        """Profit including commission and swap."""
        return self.profit + self.commission + self.swap

    @property
    def effective_time(self) -> datetime:
        """Close time, or open time for trades without a close time."""
        return self.close_time if self.close_time is not None else self.open_time


class ReportModel(BaseModel):
    """Base for analytics outputs."""

    model_config = ConfigDict(ser_json_inf_nan="strings")


class RiskMetrics(ReportModel):
    """Distribution statistics of the per-trade return series."""

    value_at_risk_95: float = 0.0
    value_at_risk_99: float = 0.0
    expected_shortfall: float = 0.0  # CVaR at the primary confidence (0.95)
    conditional_value_at_risk: float = 0.0  # CVaR at the tail confidence (0.99)
    skewness: float = 0.0
    kurtosis: float = 0.0  # Excess kurtosis
    downside_deviation: float = 0.0
    upside_deviation: float = 0.0
    omega: float = 1.0
    gain_loss_ratio: float = 0.0
    std_dev: float = 0.0  # Population standard deviation of returns


class DrawdownEpisode(ReportModel):
    """
    A maximal run of equity-curve points below the running peak.

    Indices refer to equity-curve positions. An episode still open at the
    end of the curve is closed at the series end and marked unrecovered.
    """

    start_index: int
    end_index: int  # Last underwater index (inclusive)
    length: int
    depth_pct: float  # Deepest drawdown within the episode (positive)
    recovered: bool


class DrawdownMetrics(ReportModel):
    """Drawdown path analysis of an equity curve."""

    max_drawdown: float = 0.0  # Negative percentage
    average_drawdown: float = 0.0  # Negative percentage
    max_drawdown_duration: int = 0
    average_drawdown_duration: float = 0.0
    drawdown_deviation: float = 0.0
    ulcer_index: float = 0.0
    recovery_factor: float = 0.0
    drawdown_series: list[float] = Field(default_factory=list)
    episodes: list[DrawdownEpisode] = Field(default_factory=list)


class RatioMetrics(ReportModel):
    """Composite return-to-risk ratios."""

    annual_return: float = 0.0
    sharpe_ratio: float = 0.0  # On calendar-day returns
    sortino_ratio: float = 0.0
    calmar_ratio: float = 0.0
    sterling_ratio: float = 0.0
    burke_ratio: float = 0.0
    martin_ratio: float = 0.0
    pain_index: float = 0.0
    pain_ratio: float = 0.0
    treynor_ratio: float = 0.0
    information_ratio: float = 0.0
    jensen_alpha: float = 0.0
    beta: float = 1.0  # Fixed: no benchmark series is part of the input
    efficiency_ratio: float = 0.0
    volatility_adjusted_return: float = 0.0
    trend_strength: float = 0.0
    risk_parity_score: float = 0.0


class StreakMetrics(ReportModel):
    """Consecutive win/loss statistics."""

    max_consecutive_wins: int = 0
    max_consecutive_losses: int = 0
    average_win_streak: float = 0.0
    average_loss_streak: float = 0.0
    win_streaks: list[int] = Field(default_factory=list)
    loss_streaks: list[int] = Field(default_factory=list)
    current_streak_type: Literal["win", "loss", "none"] = "none"
    current_streak: int = 0  # Length of the streak the last trade belongs to


class TimeBucketMetrics(ReportModel):
    """
    Total P&L grouped by hour of day, day of week and calendar month.

    Day of week follows Sunday=0 ... Saturday=6. Months use short English
    names ("Jan" ... "Dec"). Unpopulated buckets are absent from the maps.
    """

    hourly_pnl: dict[int, list[float]] = Field(default_factory=dict)
    daily_pnl: dict[int, list[float]] = Field(default_factory=dict)
    monthly_pnl: dict[str, list[float]] = Field(default_factory=dict)
    best_hour: int = 0
    worst_hour: int = 0
    best_day_of_week: int = 0
    worst_day_of_week: int = 0
    best_month: str = ""
    worst_month: str = ""


class TradeStatistics(ReportModel):
    """Aggregate statistics over individual trade outcomes (total P&L)."""

    total_trades: int = 0
    winning_trades: int = 0
    losing_trades: int = 0
    breakeven_trades: int = 0
    win_rate: float = 0.0
    gross_profit: float = 0.0
    gross_loss: float = 0.0  # Positive number
    profit_factor: float = 0.0
    expectancy: float = 0.0
    average_win: float = 0.0
    average_loss: float = 0.0  # Positive number
    average_rrr: float = 0.0
    largest_win: float = 0.0
    largest_loss: float = 0.0
    tail_ratio: float = 0.0
    kelly_percent: float = 0.0
    average_trade_duration_hours: float = 0.0
    monthly_win_rate: float = 0.0
    total_commission: float = 0.0
    total_swap: float = 0.0


class SymbolPerformance(ReportModel):
    """Per-instrument breakdown of trade outcomes."""

    symbol: str
    trade_count: int
    total_pnl: float
    average_pnl: float
    win_rate: float
    average_hold_time_hours: float
    profit_factor: float  # Capped at 999


class MonthlyReturn(ReportModel):
    """Return and intra-month drawdown of one calendar month."""

    month: str  # "YYYY-MM"
    trade_count: int
    pnl: float
    return_pct: float  # Month P&L / balance at month start
    max_drawdown: float  # Negative percentage, measured from the month-start balance


class TradingFrequency(ReportModel):
    """How often the history trades."""

    trades_per_day: float = 0.0
    trades_per_week: float = 0.0
    trades_per_month: float = 0.0
    average_hours_between_trades: float = 0.0


class SessionPerformance(ReportModel):
    """
    Outcomes grouped by the market session a trade was opened in.

    Sessions use UTC open hours: asian 00-08, european 08-16, american 16-24.
    """

    session: Literal["asian", "european", "american"]
    trade_count: int = 0
    total_pnl: float = 0.0
    average_pnl: float = 0.0
    win_rate: float = 0.0


class SimulationResult(ReportModel):
    """
    Outcome of a Monte Carlo bootstrap of historical returns.

    Percentiles are taken over terminal balances only. Sample paths hold the
    full trajectories (including the starting balance) of the first few runs
    and exist for visualisation.
    """

    initial_balance: float
    simulations: int
    periods: int
    p5: float
    p25: float
    p50: float
    p75: float
    p95: float
    terminal_balances: list[float] = Field(default_factory=list)
    sample_paths: list[list[float]] = Field(default_factory=list)

    @property
    def percentiles(self) -> dict[str, float]:
        """Percentile bands keyed by label."""
        return {"p5": self.p5, "p25": self.p25, "p50": self.p50, "p75": self.p75, "p95": self.p95}


class MetricsReport(ReportModel):
    """
    Complete analytics report for one trade history.

    Produced fresh by every engine call and always fully populated.
    """

    trade_count: int
    initial_balance: float
    final_balance: float
    total_return_pct: float  # Sum of per-trade returns
    years_elapsed: float
    risk_free_rate: float
    returns: list[float] = Field(default_factory=list)
    equity_curve: list[float] = Field(default_factory=list)

    risk: RiskMetrics = Field(default_factory=RiskMetrics)
    drawdown: DrawdownMetrics = Field(default_factory=DrawdownMetrics)
    ratios: RatioMetrics = Field(default_factory=RatioMetrics)
    streaks: StreakMetrics = Field(default_factory=StreakMetrics)
    time_buckets: TimeBucketMetrics = Field(default_factory=TimeBucketMetrics)
    trade_stats: TradeStatistics = Field(default_factory=TradeStatistics)
    symbols: list[SymbolPerformance] = Field(default_factory=list)
    monthly_returns: list[MonthlyReturn] = Field(default_factory=list)
    frequency: TradingFrequency = Field(default_factory=TradingFrequency)
    sessions: list[SessionPerformance] = Field(default_factory=list)
    simulation: SimulationResult | None = None

    @property
    def max_drawdown(self) -> float:
        """Maximum drawdown as a negative percentage."""
        return self.drawdown.max_drawdown

    @property
    def is_empty(self) -> bool:
        """True if the report was built from an empty trade list."""
        return self.trade_count == 0
