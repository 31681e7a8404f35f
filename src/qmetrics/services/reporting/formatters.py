"""Rich console formatters for analytics reports.

Provides terminal display of a MetricsReport with tables, colors, and
formatting using the Rich library.
"""

import math
from typing import Literal

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from qmetrics.libraries.performance.models import (
    DrawdownEpisode,
    MetricsReport,
    MonthlyReturn,
    SessionPerformance,
    SimulationResult,
    SymbolPerformance,
    TimeBucketMetrics,
    TradingFrequency,
)
from qmetrics.libraries.performance.time_buckets import DAY_NAMES, bucket_means

DetailLevel = Literal["summary", "standard", "full"]


def _format_value(value: float, precision: int = 2) -> str:
    """Format a ratio, rendering infinities as the infinity sign."""
    if math.isinf(value):
        return "∞" if value > 0 else "-∞"
    return f"{value:,.{precision}f}"


def _format_pct(value: float, precision: int = 2) -> str:
    """Format percentage."""
    if math.isinf(value):
        return _format_value(value)
    return f"{value:.{precision}f}%"


def _format_currency(value: float, precision: int = 2) -> str:
    """Format currency value."""
    return f"${value:,.{precision}f}"


def _get_color(value: float) -> str:
    """Get color based on positive/negative value."""
    if value > 0:
        return "green"
    elif value < 0:
        return "red"
    return "white"


def _ratio_color(value: float, good: float = 1.0) -> str:
    return "green" if value > good else "yellow" if value > 0 else "red"


def _create_summary_table(report: MetricsReport) -> Table:
    """Create summary metrics table."""
    table = Table(title="📊 Performance Summary", show_header=False, box=None, padding=(0, 2))

    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")

    table.add_row("Trades", f"{report.trade_count:,}")
    table.add_row("Years Elapsed", f"{report.years_elapsed:.2f}")
    table.add_row("", "")  # Spacer

    table.add_row("Initial Balance", _format_currency(report.initial_balance))
    table.add_row("Final Balance", _format_currency(report.final_balance))

    return_color = _get_color(report.total_return_pct)
    table.add_row("Total Return", f"[{return_color}]{_format_pct(report.total_return_pct)}[/{return_color}]")

    annual_color = _get_color(report.ratios.annual_return)
    table.add_row(
        "Annual Return", f"[{annual_color}]{_format_pct(report.ratios.annual_return)}[/{annual_color}]"
    )
    table.add_row("Max Drawdown", f"[red]{_format_pct(report.drawdown.max_drawdown)}[/red]")

    calmar_color = _ratio_color(report.ratios.calmar_ratio)
    table.add_row(
        "Calmar Ratio", f"[{calmar_color}]{_format_value(report.ratios.calmar_ratio)}[/{calmar_color}]"
    )

    return table


def _create_risk_table(report: MetricsReport) -> Table:
    """Create return distribution and risk table."""
    risk = report.risk
    table = Table(title="⚠️  Risk Metrics", show_header=False, box=None, padding=(0, 2))

    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")

    table.add_row("VaR (95%)", f"[red]{_format_pct(risk.value_at_risk_95)}[/red]")
    table.add_row("VaR (99%)", f"[red]{_format_pct(risk.value_at_risk_99)}[/red]")
    table.add_row("Expected Shortfall", _format_pct(risk.expected_shortfall))
    table.add_row("CVaR (99%)", _format_pct(risk.conditional_value_at_risk))
    table.add_row("Std Dev", _format_pct(risk.std_dev))
    table.add_row("Downside Deviation", _format_pct(risk.downside_deviation))
    table.add_row("Upside Deviation", _format_pct(risk.upside_deviation))
    table.add_row("Skewness", _format_value(risk.skewness, 3))
    table.add_row("Excess Kurtosis", _format_value(risk.kurtosis, 3))
    table.add_row("Omega Ratio", _format_value(risk.omega))
    table.add_row("Gain/Loss Ratio", _format_value(risk.gain_loss_ratio))

    return table


def _create_drawdown_table(report: MetricsReport) -> Table:
    """Create drawdown metrics table."""
    dd = report.drawdown
    table = Table(title="📉 Drawdown", show_header=False, box=None, padding=(0, 2))

    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")

    table.add_row("Max Drawdown", f"[red]{_format_pct(dd.max_drawdown)}[/red]")
    table.add_row("Avg Drawdown", _format_pct(dd.average_drawdown))
    table.add_row("Max DD Duration", f"{dd.max_drawdown_duration} trades")
    table.add_row("Avg DD Duration", f"{dd.average_drawdown_duration:.1f} trades")
    table.add_row("Drawdown Deviation", _format_value(dd.drawdown_deviation))
    table.add_row("Ulcer Index", _format_value(dd.ulcer_index))
    table.add_row("Recovery Factor", _format_value(dd.recovery_factor))

    return table


def _create_ratio_table(report: MetricsReport) -> Table:
    """Create risk-adjusted ratio table."""
    ratios = report.ratios
    table = Table(title=" 📈 Risk-Adjusted Returns ", show_header=False, box=None, padding=(0, 2))

    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")

    for label, value in (
        ("Sharpe Ratio", ratios.sharpe_ratio),
        ("Sortino Ratio", ratios.sortino_ratio),
        ("Calmar Ratio", ratios.calmar_ratio),
        ("Sterling Ratio", ratios.sterling_ratio),
        ("Burke Ratio", ratios.burke_ratio),
        ("Martin Ratio", ratios.martin_ratio),
        ("Pain Ratio", ratios.pain_ratio),
        ("Treynor Ratio", ratios.treynor_ratio),
        ("Information Ratio", ratios.information_ratio),
    ):
        color = _ratio_color(value)
        table.add_row(label, f"[{color}]{_format_value(value)}[/{color}]")

    table.add_row("", "")  # Spacer
    table.add_row("Pain Index", _format_value(ratios.pain_index))
    table.add_row("Jensen Alpha", _format_value(ratios.jensen_alpha))
    table.add_row("Beta", _format_value(ratios.beta))
    table.add_row("Efficiency Ratio", _format_value(ratios.efficiency_ratio, 3))
    table.add_row("Volatility-Adjusted Return", _format_value(ratios.volatility_adjusted_return))
    table.add_row("Trend Strength", _format_value(ratios.trend_strength, 3))
    table.add_row("Risk Parity Score", _format_value(ratios.risk_parity_score))
    table.add_row("Risk-Free Rate", _format_value(report.risk_free_rate, 4))

    return table


def _create_trade_stats_table(report: MetricsReport) -> Table:
    """Create trade statistics table."""
    stats = report.trade_stats
    streaks = report.streaks
    table = Table(title="💼 Trade Statistics", show_header=False, box=None, padding=(0, 2))

    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")

    table.add_row("Total Trades", f"{stats.total_trades:,}")
    table.add_row("Winning Trades", f"[green]{stats.winning_trades:,}[/green]")
    table.add_row("Losing Trades", f"[red]{stats.losing_trades:,}[/red]")
    table.add_row("Break-even Trades", f"{stats.breakeven_trades:,}")

    win_rate_color = "green" if stats.win_rate > 50 else "yellow" if stats.win_rate > 40 else "red"
    table.add_row("Win Rate", f"[{win_rate_color}]{_format_pct(stats.win_rate)}[/{win_rate_color}]")

    pf_color = "green" if stats.profit_factor > 2 else "yellow" if stats.profit_factor > 1 else "red"
    table.add_row("Profit Factor", f"[{pf_color}]{_format_value(stats.profit_factor)}[/{pf_color}]")

    expectancy_color = _get_color(stats.expectancy)
    table.add_row("Expectancy", f"[{expectancy_color}]{_format_currency(stats.expectancy)}[/{expectancy_color}]")

    table.add_row("", "")  # Spacer
    table.add_row("Avg Win", f"[green]{_format_currency(stats.average_win)}[/green]")
    table.add_row("Avg Loss", f"[red]{_format_currency(stats.average_loss)}[/red]")
    table.add_row("Avg Reward/Risk", _format_value(stats.average_rrr))
    table.add_row("Largest Win", f"[green]{_format_currency(stats.largest_win)}[/green]")
    table.add_row("Largest Loss", f"[red]{_format_currency(stats.largest_loss)}[/red]")
    table.add_row("Tail Ratio", _format_value(stats.tail_ratio))
    table.add_row("Kelly", _format_pct(stats.kelly_percent))
    table.add_row("Monthly Win Rate", _format_pct(stats.monthly_win_rate))

    if stats.average_trade_duration_hours > 0:
        table.add_row("Avg Duration", f"{stats.average_trade_duration_hours:.1f} hours")

    table.add_row("", "")  # Spacer
    table.add_row("Max Consecutive Wins", f"{streaks.max_consecutive_wins:,}")
    table.add_row("Max Consecutive Losses", f"{streaks.max_consecutive_losses:,}")
    table.add_row("Avg Win Streak", f"{streaks.average_win_streak:.2f}")
    table.add_row("Avg Loss Streak", f"{streaks.average_loss_streak:.2f}")
    current = f"{streaks.current_streak} {streaks.current_streak_type}" if streaks.current_streak else "-"
    table.add_row("Current Streak", current)

    return table


def _create_time_bucket_table(buckets: TimeBucketMetrics) -> Table | None:
    """Create best/worst time bucket table with average P&L per bucket."""
    if not buckets.hourly_pnl:
        return None

    hourly = bucket_means(buckets.hourly_pnl)
    daily = bucket_means(buckets.daily_pnl)
    monthly = bucket_means(buckets.monthly_pnl)

    table = Table(title="🕒 Timing", box=None, padding=(0, 1))

    table.add_column("Bucket", style="cyan")
    table.add_column("Best", justify="right", style="green")
    table.add_column("Avg P&L", justify="right")
    table.add_column("Worst", justify="right", style="red")
    table.add_column("Avg P&L", justify="right")

    table.add_row(
        "Hour of Day",
        f"{buckets.best_hour:02d}:00",
        _format_currency(hourly[buckets.best_hour]),
        f"{buckets.worst_hour:02d}:00",
        _format_currency(hourly[buckets.worst_hour]),
    )
    table.add_row(
        "Day of Week",
        DAY_NAMES[buckets.best_day_of_week],
        _format_currency(daily[buckets.best_day_of_week]),
        DAY_NAMES[buckets.worst_day_of_week],
        _format_currency(daily[buckets.worst_day_of_week]),
    )
    table.add_row(
        "Month",
        buckets.best_month,
        _format_currency(monthly[buckets.best_month]),
        buckets.worst_month,
        _format_currency(monthly[buckets.worst_month]),
    )

    return table


def _create_symbol_table(symbols: list[SymbolPerformance]) -> Table | None:
    """Create per-symbol performance table."""
    if not symbols:
        return None

    table = Table(title="🎯 Symbol Performance", box=None, padding=(0, 1))

    table.add_column("Symbol", style="cyan")
    table.add_column("Trades", justify="right")
    table.add_column("Total P&L", justify="right")
    table.add_column("Avg P&L", justify="right")
    table.add_column("Win Rate", justify="right")
    table.add_column("Profit Factor", justify="right")
    table.add_column("Avg Hold", justify="right")

    for symbol in symbols:
        pnl_color = _get_color(symbol.total_pnl)
        table.add_row(
            symbol.symbol or "-",
            f"{symbol.trade_count:,}",
            f"[{pnl_color}]{_format_currency(symbol.total_pnl)}[/{pnl_color}]",
            _format_currency(symbol.average_pnl),
            _format_pct(symbol.win_rate),
            _format_value(symbol.profit_factor),
            f"{symbol.average_hold_time_hours:.1f}h",
        )

    return table


def _create_monthly_table(months: list[MonthlyReturn]) -> Table | None:
    """Create month-by-month return table."""
    if not months:
        return None

    table = Table(title="📅 Monthly Returns", box=None, padding=(0, 1))

    table.add_column("Month", style="cyan")
    table.add_column("Trades", justify="right")
    table.add_column("P&L", justify="right")
    table.add_column("Return", justify="right")
    table.add_column("Max DD", justify="right", style="red")

    for month in months:
        color = _get_color(month.return_pct)
        table.add_row(
            month.month,
            f"{month.trade_count:,}",
            _format_currency(month.pnl),
            f"[{color}]{_format_pct(month.return_pct)}[/{color}]",
            _format_pct(month.max_drawdown),
        )

    return table


def _create_session_table(sessions: list[SessionPerformance], frequency: TradingFrequency) -> Table:
    """Create market session table with trading frequency in the caption."""
    table = Table(
        title="🌍 Sessions (UTC open hour)",
        caption=(
            f"{frequency.trades_per_day:.2f}/day · {frequency.trades_per_week:.2f}/week · "
            f"{frequency.trades_per_month:.2f}/month · {frequency.average_hours_between_trades:.1f}h between trades"
        ),
        box=None,
        padding=(0, 1),
    )

    table.add_column("Session", style="cyan")
    table.add_column("Trades", justify="right")
    table.add_column("Total P&L", justify="right")
    table.add_column("Avg P&L", justify="right")
    table.add_column("Win Rate", justify="right")

    for session in sessions:
        pnl_color = _get_color(session.total_pnl)
        table.add_row(
            session.session.capitalize(),
            f"{session.trade_count:,}",
            f"[{pnl_color}]{_format_currency(session.total_pnl)}[/{pnl_color}]",
            _format_currency(session.average_pnl),
            _format_pct(session.win_rate),
        )

    return table


def _create_episode_table(episodes: list[DrawdownEpisode], max_rows: int = 5) -> Table | None:
    """Create top drawdown episodes table."""
    if not episodes:
        return None

    top = sorted(episodes, key=lambda e: e.depth_pct, reverse=True)[:max_rows]

    table = Table(title=f"📉 Top {len(top)} Drawdowns", box=None, padding=(0, 1))

    table.add_column("Rank", justify="right", style="dim")
    table.add_column("Depth", justify="right", style="red")
    table.add_column("Start", justify="right", style="cyan")
    table.add_column("Length", justify="right")
    table.add_column("Status", justify="center")

    for i, episode in enumerate(top, 1):
        table.add_row(
            str(i),
            _format_pct(episode.depth_pct),
            f"#{episode.start_index}",
            f"{episode.length} trades",
            "✅" if episode.recovered else "🔴",
        )

    return table


def _create_simulation_table(simulation: SimulationResult) -> Table:
    """Create Monte Carlo percentile table."""
    table = Table(
        title=f"🎲 Monte Carlo ({simulation.simulations:,} runs × {simulation.periods:,} trades)",
        box=None,
        padding=(0, 1),
    )

    table.add_column("Percentile", style="cyan")
    table.add_column("Final Balance", justify="right")
    table.add_column("Change", justify="right")

    for label, value in simulation.percentiles.items():
        change = (value / simulation.initial_balance - 1) * 100 if simulation.initial_balance else 0.0
        color = _get_color(change)
        table.add_row(label, _format_currency(value), f"[{color}]{_format_pct(change)}[/{color}]")

    return table


def display_metrics_report(
    report: MetricsReport,
    detail_level: DetailLevel = "standard",
    console: Console | None = None,
) -> None:
    """
    Display an analytics report in Rich-formatted console output.

    Args:
        report: Complete metrics report
        detail_level: Level of detail to display:
            - "summary": Key metrics only (returns, max DD, Calmar)
            - "standard": Summary + risk, drawdown, ratios, trade stats, Monte Carlo
            - "full": Everything including timing, symbols, monthly returns,
              sessions and drawdown episodes
        console: Rich Console instance (creates new if None)
    """
    if console is None:
        console = Console()

    console.print()

    console.print(_create_summary_table(report))
    console.print()

    if report.is_empty:
        console.print(Panel("No trades to analyse", border_style="yellow"))
        console.print()
        return

    if detail_level in ["standard", "full"]:
        console.print(_create_risk_table(report))
        console.print()

        console.print(_create_drawdown_table(report))
        console.print()

        console.print(_create_ratio_table(report))
        console.print()

        console.print(_create_trade_stats_table(report))
        console.print()

        console.print(
            Panel(
                f"Total Commission: {_format_currency(report.trade_stats.total_commission)}\n"
                f"Total Swap: {_format_currency(report.trade_stats.total_swap)}",
                title="💰 Costs",
                border_style="yellow",
            )
        )
        console.print()

        if report.simulation is not None:
            console.print(_create_simulation_table(report.simulation))
            console.print()

    if detail_level == "full":
        for table in (
            _create_time_bucket_table(report.time_buckets),
            _create_symbol_table(report.symbols),
            _create_monthly_table(report.monthly_returns),
            _create_session_table(report.sessions, report.frequency),
            _create_episode_table(report.drawdown.episodes),
        ):
            if table:
                console.print(table)
                console.print()

    summary_text = Text()
    summary_text.append("🏁 Analysis Complete: ", style="bold")
    summary_text.append(
        f"{_format_currency(report.initial_balance)} → {_format_currency(report.final_balance)}", style="bold cyan"
    )
    summary_text.append(
        f" ({_format_pct(report.total_return_pct)})", style=f"bold {_get_color(report.total_return_pct)}"
    )

    console.print(Panel(summary_text, border_style="green" if report.total_return_pct > 0 else "red"))
    console.print()
