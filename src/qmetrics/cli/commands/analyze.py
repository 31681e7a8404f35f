"""Trade history analysis command."""

import sys
import traceback
from pathlib import Path
from typing import Literal, Optional, cast

import click
from rich.console import Console

from qmetrics.libraries.performance.engine import analyze_trades
from qmetrics.libraries.performance.errors import AnalyticsError
from qmetrics.libraries.performance.parsing import load_trades
from qmetrics.services.reporting import display_metrics_report, write_json_report
from qmetrics.system import LoggerFactory
from qmetrics.system.config import reload_system_config

console = Console()


@click.command("analyze")
@click.option(
    "--file",
    "-f",
    "trades_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    required=True,
    help="Path to trade history (JSON list or object with a 'trades' list)",
)
@click.option("--initial-balance", "-b", type=float, help="Override account balance before the first trade")
@click.option("--risk-free-rate", type=float, help="Override annual risk-free rate (0.02 = 2%)")
@click.option("--simulations", "-n", type=int, help="Override number of Monte Carlo runs")
@click.option("--periods", "-p", type=int, help="Override steps per Monte Carlo run")
@click.option("--seed", type=int, help="Seed for reproducible Monte Carlo results")
@click.option(
    "--detail",
    "-d",
    type=click.Choice(["summary", "standard", "full"], case_sensitive=False),
    help="Console report detail level",
)
@click.option(
    "--output",
    "-o",
    "output_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write the full report as JSON to this path",
)
@click.option(
    "--log-level",
    "-l",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Set logging level",
)
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="System configuration file (YAML)",
)
def analyze_command(
    trades_file: Path,
    initial_balance: Optional[float],
    risk_free_rate: Optional[float],
    simulations: Optional[int],
    periods: Optional[int],
    seed: Optional[int],
    detail: Optional[str],
    output_path: Optional[Path],
    log_level: Optional[str],
    config_path: Optional[Path],
):
    """
    Analyse a closed trade history.

    Loads trades, computes the full metrics report and displays it. CLI
    options override system configuration values without modifying files.

    \b
    Examples:
        # Basic run with configuration defaults
        qmetrics analyze --file trades.json

        # Larger account, reproducible simulation
        qmetrics analyze -f trades.json -b 50000 --seed 42

        # Everything on screen, full report saved as JSON
        qmetrics analyze -f trades.json -d full -o reports/latest.json
    """
    try:
        system_config = reload_system_config(config_path)

        if log_level:
            # click already validated the choice
            system_config.logging.level = cast(Literal["DEBUG", "INFO", "WARNING", "ERROR"], log_level.upper())
        LoggerFactory.configure(system_config.to_logger_config())

        config = system_config.to_analytics_config().with_overrides(
            initial_balance=initial_balance,
            risk_free_rate=risk_free_rate,
            simulations=simulations,
            periods=periods,
            seed=seed,
        )

        console.rule("[bold blue]qmetrics Analysis[/bold blue]")
        console.print(f"  Trades File: [yellow]{trades_file}[/yellow]")
        console.print(f"  Initial Balance: [yellow]${config.initial_balance:,.2f}[/yellow]")

        trades = load_trades(trades_file)
        console.print(f"  Trades Loaded: [magenta]{len(trades):,}[/magenta]")

        with console.status("[cyan]Computing metrics...[/cyan]"):
            report = analyze_trades(trades, config)

        detail_level = (detail or system_config.output.detail_level).lower()
        display_metrics_report(
            report,
            detail_level=cast(Literal["summary", "standard", "full"], detail_level),
            console=console,
        )

        destination = output_path or system_config.output.default_report_path
        if destination:
            written = write_json_report(report, destination, indent=system_config.output.indent)
            console.print(f"[cyan]Report:[/cyan] {written}")

        sys.exit(0)

    except (AnalyticsError, OSError) as e:
        console.print()
        console.print(f"[bold red]✗ Analysis failed:[/bold red] {e}")
        if LoggerFactory.get_config().level == "DEBUG":
            console.print()
            console.print("[dim]" + traceback.format_exc() + "[/dim]")
        sys.exit(1)
