"""Report writers.

JSON output for MetricsReport. Infinite ratios are written as the strings
"Infinity" / "-Infinity" by the report models themselves, so the output is
always strict JSON.
"""

import json
from pathlib import Path
from typing import Any

import structlog

from qmetrics.libraries.performance.models import MetricsReport

logger = structlog.get_logger(__name__)

# Per-trade series dropped when include_series is False
SERIES_FIELDS: dict[str, Any] = {
    "returns": True,
    "equity_curve": True,
    "drawdown": {"drawdown_series"},
    "simulation": {"terminal_balances", "sample_paths"},
}


def _dump_json(report: MetricsReport, include_series: bool, indent: int | None = None) -> str:
    return report.model_dump_json(indent=indent, exclude=None if include_series else SERIES_FIELDS)


def report_to_dict(report: MetricsReport, include_series: bool = True) -> dict[str, Any]:
    """
    Convert a report to a JSON-safe dictionary.

    Args:
        report: Report to convert
        include_series: Keep per-trade series (returns, equity curve,
            drawdown series, terminal balances and sample paths)
    """
    return json.loads(_dump_json(report, include_series))


def write_json_report(
    report: MetricsReport,
    path: Path | str,
    indent: int = 2,
    include_series: bool = True,
) -> Path:
    """
    Write a report as JSON.

    Args:
        report: Report to write
        path: Output file (parent directories are created)
        indent: JSON indentation
        include_series: Keep per-trade series in the output

    Returns:
        Path written
    """
    output_path = Path(path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(_dump_json(report, include_series, indent), encoding="utf-8")

    logger.info("report.written", path=str(output_path), trade_count=report.trade_count)
    return output_path
