"""Reporting for analytics results: Rich console display and JSON output."""

from qmetrics.services.reporting.formatters import display_metrics_report
from qmetrics.services.reporting.writers import report_to_dict, write_json_report

__all__ = [
    "display_metrics_report",
    "report_to_dict",
    "write_json_report",
]
