"""
QMetrics - Trading Performance Analytics

Public API for turning a closed trade history into risk, drawdown, ratio,
streak, time-bucket and Monte Carlo metrics.
"""

from importlib.metadata import version

try:
    __version__ = version("qmetrics")
except Exception:
    __version__ = "0.0.0.dev"  # Fallback for development


__all__ = [
    "__version__",
]
