"""Analytics configuration.

Explicit parameter object passed to the engine and its stages. There are no
module-level mutable defaults: every tunable lives here with a documented
default value.

Design Principles:
- Immutable (frozen dataclass)
- Validation in __post_init__ (fail fast with ConfigurationError)
- Degenerate but legal values (zero or negative balance, zero simulations)
  are accepted; the stages document what they produce for them
"""

import math
from dataclasses import dataclass, replace
from typing import Any

from qmetrics.libraries.performance.errors import ConfigurationError

DEFAULT_INITIAL_BALANCE = 10_000.0
DEFAULT_RISK_FREE_RATE = 0.02
DEFAULT_SIMULATIONS = 100
DEFAULT_PERIODS = 252
DEFAULT_SAMPLE_PATHS = 5


def _require_finite(name: str, value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        raise ConfigurationError(f"{name} must be a finite number, got {value!r}")


def _require_int(name: str, value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(f"{name} must be an integer, got {value!r}")


@dataclass(frozen=True)
class AnalyticsConfig:
    """Parameters for one analytics run.

    Attributes:
        initial_balance: Account balance before the first trade
        risk_free_rate: Annual risk-free rate used by Treynor and Jensen alpha,
            in the same units the original report used (0.02 = 2%)
        simulations: Number of Monte Carlo runs (<= 0 disables simulation runs)
        periods: Steps per Monte Carlo run (<= 0 disables simulation runs)
        sample_paths: Number of leading runs whose full trajectory is kept
        var_confidence: Primary VaR / expected shortfall confidence
        cvar_confidence: Tail VaR / conditional VaR confidence
        threshold: Return threshold (percent) for Omega and deviations
        seed: Seed for the Monte Carlo generator (None = nondeterministic)
        run_simulation: Include the Monte Carlo stage in the report

    Example:
        >>> config = AnalyticsConfig(initial_balance=25_000.0, seed=42)
        >>> config.simulations
        100
    """

    initial_balance: float = DEFAULT_INITIAL_BALANCE
    risk_free_rate: float = DEFAULT_RISK_FREE_RATE
    simulations: int = DEFAULT_SIMULATIONS
    periods: int = DEFAULT_PERIODS
    sample_paths: int = DEFAULT_SAMPLE_PATHS
    var_confidence: float = 0.95
    cvar_confidence: float = 0.99
    threshold: float = 0.0
    seed: int | None = None
    run_simulation: bool = True

    def __post_init__(self) -> None:
        """Validate configuration values."""
        _require_finite("initial_balance", self.initial_balance)
        _require_finite("risk_free_rate", self.risk_free_rate)
        _require_finite("threshold", self.threshold)
        _require_int("simulations", self.simulations)
        _require_int("periods", self.periods)
        _require_int("sample_paths", self.sample_paths)

        if self.sample_paths < 0:
            raise ConfigurationError(f"sample_paths must be >= 0, got {self.sample_paths}")

        for name in ("var_confidence", "cvar_confidence"):
            value = getattr(self, name)
            _require_finite(name, value)
            if not 0.0 < value < 1.0:
                raise ConfigurationError(f"{name} must be in (0, 1), got {value}")

        if self.seed is not None:
            _require_int("seed", self.seed)
            if self.seed < 0:
                raise ConfigurationError(f"seed must be >= 0, got {self.seed}")

    def with_overrides(self, **overrides: Any) -> "AnalyticsConfig":
        """Return a copy with the given non-None fields replaced."""
        changes = {key: value for key, value in overrides.items() if value is not None}
        return replace(self, **changes) if changes else self
