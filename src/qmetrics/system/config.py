"""
System configuration for qmetrics.

One YAML file configures the whole tool:
- analytics: Default parameters for analytics runs (balance, risk-free rate, Monte Carlo)
- output: Where reports are written and how they are displayed
- logging: Console/file logging

Loading order:
1. Built-in defaults (the dataclass defaults below)
2. YAML file, deep-merged over the defaults
3. ${VAR} placeholders substituted from the environment

File resolution (first match wins):
1. Explicit path passed to SystemConfig.load()
2. $QMETRICS_CONFIG
3. config/qmetrics.yaml in the working directory

Example config/qmetrics.yaml:
    analytics:
      initial_balance: 25000
      simulations: 500
      seed: 42
    output:
      default_report_path: ${HOME}/reports/latest.json
    logging:
      level: DEBUG
"""

import dataclasses
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import structlog
import yaml

from qmetrics.libraries.performance.config import (
    DEFAULT_INITIAL_BALANCE,
    DEFAULT_PERIODS,
    DEFAULT_RISK_FREE_RATE,
    DEFAULT_SAMPLE_PATHS,
    DEFAULT_SIMULATIONS,
    AnalyticsConfig,
)
from qmetrics.libraries.performance.errors import ConfigurationError
from qmetrics.system import log_system

logger = structlog.get_logger(__name__)

CONFIG_ENV_VAR = "QMETRICS_CONFIG"
DEFAULT_CONFIG_PATH = Path("config/qmetrics.yaml")

_ENV_PATTERN = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)\}")


@dataclass
class AnalyticsSettings:
    """Default analytics parameters (CLI options override these)."""

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

    def to_analytics_config(self) -> AnalyticsConfig:
        """Convert to the validated AnalyticsConfig used by the engine."""
        return AnalyticsConfig(**dataclasses.asdict(self))


@dataclass
class OutputConfig:
    """Report output settings."""

    default_report_path: str | None = None
    detail_level: str = "standard"
    indent: int = 2


@dataclass
class LoggingConfig:
    """Logging settings as they appear in YAML."""

    level: str = "INFO"
    format: str = "console"
    timestamp_format: str = "compact"
    enable_file: bool = False
    file_path: str = "logs/qmetrics.log"
    file_level: str = "WARNING"
    file_rotation: bool = True
    max_file_size_mb: int = 10
    backup_count: int = 3

    def to_logger_config(self) -> log_system.LoggingConfig:
        """Convert to log_system.LoggingConfig for LoggerFactory.configure()."""
        return log_system.LoggingConfig(
            level=self.level,  # type: ignore[arg-type]
            format=self.format,  # type: ignore[arg-type]
            timestamp_format=self.timestamp_format,  # type: ignore[arg-type]
            enable_file=self.enable_file,
            file_path=Path(self.file_path),
            file_level=self.file_level,  # type: ignore[arg-type]
            file_rotation=self.file_rotation,
            max_file_size_mb=self.max_file_size_mb,
            backup_count=self.backup_count,
        )


@dataclass
class SystemConfig:
    """Complete system configuration."""

    analytics: AnalyticsSettings = field(default_factory=AnalyticsSettings)
    output: OutputConfig = field(default_factory=OutputConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def load(cls, path: Path | str | None = None) -> "SystemConfig":
        """
        Load configuration from YAML, merged over built-in defaults.

        Args:
            path: Config file. If None, $QMETRICS_CONFIG then config/qmetrics.yaml.
                  A missing file yields the defaults.

        Returns:
            SystemConfig

        Raises:
            ConfigurationError: If the file is not valid YAML or has unknown keys
        """
        config_path = _resolve_config_path(path)

        if config_path is None or not config_path.exists():
            logger.debug("system_config.defaults", path=str(config_path) if config_path else None)
            return cls()

        try:
            with config_path.open("r", encoding="utf-8") as f:
                loaded = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {config_path}: {e}") from e

        if not isinstance(loaded, dict):
            raise ConfigurationError(f"{config_path} must contain a mapping at the top level")

        merged = _deep_merge(dataclasses.asdict(cls()), _substitute_env_vars(loaded))
        logger.debug("system_config.loaded", path=str(config_path))
        return cls._from_dict(merged)

    @classmethod
    def _from_dict(cls, data: dict[str, Any]) -> "SystemConfig":
        """Build config from a (possibly partial) dictionary."""
        try:
            return cls(
                analytics=AnalyticsSettings(**data.get("analytics", {})),
                output=OutputConfig(**data.get("output", {})),
                logging=LoggingConfig(**data.get("logging", {})),
            )
        except TypeError as e:
            raise ConfigurationError(f"Unknown configuration key: {e}") from e

    def to_analytics_config(self) -> AnalyticsConfig:
        """Shortcut for self.analytics.to_analytics_config()."""
        return self.analytics.to_analytics_config()

    def to_logger_config(self) -> log_system.LoggingConfig:
        """Shortcut for self.logging.to_logger_config()."""
        return self.logging.to_logger_config()


def _resolve_config_path(path: Path | str | None) -> Path | None:
    if path is not None:
        return Path(path)
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path)
    return DEFAULT_CONFIG_PATH


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge override into a copy of base. Override wins on conflicts."""
    result = dict(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _substitute_env_vars(value: Any) -> Any:
    """Replace ${VAR} with environment values. Undefined variables keep the placeholder."""
    if isinstance(value, dict):
        return {key: _substitute_env_vars(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_substitute_env_vars(item) for item in value]
    if isinstance(value, str):
        return _ENV_PATTERN.sub(lambda m: os.environ.get(m.group(1), m.group(0)), value)
    return value


_system_config: SystemConfig | None = None


def get_system_config(path: Path | str | None = None) -> SystemConfig:
    """Get the system config singleton, loading it on first use or when a path is given."""
    global _system_config
    if _system_config is None or path is not None:
        _system_config = SystemConfig.load(path)
    return _system_config


def reload_system_config(path: Path | str | None = None) -> SystemConfig:
    """Force reload of the system config singleton."""
    global _system_config
    _system_config = SystemConfig.load(path)
    return _system_config
