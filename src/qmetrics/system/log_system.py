"""Structured logging for qmetrics.

structlog sits on top of stdlib logging so that library modules can call
``structlog.get_logger(__name__)`` at import time and stay silent until an
application (the CLI) calls ``LoggerFactory.configure()``.

Handlers:
    console  stderr, coloured one-line events or JSON
    file     optional JSON lines, plain or size-rotated

Events are named ``<area>.<what>`` (``analytics.completed``,
``analytics.trade_rejected``, ``monte_carlo.completed``, ``report.written``).
"""

import inspect
import logging
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Callable, Literal

import structlog
from pydantic import BaseModel, Field

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
TimestampFormat = Literal["iso", "compact", "time", "short"]

DEFAULT_LOG_FILE = Path("logs/qmetrics.log")
TIMESTAMP_KEY = "log_timestamp"

# strftime patterns; "{cs}" is replaced by centiseconds
_TIMESTAMP_PATTERNS: dict[str, str] = {
    "compact": "%y%m%d-%H%M%S.{cs}",
    "time": "%H:%M:%S.{cs}",
    "short": "%m%dT%H%M%S",
}

_LEVEL_COLORS = {
    "DEBUG": "\033[36m",
    "INFO": "\033[32m",
    "WARNING": "\033[33m",
    "ERROR": "\033[31m",
    "CRITICAL": "\033[35m",
}
_RESET = "\033[0m"
_DIM = "\033[90m"

# Keys consumed by the renderer itself
_RESERVED_KEYS = (TIMESTAMP_KEY, "level", "event", "filename", "lineno", "logger")


class LoggingConfig(BaseModel):
    """Logging settings.

    What each level shows:
        DEBUG    analysis start, Monte Carlo percentiles
        INFO     analysis summary, report written (default)
        WARNING  rejected trade records
        ERROR    failures that abort a command

    Timestamp formats: iso (2024-10-22T20:50:07.288824+00:00),
    compact (241022-205007.28), time (20:50:07.28), short (1022T205007).
    """

    level: LogLevel = Field(default="INFO", description="Minimum console level")
    format: Literal["console", "json"] = Field(default="console", description="Console output format")
    timestamp_format: TimestampFormat = Field(default="compact", description="Timestamp style")
    enable_file: bool = Field(default=False, description="Also write JSON lines to a file")
    file_path: Path | None = Field(default=None, description="Log file (logs/qmetrics.log if None)")
    file_level: LogLevel = Field(default="WARNING", description="Minimum file level")
    file_rotation: bool = Field(default=True, description="Rotate the file by size")
    max_file_size_mb: int = Field(default=10, ge=1, description="Rotation threshold in MB")
    backup_count: int = Field(default=3, ge=0, description="Rotated files kept")


def _make_timestamper(fmt: str) -> Callable[[Any, str, dict[str, Any]], dict[str, Any]]:
    """Processor stamping events under TIMESTAMP_KEY, leaving any 'timestamp' field alone."""
    pattern = _TIMESTAMP_PATTERNS.get(fmt)

    def stamp(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
        now = datetime.now(timezone.utc)
        if pattern is None:
            event_dict[TIMESTAMP_KEY] = now.isoformat()
        else:
            event_dict[TIMESTAMP_KEY] = now.strftime(pattern.replace("{cs}", f"{now.microsecond // 10000:02d}"))
        return event_dict

    return stamp


def _format_context_value(value: Any) -> str:
    # Metrics carry long float tails; keep console lines readable
    if isinstance(value, float):
        return f"{value:.6g}"
    return str(value)


class LoggerFactory:
    """
    Configures structlog once and hands out loggers.

    Example:
        LoggerFactory.configure(LoggingConfig(level="DEBUG"))
        logger = LoggerFactory.get_logger()
        logger.info("analytics.completed", trade_count=42)
    """

    _config: LoggingConfig | None = None
    _configured: bool = False

    @classmethod
    def configure(cls, config: LoggingConfig | None = None) -> None:
        """
        Install handlers on the root logger and configure structlog.

        Calling it again replaces the previous setup.

        Args:
            config: Logging settings (defaults to LoggingConfig())
        """
        if config is None:
            config = LoggingConfig()
        if config.enable_file and config.file_path is None:
            config.file_path = DEFAULT_LOG_FILE
        cls._config = config

        pre_chain = cls._build_common_processors(config.timestamp_format)

        handlers = [cls._build_console_handler(config, pre_chain)]
        root_level = logging.getLevelName(config.level)
        if config.enable_file:
            handlers.append(cls._configure_file_logging(config, pre_chain))
            root_level = min(root_level, logging.getLevelName(config.file_level))

        logging.basicConfig(level=root_level, handlers=handlers, force=True)

        structlog.configure(
            processors=[
                *pre_chain,
                *cls._exception_processors(config.format),
                structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
            ],
            wrapper_class=structlog.stdlib.BoundLogger,
            context_class=dict,
            logger_factory=structlog.stdlib.LoggerFactory(),
            cache_logger_on_first_use=True,
        )
        cls._configured = True

    @classmethod
    def _build_common_processors(cls, timestamp_format: str) -> list[Any]:
        """Processors run for structlog and foreign stdlib records alike."""
        return [
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            _make_timestamper(timestamp_format),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.CallsiteParameterAdder(
                [structlog.processors.CallsiteParameter.FILENAME, structlog.processors.CallsiteParameter.LINENO]
            ),
        ]

    @staticmethod
    def _exception_processors(fmt: str) -> list[Any]:
        if fmt == "json":
            return [structlog.processors.format_exc_info]
        return [
            structlog.dev.set_exc_info,
            structlog.processors.ExceptionRenderer(structlog.dev.plain_traceback),  # type: ignore[arg-type]
        ]

    @classmethod
    def _build_console_handler(cls, config: LoggingConfig, pre_chain: list[Any]) -> logging.Handler:
        # stdout belongs to the report tables
        handler = logging.StreamHandler(stream=sys.stderr)
        handler.setLevel(config.level)
        renderer = (
            cls._custom_console_renderer() if config.format == "console" else structlog.processors.JSONRenderer()
        )
        handler.setFormatter(structlog.stdlib.ProcessorFormatter(processor=renderer, foreign_pre_chain=pre_chain))
        return handler

    @staticmethod
    def _custom_console_renderer() -> Callable[[Any, str, dict[str, Any]], str]:
        """
        Render one event per line.

        Layout: ``<timestamp> [level] event | key=value ... (module:line)``
        where ``module`` is the last segment of the logger name.
        """

        def render(logger: Any, name: str, event_dict: dict[str, Any]) -> str:
            timestamp, level, event, filename, lineno, logger_name = (
                event_dict.pop(key, "") for key in _RESERVED_KEYS
            )
            level = str(level or "info").upper()

            parts = [str(timestamp), f"[{_LEVEL_COLORS.get(level, '')}{level.lower()}{_RESET}]", str(event)]

            context = " ".join(
                f"{key}={_format_context_value(value)}"
                for key, value in sorted(event_dict.items())
                if not key.startswith("_")
            )
            if context:
                parts.append(f"{_DIM}|{_RESET} {context}")

            module = str(logger_name).rsplit(".", 1)[-1] if logger_name else Path(str(filename)).stem
            if module and lineno:
                parts.append(f"{_DIM}({module}:{lineno}){_RESET}")

            return " ".join(part for part in parts if part)

        return render

    @classmethod
    def _configure_file_logging(cls, config: LoggingConfig, pre_chain: list[Any]) -> logging.Handler:
        """JSON-lines file handler; parent directories are created."""
        assert config.file_path is not None
        config.file_path.parent.mkdir(parents=True, exist_ok=True)

        handler: logging.Handler
        if config.file_rotation:
            handler = RotatingFileHandler(
                config.file_path,
                maxBytes=config.max_file_size_mb * 1024 * 1024,
                backupCount=config.backup_count,
                encoding="utf-8",
            )
        else:
            handler = logging.FileHandler(config.file_path, encoding="utf-8")

        handler.setLevel(config.file_level)
        handler.setFormatter(
            structlog.stdlib.ProcessorFormatter(
                processor=structlog.processors.JSONRenderer(),
                foreign_pre_chain=pre_chain,
            )
        )
        return handler

    @classmethod
    def get_logger(cls, name: str | None = None):
        """
        Return a structlog logger, configuring defaults on first use.

        Args:
            name: Logger name (defaults to the caller's module name)
        """
        if not cls._configured:
            cls.configure()

        if name is None:
            caller = inspect.currentframe()
            caller = caller.f_back if caller else None
            name = caller.f_globals.get("__name__", "qmetrics") if caller else "qmetrics"

        return structlog.get_logger(name)

    @classmethod
    def get_config(cls) -> LoggingConfig:
        """Active configuration, or the defaults when not configured."""
        return cls._config or LoggingConfig()

    @classmethod
    def is_configured(cls) -> bool:
        return cls._configured

    @classmethod
    def reset(cls) -> None:
        """Drop all handlers and structlog configuration (used by tests)."""
        root = logging.getLogger()
        for handler in list(root.handlers):
            root.removeHandler(handler)
            handler.close()
        root.setLevel(logging.NOTSET)

        cls._config = None
        cls._configured = False
        structlog.reset_defaults()
