"""
Structured Logging for Perennial.

Every module logs through get_logger() so that console output goes through
Rich and context fields are rendered the same way everywhere:

    from perennial.core.logging import get_logger
    logger = get_logger(__name__)

    logger.bind(profile_id="p_123")
    logger.info("Saved scheduling config", ease=2.65)
    # -> "Saved scheduling config | profile_id=p_123 | ease=2.65"

Loggers are cached by name. configure_logging() sets the defaults used by
loggers created afterwards (the CLI calls it once per invocation).
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional


@dataclass
class LogConfig:
    """Logging configuration."""

    level: str = "WARNING"
    format: str = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
    date_format: str = "%Y-%m-%d %H:%M:%S"
    file_path: Optional[Path] = None
    console: bool = True


class StructuredLogger:
    """
    Structured logger with context support.

    Keyword arguments passed to a log call, and any fields attached with
    bind(), are appended to the message as key=value pairs.
    """

    def __init__(self, name: str, config: Optional[LogConfig] = None) -> None:
        self.logger = logging.getLogger(name)
        self.config = config or _ConfigHolder.get_config()
        self._context: dict[str, Any] = {}
        self._setup_logger()

    def _setup_logger(self) -> None:
        """Configure the logger."""
        level = getattr(logging, self.config.level.upper(), logging.WARNING)
        self.logger.setLevel(level)
        self.logger.handlers.clear()

        formatter = logging.Formatter(
            self.config.format,
            datefmt=self.config.date_format,
        )

        if self.config.console:
            from rich.console import Console
            from rich.logging import RichHandler

            console_handler = RichHandler(
                console=Console(stderr=True),
                show_time=True,
                show_path=False,
                markup=False,
                rich_tracebacks=True,
            )
            console_handler.setLevel(level)
            self.logger.addHandler(console_handler)

        if self.config.file_path:
            self.config.file_path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(self.config.file_path)
            file_handler.setLevel(level)
            file_handler.setFormatter(formatter)
            self.logger.addHandler(file_handler)

        self.logger.propagate = False

    def bind(self, **kwargs: Any) -> "StructuredLogger":
        """Attach context fields to every subsequent message."""
        self._context.update(kwargs)
        return self

    def unbind(self, *keys: str) -> "StructuredLogger":
        """Remove previously bound context fields."""
        for key in keys:
            self._context.pop(key, None)
        return self

    def _format_message(self, message: str, **kwargs: Any) -> str:
        """Format message with context and extra fields."""
        fields = {**self._context, **kwargs}
        if fields:
            field_str = " | ".join(f"{k}={v}" for k, v in fields.items())
            return f"{message} | {field_str}"
        return message

    def debug(self, message: str, **kwargs: Any) -> None:
        """Log debug message."""
        self.logger.debug(self._format_message(message, **kwargs))

    def info(self, message: str, **kwargs: Any) -> None:
        """Log info message."""
        self.logger.info(self._format_message(message, **kwargs))

    def warning(self, message: str, **kwargs: Any) -> None:
        """Log warning message."""
        self.logger.warning(self._format_message(message, **kwargs))

    def error(self, message: str, **kwargs: Any) -> None:
        """Log error message."""
        self.logger.error(self._format_message(message, **kwargs))

    def exception(self, message: str, **kwargs: Any) -> None:
        """Log exception with traceback."""
        self.logger.exception(self._format_message(message, **kwargs))


_loggers: dict[str, StructuredLogger] = {}


def get_logger(name: str, config: Optional[LogConfig] = None) -> StructuredLogger:
    """
    Get or create a structured logger.

    Args:
        name: Logger name (typically __name__).
        config: Optional logging configuration.

    Returns:
        Configured StructuredLogger instance.
    """
    if name not in _loggers:
        _loggers[name] = StructuredLogger(name, config)
    return _loggers[name]


def configure_logging(
    level: str = "WARNING",
    log_file: Optional[Path] = None,
    console: bool = True,
) -> None:
    """
    Configure global logging settings.

    Already-created loggers are reconfigured so that module-level loggers
    pick up the level chosen on the command line.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_file: Optional file path for log output.
        console: Whether to log to console.
    """
    config = LogConfig(
        level=level,
        file_path=log_file,
        console=console,
    )

    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.WARNING))
    _ConfigHolder.set_config(config)

    for structured in _loggers.values():
        structured.config = config
        structured._setup_logger()


class _ConfigHolder:
    """Holds default logging configuration."""

    _config: LogConfig = LogConfig()

    @classmethod
    def get_config(cls) -> LogConfig:
        """Get the default config."""
        return cls._config

    @classmethod
    def set_config(cls, config: LogConfig) -> None:
        """Set the default config."""
        cls._config = config
