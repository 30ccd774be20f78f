"""
Structured logging configuration for release-tool.

Emits machine-readable JSON events on stderr so rendered release notes on
stdout are never interleaved with log output.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

_RESERVED_ATTRS = {
    "name",
    "msg",
    "args",
    "levelname",
    "levelno",
    "pathname",
    "filename",
    "module",
    "lineno",
    "funcName",
    "created",
    "msecs",
    "relativeCreated",
    "thread",
    "threadName",
    "processName",
    "process",
    "taskName",
    "getMessage",
    "exc_info",
    "exc_text",
    "stack_info",
}


class StructuredFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "component": record.name,
        }

        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS:
                log_entry[key] = value

        return json.dumps(log_entry, default=str)


class ComponentLogger:
    """Structured logger for one release-tool component."""

    def __init__(self, name: str):
        self.logger = logging.getLogger(f"release_tool.{name}")
        self._setup_logger()
        self.context: Dict[str, Any] = {}

    def _setup_logger(self) -> None:
        if not self.logger.handlers:
            handler = logging.StreamHandler(sys.stderr)
            handler.setFormatter(StructuredFormatter())
            self.logger.addHandler(handler)
            self.logger.setLevel(logging.WARNING)
            self.logger.propagate = False

    def set_context(self, **context: Any) -> None:
        """Attach fields to every subsequent event."""
        self.context = {key: value for key, value in context.items() if value is not None}

    def clear_context(self) -> None:
        self.context.clear()

    def _log(self, level: int, event_type: str, **kwargs) -> None:
        if not self.logger.isEnabledFor(level):
            return
        log_data = {"event_type": event_type, **self.context, **kwargs}
        self.logger.log(level, "", extra=log_data)

    def info(self, event_type: str, **kwargs) -> None:
        """Log info level event."""
        self._log(logging.INFO, event_type, **kwargs)

    def warning(self, event_type: str, **kwargs) -> None:
        """Log warning level event."""
        self._log(logging.WARNING, event_type, **kwargs)

    def error(self, event_type: str, **kwargs) -> None:
        """Log error level event."""
        self._log(logging.ERROR, event_type, **kwargs)

    def debug(self, event_type: str, **kwargs) -> None:
        """Log debug level event."""
        self._log(logging.DEBUG, event_type, **kwargs)


# Global logger instances
_manifest_logger = ComponentLogger("manifest")
_changelog_logger = ComponentLogger("changelog")
_git_logger = ComponentLogger("git")
_release_logger = ComponentLogger("release")

_ALL_LOGGERS = [_manifest_logger, _changelog_logger, _git_logger, _release_logger]


def get_manifest_logger() -> ComponentLogger:
    """Get manifest parsing and dependency diff logger."""
    return _manifest_logger


def get_changelog_logger() -> ComponentLogger:
    """Get changelog and contributor logger."""
    return _changelog_logger


def get_git_logger() -> ComponentLogger:
    """Get git invocation logger."""
    return _git_logger


def get_release_logger() -> ComponentLogger:
    """Get release assembly logger."""
    return _release_logger


def log_release_start(tag: str, previous: str, commit: str) -> None:
    """Log the start of a release notes build and set context on all loggers."""
    set_release_context(tag=tag)
    _release_logger.info("release_started", previous=previous, commit=commit)


def log_release_complete(
    tag: str,
    changes_count: int,
    dependencies_count: int,
    contributors_count: int,
) -> None:
    """Log release notes build completion."""
    _release_logger.info(
        "release_completed",
        tag=tag,
        total_changes=changes_count,
        updated_dependencies=dependencies_count,
        total_contributors=contributors_count,
    )
    clear_release_context()


def set_release_context(tag: Optional[str] = None) -> None:
    """Set release context for all loggers."""
    for logger in _ALL_LOGGERS:
        logger.set_context(tag=tag)


def clear_release_context() -> None:
    """Clear release context on all loggers."""
    for logger in _ALL_LOGGERS:
        logger.clear_context()


def configure_logging(log_level: str = "WARNING") -> None:
    """Configure logging levels for the application."""
    level = getattr(logging, log_level.upper(), logging.WARNING)

    logging.getLogger("release_tool").setLevel(level)
    for logger in _ALL_LOGGERS:
        logger.logger.setLevel(level)
