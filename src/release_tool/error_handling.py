"""
Error handling for release-tool.

Defines the exception taxonomy raised by the core and a categorized error
handler that logs structured error contexts before errors propagate.
"""

import logging
import re
import sys
import traceback
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class ReleaseToolError(Exception):
    """Base class for all release-tool failures."""


class ManifestNotFoundError(ReleaseToolError):
    """A dependency manifest does not exist at the requested revision."""

    def __init__(self, message: str, path: Optional[str] = None, revision: Optional[str] = None):
        super().__init__(message)
        self.path = path
        self.revision = revision


class MalformedInputError(ReleaseToolError, ValueError):
    """A manifest, changelog or author line violates the expected structure."""


class GitCommandError(ReleaseToolError):
    """The git executable exited with a non-zero status."""

    def __init__(self, args: List[str], returncode: int, output: str):
        self.command = list(args)
        self.returncode = returncode
        self.output = output
        super().__init__(f"exit status {returncode}: {output}")


class ConfigurationMissingError(ReleaseToolError):
    """The release file was not supplied or does not exist."""


class TemplateError(ReleaseToolError):
    """The release notes template could not be read or rendered."""


class ErrorLevel(Enum):
    """Error severity levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class ErrorCategory(Enum):
    """Error categories for better classification."""

    PARSING = "PARSING"
    GIT = "GIT"
    CONFIGURATION = "CONFIGURATION"
    TEMPLATE = "TEMPLATE"
    FILESYSTEM = "FILESYSTEM"


@dataclass
class ErrorContext:
    """Structured error context information."""

    level: ErrorLevel
    category: ErrorCategory
    message: str
    module: str
    function: str
    details: Dict[str, Any] = field(default_factory=dict)
    exception: Optional[Exception] = None
    traceback_info: Optional[str] = None
    suggestions: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert error context to dictionary for logging."""
        return {
            "level": self.level.value,
            "category": self.category.value,
            "message": self.message,
            "module": self.module,
            "function": self.function,
            "details": self.details,
            "exception_type": type(self.exception).__name__ if self.exception else None,
            "exception_message": str(self.exception) if self.exception else None,
            "traceback": self.traceback_info,
            "suggestions": self.suggestions,
        }


class SecureLogger:
    """Logger that masks credentials embedded in git output and remote URLs."""

    _SENSITIVE_PATTERNS = [
        (r"(https?://[^@\s/]+:)[^@\s]+@", r"\1[REDACTED]@"),
        (r'token["\s]*[:=]["\s]*([a-zA-Z0-9_\-+=/.]{8,})', 'token="[REDACTED]"'),
        (r'password["\s]*[:=]["\s]*([^\s"\']+)', 'password="[REDACTED]"'),
        (r"Authorization:\s*\w+\s+([^\s]+)", "Authorization: [REDACTED]"),
    ]

    def __init__(self, name: str, level: int = logging.WARNING):
        """
        Initialize secure logger.

        Args:
            name: Logger name
            level: Logging level
        """
        self.logger = logging.getLogger(name)
        self.logger.setLevel(level)

        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )

        if not self.logger.handlers:
            handler = logging.StreamHandler(sys.stderr)
            handler.setFormatter(formatter)
            self.logger.addHandler(handler)

    def _sanitize_message(self, message: str) -> str:
        sanitized = message
        for pattern, replacement in self._SENSITIVE_PATTERNS:
            sanitized = re.sub(pattern, replacement, sanitized, flags=re.IGNORECASE)
        return sanitized

    def _sanitize_dict(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Sanitize dictionary values to remove sensitive info."""
        sanitized = {}
        sensitive_keys = {"token", "password", "secret", "credential", "auth"}

        for key, value in data.items():
            if any(sensitive_key in key.lower() for sensitive_key in sensitive_keys):
                sanitized[key] = "[REDACTED]"
            elif isinstance(value, dict):
                sanitized[key] = self._sanitize_dict(value)
            elif isinstance(value, str):
                sanitized[key] = self._sanitize_message(value)
            else:
                sanitized[key] = value

        return sanitized

    def log_error_context(self, context: ErrorContext):
        """
        Log error context with appropriate level.

        Args:
            context: Error context to log
        """
        log_data = {
            "category": context.category.value,
            "module": context.module,
            "function": context.function,
            "details": self._sanitize_dict(context.details),
        }

        if context.exception:
            log_data["exception"] = type(context.exception).__name__

        if context.suggestions:
            log_data["suggestions"] = context.suggestions

        log_message = f"{self._sanitize_message(context.message)} | {log_data}"
        self.logger.log(getattr(logging, context.level.value), log_message)


class ErrorHandler:
    """
    Centralized error handler for consistent error management.

    Errors are logged and counted; raising is left to the caller so that
    every failure still propagates.
    """

    def __init__(
        self,
        logger_name: str = "release_tool",
        log_level: int = logging.WARNING,
    ):
        self.logger = SecureLogger(logger_name, log_level)
        self.error_stats: Dict[str, int] = {}

    def handle_error(
        self,
        level: ErrorLevel,
        category: ErrorCategory,
        message: str,
        module: str,
        function: str,
        exception: Optional[Exception] = None,
        details: Optional[Dict[str, Any]] = None,
        suggestions: Optional[List[str]] = None,
    ) -> ErrorContext:
        """
        Handle an error with structured logging.

        Args:
            level: Error severity level
            category: Error category
            message: Error message
            module: Module where error occurred
            function: Function where error occurred
            exception: Optional exception object
            details: Additional error details
            suggestions: Suggested fixes

        Returns:
            ErrorContext: The created error context
        """
        context = ErrorContext(
            level=level,
            category=category,
            message=message,
            module=module,
            function=function,
            details=details or {},
            exception=exception,
            traceback_info=(
                "".join(traceback.format_exception(exception)) if exception else None
            ),
            suggestions=suggestions or [],
        )

        stat_key = f"{category.value}_{level.value}"
        self.error_stats[stat_key] = self.error_stats.get(stat_key, 0) + 1

        self.logger.log_error_context(context)

        return context

    def warning(
        self,
        category: ErrorCategory,
        message: str,
        module: str,
        function: str,
        **kwargs,
    ) -> ErrorContext:
        """Handle warning level error."""
        return self.handle_error(
            ErrorLevel.WARNING, category, message, module, function, **kwargs
        )

    def error(
        self,
        category: ErrorCategory,
        message: str,
        module: str,
        function: str,
        **kwargs,
    ) -> ErrorContext:
        """Handle error level error."""
        return self.handle_error(
            ErrorLevel.ERROR, category, message, module, function, **kwargs
        )

    def get_error_stats(self) -> Dict[str, int]:
        """Get error statistics."""
        return self.error_stats.copy()


# Global error handler instance
_global_error_handler: Optional[ErrorHandler] = None


def get_error_handler() -> ErrorHandler:
    """Get the global error handler instance."""
    global _global_error_handler
    if _global_error_handler is None:
        _global_error_handler = ErrorHandler()
    return _global_error_handler


def setup_error_handling(
    log_level: int = logging.WARNING,
    logger_name: str = "release_tool",
) -> ErrorHandler:
    """
    Setup global error handling configuration.

    Args:
        log_level: Logging level
        logger_name: Logger name

    Returns:
        ErrorHandler: Configured error handler
    """
    global _global_error_handler
    _global_error_handler = ErrorHandler(logger_name, log_level)
    return _global_error_handler


def log_parsing_error(
    message: str,
    module: str,
    function: str,
    line: Optional[str] = None,
    source: Optional[str] = None,
    exception: Optional[Exception] = None,
):
    """
    Convenience function for logging parsing errors.

    Args:
        message: Error message
        module: Module name
        function: Function name
        line: Offending input line
        source: Manifest or log the line came from
        exception: Optional exception
    """
    details = {}
    if line is not None:
        details["line"] = line[:200]
    if source is not None:
        details["source"] = source

    get_error_handler().error(
        ErrorCategory.PARSING,
        message,
        module,
        function,
        details=details,
        exception=exception,
        suggestions=[
            "Check the manifest format at the given revision",
            "Verify the revision range is correct",
        ],
    )


def log_git_error(
    message: str,
    module: str,
    function: str,
    command: Optional[List[str]] = None,
    returncode: Optional[int] = None,
    exception: Optional[Exception] = None,
):
    """
    Convenience function for logging failed git invocations.

    Args:
        message: Error message
        module: Module name
        function: Function name
        command: git arguments that failed
        returncode: Exit status of the git process
        exception: Optional exception
    """
    details: Dict[str, Any] = {}
    if command is not None:
        details["command"] = " ".join(command)
    if returncode is not None:
        details["returncode"] = returncode

    get_error_handler().error(
        ErrorCategory.GIT,
        message,
        module,
        function,
        details=details,
        exception=exception,
        suggestions=[
            "Check that the repository path is a git repository",
            "Verify both revisions exist locally (git fetch --tags)",
        ],
    )
