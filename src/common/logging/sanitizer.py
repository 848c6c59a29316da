"""
Log Sanitization

Provides filters and utilities for redacting credentials from logs.
The baserCMS login call carries an email/password pair and every
subsequent request carries a JWT access token, so both must never
reach stderr in clear text.
"""

from __future__ import annotations

import logging
import re
import sys
from re import Pattern
from typing import Any, TextIO

# Patterns for sensitive data that should be redacted
SENSITIVE_PATTERNS: list[tuple[str, Pattern[str]]] = [
    (
        "SECRET",
        re.compile(
            r"(secret|password|passwd|pwd)['\"]?\s*[=:]\s*['\"]?[^\s'\",}]{4,}['\"]?",
            re.IGNORECASE,
        ),
    ),
    (
        "TOKEN",
        re.compile(
            r"(access[_-]?token|refresh[_-]?token|auth[_-]?token)['\"]?\s*[=:]\s*['\"]?[\w\-\.]{16,}['\"]?",
            re.IGNORECASE,
        ),
    ),
    # Authorization header values (baserCMS sends the bare token)
    (
        "AUTHORIZATION",
        re.compile(r"(authorization)['\"]?\s*[=:]\s*['\"]?[\w\-\.]{16,}['\"]?", re.IGNORECASE),
    ),
    # Bare JWTs: header.payload.signature
    ("JWT", re.compile(r"eyJ[a-zA-Z0-9_\-]+\.[a-zA-Z0-9_\-]+\.[a-zA-Z0-9_\-]+")),
    # Bearer tokens in headers
    ("BEARER", re.compile(r"Bearer\s+[a-zA-Z0-9\-_\.]+", re.IGNORECASE)),
    # URLs with embedded credentials
    ("URL_CREDENTIALS", re.compile(r"(?<=://)[^/\s:@]+:[^/\s@]+@", re.IGNORECASE)),
]

# Placeholder for redacted content
REDACTION_PLACEHOLDER = "[REDACTED]"


class SanitizingFilter(logging.Filter):
    """
    A logging filter that redacts sensitive information from log messages.

    Usage:
        logger = logging.getLogger(__name__)
        logger.addFilter(SanitizingFilter())
    """

    def __init__(
        self,
        name: str = "",
        additional_patterns: list[tuple[str, Pattern[str]]] | None = None,
        redaction_placeholder: str = REDACTION_PLACEHOLDER,
    ):
        """
        Initialize the sanitizing filter.

        Args:
            name: Filter name (passed to parent)
            additional_patterns: Extra patterns to redact beyond defaults
            redaction_placeholder: Text to replace sensitive data with
        """
        super().__init__(name)
        self._patterns = list(SENSITIVE_PATTERNS)
        if additional_patterns:
            self._patterns.extend(additional_patterns)
        self._placeholder = redaction_placeholder

    def filter(self, record: logging.LogRecord) -> bool:
        """Sanitize the record in place; always lets it through."""
        if record.msg:
            record.msg = self._sanitize(str(record.msg))

        if record.args:
            if isinstance(record.args, dict):
                record.args = {k: self._sanitize_value(v) for k, v in record.args.items()}
            elif isinstance(record.args, tuple):
                record.args = tuple(self._sanitize_value(arg) for arg in record.args)

        return True

    def sanitize(self, text: str) -> str:
        """Redact every known sensitive pattern in ``text``."""
        return self._sanitize(text)

    def _sanitize(self, text: str) -> str:
        result = text
        for pattern_name, pattern in self._patterns:
            result = pattern.sub(f"{pattern_name}={self._placeholder}", result)
        return result

    def _sanitize_value(self, value: Any) -> Any:
        if isinstance(value, str):
            return self._sanitize(value)
        return value


def configure_sanitized_logging(
    level: int | str = logging.INFO,
    format_string: str | None = None,
    stream: TextIO | None = None,
    additional_patterns: list[tuple[str, Pattern[str]]] | None = None,
) -> None:
    """
    Configure the root logger with sanitization enabled.

    Logs default to stderr: on the stdio transport stdout carries the
    JSON-RPC stream and any stray log line would corrupt it.

    Args:
        level: Logging level (int or name such as "DEBUG")
        format_string: Log format string (uses default if not specified)
        stream: Output stream, stderr when omitted
        additional_patterns: Extra patterns to redact
    """
    if format_string is None:
        format_string = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(level=level, format=format_string, stream=stream or sys.stderr)

    root_logger = logging.getLogger()
    sanitizing_filter = SanitizingFilter(additional_patterns=additional_patterns)
    root_logger.addFilter(sanitizing_filter)

    # Records from child loggers bypass root filters, so handlers need it too
    for handler in root_logger.handlers:
        handler.addFilter(sanitizing_filter)


def get_sanitized_logger(name: str) -> logging.Logger:
    """
    Get a logger with sanitization filter attached.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger with SanitizingFilter attached
    """
    logger = logging.getLogger(name)

    has_sanitizing_filter = any(isinstance(f, SanitizingFilter) for f in logger.filters)
    if not has_sanitizing_filter:
        logger.addFilter(SanitizingFilter())

    return logger
