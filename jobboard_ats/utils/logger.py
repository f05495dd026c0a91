"""
Logging infrastructure for the Jobboard ATS.

Uses Loguru for logging with automatic rotation, structured output,
and a separate sink for security events.
"""

import sys
from typing import Any

from loguru import logger

from jobboard_ats.utils.config import get_settings

SENSITIVE_KEYS = frozenset(
    {
        "password", "passwd", "pwd", "secret", "token", "api_key",
        "apikey", "auth", "credential", "private_key", "access_token",
        "refresh_token", "recruiter_notes", "internal_notes",
        "recruiternotes", "internalnotes",
    }
)


def setup_logging() -> None:
    """
    Configure application-wide logging.

    Sets up console and file logging with appropriate formatting,
    rotation, and retention policies.
    """
    settings = get_settings()
    log_settings = settings.logging

    # Remove default handler
    logger.remove()

    # Security: diagnose=False outside development to keep variable values out of tracebacks
    enable_diagnose = settings.debug and settings.environment == "development"

    if log_settings.console_output:
        logger.add(
            sys.stderr,
            format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
            "<level>{message}</level>",
            level=log_settings.level,
            colorize=True,
            backtrace=True,
            diagnose=enable_diagnose,
        )

    if not log_settings.file_output:
        logger.info(f"Logging initialized - Level: {log_settings.level}")
        return

    log_file = log_settings.file_path
    log_file.parent.mkdir(parents=True, exist_ok=True)

    logger.add(
        log_file,
        format=log_settings.format,
        level=log_settings.level,
        rotation=log_settings.rotation,
        retention=log_settings.retention,
        compression="zip",
        backtrace=True,
        diagnose=enable_diagnose,
        enqueue=True,
    )

    # Leak-guard trips and other security events get their own file
    security_log_path = log_file.parent / "security.log"
    logger.add(
        security_log_path,
        format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level} | {extra[security]} | {message}",
        level="WARNING",
        filter=lambda record: "security" in record["extra"],
        rotation="1 week",
        retention="1 year",
        compression="zip",
        enqueue=True,
    )

    logger.info(f"Logging initialized - Level: {log_settings.level}")


def get_logger(name: str) -> Any:
    """
    Get a logger instance with the specified name.

    Args:
        name: The name for the logger (typically __name__)

    Returns:
        A configured logger instance
    """
    return logger.bind(name=name)


def sanitize_for_logging(data: Any) -> Any:
    """
    Sanitize data before logging to prevent sensitive information exposure.

    Redacts passwords, tokens, recruiter notes and other sensitive fields.
    """
    if isinstance(data, dict):
        return {
            k: "***REDACTED***"
            if any(s in str(k).lower() for s in SENSITIVE_KEYS)
            else sanitize_for_logging(v)
            for k, v in data.items()
        }
    elif isinstance(data, (list, tuple)):
        return [sanitize_for_logging(item) for item in data]
    return data


def log_security_event(event: str, details: dict[str, Any]) -> None:
    """
    Log a security event to the dedicated security sink.

    Args:
        event: Short event name (e.g., "recruiter_notes_leak")
        details: Dictionary of relevant details, redacted before writing
    """
    sanitized_details = sanitize_for_logging(details)
    logger.bind(security=event).error(f"{event} | {sanitized_details}")


class LoggerMixin:
    """
    Mixin class to add logging capability to any class.

    Usage:
        class MyClass(LoggerMixin):
            def my_method(self):
                self.logger.info("Doing something...")
    """

    @property
    def logger(self) -> Any:
        """Get a logger instance for this class."""
        if not hasattr(self, "_logger"):
            self._logger = get_logger(self.__class__.__name__)
        return self._logger


# Module-level logger for quick access
log = logger
