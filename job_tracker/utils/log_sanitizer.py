"""
Log Sanitizer - Filters credentials from log output

Keeps bearer tokens, JWTs, passwords and database credentials out of the
logs.

Usage:
    from job_tracker.utils.log_sanitizer import setup_logging
    setup_logging(level="INFO", log_file="logs/job_tracker.log")  # once at startup
"""
import re
import sys
from typing import List, Optional, Pattern
from loguru import logger


# Patterns to redact from logs
SENSITIVE_PATTERNS: List[Pattern] = [
    # Bearer tokens
    re.compile(r'(Bearer\s+)([a-zA-Z0-9_.-]{20,})', re.IGNORECASE),

    # Bare JWTs (header.payload.signature)
    re.compile(r'(eyJ[a-zA-Z0-9_-]{10,}\.[a-zA-Z0-9_-]{10,}\.[a-zA-Z0-9_-]{10,})'),

    # Token / secret assignments
    re.compile(r'(["\']?(?:token|access[_-]?token|jwt[_-]?secret|secret)["\']?\s*[:=]\s*)["\']?([a-zA-Z0-9_.-]{8,})["\']?', re.IGNORECASE),

    # Passwords and password hashes
    re.compile(r'(["\']?(?:password|password[_-]?hash|passwd|pwd)["\']?\s*[:=]\s*)["\']?([^\s"\',}]{4,})["\']?', re.IGNORECASE),

    # Database connection strings with credentials
    re.compile(r'(postgresql(?:\+\w+)?://[^:/]+:)([^@]+)(@)', re.IGNORECASE),
    re.compile(r'(mysql(?:\+\w+)?://[^:/]+:)([^@]+)(@)', re.IGNORECASE),
]

# Replacement text for redacted content
REDACTED = "[REDACTED]"

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)


def sanitize_message(message: str) -> str:
    """
    Sanitize a log message by redacting sensitive information.

    Args:
        message: The log message to sanitize

    Returns:
        Sanitized message with sensitive data replaced by [REDACTED]
    """
    sanitized = message

    for pattern in SENSITIVE_PATTERNS:
        # Keep the label, drop the secret
        if pattern.groups >= 3:
            sanitized = pattern.sub(rf'\g<1>{REDACTED}\g<3>', sanitized)
        elif pattern.groups == 2:
            sanitized = pattern.sub(rf'\g<1>{REDACTED}', sanitized)
        else:
            sanitized = pattern.sub(REDACTED, sanitized)

    return sanitized


class SanitizingFilter:
    """Loguru filter that sanitizes sensitive data"""

    def __call__(self, record):
        record["message"] = sanitize_message(record["message"])

        if record.get("extra"):
            for key, value in record["extra"].items():
                if isinstance(value, str):
                    record["extra"][key] = sanitize_message(value)

        return True


def setup_logging(level: str = "INFO", log_file: Optional[str] = None):
    """
    Configure loguru with sanitized stderr and (optionally) rotating file output.
    Call this once at application startup.
    """
    logger.remove()

    logger.add(
        sys.stderr,
        filter=SanitizingFilter(),
        format=LOG_FORMAT,
        level=level,
    )

    if log_file:
        logger.add(
            log_file,
            filter=SanitizingFilter(),
            rotation="10 MB",
            retention="7 days",
            level="DEBUG",
        )

    logger.info("Log sanitization enabled - credentials will be redacted")
