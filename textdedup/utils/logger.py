"""Sanitized logging utilities for textdedup.

Submitted text can contain anything a user pasted, so context values are
passed through ``sanitize_text`` and truncated before they reach the log.
"""
import json
import logging
import re
from typing import Any, Optional

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)

logger = logging.getLogger('textdedup')


def set_log_level(level: str, fmt: Optional[str] = None) -> None:
    """Apply the configured level (and optionally format) to the package logger."""
    logger.setLevel(level.upper())
    if fmt:
        for handler in logging.getLogger().handlers:
            handler.setFormatter(logging.Formatter(fmt, datefmt='%Y-%m-%d %H:%M:%S'))


def sanitize_text(text: str) -> str:
    """Remove sensitive information from text.

    Args:
        text: Input text that may contain sensitive data

    Returns:
        Sanitized text with sensitive patterns replaced
    """
    if not text:
        return text

    # Email addresses
    text = re.sub(r'[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}', '<email>', text)

    # API keys and tokens (common patterns)
    text = re.sub(r'sk-[a-zA-Z0-9]{20,}', '<api-key>', text)
    text = re.sub(r'[a-zA-Z0-9]{32,}', '<token>', text)

    # URLs with potential sensitive data
    text = re.sub(r'https?://[^\s"]+', '<url>', text)

    # UUIDs
    text = re.sub(r'[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}', '<uuid>', text, flags=re.IGNORECASE)

    return text


def preview(text: str, limit: int = 60) -> str:
    """Short, single-line preview of a corpus text for log context."""
    if not text:
        return ""
    flat = " ".join(text.split())
    if len(flat) > limit:
        return flat[:limit] + "..."
    return flat


def safe_json(obj: Any, max_length: int = 1000) -> str:
    """Safely serialize object to JSON with sensitive data sanitized.

    Args:
        obj: Object to serialize
        max_length: Maximum length of output string

    Returns:
        Sanitized JSON string
    """
    try:
        json_str = json.dumps(obj, ensure_ascii=False, default=str)
        sanitized = sanitize_text(json_str)

        if len(sanitized) > max_length:
            sanitized = sanitized[:max_length] + "... [truncated]"

        return sanitized
    except (TypeError, ValueError):
        return "<unable to serialize>"


def log_info(message: str, **kwargs) -> None:
    """Log info message with optional sanitized context."""
    if kwargs:
        logger.info(f"{message} | Context: {safe_json(kwargs)}")
    else:
        logger.info(message)


def log_warning(message: str, **kwargs) -> None:
    """Log warning message with optional sanitized context."""
    if kwargs:
        logger.warning(f"{message} | Context: {safe_json(kwargs)}")
    else:
        logger.warning(message)


def log_error(message: str, **kwargs) -> None:
    """Log error message with optional sanitized context."""
    if kwargs:
        logger.error(f"{message} | Context: {safe_json(kwargs)}")
    else:
        logger.error(message)


def log_debug(message: str, **kwargs) -> None:
    """Log debug message with optional sanitized context."""
    if kwargs:
        logger.debug(f"{message} | Context: {safe_json(kwargs)}")
    else:
        logger.debug(message)


def log_transition(previous: str, current: str, **kwargs) -> None:
    """Log a session state machine transition.

    Args:
        previous: State being left
        current: State being entered
        **kwargs: Additional context
    """
    log_debug(f"Session transition: {previous} -> {current}", **kwargs)


def log_engine_call(operation: str, elapsed_seconds: float, **kwargs) -> None:
    """Log a completed engine call with its duration.

    Args:
        operation: Engine operation name
        elapsed_seconds: Wall time spent waiting for the engine
        **kwargs: Additional context
    """
    log_debug(f"Engine {operation} completed",
              elapsed_ms=round(elapsed_seconds * 1000, 2),
              **kwargs)
