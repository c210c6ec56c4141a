"""Logging for clickflow.

Three helpers write to the "clickflow" logger:
- logError: failures, tagged with a stable ErrorIds value
- logForDebugging: diagnostics about candidates, techniques and waits
- logEvent: "[EVENT] name | key=value" lines marking flow progress

Structured context is passed as a dict and rendered as key=value pairs so
log lines can be grepped by error ID, step or technique.
"""

import logging
import sys
from typing import Any

_LOGGER_NAME = "clickflow"
_LINE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class ErrorIds:
    """Stable error IDs, one per failure site, used as log prefixes."""

    # Element resolution
    ELEMENT_NOT_FOUND = "ERR_ELEMENT_NOT_FOUND"
    ELEMENT_SNAPSHOT_FAILED = "ERR_ELEMENT_SNAPSHOT"

    # Interaction
    TECHNIQUE_FAILED = "ERR_TECHNIQUE_FAILED"
    ALL_TECHNIQUES_FAILED = "ERR_ALL_TECHNIQUES_FAILED"
    POST_CONDITION_TIMEOUT = "ERR_POST_CONDITION_TIMEOUT"

    # Requests and flows
    INPUT_VALIDATION = "ERR_INPUT_VALIDATION"
    REQUEST_TIMEOUT = "ERR_REQUEST_TIMEOUT"
    NAVIGATION_FAILED = "ERR_NAVIGATE"
    CONFIGURATION = "ERR_CONFIGURATION"

    # Browser sessions
    SESSION_ACQUISITION_FAILED = "ERR_SESSION_ACQUIRE"
    SESSION_RELEASE_FAILED = "ERR_SESSION_RELEASE"
    SCREENSHOT_CAPTURE_FAILED = "ERR_SCREENSHOT"

    UNEXPECTED_ERROR = "ERR_UNEXPECTED"
    KEYBOARD_INTERRUPT = "KEYBOARD_INTERRUPT"


_logger: logging.Logger | None = None
_console_handler: logging.Handler | None = None


def _formatter() -> logging.Formatter:
    return logging.Formatter(_LINE_FORMAT, datefmt=_DATE_FORMAT)


def _get_logger() -> logging.Logger:
    """Return the clickflow logger, attaching the console handler once."""
    global _logger, _console_handler
    if _logger is None:
        _logger = logging.getLogger(_LOGGER_NAME)
        _logger.setLevel(logging.DEBUG)

        _console_handler = logging.StreamHandler(sys.stdout)
        _console_handler.setLevel(logging.INFO)
        _console_handler.setFormatter(_formatter())
        _logger.addHandler(_console_handler)

    return _logger


def _with_context(message: str, context: dict[str, Any] | None) -> str:
    if not context:
        return message
    pairs = ", ".join(f"{key}={value}" for key, value in context.items())
    return f"{message} | {pairs}"


def logError(
    error_id: str,
    message: str,
    exc_info: bool = False,
    extra: dict[str, Any] | None = None,
) -> None:
    """Log a failure under a stable error ID.

    Args:
        error_id: One of the ErrorIds constants.
        message: Human-readable description.
        exc_info: Attach the active exception's traceback.
        extra: Context such as step, candidate or elapsed time.
    """
    _get_logger().error(_with_context(f"[{error_id}] {message}", extra), exc_info=exc_info)


def logForDebugging(
    message: str,
    level: str = "debug",
    extra: dict[str, Any] | None = None,
) -> None:
    """Log a diagnostic message at the given level name."""
    log_level = getattr(logging, level.upper(), logging.DEBUG)
    _get_logger().log(log_level, _with_context(message, extra))


def logEvent(
    event_name: str,
    properties: dict[str, Any] | None = None,
) -> None:
    """Log a flow milestone (e.g., "candidate_matched", "flow_failed")."""
    _get_logger().info(_with_context(f"[EVENT] {event_name}", properties))


def set_log_level(level: str | int) -> None:
    """Set the level of the logger and its console output.

    Args:
        level: Level name ("debug", "info", "warning", "error") or a
               logging constant. Unknown names fall back to INFO.
    """
    logger = _get_logger()
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)
    logger.setLevel(level)
    if _console_handler is not None:
        _console_handler.setLevel(level)


def enable_file_logging(filepath: str) -> logging.Handler:
    """Also write every clickflow log line, down to DEBUG, to a file.

    The logger itself is lowered to DEBUG so the file receives diagnostics
    the console filters out.

    Args:
        filepath: Path to the log file (appended to).

    Returns:
        The attached handler.
    """
    logger = _get_logger()
    file_handler = logging.FileHandler(filepath)
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(_formatter())
    logger.addHandler(file_handler)
    logger.setLevel(logging.DEBUG)
    return file_handler
