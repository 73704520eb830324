"""
Structured logging for familyhub.

All modules log through structlog with snake_case event names and keyword
context, e.g. ``logger.info("family_photo_uploaded", photo_id=...)``.
Cloud Run collects JSON lines from stderr; local runs get console output.

Per-run context (signed-in user, current page) is bound once per script
run with :func:`bind_session_context` and merged into every event logged
during that run.
"""

import logging
import os
import sys
from typing import Any

import structlog

DEVELOPMENT_ENVIRONMENTS = ("development", "dev", "local")

_configured = False


def get_log_level() -> int:
    """Level from LOG_LEVEL; INFO when unset or not a level name."""
    level = logging.getLevelName(os.getenv("LOG_LEVEL", "INFO").strip().upper())
    return level if isinstance(level, int) else logging.INFO


def is_development_environment() -> bool:
    return os.getenv("ENVIRONMENT", "development").strip().lower() in DEVELOPMENT_ENVIRONMENTS


def summarize_binary_values(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """Replace raw bytes (uploaded file contents) with their size."""
    for key, value in event_dict.items():
        if isinstance(value, bytes | bytearray):
            event_dict[key] = f"<{len(value)} bytes>"
    return event_dict


def build_processors(json_output: bool) -> list[Any]:
    """Processor chain shared by every logger."""
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        summarize_binary_values,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    if json_output:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))
    return processors


def configure_structured_logging(force: bool = False) -> None:
    """
    Configure structlog on top of the standard library root logger.

    Streamlit re-executes the main script on every interaction, so this
    only runs once per process unless ``force`` is set.
    """
    global _configured
    if _configured and not force:
        return

    log_level = get_log_level()
    json_output = not is_development_environment()

    logging.basicConfig(level=log_level, format="%(message)s", stream=sys.stderr, force=force)
    logging.getLogger().setLevel(log_level)

    structlog.configure(
        processors=build_processors(json_output),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    _configured = True

    get_logger("familyhub.logging").info(
        "logging_configured", log_level=logging.getLevelName(log_level), json_output=json_output
    )


def get_logger(name: str | None = None) -> Any:
    return structlog.get_logger(name or "familyhub")


def bind_session_context(**context: Any) -> None:
    """Replace the context attached to events logged during this script run."""
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(**{key: value for key, value in context.items() if value is not None})


def clear_session_context() -> None:
    structlog.contextvars.clear_contextvars()


def log_user_action(user_id: str, action: str, **context: Any) -> None:
    """Audit trail entry for a change made to family records."""
    get_logger("familyhub.audit").info("user_action", user_id=user_id, action=action, **context)


def log_error(error: Exception, context: dict[str, Any] | None = None) -> None:
    get_logger("familyhub.errors").error(
        "error_occurred", error_type=type(error).__name__, error_message=str(error), **(context or {})
    )


def log_security_event(event_type: str, user_id: str | None = None, **context: Any) -> None:
    """Sign-in failures and other authentication events."""
    get_logger("familyhub.security").warning("security_event", event_type=event_type, user_id=user_id, **context)
