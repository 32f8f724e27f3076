"""
Logging setup - structlog on top of stdlib logging.

Usage:
    import structlog
    logger = structlog.get_logger(__name__)
    logger.info("resume_saved", resume_id=resume_id)

Call configure_logging() once at startup. Debug mode renders coloured
key=value lines for the console; otherwise every event is one JSON line.
"""

import logging
import sys

import structlog
from structlog.types import EventDict, WrappedLogger

SENSITIVE_FIELDS = {"password", "api_key", "token", "secret", "authorization"}


def mask_sensitive(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Replace values of credential-looking keys with a mask."""
    for key in list(event_dict.keys()):
        key_lower = key.lower()
        for sensitive in SENSITIVE_FIELDS:
            if key_lower == sensitive or key_lower.endswith(f"_{sensitive}"):
                event_dict[key] = "***MASKED***"
                break
    return event_dict


def configure_logging(debug: bool = True, log_level: str = "INFO") -> None:
    level = getattr(logging, log_level.upper(), logging.INFO)

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)

    renderer = structlog.dev.ConsoleRenderer() if debug else structlog.processors.JSONRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            mask_sensitive,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
