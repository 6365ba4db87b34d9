from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

_CONFIGURED = False


def setup_logging(level: int = logging.INFO) -> None:
    """Configure structlog to emit JSON logs with contextvars support."""
    global _CONFIGURED
    if _CONFIGURED:
        return

    logging.basicConfig(level=level, format="%(message)s", stream=sys.stdout)
    # SQLAlchemy echoes through stdlib logging; keep it at warnings unless asked
    logging.getLogger("sqlalchemy.engine").setLevel(max(level, logging.WARNING))

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", key="timestamp"),
        structlog.processors.dict_tracebacks,
        structlog.processors.JSONRenderer(),
    ]

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(level),
        cache_logger_on_first_use=True,
    )

    _CONFIGURED = True
