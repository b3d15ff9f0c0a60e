"""
Structured logging for the ledger.

Every ledger mutation emits one structured event (entry_created,
entry_deleted, ...) carrying the entry id. Nothing is persisted as a
history; the log is for debugging only.

structlog is wired through the standard library so the level filter
and handlers configured there apply.
"""

import logging
import sys
from typing import Optional

import structlog

from splitledger.config import AppSettings


def configure_logging(settings: Optional[AppSettings] = None) -> None:
    """
    Configure structlog and the stdlib root logger.

    Safe to call more than once; the last call wins. Handlers already
    attached to the root logger are left alone.
    """
    settings = settings or AppSettings()

    root = logging.getLogger()
    level = logging.DEBUG if settings.debug_mode else getattr(logging, settings.log_level)
    root.setLevel(level)
    if not root.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter("%(message)s"))
        root.addHandler(handler)

    renderer = (
        structlog.processors.JSONRenderer()
        if settings.json_logs
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: Optional[str] = None) -> structlog.stdlib.BoundLogger:
    """Get a structlog logger bound to `name`."""
    return structlog.get_logger(name)
