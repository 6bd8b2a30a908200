"""Structured logging for barracuda.

Every lookup emits key/value events (`dpe_candidates_retrieved`,
`cadastral_lookup_failed`, ...). Development output is a plain console
line; production output is one JSON object per line. Within
`parcel_context` every event also carries the parcel id.
"""

from __future__ import annotations

import logging
import logging.handlers
import os
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, MutableMapping, Optional

import structlog

LOG_FILE_NAME = "barracuda.log"

_configured: bool = False


def drop_unset_fields(logger: Any, method_name: str, event_dict: MutableMapping[str, Any]) -> MutableMapping[str, Any]:
    """Remove keys whose value is None (unknown parcel attributes are common)."""
    for key in [k for k, v in event_dict.items() if v is None]:
        del event_dict[key]
    return event_dict


def _file_handler(log_dir: Optional[str]) -> Optional[logging.Handler]:
    if not log_dir or "pytest" in sys.modules or os.environ.get("PYTEST_CURRENT_TEST"):
        return None
    try:
        path = Path(log_dir)
        path.mkdir(parents=True, exist_ok=True)
        return logging.handlers.RotatingFileHandler(
            str(path / LOG_FILE_NAME), maxBytes=5 * 1024 * 1024, backupCount=3, encoding="utf-8"
        )
    except OSError:
        return None


def configure_logging(
    level: Optional[str] = None,
    json_output: Optional[bool] = None,
    log_dir: Optional[str] = None,
) -> structlog.BoundLogger:
    """Configure stdlib handlers and the structlog processor chain.

    Calling it again is a no-op. Arguments left to None fall back to
    `AppSettings` (log_level, json_logs, log_dir).
    """
    global _configured

    if _configured:
        return structlog.get_logger()

    # Deferred so a bad environment surfaces on the first log call
    from barracuda.core.settings import get_settings

    settings = get_settings()
    numeric_level = getattr(logging, (level or settings.log_level).upper(), logging.INFO)
    if json_output is None:
        json_output = settings.json_logs

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    file_handler = _file_handler(log_dir if log_dir is not None else settings.log_dir)
    if file_handler is not None:
        handlers.append(file_handler)

    logging.basicConfig(format="%(message)s", level=numeric_level, handlers=handlers, force=True)

    processors: list[Any] = [
        structlog.stdlib.filter_by_level,
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        drop_unset_fields,
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer() if json_output else structlog.dev.ConsoleRenderer(colors=False),
    ]

    structlog.configure(
        processors=processors,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    _configured = True
    return structlog.get_logger()


def get_logger(name: Optional[str] = None) -> structlog.BoundLogger:
    """Logger bound to `logger_name`; configures logging on first use."""
    if not _configured:
        configure_logging()

    logger = structlog.get_logger()
    return logger.bind(logger_name=name) if name else logger


@contextmanager
def parcel_context(parcel_id: Optional[str], **extra: Any) -> Iterator[None]:
    """Attach the parcel id (and any extra keys) to every event logged inside."""
    with structlog.contextvars.bound_contextvars(parcel_id=parcel_id, **extra):
        yield
