"""Structured logging configuration.

Log lines are pipe-separated (timestamp, level, logger, event) and any
``extra={...}`` context passed to the logger is appended as ``key=value``
pairs, e.g.::

    2024-01-01T10:00:00+0000 | INFO     | app.services.editing | edit_submission_applied | candidate_id=c-1 fields=['hobbies', 'lastUpdated']

The log level is controlled by ``settings.LOG_LEVEL``.
"""

import logging
import sys

from app.core.config import settings

# Attributes every LogRecord carries; anything else came from ``extra``.
_RESERVED_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None))
) | {"message", "asctime", "taskName"}


class ContextFormatter(logging.Formatter):
    """``logging.Formatter`` that appends ``extra`` context to the message."""

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = {
            key: value
            for key, value in vars(record).items()
            if key not in _RESERVED_ATTRS and not key.startswith("_")
        }
        if not context:
            return line
        pairs = " ".join(f"{key}={value}" for key, value in sorted(context.items()))
        return f"{line} | {pairs}"


def setup_logging() -> None:
    """Configure structured logging for the application.

    Sets the root logger level from ``settings.LOG_LEVEL`` and replaces any
    existing handlers with a single ``StreamHandler`` on *stdout*.
    """
    log_level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    formatter = ContextFormatter(
        fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S%z",
    )

    handler = logging.StreamHandler(stream=sys.stdout)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.setLevel(log_level)
    root.handlers.clear()
    root.addHandler(handler)

    # Supabase talks through httpx; keep request lines out of the app log
    for noisy in ("httpx", "httpcore", "hpack", "uvicorn.access"):
        logging.getLogger(noisy).setLevel(logging.WARNING)
