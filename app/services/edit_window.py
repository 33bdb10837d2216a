"""Edit-window policy for registered candidates.

A record stays editable until its registration instant plus
``EDIT_WINDOW_DAYS`` calendar days, inclusive of the boundary instant.
The days are added to the wall-clock date in ``settings.APP_TIMEZONE``, so
across a DST change the window is an hour longer or shorter than
3 x 24 hours.

Timestamps arrive in several shapes (see ``TimestampKind``); they are all
normalized to epoch milliseconds before comparison.  A missing or
unparseable registration timestamp leaves the record editable.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from datetime import datetime, timedelta, timezone
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from app.core.config import settings
from app.models.editing import EditWindow
from app.models.enums import TimestampKind

logger = logging.getLogger(__name__)

EDIT_WINDOW_DAYS: int = settings.EDIT_WINDOW_DAYS

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_ONE_MS = timedelta(milliseconds=1)


# ---------------------------------------------------------------------------
# Timestamp normalization
# ---------------------------------------------------------------------------

def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def classify_timestamp(value: Any) -> TimestampKind | None:
    """Tag *value* with its timestamp shape, or ``None`` if unrecognized."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return TimestampKind.native
    if _is_number(value):
        return TimestampKind.epoch_millis
    if isinstance(value, str):
        return TimestampKind.iso_string
    if isinstance(value, Mapping):
        return TimestampKind.seconds_wrapper if "seconds" in value else None
    if hasattr(value, "seconds"):
        return TimestampKind.seconds_wrapper
    return None


def _from_seconds_wrapper(value: Any) -> int | None:
    if isinstance(value, Mapping):
        seconds = value.get("seconds")
        nanos = value.get("nanoseconds", 0)
    else:
        seconds = getattr(value, "seconds", None)
        nanos = getattr(value, "nanoseconds", 0)
    if not _is_number(seconds) or not _is_number(nanos):
        return None
    if not (math.isfinite(seconds) and math.isfinite(nanos)):
        return None
    return int(seconds) * 1000 + int(nanos) // 1_000_000


def normalize_timestamp(value: Any) -> int | None:
    """Normalize any accepted timestamp shape to epoch milliseconds.

    Naive datetimes and ISO strings without an offset are read as UTC.
    Returns ``None`` for anything that cannot be interpreted.
    """
    kind = classify_timestamp(value)

    if kind is TimestampKind.native:
        aware = value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)
        return (aware - _EPOCH) // _ONE_MS

    if kind is TimestampKind.epoch_millis:
        if not math.isfinite(value):
            return None
        return int(value)

    if kind is TimestampKind.iso_string:
        text = value.strip()
        if not text:
            return None
        try:
            parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            return None
        return normalize_timestamp(parsed)

    if kind is TimestampKind.seconds_wrapper:
        return _from_seconds_wrapper(value)

    return None


def ms_to_datetime(millis: int, tz: str | None = None) -> datetime:
    """Convert epoch milliseconds to an aware datetime in *tz* (app zone by default)."""
    return (_EPOCH + timedelta(milliseconds=millis)).astimezone(_zone(tz))


def _zone(tz: str | None) -> ZoneInfo | timezone:
    name = tz or settings.APP_TIMEZONE
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("unknown_timezone_falling_back_to_utc", extra={"timezone": name})
        return timezone.utc


def _now_ms() -> int:
    return (datetime.now(timezone.utc) - _EPOCH) // _ONE_MS


# ---------------------------------------------------------------------------
# Policy
# ---------------------------------------------------------------------------

def edit_deadline(
    registration: Any,
    *,
    days: int | None = None,
    tz: str | None = None,
) -> int | None:
    """Return the edit deadline in epoch ms, or ``None`` without a timestamp.

    Calendar-day arithmetic: the registration instant is moved to wall-clock
    time in *tz*, ``days`` are added to the date at the same wall-clock
    time, and the result is converted back.
    """
    registered_ms = normalize_timestamp(registration)
    if registered_ms is None:
        return None

    window_days = EDIT_WINDOW_DAYS if days is None else days
    try:
        local = ms_to_datetime(registered_ms, tz)
        # Aware datetime + timedelta keeps the wall-clock time; the UTC
        # offset is re-resolved for the new date.
        deadline_local = local + timedelta(days=window_days)
    except (OverflowError, ValueError):
        return None
    return (deadline_local - _EPOCH) // _ONE_MS


def is_editable(
    registration: Any,
    now: Any = None,
    *,
    days: int | None = None,
    tz: str | None = None,
) -> bool:
    """Return True while ``now <= deadline``; True when no deadline exists."""
    deadline = edit_deadline(registration, days=days, tz=tz)
    if deadline is None:
        return True

    now_ms = normalize_timestamp(now)
    if now_ms is None:
        now_ms = _now_ms()
    return now_ms <= deadline


def edit_window(
    registration: Any,
    now: Any = None,
    *,
    days: int | None = None,
    tz: str | None = None,
) -> EditWindow:
    """Bundle ``is_editable`` and the deadline for API consumers."""
    deadline = edit_deadline(registration, days=days, tz=tz)
    return EditWindow(
        editable=is_editable(registration, now, days=days, tz=tz),
        deadline=ms_to_datetime(deadline, tz) if deadline is not None else None,
    )
