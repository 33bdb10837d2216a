"""Site visit and registration counters.

Counters live in a single ``site_stats`` row and are incremented with the
``increment_site_stat`` PL/pgSQL function so concurrent requests do not
lose updates.  Incrementing is fire-and-forget: a failure is logged and
never fails the request that triggered it.
"""

from __future__ import annotations

import logging

from app.core.constants import SITE_STATS_ROW_ID, SITE_STATS_TABLE
from app.db.supabase import get_supabase
from app.models.dashboard import SiteStats

logger = logging.getLogger(__name__)


def _increment(field: str) -> bool:
    try:
        get_supabase().rpc("increment_site_stat", {"p_field": field}).execute()
    except Exception as exc:
        logger.warning(
            "site_stat_increment_failed",
            extra={"field": field, "error_message": str(exc)},
        )
        return False
    logger.debug("site_stat_incremented", extra={"field": field})
    return True


def increment_visits() -> bool:
    """Count one landing page visit."""
    return _increment("total_visits")


def increment_registrations() -> bool:
    """Count one completed registration."""
    return _increment("total_registrations")


def get_site_stats() -> SiteStats:
    """Return the current counters, zeros when the row does not exist yet."""
    result = (
        get_supabase()
        .table(SITE_STATS_TABLE)
        .select("total_visits, total_registrations")
        .eq("id", SITE_STATS_ROW_ID)
        .limit(1)
        .execute()
    )
    if not result.data:
        return SiteStats()
    row = result.data[0]
    return SiteStats(
        total_visits=int(row.get("total_visits") or 0),
        total_registrations=int(row.get("total_registrations") or 0),
    )
