"""Field-level diff between two candidate snapshots.

The diff is a minimal patch: only changed fields, valued by the current
value.  ``build_update_patch`` layers the session facts (new image URL,
``lastUpdated``) on top and returns ``None`` when there is nothing to send.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from app.core.constants import DIFFABLE_FIELDS
from app.models.snapshot import CandidateSnapshot


def diff_snapshots(
    baseline: CandidateSnapshot,
    current: CandidateSnapshot,
) -> dict[str, Any]:
    """Return ``{field: current_value}`` for every diffable field that changed.

    Keys are camelCase field names in ``DIFFABLE_FIELDS`` order.  The
    result is empty if and only if both snapshots are field-wise equal.
    """
    before = baseline.model_dump(by_alias=True)
    after = current.model_dump(by_alias=True)
    return {
        field: after[field]
        for field in DIFFABLE_FIELDS
        if before[field] != after[field]
    }


def build_update_patch(
    diff: dict[str, Any],
    *,
    now: datetime,
    image_url: str | None = None,
) -> dict[str, Any] | None:
    """Build the partial update for a submission, or ``None`` for a no-op.

    An empty diff with no new image is a no-op.  Otherwise the patch is
    the diff plus ``lastUpdated`` and, when an image was uploaded in this
    session, ``profileImageUrl``.
    """
    if not diff and not image_url:
        return None

    patch = dict(diff)
    if image_url:
        patch["profileImageUrl"] = image_url
    patch["lastUpdated"] = now
    return patch
