"""Paging neighbours of the currently viewed candidate."""

from app.models.base import CamelModel


class CandidateNeighbors(CamelModel):
    """Previous/next candidate ids around the current one."""
    prev_id: str | None = None
    next_id: str | None = None
    index: int = -1
    total: int = 0
