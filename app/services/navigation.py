"""Previous/next paging over the dashboard's candidate list.

``CandidateNavigator`` keeps the ordered candidate ids of the last list
load plus the id currently being viewed, and pushes the derived
``CandidateNeighbors`` to subscribers whenever either one changes.
Subscribers get the current value immediately on ``subscribe``.

A process-wide instance, ``candidate_nav``, is shared by the list and
detail endpoints.  Handlers run in FastAPI's thread pool, so state
changes go through a ``threading.Lock``; callbacks run outside the lock.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable

from app.models.navigation import CandidateNeighbors

logger = logging.getLogger(__name__)

NeighborsCallback = Callable[[CandidateNeighbors], None]


def compute_neighbors(ids: list[str], current_id: str | None) -> CandidateNeighbors:
    """Derive the neighbours of *current_id* within *ids*."""
    total = len(ids)
    index = ids.index(current_id) if current_id and current_id in ids else -1
    if index < 0:
        return CandidateNeighbors(prev_id=None, next_id=None, index=-1, total=total)
    return CandidateNeighbors(
        prev_id=ids[index - 1] if index > 0 else None,
        next_id=ids[index + 1] if index < total - 1 else None,
        index=index,
        total=total,
    )


class CandidateNavigator:
    """Observable store of candidate ids and the current position."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._ids: list[str] = []
        self._current_id: str | None = None
        self._subscribers: dict[int, NeighborsCallback] = {}
        self._next_token = 0

    @property
    def ids(self) -> list[str]:
        with self._lock:
            return list(self._ids)

    @property
    def current_id(self) -> str | None:
        return self._current_id

    def set_list(self, ids: Iterable[str | None]) -> None:
        """Replace the tracked ids, keeping first occurrences and dropping empties."""
        seen: set[str] = set()
        cleaned: list[str] = []
        for candidate_id in ids:
            if not candidate_id or candidate_id in seen:
                continue
            seen.add(candidate_id)
            cleaned.append(candidate_id)

        with self._lock:
            self._ids = cleaned
        self._emit()

    def set_current_id(self, candidate_id: str | None) -> None:
        """Point the navigator at the record being viewed."""
        with self._lock:
            self._current_id = candidate_id
        self._emit()

    def focus(self, candidate_id: str) -> CandidateNeighbors:
        """Point at *candidate_id* and return its neighbours.

        The returned value belongs to *candidate_id* even if another caller
        moves the pointer right after.
        """
        with self._lock:
            self._current_id = candidate_id
            focused = compute_neighbors(self._ids, candidate_id)
        self._emit()
        return focused

    def neighbors(self) -> CandidateNeighbors:
        """Return the neighbours for the current state."""
        with self._lock:
            return compute_neighbors(self._ids, self._current_id)

    def subscribe(self, callback: NeighborsCallback) -> Callable[[], None]:
        """Register *callback* and return a function that unsubscribes it.

        The callback is invoked right away with the current neighbours.
        """
        with self._lock:
            token = self._next_token
            self._next_token += 1
            self._subscribers[token] = callback
            current = compute_neighbors(self._ids, self._current_id)

        self._deliver(callback, current)

        def unsubscribe() -> None:
            with self._lock:
                self._subscribers.pop(token, None)

        return unsubscribe

    def reset(self) -> None:
        """Clear ids, pointer, and subscribers."""
        with self._lock:
            self._ids = []
            self._current_id = None
            self._subscribers.clear()

    def _emit(self) -> None:
        with self._lock:
            current = compute_neighbors(self._ids, self._current_id)
            callbacks = list(self._subscribers.values())
        for callback in callbacks:
            self._deliver(callback, current)

    @staticmethod
    def _deliver(callback: NeighborsCallback, neighbors: CandidateNeighbors) -> None:
        try:
            callback(neighbors)
        except Exception:
            # One failing subscriber must not starve the others
            logger.exception("candidate_nav_subscriber_failed")


candidate_nav = CandidateNavigator()
