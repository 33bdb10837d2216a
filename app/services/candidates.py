"""Candidate data access on Supabase.

``SupabaseCandidateRepository`` is the only place that talks to the
``candidates`` table and the profile image bucket.  Workflow services
depend on the ``CandidateRepository`` protocol so that tests can pass a
fake.  Backend failures are logged and re-raised as ``PersistenceError``.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Iterable
from datetime import datetime
from typing import Any, Protocol

from pydantic import ValidationError

from app.core.constants import CANDIDATES_TABLE, FIELD_TO_COLUMN, IMAGE_PATH_PREFIX
from app.core.exceptions import CandidateNotFoundError, PersistenceError
from app.db.supabase import get_bucket, get_supabase
from app.models.candidate import Candidate, CandidateCreate, ImageUpload
from app.models.enums import CandidateSortField, SortOrder

logger = logging.getLogger(__name__)


class CandidateRepository(Protocol):
    """Persistence operations used by the candidate workflows."""

    def list_all(self) -> list[Candidate]: ...

    def get_by_id(self, candidate_id: str) -> Candidate | None: ...

    def create(self, data: CandidateCreate) -> str: ...

    def update(self, candidate_id: str, changes: dict[str, Any]) -> None: ...

    def delete(self, candidate_id: str) -> None: ...

    def upload_image(self, image: ImageUpload) -> str: ...


def to_columns(changes: dict[str, Any]) -> dict[str, Any]:
    """Map a camelCase patch to ``candidates`` columns with JSON-safe values."""
    row: dict[str, Any] = {}
    for field, value in changes.items():
        column = FIELD_TO_COLUMN.get(field, field)
        row[column] = value.isoformat() if isinstance(value, datetime) else value
    return row


def image_object_path(filename: str, now_ms: int | None = None) -> str:
    """Return the bucket path for an uploaded profile image."""
    stamp = now_ms if now_ms is not None else int(time.time() * 1000)
    safe_name = filename.replace("/", "_").replace("\\", "_") or "image"
    return f"{IMAGE_PATH_PREFIX}/{stamp}_{safe_name}"


class SupabaseCandidateRepository:
    """``CandidateRepository`` backed by the Supabase client singleton."""

    def __init__(self, client: Any | None = None, bucket: Any | None = None) -> None:
        self._client = client
        self._bucket = bucket

    @property
    def client(self) -> Any:
        return self._client if self._client is not None else get_supabase()

    @property
    def bucket(self) -> Any:
        return self._bucket if self._bucket is not None else get_bucket()

    def list_all(self) -> list[Candidate]:
        """Return all candidates, newest registration first."""
        try:
            result = (
                self.client.table(CANDIDATES_TABLE)
                .select("*")
                .order("registration_date", desc=True)
                .execute()
            )
        except Exception as exc:
            logger.error("list_candidates_failed", extra={"error_message": str(exc)})
            raise PersistenceError("Failed to list candidates") from exc

        candidates: list[Candidate] = []
        for row in result.data or []:
            try:
                candidates.append(Candidate.model_validate(row))
            except ValidationError as exc:
                logger.warning(
                    "candidate_row_skipped",
                    extra={"candidate_id": row.get("id"), "error_message": str(exc)},
                )
        return candidates

    def get_by_id(self, candidate_id: str) -> Candidate | None:
        """Return the candidate with *candidate_id*, or ``None``."""
        try:
            result = (
                self.client.table(CANDIDATES_TABLE)
                .select("*")
                .eq("id", candidate_id)
                .limit(1)
                .execute()
            )
        except Exception as exc:
            logger.error(
                "get_candidate_failed",
                extra={"candidate_id": candidate_id, "error_message": str(exc)},
            )
            raise PersistenceError(f"Failed to load candidate {candidate_id}") from exc

        if not result.data:
            return None
        return Candidate.model_validate(result.data[0])

    def create(self, data: CandidateCreate) -> str:
        """Insert a candidate and return the id assigned by the database."""
        try:
            result = (
                self.client.table(CANDIDATES_TABLE)
                .insert(data.model_dump(mode="json"))
                .execute()
            )
        except Exception as exc:
            logger.error("create_candidate_failed", extra={"error_message": str(exc)})
            raise PersistenceError("Failed to create candidate") from exc

        if not result.data:
            raise PersistenceError("Insert returned no candidate id")
        candidate_id = str(result.data[0]["id"])
        logger.info("candidate_created", extra={"candidate_id": candidate_id})
        return candidate_id

    def update(self, candidate_id: str, changes: dict[str, Any]) -> None:
        """Apply a partial update: only the given fields are written."""
        row = to_columns(changes)
        try:
            result = (
                self.client.table(CANDIDATES_TABLE)
                .update(row)
                .eq("id", candidate_id)
                .execute()
            )
        except Exception as exc:
            logger.error(
                "update_candidate_failed",
                extra={
                    "candidate_id": candidate_id,
                    "fields": sorted(row),
                    "error_message": str(exc),
                },
            )
            raise PersistenceError(f"Failed to update candidate {candidate_id}") from exc

        if not result.data:
            raise CandidateNotFoundError(candidate_id)
        logger.info(
            "candidate_updated",
            extra={"candidate_id": candidate_id, "fields": sorted(row)},
        )

    def delete(self, candidate_id: str) -> None:
        """Delete the candidate with *candidate_id*."""
        try:
            result = (
                self.client.table(CANDIDATES_TABLE)
                .delete()
                .eq("id", candidate_id)
                .execute()
            )
        except Exception as exc:
            logger.error(
                "delete_candidate_failed",
                extra={"candidate_id": candidate_id, "error_message": str(exc)},
            )
            raise PersistenceError(f"Failed to delete candidate {candidate_id}") from exc

        if not result.data:
            raise CandidateNotFoundError(candidate_id)
        logger.info("candidate_deleted", extra={"candidate_id": candidate_id})

    def upload_image(self, image: ImageUpload) -> str:
        """Upload a profile image and return its public URL."""
        path = image_object_path(image.filename)
        try:
            self.bucket.upload(
                path,
                image.content,
                {"content-type": image.content_type},
            )
            url = self.bucket.get_public_url(path)
        except Exception as exc:
            logger.error(
                "profile_image_upload_failed",
                extra={"path": path, "error_message": str(exc)},
            )
            raise PersistenceError("Failed to upload profile image") from exc

        logger.info("profile_image_uploaded", extra={"path": path, "bytes": image.size})
        return str(url)


def get_candidate_repository() -> CandidateRepository:
    """FastAPI dependency returning the Supabase-backed repository."""
    return SupabaseCandidateRepository()


# ---------------------------------------------------------------------------
# Dashboard list: search, sort, paging
# ---------------------------------------------------------------------------

_SEARCH_FIELDS: tuple[str, ...] = (
    "full_name", "email", "phone", "age", "city", "hobbies",
)


def _matches(candidate: Candidate, needle: str) -> bool:
    haystack = " ".join(
        str(getattr(candidate, name) or "") for name in _SEARCH_FIELDS
    ).lower()
    return needle in haystack


def _sort_key(field: CandidateSortField) -> Any:
    attribute = {
        CandidateSortField.full_name: "full_name",
        CandidateSortField.email: "email",
        CandidateSortField.phone: "phone",
        CandidateSortField.age: "age",
        CandidateSortField.city: "city",
        CandidateSortField.registration_date: "registration_date",
        CandidateSortField.last_updated: "last_updated",
    }[field]

    def key(candidate: Candidate) -> tuple[bool, Any]:
        value = getattr(candidate, attribute)
        if isinstance(value, str):
            value = value.lower()
        # None sorts last in ascending order
        return (value is None, value if value is not None else 0)

    return key


def filter_candidates(
    candidates: Iterable[Candidate],
    *,
    search: str | None = None,
    sort_by: CandidateSortField | None = None,
    order: SortOrder = SortOrder.asc,
    limit: int = 50,
    offset: int = 0,
) -> tuple[list[Candidate], int]:
    """Filter, sort and page candidates for the dashboard table.

    Returns the page and the total number of matches before paging.
    """
    needle = (search or "").strip().lower()
    matched = [c for c in candidates if not needle or _matches(c, needle)]

    if sort_by is not None:
        matched.sort(key=_sort_key(sort_by), reverse=order is SortOrder.desc)

    return matched[offset:offset + limit], len(matched)
