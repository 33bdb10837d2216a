"""Candidate registration and re-edit bookkeeping.

``register_candidate`` runs the landing page submission: validate, upload
the photo, insert the record, count the registration.

After registering, the applicant keeps a small "re-edit ticket" (candidate
id + ISO registration date) in a key-value store.  On the web this store is
the applicant's cookies (``CookieKeyValueStore``); tests and scripts can
use ``InMemoryKeyValueStore``.  ``check_re_edit_eligibility`` reads the
ticket back and clears it once the edit window has passed.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Protocol

from starlette.responses import Response

from app.core.config import settings
from app.core.constants import RE_EDIT_CANDIDATE_KEY, RE_EDIT_REGISTRATION_KEY
from app.models.candidate import CandidateCreate, CandidateForm, ImageUpload
from app.models.editing import ReEditEligibility, RegistrationReceipt
from app.services.candidates import CandidateRepository
from app.services.edit_window import edit_deadline, ms_to_datetime, normalize_timestamp
from app.services.site_stats import increment_registrations
from app.services.validation import validate_candidate_form, validate_image

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Key-value stores
# ---------------------------------------------------------------------------

class KeyValueStore(Protocol):
    """Minimal string key-value store for re-edit bookkeeping."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str, *, expires_at: datetime | None = None) -> None: ...

    def remove(self, key: str) -> None: ...


class InMemoryKeyValueStore:
    """Dict-backed ``KeyValueStore``.

    Expiry is recorded in ``expires`` but not enforced.
    """

    def __init__(self, initial: Mapping[str, str] | None = None) -> None:
        self.data: dict[str, str] = dict(initial or {})
        self.expires: dict[str, datetime] = {}

    def get(self, key: str) -> str | None:
        return self.data.get(key)

    def set(self, key: str, value: str, *, expires_at: datetime | None = None) -> None:
        self.data[key] = value
        if expires_at is not None:
            self.expires[key] = expires_at

    def remove(self, key: str) -> None:
        self.data.pop(key, None)
        self.expires.pop(key, None)


class CookieKeyValueStore:
    """``KeyValueStore`` over request cookies, writing changes to a response.

    Writes are visible to later reads on the same instance.
    """

    def __init__(
        self,
        cookies: Mapping[str, str],
        response: Response,
        *,
        max_age: int | None = None,
    ) -> None:
        self._cookies = dict(cookies)
        self._response = response
        self._max_age = max_age if max_age is not None else settings.EDIT_WINDOW_DAYS * 24 * 3600

    def get(self, key: str) -> str | None:
        value = self._cookies.get(key)
        return value or None

    def set(self, key: str, value: str, *, expires_at: datetime | None = None) -> None:
        """Write *key* as a cookie.

        With *expires_at* the cookie gets an absolute ``Expires``; otherwise
        it lives for the store's ``max_age``.
        """
        self._cookies[key] = value
        self._response.set_cookie(
            key,
            value,
            max_age=None if expires_at is not None else self._max_age,
            expires=expires_at.astimezone(timezone.utc) if expires_at is not None else None,
            httponly=True,
            secure=settings.COOKIE_SECURE,
            samesite="lax",
        )

    def remove(self, key: str) -> None:
        self._cookies.pop(key, None)
        self._response.delete_cookie(
            key,
            httponly=True,
            secure=settings.COOKIE_SECURE,
            samesite="lax",
        )


# ---------------------------------------------------------------------------
# Registration
# ---------------------------------------------------------------------------

def register_candidate(
    repository: CandidateRepository,
    form: CandidateForm,
    image: ImageUpload | None,
    *,
    now: datetime | None = None,
    require_image: bool = True,
) -> RegistrationReceipt:
    """Validate and store a new candidate.

    The landing page requires a photo; the admin "add candidate" form
    passes ``require_image=False``.  Counting the registration is
    best-effort and never fails the call.

    Raises
    ------
    CandidateValidationError
        Before any backend call, if the form or the image is invalid.
    PersistenceError
        If the upload or the insert fails.
    """
    valid_form = validate_candidate_form(form)
    validate_image(image, required=require_image)

    registered_at = now or datetime.now(timezone.utc)
    image_url = repository.upload_image(image) if image is not None else ""

    candidate_id = repository.create(
        CandidateCreate(
            full_name=valid_form.full_name,
            email=valid_form.email,
            phone=valid_form.phone,
            age=valid_form.age,
            city=valid_form.city,
            city_lat=valid_form.city_lat,
            city_lng=valid_form.city_lng,
            hobbies=valid_form.hobbies,
            perfect_candidate_reason=valid_form.perfect_candidate_reason,
            profile_image_url=image_url,
            registration_date=registered_at,
            last_updated=registered_at,
        )
    )

    increment_registrations()

    deadline = edit_deadline(registered_at)
    logger.info(
        "candidate_registered",
        extra={"candidate_id": candidate_id, "with_image": bool(image_url)},
    )
    return RegistrationReceipt(
        candidate_id=candidate_id,
        registration_date=registered_at,
        edit_until=ms_to_datetime(deadline) if deadline is not None else None,
    )


# ---------------------------------------------------------------------------
# Re-edit bookkeeping
# ---------------------------------------------------------------------------

def remember_registration(store: KeyValueStore, receipt: RegistrationReceipt) -> None:
    """Store the re-edit ticket for *receipt*.

    The ticket expires at the edit deadline, so it is kept exactly as long
    as the record stays editable.
    """
    deadline = edit_deadline(receipt.registration_date)
    expires_at = ms_to_datetime(deadline) if deadline is not None else None
    store.set(RE_EDIT_CANDIDATE_KEY, receipt.candidate_id, expires_at=expires_at)
    store.set(
        RE_EDIT_REGISTRATION_KEY,
        receipt.registration_date.isoformat(),
        expires_at=expires_at,
    )


def forget_registration(store: KeyValueStore) -> None:
    """Remove the re-edit ticket."""
    store.remove(RE_EDIT_CANDIDATE_KEY)
    store.remove(RE_EDIT_REGISTRATION_KEY)


def check_re_edit_eligibility(
    store: KeyValueStore,
    *,
    now: datetime | None = None,
) -> ReEditEligibility:
    """Read the re-edit ticket and decide whether it is still usable.

    Eligible while ``now`` is strictly before the deadline.  An expired or
    unreadable ticket is removed from the store.
    """
    candidate_id = store.get(RE_EDIT_CANDIDATE_KEY)
    registered_raw = store.get(RE_EDIT_REGISTRATION_KEY)

    if not candidate_id or not registered_raw:
        return ReEditEligibility(can_re_edit=False)

    deadline = edit_deadline(registered_raw)
    now_ms = normalize_timestamp(now or datetime.now(timezone.utc))

    if deadline is not None and now_ms is not None and now_ms < deadline:
        return ReEditEligibility(
            can_re_edit=True,
            candidate_id=candidate_id,
            expires_at=ms_to_datetime(deadline),
        )

    forget_registration(store)
    logger.info("re_edit_ticket_cleared", extra={"candidate_id": candidate_id})
    return ReEditEligibility(can_re_edit=False)
