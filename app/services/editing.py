"""Edit session for an existing candidate.

One ``EditSession`` covers one edit of one record:

1. ``load`` fetches the record, captures the baseline snapshot and the
   edit window.  Nothing can be submitted before the baseline exists.
2. ``submit`` gates on the edit window, validates the working form,
   diffs it against the baseline at the moment of submission, and hands
   only the changed fields (plus ``lastUpdated`` and a new image URL, when
   there is one) to the repository.

An empty diff without a new image is a no-op: no upload, no update.
Image upload and the record update are two separate backend calls; if
either fails the submission is reported as failed as a whole.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from app.core.exceptions import (
    CandidateNotFoundError,
    EditWindowExpiredError,
)
from app.models.candidate import Candidate, CandidateForm, ImageUpload
from app.models.editing import EditWindow, SubmissionResult
from app.models.enums import SubmissionStatus
from app.models.snapshot import CandidateSnapshot
from app.services.candidates import CandidateRepository
from app.services.diff import build_update_patch, diff_snapshots
from app.services.edit_window import edit_window
from app.services.snapshot import take_snapshot
from app.services.validation import validate_candidate_form, validate_image

logger = logging.getLogger(__name__)


class EditSession:
    """Baseline + working state for editing a single candidate."""

    def __init__(self, repository: CandidateRepository, candidate_id: str) -> None:
        self.repository = repository
        self.candidate_id = candidate_id
        self.candidate: Candidate | None = None
        self.baseline: CandidateSnapshot | None = None
        self.window = EditWindow()

    @property
    def loaded(self) -> bool:
        return self.baseline is not None

    @property
    def can_edit(self) -> bool:
        return self.loaded and self.window.editable

    def load(self, *, now: datetime | None = None) -> Candidate:
        """Fetch the record and capture the baseline snapshot.

        Raises ``CandidateNotFoundError`` when the id does not resolve.
        """
        candidate = self.repository.get_by_id(self.candidate_id)
        if candidate is None:
            raise CandidateNotFoundError(self.candidate_id)

        self.candidate = candidate
        self.baseline = take_snapshot(candidate)
        self.window = edit_window(candidate.registration_date, now)

        if not self.window.editable:
            logger.info(
                "edit_session_read_only",
                extra={
                    "candidate_id": self.candidate_id,
                    "deadline": self.window.deadline.isoformat() if self.window.deadline else None,
                },
            )
        return candidate

    def submit(
        self,
        form: CandidateForm,
        *,
        image: ImageUpload | None = None,
        now: datetime | None = None,
    ) -> SubmissionResult:
        """Persist the changes between the baseline and *form*.

        Raises
        ------
        RuntimeError
            If ``load`` has not completed.
        EditWindowExpiredError
            If the edit window has closed (checked at submission time).
        CandidateValidationError
            If the form or image is invalid.
        PersistenceError
            If the image upload or the update fails.
        """
        if self.candidate is None or self.baseline is None:
            raise RuntimeError("EditSession.submit called before load")

        submitted_at = now or datetime.now(timezone.utc)

        # The window may have closed since load; re-check against submit time
        window = edit_window(self.candidate.registration_date, submitted_at)
        if not (self.window.editable and window.editable):
            self.window = EditWindow(editable=False, deadline=window.deadline)
            logger.warning(
                "edit_rejected_window_expired",
                extra={
                    "candidate_id": self.candidate_id,
                    "deadline": window.deadline.isoformat() if window.deadline else None,
                },
            )
            raise EditWindowExpiredError(window.deadline)

        valid_form = validate_candidate_form(form)
        validate_image(image, required=False)

        current = take_snapshot(valid_form)
        diff = diff_snapshots(self.baseline, current)

        if not diff and image is None:
            logger.info("edit_submission_noop", extra={"candidate_id": self.candidate_id})
            return SubmissionResult(status=SubmissionStatus.noop)

        image_url = self.repository.upload_image(image) if image is not None else None

        patch = build_update_patch(diff, now=submitted_at, image_url=image_url)
        if patch is None:
            return SubmissionResult(status=SubmissionStatus.noop)
        if "city" in diff:
            # Stored coordinates must describe the stored city
            patch["cityLat"] = valid_form.city_lat
            patch["cityLng"] = valid_form.city_lng

        self.repository.update(self.candidate_id, patch)

        self.baseline = current
        if image_url:
            self.candidate = self.candidate.model_copy(update={"profile_image_url": image_url})

        logger.info(
            "edit_submission_applied",
            extra={"candidate_id": self.candidate_id, "fields": list(patch)},
        )
        return SubmissionResult(status=SubmissionStatus.updated, changes=patch)


