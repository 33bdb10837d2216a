"""Domain exceptions raised by services and mapped to HTTP errors by routers."""

from __future__ import annotations

from datetime import datetime


class CandidateError(Exception):
    """Base class for candidate workflow failures."""


class CandidateNotFoundError(CandidateError):
    """The requested candidate id does not resolve to a record."""

    def __init__(self, candidate_id: str) -> None:
        super().__init__(f"Candidate not found: {candidate_id}")
        self.candidate_id = candidate_id


class CandidateValidationError(CandidateError):
    """Submitted form values failed validation.

    ``errors`` maps field name to an error code (``required``, ``lettersOnly``...).
    """

    def __init__(self, errors: dict[str, str]) -> None:
        super().__init__(
            "Invalid candidate data: "
            + ", ".join(f"{field}={code}" for field, code in errors.items())
        )
        self.errors = errors


class EditWindowExpiredError(CandidateError):
    """An edit was attempted after the registration edit window closed."""

    def __init__(self, deadline: datetime | None) -> None:
        if deadline is not None:
            message = f"The edit window expired on {deadline.isoformat()}."
        else:
            message = "The edit window expired."
        super().__init__(message)
        self.deadline = deadline


class PersistenceError(CandidateError):
    """The storage backend rejected an upload or a write."""
