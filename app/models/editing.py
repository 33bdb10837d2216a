"""Response models for the edit and registration workflows."""

from datetime import datetime
from typing import Any

from app.models.base import CamelModel
from app.models.candidate import Candidate
from app.models.enums import SubmissionStatus
from app.models.navigation import CandidateNeighbors


class EditWindow(CamelModel):
    """Whether a record can still be edited, and until when."""
    editable: bool = True
    deadline: datetime | None = None


class SubmissionResult(CamelModel):
    """Outcome of ``EditSession.submit``."""
    status: SubmissionStatus
    changes: dict[str, Any] = {}


class RegistrationReceipt(CamelModel):
    """Returned to the applicant after a successful registration."""
    candidate_id: str
    registration_date: datetime
    edit_until: datetime | None = None


class ReEditEligibility(CamelModel):
    """Result of checking the applicant's re-edit ticket."""
    can_re_edit: bool = False
    candidate_id: str | None = None
    expires_at: datetime | None = None


class CandidateDetail(CamelModel):
    """Candidate record with paging neighbours and its edit window."""
    candidate: Candidate
    neighbors: CandidateNeighbors | None = None
    edit_window: EditWindow = EditWindow()


class CandidateListResponse(CamelModel):
    """One page of the filtered candidate list."""
    candidates: list[Candidate] = []
    total: int = 0
    limit: int = 50
    offset: int = 0
