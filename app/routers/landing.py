"""Public landing page endpoints.

POST /visit                    -- count a landing page visit.
POST /register                 -- submit the application (multipart, photo required).
GET  /re-edit                  -- is the applicant's re-edit ticket still valid?
GET  /candidates/{id}          -- load the applicant's own record for editing.
PUT  /candidates/{id}          -- submit the applicant's edit.

The re-edit ticket lives in two cookies set on registration; the
candidate endpoints only serve the id named in a still-valid ticket.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, File, HTTPException, Request, Response, UploadFile
from fastapi.concurrency import run_in_threadpool

from app.core.exceptions import CandidateError
from app.models.candidate import CandidateForm
from app.models.editing import (
    CandidateDetail,
    ReEditEligibility,
    RegistrationReceipt,
    SubmissionResult,
)
from app.routers.common import candidate_form, read_image, to_http_error
from app.services.candidates import CandidateRepository, get_candidate_repository
from app.services.editing import EditSession
from app.services.registration import (
    CookieKeyValueStore,
    check_re_edit_eligibility,
    register_candidate,
    remember_registration,
)
from app.services.site_stats import increment_visits

logger = logging.getLogger(__name__)

router = APIRouter()


def _require_ticket(request: Request, response: Response, candidate_id: str) -> None:
    """Reject the request unless the re-edit cookies name *candidate_id*."""
    store = CookieKeyValueStore(request.cookies, response)
    eligibility = check_re_edit_eligibility(store)
    if not eligibility.can_re_edit or eligibility.candidate_id != candidate_id:
        logger.info("re_edit_denied", extra={"candidate_id": candidate_id})
        raise HTTPException(status_code=403, detail="Re-edit is not available for this candidate")


@router.post("/visit", status_code=204)
async def record_visit() -> Response:
    """Count one landing page visit (best-effort)."""
    await run_in_threadpool(increment_visits)
    return Response(status_code=204)


@router.post("/register", status_code=201, response_model=RegistrationReceipt)
async def register(
    request: Request,
    response: Response,
    form: CandidateForm = Depends(candidate_form),
    profile_image: UploadFile | None = File(default=None, alias="profileImage"),
    repository: CandidateRepository = Depends(get_candidate_repository),
) -> RegistrationReceipt:
    """Register a new applicant and hand back a re-edit ticket."""
    image = await read_image(profile_image)
    try:
        receipt = await run_in_threadpool(register_candidate, repository, form, image)
    except CandidateError as exc:
        raise to_http_error(exc) from exc

    remember_registration(CookieKeyValueStore(request.cookies, response), receipt)
    return receipt


@router.get("/re-edit", response_model=ReEditEligibility)
async def re_edit_status(request: Request, response: Response) -> ReEditEligibility:
    """Report whether the applicant can still edit their submission."""
    return check_re_edit_eligibility(CookieKeyValueStore(request.cookies, response))


@router.get("/candidates/{candidate_id}", response_model=CandidateDetail)
def get_own_candidate(
    candidate_id: str,
    request: Request,
    response: Response,
    repository: CandidateRepository = Depends(get_candidate_repository),
) -> CandidateDetail:
    """Load the applicant's own record together with its edit window."""
    _require_ticket(request, response, candidate_id)
    session = EditSession(repository, candidate_id)
    try:
        candidate = session.load()
    except CandidateError as exc:
        raise to_http_error(exc) from exc
    return CandidateDetail(candidate=candidate, edit_window=session.window)


@router.put("/candidates/{candidate_id}", response_model=SubmissionResult)
async def update_own_candidate(
    candidate_id: str,
    request: Request,
    response: Response,
    form: CandidateForm = Depends(candidate_form),
    profile_image: UploadFile | None = File(default=None, alias="profileImage"),
    repository: CandidateRepository = Depends(get_candidate_repository),
) -> SubmissionResult:
    """Apply the applicant's edit within the edit window."""
    _require_ticket(request, response, candidate_id)
    image = await read_image(profile_image)

    def _edit() -> SubmissionResult:
        session = EditSession(repository, candidate_id)
        session.load()
        return session.submit(form, image=image)

    try:
        return await run_in_threadpool(_edit)
    except CandidateError as exc:
        raise to_http_error(exc) from exc
