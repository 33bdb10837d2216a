"""Admin candidate management endpoints (JWT protected).

GET    /            -- filtered, sorted, paged list; rebuilds the paging index.
GET    /{id}        -- record + previous/next neighbours + edit window.
POST   /            -- admin "add candidate" (multipart, photo optional).
PUT    /{id}        -- admin edit through an ``EditSession``.
DELETE /{id}        -- remove a candidate.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, File, Query, Response, UploadFile
from fastapi.concurrency import run_in_threadpool

from app.core.exceptions import CandidateError
from app.models.candidate import CandidateForm
from app.models.editing import (
    CandidateDetail,
    CandidateListResponse,
    RegistrationReceipt,
    SubmissionResult,
)
from app.models.enums import CandidateSortField, SortOrder
from app.routers.common import candidate_form, read_image, to_http_error
from app.services.candidates import (
    CandidateRepository,
    filter_candidates,
    get_candidate_repository,
)
from app.services.editing import EditSession
from app.services.navigation import candidate_nav
from app.services.registration import register_candidate

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=CandidateListResponse)
def list_candidates(
    search: str | None = Query(default=None, description="Case-insensitive text filter"),
    sort_by: CandidateSortField | None = Query(default=None, alias="sortBy"),
    order: SortOrder = Query(default=SortOrder.asc),
    limit: int = Query(default=50, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    repository: CandidateRepository = Depends(get_candidate_repository),
) -> CandidateListResponse:
    """Return one page of candidates.

    The paging index behind the detail view's previous/next links is
    rebuilt from the full, unfiltered list on every call.
    """
    try:
        candidates = repository.list_all()
    except CandidateError as exc:
        raise to_http_error(exc) from exc

    candidate_nav.set_list(c.id for c in candidates)

    page, total = filter_candidates(
        candidates,
        search=search,
        sort_by=sort_by,
        order=order,
        limit=limit,
        offset=offset,
    )
    return CandidateListResponse(candidates=page, total=total, limit=limit, offset=offset)


@router.get("/{candidate_id}", response_model=CandidateDetail)
def get_candidate(
    candidate_id: str,
    repository: CandidateRepository = Depends(get_candidate_repository),
) -> CandidateDetail:
    """Return a candidate with paging neighbours and edit window."""
    neighbors = candidate_nav.focus(candidate_id)
    session = EditSession(repository, candidate_id)
    try:
        candidate = session.load()
    except CandidateError as exc:
        raise to_http_error(exc) from exc

    return CandidateDetail(
        candidate=candidate,
        neighbors=neighbors,
        edit_window=session.window,
    )


@router.post("", status_code=201, response_model=RegistrationReceipt)
async def create_candidate(
    form: CandidateForm = Depends(candidate_form),
    profile_image: UploadFile | None = File(default=None, alias="profileImage"),
    repository: CandidateRepository = Depends(get_candidate_repository),
) -> RegistrationReceipt:
    """Add a candidate from the admin form."""
    image = await read_image(profile_image)
    try:
        return await run_in_threadpool(
            lambda: register_candidate(repository, form, image, require_image=False)
        )
    except CandidateError as exc:
        raise to_http_error(exc) from exc


@router.put("/{candidate_id}", response_model=SubmissionResult)
async def update_candidate(
    candidate_id: str,
    form: CandidateForm = Depends(candidate_form),
    profile_image: UploadFile | None = File(default=None, alias="profileImage"),
    repository: CandidateRepository = Depends(get_candidate_repository),
) -> SubmissionResult:
    """Edit a candidate; only changed fields are written."""
    image = await read_image(profile_image)

    def _edit() -> SubmissionResult:
        session = EditSession(repository, candidate_id)
        session.load()
        return session.submit(form, image=image)

    try:
        return await run_in_threadpool(_edit)
    except CandidateError as exc:
        raise to_http_error(exc) from exc


@router.delete("/{candidate_id}", status_code=204)
def delete_candidate(
    candidate_id: str,
    repository: CandidateRepository = Depends(get_candidate_repository),
) -> Response:
    """Delete a candidate."""
    try:
        repository.delete(candidate_id)
    except CandidateError as exc:
        raise to_http_error(exc) from exc
    logger.info("candidate_deleted_by_admin", extra={"candidate_id": candidate_id})
    return Response(status_code=204)
