"""Dashboard data endpoints (JWT protected).

GET /overview -- age breakdown, top cities, visit/registration conversion.
GET /map      -- geocoded city markers and how to frame them.
GET /focus    -- centre the map on one candidate's city.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.concurrency import run_in_threadpool

from app.core.constants import MAP_FOCUS_ZOOM
from app.core.exceptions import CandidateError
from app.models.dashboard import DashboardOverview, FocusResponse, MapResponse
from app.routers.common import to_http_error
from app.services.candidates import CandidateRepository, get_candidate_repository
from app.services.dashboard import build_overview, map_markers
from app.services.geocoding import geocoder
from app.services.site_stats import get_site_stats

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/overview", response_model=DashboardOverview)
def dashboard_overview(
    repository: CandidateRepository = Depends(get_candidate_repository),
) -> DashboardOverview:
    """Return chart series for the dashboard."""
    try:
        candidates = repository.list_all()
    except CandidateError as exc:
        raise to_http_error(exc) from exc

    try:
        stats = get_site_stats()
    except Exception as exc:
        logger.error("site_stats_unavailable", extra={"error_message": str(exc)})
        raise HTTPException(status_code=502, detail=f"Failed to load site stats: {exc}") from exc

    return build_overview(candidates, stats)


@router.get("/map", response_model=MapResponse)
async def dashboard_map(
    repository: CandidateRepository = Depends(get_candidate_repository),
) -> MapResponse:
    """Return one marker per geocodable candidate city."""
    try:
        candidates = await run_in_threadpool(repository.list_all)
    except CandidateError as exc:
        raise to_http_error(exc) from exc
    return await map_markers(candidates, geocoder)


@router.get("/focus", response_model=FocusResponse)
async def dashboard_focus(
    candidate_id: str = Query(..., alias="candidateId"),
    repository: CandidateRepository = Depends(get_candidate_repository),
) -> FocusResponse:
    """Return the map centre for a candidate's city (``center`` is null if unknown)."""
    try:
        candidate = await run_in_threadpool(repository.get_by_id, candidate_id)
    except CandidateError as exc:
        raise to_http_error(exc) from exc
    if candidate is None:
        raise HTTPException(status_code=404, detail=f"Candidate not found: {candidate_id}")

    city = (candidate.city or "").strip()
    coords = await geocoder.get_coordinates(city)
    return FocusResponse(
        candidate_id=candidate_id,
        city=city,
        center=coords,
        zoom=MAP_FOCUS_ZOOM if coords is not None else None,
    )
