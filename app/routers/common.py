"""Helpers shared by the landing and candidate routers.

- ``candidate_form``: dependency reading the multipart candidate form.
- ``read_image``: turns an optional ``UploadFile`` into an ``ImageUpload``.
- ``to_http_error``: maps domain exceptions to ``HTTPException``.
"""

from __future__ import annotations

import logging

from fastapi import Form, HTTPException, UploadFile

from app.core.exceptions import (
    CandidateError,
    CandidateNotFoundError,
    CandidateValidationError,
    EditWindowExpiredError,
    PersistenceError,
)
from app.models.candidate import CandidateForm, ImageUpload

logger = logging.getLogger(__name__)


def candidate_form(
    full_name: str = Form(default="", alias="fullName"),
    email: str = Form(default=""),
    phone: str = Form(default=""),
    age: int | None = Form(default=None),
    city: str = Form(default=""),
    city_lat: float | None = Form(default=None, alias="cityLat"),
    city_lng: float | None = Form(default=None, alias="cityLng"),
    hobbies: str = Form(default=""),
    perfect_candidate_reason: str = Form(default="", alias="perfectCandidateReason"),
) -> CandidateForm:
    """Collect the candidate form fields from a multipart request."""
    return CandidateForm(
        full_name=full_name,
        email=email,
        phone=phone,
        age=age,
        city=city,
        city_lat=city_lat,
        city_lng=city_lng,
        hobbies=hobbies,
        perfect_candidate_reason=perfect_candidate_reason,
    )


async def read_image(upload: UploadFile | None) -> ImageUpload | None:
    """Read an uploaded file into memory; ``None`` when no file was chosen."""
    if upload is None or not upload.filename:
        return None
    content = await upload.read()
    return ImageUpload(
        content=content,
        filename=upload.filename,
        content_type=upload.content_type or "application/octet-stream",
    )


def to_http_error(exc: CandidateError) -> HTTPException:
    """Map a domain exception to the HTTP error the client should see."""
    if isinstance(exc, CandidateNotFoundError):
        return HTTPException(status_code=404, detail=str(exc))
    if isinstance(exc, CandidateValidationError):
        return HTTPException(
            status_code=422,
            detail={"message": "Invalid candidate data", "errors": exc.errors},
        )
    if isinstance(exc, EditWindowExpiredError):
        return HTTPException(
            status_code=403,
            detail={
                "message": str(exc),
                "deadline": exc.deadline.isoformat() if exc.deadline else None,
            },
        )
    if isinstance(exc, PersistenceError):
        logger.error("candidate_persistence_failed", extra={"error_message": str(exc)})
        return HTTPException(status_code=502, detail=f"Storage backend error: {exc}")
    return HTTPException(status_code=500, detail=str(exc))
