"""Candidate form and image validation.

Every rule reports a short error code per field so that the front-end
can render inline messages.  All problems are collected before raising a
single ``CandidateValidationError``.
"""

from __future__ import annotations

import re
import unicodedata

from pydantic import EmailStr, TypeAdapter, ValidationError

from app.core.constants import (
    AGE_MAX,
    AGE_MIN,
    ALLOWED_IMAGE_TYPES,
    MAX_IMAGE_BYTES,
    PHONE_PATTERN,
    REASON_MAX_LENGTH,
)
from app.core.exceptions import CandidateValidationError
from app.models.candidate import CandidateForm, ImageUpload

_PHONE_RE = re.compile(PHONE_PATTERN)
_WHITESPACE_RE = re.compile(r"\s+")
_NAME_JOINERS_RE = re.compile(r"[-']")
_EMAIL_ADAPTER: TypeAdapter[str] = TypeAdapter(EmailStr)


def normalize_full_name(value: str) -> str:
    """Trim and collapse inner whitespace runs to single spaces."""
    return _WHITESPACE_RE.sub(" ", value.strip())


def _is_name_letter(ch: str) -> bool:
    """True for Latin or Hebrew script letters."""
    return ch.isalpha() and unicodedata.name(ch, "").startswith(("LATIN ", "HEBREW "))


def _is_name_part(part: str) -> bool:
    # letters, optionally joined by single '-' or "'" (no leading/trailing/doubled joiners)
    segments = _NAME_JOINERS_RE.split(part)
    return all(seg and all(_is_name_letter(ch) for ch in seg) for seg in segments)


def full_name_error(value: str | None) -> str | None:
    """Return the full-name error code, or ``None`` when the name is acceptable.

    An empty value passes here; required-ness is checked separately.
    """
    trimmed = value.strip() if isinstance(value, str) else ""
    if not trimmed:
        return None

    parts = normalize_full_name(trimmed).split(" ")
    if len(parts) < 2:
        return "atLeastTwoParts"
    if not all(_is_name_part(p) for p in parts):
        return "lettersOnly"
    return None


def _email_error(value: str) -> str | None:
    try:
        _EMAIL_ADAPTER.validate_python(value)
    except ValidationError:
        return "email"
    return None


def validate_candidate_form(form: CandidateForm) -> CandidateForm:
    """Validate *form* and return a normalized copy.

    Raises
    ------
    CandidateValidationError
        With ``{field: code}`` for every failing field.
    """
    errors: dict[str, str] = {}

    full_name = normalize_full_name(form.full_name)
    email = form.email.strip()
    phone = form.phone.strip()
    city = form.city.strip()
    reason = form.perfect_candidate_reason.strip()

    if not full_name:
        errors["fullName"] = "required"
    elif (code := full_name_error(full_name)) is not None:
        errors["fullName"] = code

    if not email:
        errors["email"] = "required"
    elif (code := _email_error(email)) is not None:
        errors["email"] = code

    if not phone:
        errors["phone"] = "required"
    elif not _PHONE_RE.match(phone):
        errors["phone"] = "pattern"

    if form.age is None:
        errors["age"] = "required"
    elif form.age < AGE_MIN:
        errors["age"] = "min"
    elif form.age > AGE_MAX:
        errors["age"] = "max"

    if not city:
        errors["city"] = "required"

    if not reason:
        errors["perfectCandidateReason"] = "required"
    elif len(reason) > REASON_MAX_LENGTH:
        errors["perfectCandidateReason"] = "maxlength"

    if errors:
        raise CandidateValidationError(errors)

    return form.model_copy(
        update={
            "full_name": full_name,
            "email": email,
            "phone": phone,
            "city": city,
            "hobbies": form.hobbies.strip(),
            "perfect_candidate_reason": reason,
        }
    )


def validate_image(image: ImageUpload | None, *, required: bool) -> None:
    """Check the selected profile image against type and size limits."""
    if image is None:
        if required:
            raise CandidateValidationError({"profileImage": "required"})
        return
    if image.content_type not in ALLOWED_IMAGE_TYPES:
        raise CandidateValidationError({"profileImage": "fileType"})
    if image.size > MAX_IMAGE_BYTES:
        raise CandidateValidationError({"profileImage": "fileSize"})
