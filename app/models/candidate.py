"""Pydantic models for the ``candidates`` table and the candidate form.

``registration_date`` is written once on insert and never appears in an
update payload.  ``CandidateForm`` holds raw working values from the
landing page or the admin form; it is deliberately lenient so that
validation can report every problem as a field code.
"""

from datetime import datetime

from pydantic import ConfigDict

from app.models.base import CamelModel


class CandidateForm(CamelModel):
    """Working form values as submitted (before validation)."""
    full_name: str = ""
    email: str = ""
    phone: str = ""
    age: int | None = None
    city: str = ""
    city_lat: float | None = None
    city_lng: float | None = None
    hobbies: str = ""
    perfect_candidate_reason: str = ""


class CandidateCreate(CamelModel):
    """Payload for inserting a candidate."""
    full_name: str
    email: str
    phone: str
    age: int
    city: str
    city_lat: float | None = None
    city_lng: float | None = None
    hobbies: str = ""
    perfect_candidate_reason: str
    profile_image_url: str = ""
    registration_date: datetime
    last_updated: datetime


class Candidate(CamelModel):
    """Full candidate record returned from the database."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    full_name: str = ""
    email: str = ""
    phone: str = ""
    age: int | None = None
    city: str = ""
    city_lat: float | None = None
    city_lng: float | None = None
    hobbies: str | None = None
    perfect_candidate_reason: str = ""
    profile_image_url: str = ""
    registration_date: datetime | None = None
    last_updated: datetime | None = None


class ImageUpload(CamelModel):
    """An image selected in the form, held in memory until upload."""
    content: bytes
    filename: str
    content_type: str

    @property
    def size(self) -> int:
        return len(self.content)
