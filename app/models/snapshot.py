"""Comparable projection of a candidate's editable fields."""

from typing import Any

from pydantic import ConfigDict

from app.models.base import CamelModel


class CandidateSnapshot(CamelModel):
    """Normalized values of the diffable candidate fields.

    Text fields are already trimmed; ``age`` is carried as given.
    Instances are immutable and compare field by field.
    """
    model_config = ConfigDict(frozen=True)

    full_name: str = ""
    email: str = ""
    phone: str = ""
    age: Any = None
    city: str = ""
    hobbies: str = ""
    perfect_candidate_reason: str = ""
