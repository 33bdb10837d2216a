"""Snapshot capture for candidate edit sessions.

A snapshot is the normalized, comparable view of the diffable candidate
fields.  It is taken from the loaded record (the baseline) and again from
the working form at submission time; the two are then handed to the diff
engine.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel

from app.core.constants import DIFFABLE_FIELDS, FIELD_TO_COLUMN, TEXT_FIELDS
from app.models.snapshot import CandidateSnapshot


def _as_mapping(raw: Any) -> Mapping[str, Any]:
    """Return *raw* as a mapping, whatever candidate-like shape it has."""
    if isinstance(raw, BaseModel):
        return raw.model_dump(by_alias=True)
    if isinstance(raw, Mapping):
        return raw
    if raw is None:
        return {}
    # Plain objects: read attributes by column name
    return {
        column: getattr(raw, column)
        for column in FIELD_TO_COLUMN.values()
        if hasattr(raw, column)
    }


def _lookup(source: Mapping[str, Any], field: str) -> Any:
    """Read *field* by its camelCase name, falling back to the column name."""
    if field in source:
        return source[field]
    return source.get(FIELD_TO_COLUMN[field])


def take_snapshot(raw: Any) -> CandidateSnapshot:
    """Project a candidate-like record onto a ``CandidateSnapshot``.

    Accepts a mapping (camelCase or snake_case keys), a pydantic model, an
    existing snapshot, or ``None``.  Text fields are trimmed; missing or
    non-string text values become ``""``.  ``age`` passes through as is.
    Never raises.
    """
    if isinstance(raw, CandidateSnapshot):
        return raw

    source = _as_mapping(raw)
    values: dict[str, Any] = {}
    for field in DIFFABLE_FIELDS:
        value = _lookup(source, field)
        if field in TEXT_FIELDS:
            values[field] = value.strip() if isinstance(value, str) else ""
        else:
            values[field] = value

    return CandidateSnapshot.model_validate(values)
