"""Enum types shared by services and routers."""

from enum import Enum


class TimestampKind(str, Enum):
    """Accepted shapes of a stored timestamp."""
    native = "native"  # datetime
    epoch_millis = "epoch_millis"  # int / float
    iso_string = "iso_string"  # PostgREST timestamptz
    seconds_wrapper = "seconds_wrapper"  # {seconds, nanoseconds}


class SubmissionStatus(str, Enum):
    """Outcome of an edit submission."""
    noop = "noop"
    updated = "updated"


class CandidateSortField(str, Enum):
    """Columns the dashboard list can be sorted by."""
    full_name = "fullName"
    email = "email"
    phone = "phone"
    age = "age"
    city = "city"
    registration_date = "registrationDate"
    last_updated = "lastUpdated"


class SortOrder(str, Enum):
    """Sort direction."""
    asc = "asc"
    desc = "desc"
