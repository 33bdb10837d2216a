"""Application constants.

Contains the candidate field layout, form validation rules, re-edit
bookkeeping keys, and dashboard defaults.
"""

# ---------------------------------------------------------------------------
# Candidate fields
# ---------------------------------------------------------------------------

# Fields compared between the loaded record and the submitted form, in order.
DIFFABLE_FIELDS: tuple[str, ...] = (
    "fullName",
    "email",
    "phone",
    "age",
    "city",
    "hobbies",
    "perfectCandidateReason",
)

# Fields of DIFFABLE_FIELDS that are free text (trimmed on snapshot).
TEXT_FIELDS: frozenset[str] = frozenset(DIFFABLE_FIELDS) - {"age"}

# API (camelCase) -> ``candidates`` table column (snake_case)
FIELD_TO_COLUMN: dict[str, str] = {
    "id": "id",
    "fullName": "full_name",
    "email": "email",
    "phone": "phone",
    "age": "age",
    "city": "city",
    "cityLat": "city_lat",
    "cityLng": "city_lng",
    "hobbies": "hobbies",
    "perfectCandidateReason": "perfect_candidate_reason",
    "profileImageUrl": "profile_image_url",
    "registrationDate": "registration_date",
    "lastUpdated": "last_updated",
}

COLUMN_TO_FIELD: dict[str, str] = {v: k for k, v in FIELD_TO_COLUMN.items()}

CANDIDATES_TABLE: str = "candidates"
SITE_STATS_TABLE: str = "site_stats"
SITE_STATS_ROW_ID: str = "site"

# ---------------------------------------------------------------------------
# Form validation
# ---------------------------------------------------------------------------
PHONE_PATTERN: str = r"^0(?:[23489]\d{7}|5\d{8})$"
AGE_MIN: int = 18
AGE_MAX: int = 100
REASON_MAX_LENGTH: int = 1000

ALLOWED_IMAGE_TYPES: frozenset[str] = frozenset(
    {"image/png", "image/jpeg", "image/jpg"}
)
MAX_IMAGE_BYTES: int = 5 * 1024 * 1024
IMAGE_PATH_PREFIX: str = "candidate-images"

# ---------------------------------------------------------------------------
# Re-edit bookkeeping (cookie / key-value store keys)
# ---------------------------------------------------------------------------
RE_EDIT_CANDIDATE_KEY: str = "iisa_candidate_id"
RE_EDIT_REGISTRATION_KEY: str = "iisa_registration_date"

# ---------------------------------------------------------------------------
# Dashboard
# ---------------------------------------------------------------------------
AGE_BUCKETS: tuple[tuple[str, int | None], ...] = (
    ("18-25", 25),
    ("26-35", 35),
    ("36-45", 45),
    ("46+", None),
)
TOP_CITIES: int = 7

MAP_DEFAULT_CENTER: tuple[float, float] = (31.7683, 35.2137)
MAP_DEFAULT_ZOOM: int = 8
MAP_SINGLE_MARKER_ZOOM: int = 10
MAP_FOCUS_ZOOM: int = 11

GEOCODING_URL: str = "https://maps.googleapis.com/maps/api/geocode/json"
