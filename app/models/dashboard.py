"""Response models for dashboard endpoints.

These are chart-ready series and map data, not table mappings.
"""

from app.models.base import CamelModel


class ChartPoint(CamelModel):
    """A single named value in a chart series."""
    name: str
    value: int = 0


class SiteStats(CamelModel):
    """Row of the ``site_stats`` table."""
    total_visits: int = 0
    total_registrations: int = 0


class DashboardOverview(CamelModel):
    """Full response for GET /api/v1/dashboard/overview."""
    total_candidates: int = 0
    age_breakdown: list[ChartPoint] = []
    city_distribution: list[ChartPoint] = []
    conversion: list[ChartPoint] = []


class Coordinates(CamelModel):
    """A latitude/longitude pair."""
    lat: float
    lng: float


class MapBounds(CamelModel):
    """South-west / north-east corners of the marker bounding box."""
    south_west: Coordinates
    north_east: Coordinates


class MapView(CamelModel):
    """How the client should frame the map."""
    center: Coordinates
    zoom: int | None = None
    bounds: MapBounds | None = None


class MapResponse(CamelModel):
    """Full response for GET /api/v1/dashboard/map."""
    markers: list[Coordinates] = []
    view: MapView


class FocusResponse(CamelModel):
    """Full response for GET /api/v1/dashboard/focus."""
    candidate_id: str
    city: str
    center: Coordinates | None = None
    zoom: int | None = None
