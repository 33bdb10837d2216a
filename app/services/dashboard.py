"""Dashboard aggregation service.

Builds the chart series (age breakdown, top cities, visit/registration
conversion) and map markers from the candidate list.  Charts are
computed in Python from the full list; the data set is small and the
list is already loaded for the table.
"""

from __future__ import annotations

import asyncio
import logging
from collections import Counter
from collections.abc import Iterable

from app.core.constants import (
    AGE_BUCKETS,
    MAP_DEFAULT_CENTER,
    MAP_DEFAULT_ZOOM,
    MAP_SINGLE_MARKER_ZOOM,
    TOP_CITIES,
)
from app.models.candidate import Candidate
from app.models.dashboard import (
    ChartPoint,
    Coordinates,
    DashboardOverview,
    MapBounds,
    MapResponse,
    MapView,
    SiteStats,
)
from app.services.geocoding import Geocoder

logger = logging.getLogger(__name__)


def _age_value(age: object) -> float:
    try:
        return float(age)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return 0.0


def age_breakdown(candidates: Iterable[Candidate]) -> list[ChartPoint]:
    """Count candidates per age bucket; all buckets are always present."""
    counts = {name: 0 for name, _ in AGE_BUCKETS}
    for candidate in candidates:
        age = _age_value(candidate.age)
        for name, upper in AGE_BUCKETS:
            if upper is None or age <= upper:
                counts[name] += 1
                break
    return [ChartPoint(name=name, value=value) for name, value in counts.items()]


def _city_counts(candidates: Iterable[Candidate]) -> Counter[str]:
    counts: Counter[str] = Counter()
    for candidate in candidates:
        city = (candidate.city or "").strip()
        if city:
            counts[city] += 1
    return counts


def city_distribution(
    candidates: Iterable[Candidate],
    top: int = TOP_CITIES,
) -> list[ChartPoint]:
    """Return the *top* cities by candidate count (ties in first-seen order)."""
    return [
        ChartPoint(name=city, value=count)
        for city, count in _city_counts(candidates).most_common(top)
    ]


def conversion(stats: SiteStats) -> list[ChartPoint]:
    """Visits vs registrations series."""
    return [
        ChartPoint(name="Visits", value=stats.total_visits),
        ChartPoint(name="Registrations", value=stats.total_registrations),
    ]


def build_overview(candidates: list[Candidate], stats: SiteStats) -> DashboardOverview:
    """Assemble the full dashboard overview payload."""
    return DashboardOverview(
        total_candidates=len(candidates),
        age_breakdown=age_breakdown(candidates),
        city_distribution=city_distribution(candidates),
        conversion=conversion(stats),
    )


def map_view(markers: list[Coordinates]) -> MapView:
    """Frame the map around *markers*.

    No markers: default centre and zoom.  One marker: centred on it.
    Several: a bounding box, centred on its midpoint.
    """
    if not markers:
        lat, lng = MAP_DEFAULT_CENTER
        return MapView(center=Coordinates(lat=lat, lng=lng), zoom=MAP_DEFAULT_ZOOM)
    if len(markers) == 1:
        return MapView(center=markers[0], zoom=MAP_SINGLE_MARKER_ZOOM)

    south = min(m.lat for m in markers)
    north = max(m.lat for m in markers)
    west = min(m.lng for m in markers)
    east = max(m.lng for m in markers)
    return MapView(
        center=Coordinates(lat=(south + north) / 2, lng=(west + east) / 2),
        bounds=MapBounds(
            south_west=Coordinates(lat=south, lng=west),
            north_east=Coordinates(lat=north, lng=east),
        ),
    )


async def map_markers(
    candidates: Iterable[Candidate],
    geocoder: Geocoder,
) -> MapResponse:
    """Geocode every distinct city concurrently and build the map payload."""
    cities = list(_city_counts(candidates))
    if not cities:
        return MapResponse(markers=[], view=map_view([]))

    results = await asyncio.gather(*(geocoder.get_coordinates(c) for c in cities))
    markers = [coords for coords in results if coords is not None]

    logger.info(
        "dashboard_map_built",
        extra={"cities": len(cities), "markers": len(markers)},
    )
    return MapResponse(markers=markers, view=map_view(markers))
