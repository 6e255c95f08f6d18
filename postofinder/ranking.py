"""Distance calculations and proximity ordering for stations."""

from __future__ import annotations

from math import asin, cos, floor, radians, sin, sqrt
from typing import Iterable
from urllib.parse import urlencode

from postofinder.models import Coordinate, RankedStation, Station

EARTH_RADIUS_KM = 6371.0
OSM_BASE_URL = "https://www.openstreetmap.org"


def haversine_distance_km(a: Coordinate, b: Coordinate) -> float:
    """
    Great circle distance between two points on the earth,
    in kilometers.
    """
    lat1, lon1, lat2, lon2 = map(radians, [a.lat, a.lon, b.lat, b.lon])

    dlon = lon2 - lon1
    dlat = lat2 - lat1
    h = sin(dlat / 2) ** 2 + cos(lat1) * cos(lat2) * sin(dlon / 2) ** 2
    return 2 * EARTH_RADIUS_KM * asin(sqrt(min(1.0, h)))


def rank_by_distance(stations: Iterable[Station], reference: Coordinate | None) -> list[RankedStation]:
    if reference is None:
        return [RankedStation(station=station) for station in stations]

    ranked = [
        RankedStation(station=station, distance_km=haversine_distance_km(reference, station.coordinate))
        for station in stations
    ]
    # sorted() is stable, equal distances keep their source order.
    return sorted(ranked, key=lambda item: item.distance_km)


def format_distance(km: float) -> str:
    if km < 1:
        return f"{int(floor(km * 1000 + 0.5))} m"
    return f"{km:.1f} km"


def osm_map_url(station: Station, zoom: int = 16) -> str:
    params = {"mlat": station.coordinate.lat, "mlon": station.coordinate.lon, "zoom": zoom}
    return f"{OSM_BASE_URL}/?{urlencode(params)}"


def osm_directions_url(origin: Coordinate, station: Station) -> str:
    params = {
        "from": f"{origin.lat},{origin.lon}",
        "to": f"{station.coordinate.lat},{station.coordinate.lon}",
    }
    return f"{OSM_BASE_URL}/directions?{urlencode(params)}"
