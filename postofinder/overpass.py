from __future__ import annotations

import logging
import math

import requests

from postofinder.errors import InputError, UpstreamUnavailable
from postofinder.models import Coordinate

DEFAULT_OVERPASS_URL = "https://overpass-api.de/api/interpreter"

logger = logging.getLogger(__name__)


def build_overpass_query(coordinate: Coordinate, radius_meters: int) -> str:
    """Build an Overpass query for fuel amenities around a point."""
    around = f"(around:{int(radius_meters)},{coordinate.lat},{coordinate.lon})"
    return f"""
    [out:json][timeout:25];
    (
      node["amenity"="fuel"]{around};
      way["amenity"="fuel"]{around};
      relation["amenity"="fuel"]{around};
    );
    out center meta;
    """


def element_coordinate(element: dict[str, object]) -> Coordinate | None:
    """Return the element's own point, or the centroid Overpass adds for ways and relations."""
    center = element.get("center")
    if not isinstance(center, dict):
        center = {}

    lat = element.get("lat")
    lon = element.get("lon")
    if lat is None or lon is None:
        lat = center.get("lat")
        lon = center.get("lon")

    if lat is None or lon is None or isinstance(lat, bool) or isinstance(lon, bool):
        return None
    try:
        lat_value = float(lat)
        lon_value = float(lon)
    except (TypeError, ValueError):
        return None
    if not (math.isfinite(lat_value) and math.isfinite(lon_value)):
        return None

    try:
        return Coordinate(lat=lat_value, lon=lon_value)
    except InputError:
        logger.debug("Discarding element %s with out-of-range coordinates", element.get("id"))
        return None


class OverpassClient:
    def __init__(
        self,
        endpoint: str = DEFAULT_OVERPASS_URL,
        user_agent: str = "PostoFinder/1.0",
        timeout_seconds: float = 30.0,
        session: requests.Session | None = None,
    ) -> None:
        self.endpoint = endpoint
        self.user_agent = user_agent
        self.timeout_seconds = timeout_seconds
        self.session = session

    def fetch_elements(self, coordinate: Coordinate, radius_meters: int) -> list[dict[str, object]]:
        """Run a single Overpass round trip. No retries; any failure is fatal for the request."""
        query = build_overpass_query(coordinate, radius_meters)
        poster = self.session.post if self.session is not None else requests.post
        logger.debug("Querying Overpass endpoint %s", self.endpoint)

        try:
            response = poster(
                self.endpoint,
                data={"data": query},
                headers={"User-Agent": self.user_agent},
                timeout=self.timeout_seconds,
            )
        except requests.RequestException as exc:
            logger.warning("Overpass endpoint %s failed: %s", self.endpoint, exc)
            raise UpstreamUnavailable("Overpass API unreachable.") from exc

        if response.status_code == 429:
            logger.warning("Overpass endpoint %s rate limited the request", self.endpoint)
            raise UpstreamUnavailable("Overpass API rate limit hit.")

        if response.status_code >= 400:
            logger.warning("Overpass endpoint %s returned %s", self.endpoint, response.status_code)
            raise UpstreamUnavailable(f"Overpass API returned HTTP {response.status_code}.")

        try:
            payload = response.json()
        except ValueError as exc:
            logger.warning("Overpass endpoint %s returned invalid JSON: %s", self.endpoint, exc)
            raise UpstreamUnavailable("Overpass API returned invalid JSON payload.") from exc

        elements = payload.get("elements") if isinstance(payload, dict) else None
        if not isinstance(elements, list):
            raise UpstreamUnavailable("Overpass API response has no elements list.")
        return [element for element in elements if isinstance(element, dict)]
