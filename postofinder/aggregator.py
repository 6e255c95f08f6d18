"""
Station lookup around a coordinate.

Flow:
  1. One Overpass query for fuel amenities within the radius
  2. Drop elements without a usable coordinate, normalize tags
  3. Reverse geocode every station still lacking an address (parallel)
  4. Keep the first ``max_results`` in Overpass order
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
import logging
from typing import Protocol

from postofinder.config import Settings
from postofinder.errors import PostoFinderError, StationLookupError
from postofinder.geocoder import NominatimReverseGeocoder
from postofinder.models import Coordinate, Station
from postofinder.overpass import OverpassClient, element_coordinate
from postofinder.tags import station_from_tags

DEFAULT_RADIUS_METERS = 5000
MAX_RESULTS = 20

logger = logging.getLogger(__name__)


class ElementSource(Protocol):
    def fetch_elements(self, coordinate: Coordinate, radius_meters: int) -> list[dict[str, object]]: ...


class AddressResolver(Protocol):
    def resolve_address(self, coordinate: Coordinate, fallback: str = ...) -> str: ...


class StationFinder:
    def __init__(
        self,
        source: ElementSource,
        resolver: AddressResolver,
        max_results: int = MAX_RESULTS,
        max_workers: int = 8,
    ) -> None:
        self.source = source
        self.resolver = resolver
        self.max_results = max_results
        self.max_workers = max_workers

    @classmethod
    def from_settings(cls, settings: Settings) -> StationFinder:
        source = OverpassClient(
            endpoint=settings.overpass_url,
            user_agent=settings.user_agent,
            timeout_seconds=settings.overpass_timeout_seconds,
        )
        resolver = NominatimReverseGeocoder(
            base_url=settings.nominatim_url,
            user_agent=settings.user_agent,
            max_retries=settings.geocoder_max_retries,
            timeout_seconds=settings.geocoder_timeout_seconds,
        )
        return cls(source, resolver, max_results=settings.max_results, max_workers=settings.geocoder_max_workers)

    def find_stations(self, coordinate: Coordinate, radius_meters: int = DEFAULT_RADIUS_METERS) -> list[Station]:
        try:
            elements = self.source.fetch_elements(coordinate, radius_meters)
            stations = self._build_stations(elements)
            self._fill_missing_addresses(stations)
        except PostoFinderError:
            raise
        except Exception as exc:
            logger.exception("Station lookup failed for %s,%s", coordinate.lat, coordinate.lon)
            raise StationLookupError("Station lookup failed.") from exc

        logger.info(
            "Found %d stations within %dm of %s,%s",
            len(stations),
            radius_meters,
            coordinate.lat,
            coordinate.lon,
        )
        return stations[: self.max_results]

    def _build_stations(self, elements: list[dict[str, object]]) -> list[Station]:
        stations: list[Station] = []
        for element in elements:
            coordinate = element_coordinate(element)
            if coordinate is None:
                continue
            stations.append(station_from_tags(coordinate, element.get("tags")))
        return stations

    def _fill_missing_addresses(self, stations: list[Station]) -> None:
        pending = [station for station in stations if station.needs_address]
        if not pending:
            return

        with ThreadPoolExecutor(max_workers=min(self.max_workers, len(pending))) as executor:
            futures = {executor.submit(self._resolve_one, station): station for station in pending}

        for future, station in futures.items():
            error = future.exception()
            if error is not None:
                logger.warning(
                    "Address enrichment failed for %s at %s,%s: %s",
                    station.name,
                    station.coordinate.lat,
                    station.coordinate.lon,
                    error,
                )

    def _resolve_one(self, station: Station) -> None:
        station.address = self.resolver.resolve_address(station.coordinate, station.address) or station.address


def find_stations(
    coordinate: Coordinate,
    radius_meters: int = DEFAULT_RADIUS_METERS,
    settings: Settings | None = None,
) -> list[Station]:
    finder = StationFinder.from_settings(settings or Settings.from_env())
    return finder.find_stations(coordinate, radius_meters)
