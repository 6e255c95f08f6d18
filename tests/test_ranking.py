import pytest

from postofinder.models import Coordinate, Station
from postofinder.ranking import (
    format_distance,
    haversine_distance_km,
    osm_directions_url,
    osm_map_url,
    rank_by_distance,
)

SAO_PAULO = Coordinate(lat=-23.5505, lon=-46.6333)
RIO = Coordinate(lat=-22.9068, lon=-43.1729)


def _station(name: str, lat: float, lon: float) -> Station:
    return Station(coordinate=Coordinate(lat=lat, lon=lon), name=name)


def test_haversine_is_zero_for_identical_points() -> None:
    assert haversine_distance_km(SAO_PAULO, SAO_PAULO) == 0.0
    assert haversine_distance_km(Coordinate(90.0, 180.0), Coordinate(90.0, 180.0)) == 0.0


def test_haversine_is_symmetric_and_plausible() -> None:
    forward = haversine_distance_km(SAO_PAULO, RIO)
    backward = haversine_distance_km(RIO, SAO_PAULO)

    assert forward == backward
    assert forward == pytest.approx(361, abs=5)


def test_haversine_one_degree_of_latitude() -> None:
    assert haversine_distance_km(Coordinate(0.0, 0.0), Coordinate(1.0, 0.0)) == pytest.approx(111.195, abs=0.01)


def test_rank_by_distance_is_stable_for_ties() -> None:
    reference = Coordinate(lat=0.0, lon=0.0)
    one_km = 1 / 111.195
    station_a = _station("A", 2 * one_km, 0.0)
    station_b = _station("B", -2 * one_km, 0.0)
    station_c = _station("C", one_km, 0.0)

    ranked = rank_by_distance([station_a, station_b, station_c], reference)

    assert [item.station.name for item in ranked] == ["C", "A", "B"]
    assert ranked[0].distance_km == pytest.approx(1.0, abs=1e-3)
    assert ranked[1].distance_km == ranked[2].distance_km


def test_rank_by_distance_without_reference_keeps_order() -> None:
    stations = [_station("Far", 10.0, 10.0), _station("Near", 0.1, 0.1)]

    ranked = rank_by_distance(stations, None)

    assert [item.station.name for item in ranked] == ["Far", "Near"]
    assert all(item.distance_km is None for item in ranked)


def test_format_distance() -> None:
    assert format_distance(0.45) == "450 m"
    assert format_distance(0.0) == "0 m"
    assert format_distance(0.0004) == "0 m"
    assert format_distance(1.0) == "1.0 km"
    assert format_distance(12.34) == "12.3 km"


def test_osm_links() -> None:
    station = _station("Posto", -23.5, -46.6)

    assert osm_map_url(station) == "https://www.openstreetmap.org/?mlat=-23.5&mlon=-46.6&zoom=16"
    assert osm_directions_url(SAO_PAULO, station) == (
        "https://www.openstreetmap.org/directions?from=-23.5505%2C-46.6333&to=-23.5%2C-46.6"
    )
