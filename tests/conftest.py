"""Shared fakes and Overpass payloads for station lookup tests."""

import threading

import pytest

from postofinder.aggregator import StationFinder
from postofinder.models import ADDRESS_UNAVAILABLE


class FakeSource:
    def __init__(self, elements=None, error=None):
        self.elements = elements or []
        self.error = error
        self.calls = []

    def fetch_elements(self, coordinate, radius_meters):
        self.calls.append((coordinate, radius_meters))
        if self.error is not None:
            raise self.error
        return self.elements


class FakeResolver:
    """Resolves addresses from a lookup table keyed by (lat, lon)."""

    def __init__(self, addresses=None, failures=None):
        self.addresses = addresses or {}
        self.failures = failures or {}
        self.calls = []
        self._lock = threading.Lock()

    def resolve_address(self, coordinate, fallback=ADDRESS_UNAVAILABLE):
        key = (coordinate.lat, coordinate.lon)
        with self._lock:
            self.calls.append(key)
        if key in self.failures:
            raise self.failures[key]
        return self.addresses.get(key, fallback)


# ---------------------------------------------------------------------------
# Overpass elements
# ---------------------------------------------------------------------------

NODE_WITH_ADDRESS = {
    "type": "node",
    "id": 1,
    "lat": -23.5505,
    "lon": -46.6333,
    "tags": {
        "amenity": "fuel",
        "name": "Posto Ipiranga Centro",
        "brand": "Ipiranga",
        "addr:street": "Rua da Consolação",
        "addr:housenumber": "100",
        "addr:city": "São Paulo",
        "addr:state": "SP",
        "opening_hours": "24/7",
        "fuel:diesel": "yes",
        "fuel:octane_95": "yes",
    },
}

WAY_WITHOUT_ADDRESS = {
    "type": "way",
    "id": 2,
    "center": {"lat": -23.5600, "lon": -46.6400},
    "tags": {"amenity": "fuel", "operator": "Shell"},
}

NODE_WITHOUT_COORDINATES = {
    "type": "relation",
    "id": 3,
    "tags": {"amenity": "fuel", "name": "Fantasma"},
}


def make_point_elements(count):
    return [
        {
            "type": "node",
            "id": 100 + index,
            "lat": -23.0 - index * 0.001,
            "lon": -46.0,
            "tags": {"name": f"Posto {index}", "addr:city": "Campinas"},
        }
        for index in range(count)
    ]


@pytest.fixture
def fake_source():
    return FakeSource(elements=[NODE_WITH_ADDRESS, WAY_WITHOUT_ADDRESS, NODE_WITHOUT_COORDINATES])


@pytest.fixture
def fake_resolver():
    return FakeResolver(addresses={(-23.56, -46.64): "Avenida Paulista, 1000, Bela Vista, São Paulo, SP"})


@pytest.fixture
def finder(fake_source, fake_resolver):
    return StationFinder(fake_source, fake_resolver)
