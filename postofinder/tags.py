"""
Normalization of OpenStreetMap tags into station records.

Overpass hands back a free-form ``tags`` mapping per element. Every key is
optional and values are not guaranteed to be strings, so all reads go
through ``TagMapping.get_string``.
"""

from __future__ import annotations

from collections.abc import Mapping

from postofinder.models import ADDRESS_UNAVAILABLE, Coordinate, Station

DEFAULT_STATION_NAME = "Posto de Combustível"
TRUTHY_TAG_VALUE = "yes"

FUEL_CATEGORIES: tuple[tuple[str, str], ...] = (
    ("fuel:diesel", "Diesel"),
    ("fuel:octane_95", "Gasolina Comum"),
    ("fuel:octane_98", "Gasolina Aditivada"),
    ("fuel:e85", "Etanol"),
    ("fuel:lpg", "GLP"),
    ("fuel:cng", "GNV"),
)

__all__ = [
    "ADDRESS_UNAVAILABLE",
    "DEFAULT_STATION_NAME",
    "FUEL_CATEGORIES",
    "TagMapping",
    "extract_fuel_types",
    "extract_name",
    "format_address_from_tags",
    "station_from_tags",
]


class TagMapping:
    def __init__(self, raw: Mapping[str, object] | None = None) -> None:
        self._raw: Mapping[str, object] = raw if isinstance(raw, Mapping) else {}

    @classmethod
    def wrap(cls, tags: TagMapping | Mapping[str, object] | None) -> TagMapping:
        if isinstance(tags, TagMapping):
            return tags
        return cls(tags)

    def get_string(self, key: str) -> str | None:
        """Return the tag value as a non-empty string, or ``None``."""
        value = self._raw.get(key)
        if not isinstance(value, str):
            return None
        if not value.strip():
            return None
        return value

    def first_of(self, *keys: str) -> str | None:
        for key in keys:
            value = self.get_string(key)
            if value is not None:
                return value
        return None


def extract_name(tags: TagMapping | Mapping[str, object] | None) -> str:
    return TagMapping.wrap(tags).first_of("name", "brand", "operator") or DEFAULT_STATION_NAME


def join_address_parts(parts: list[str]) -> str:
    return ", ".join(parts) if parts else ADDRESS_UNAVAILABLE


def format_address_from_tags(tags: TagMapping | Mapping[str, object] | None) -> str:
    mapping = TagMapping.wrap(tags)
    parts: list[str] = []

    street = mapping.get_string("addr:street")
    if street:
        house_number = mapping.get_string("addr:housenumber")
        parts.append(f"{street}, {house_number}" if house_number else street)

    for key in ("addr:city", "addr:state"):
        value = mapping.get_string(key)
        if value:
            parts.append(value)

    return join_address_parts(parts)


def extract_fuel_types(tags: TagMapping | Mapping[str, object] | None) -> list[str]:
    # Only the exact marker counts; "true", "1" or "Yes" are treated as absent.
    mapping = TagMapping.wrap(tags)
    return [label for key, label in FUEL_CATEGORIES if mapping.get_string(key) == TRUTHY_TAG_VALUE]


def station_from_tags(coordinate: Coordinate, tags: TagMapping | Mapping[str, object] | None) -> Station:
    mapping = TagMapping.wrap(tags)
    return Station(
        coordinate=coordinate,
        name=extract_name(mapping),
        address=format_address_from_tags(mapping),
        opening_hours=mapping.get_string("opening_hours"),
        brand=mapping.get_string("brand"),
        operator=mapping.get_string("operator"),
        fuel_types=extract_fuel_types(mapping),
    )
