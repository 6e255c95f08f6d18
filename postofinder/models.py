from __future__ import annotations

from dataclasses import dataclass, field
import math

from postofinder.errors import InputError

ADDRESS_UNAVAILABLE = "Endereço não disponível"


@dataclass(frozen=True, slots=True)
class Coordinate:
    lat: float
    lon: float

    def __post_init__(self) -> None:
        if not -90.0 <= self.lat <= 90.0:
            raise InputError(f"Latitude fora do intervalo: {self.lat}")
        if not -180.0 <= self.lon <= 180.0:
            raise InputError(f"Longitude fora do intervalo: {self.lon}")

    @classmethod
    def parse(cls, lat: object, lng: object) -> Coordinate:
        """Build a coordinate from loosely typed input such as query parameters."""
        if lat is None or lng is None or str(lat).strip() == "" or str(lng).strip() == "":
            raise InputError("Latitude e longitude são obrigatórios")
        try:
            lat_value = float(str(lat).strip())
            lon_value = float(str(lng).strip())
        except ValueError as error:
            raise InputError("Latitude e longitude devem ser números") from error
        if not (math.isfinite(lat_value) and math.isfinite(lon_value)):
            raise InputError("Latitude e longitude devem ser números")
        return cls(lat=lat_value, lon=lon_value)


@dataclass(slots=True)
class Station:
    coordinate: Coordinate
    name: str
    address: str = ADDRESS_UNAVAILABLE
    opening_hours: str | None = None
    brand: str | None = None
    operator: str | None = None
    fuel_types: list[str] = field(default_factory=list)

    @property
    def needs_address(self) -> bool:
        return self.address == ADDRESS_UNAVAILABLE

    def to_dict(self) -> dict[str, object]:
        return {
            "lat": self.coordinate.lat,
            "lon": self.coordinate.lon,
            "name": self.name,
            "address": self.address,
            "opening_hours": self.opening_hours,
            "brand": self.brand,
            "operator": self.operator,
            "fuel_types": list(self.fuel_types),
        }


@dataclass(slots=True)
class RankedStation:
    station: Station
    distance_km: float | None = None

    def to_dict(self) -> dict[str, object]:
        payload = self.station.to_dict()
        payload["distance_km"] = self.distance_km
        return payload
