from __future__ import annotations

import logging
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.templating import Jinja2Templates

from postofinder.aggregator import StationFinder
from postofinder.config import Settings
from postofinder.env_utils import load_env_file
from postofinder.errors import InputError, StationLookupError, UpstreamUnavailable
from postofinder.models import Coordinate, RankedStation
from postofinder.ranking import format_distance, osm_directions_url, osm_map_url, rank_by_distance

TEMPLATES = Jinja2Templates(directory=str(Path(__file__).resolve().parent / "templates"))

SOURCE_UNAVAILABLE_MESSAGE = "Serviço de mapas indisponível no momento. Tente novamente em alguns segundos."
LOOKUP_FAILED_MESSAGE = "Erro ao buscar postos de combustível. Tente novamente em alguns segundos."

logger = logging.getLogger(__name__)


def create_app(finder: StationFinder | None = None, settings: Settings | None = None) -> FastAPI:
    settings = settings or Settings.from_env()
    app = FastAPI(title="PostoFinder")
    app.state.settings = settings
    app.state.finder = finder or StationFinder.from_settings(settings)

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/stations")
    def stations(lat: str | None = None, lng: str | None = None):
        try:
            coordinate = Coordinate.parse(lat, lng)
        except InputError as error:
            return JSONResponse({"error": str(error)}, status_code=400)

        try:
            found = app.state.finder.find_stations(coordinate, app.state.settings.search_radius_meters)
        except (UpstreamUnavailable, StationLookupError) as error:
            return JSONResponse({"error": _lookup_error_message(error)}, status_code=500)

        return {"stations": [station.to_dict() for station in found]}

    @app.get("/")
    def home(request: Request, lat: str | None = None, lng: str | None = None):
        origin: Coordinate | None = None
        ranked: list[RankedStation] = []
        error: str | None = None

        if lat is not None or lng is not None:
            try:
                origin = Coordinate.parse(lat, lng)
                found = app.state.finder.find_stations(origin, app.state.settings.search_radius_meters)
                ranked = rank_by_distance(found, origin)
            except InputError as exc:
                error = str(exc)
            except (UpstreamUnavailable, StationLookupError) as exc:
                error = _lookup_error_message(exc)

        context = {
            "request": request,
            "origin": origin,
            "stations": [_station_view(item, origin) for item in ranked],
            "error": error,
            "searched": origin is not None and error is None,
        }
        return TEMPLATES.TemplateResponse(request=request, name="index.html", context=context)

    return app


def _lookup_error_message(error: Exception) -> str:
    logger.warning("Station lookup error: %s", error)
    if isinstance(error, UpstreamUnavailable):
        return SOURCE_UNAVAILABLE_MESSAGE
    return LOOKUP_FAILED_MESSAGE


def _station_view(item: RankedStation, origin: Coordinate | None) -> dict[str, object]:
    payload = item.to_dict()
    payload["distance_label"] = format_distance(item.distance_km) if item.distance_km is not None else None
    payload["map_url"] = osm_map_url(item.station)
    payload["directions_url"] = osm_directions_url(origin, item.station) if origin is not None else None
    return payload


load_env_file(Path.cwd())
app = create_app()
