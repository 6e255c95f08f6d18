from argparse import ArgumentParser
import logging
from pathlib import Path

from postofinder.aggregator import StationFinder
from postofinder.config import Settings
from postofinder.env_utils import load_env_file
from postofinder.errors import PostoFinderError
from postofinder.models import Coordinate
from postofinder.ranking import format_distance, rank_by_distance

logger = logging.getLogger(__name__)


def nearby(lat: str, lng: str, radius_meters: int | None = None, settings: Settings | None = None) -> list[str]:
    settings = settings or Settings.from_env()
    origin = Coordinate.parse(lat, lng)
    finder = StationFinder.from_settings(settings)
    stations = finder.find_stations(origin, radius_meters or settings.search_radius_meters)

    lines: list[str] = []
    for index, item in enumerate(rank_by_distance(stations, origin), start=1):
        station = item.station
        fuels = ", ".join(station.fuel_types) or "-"
        lines.append(f"{index:2d}. {station.name} ({format_distance(item.distance_km)})")
        lines.append(f"    {station.address}")
        lines.append(f"    Combustíveis: {fuels}")
    return lines


def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )
    load_env_file(Path.cwd())

    parser = ArgumentParser(description="PostoFinder: fuel stations near a coordinate")
    sub = parser.add_subparsers(dest="command", required=True)
    near = sub.add_parser("nearby", help="List stations near a coordinate, closest first")
    near.add_argument("--lat", required=True, help="Latitude in decimal degrees")
    near.add_argument("--lng", required=True, help="Longitude in decimal degrees")
    near.add_argument(
        "--radius",
        type=int,
        default=None,
        help="Search radius in meters (default: POSTOFINDER_SEARCH_RADIUS_METERS or 5000)",
    )
    args = parser.parse_args(argv)

    if args.command == "nearby":
        try:
            lines = nearby(args.lat, args.lng, radius_meters=args.radius)
        except PostoFinderError as error:
            logger.error(f"Lookup failed: {error}")
            return 1
        if not lines:
            print("Nenhum posto encontrado nas proximidades.")
        for line in lines:
            print(line)
        return 0
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
