"""Command line entry point: ``python -m solsoker``."""
from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import List, Optional

from .app import Application, get_application
from .entities import GeoPoint, WeightTriple
from .errors import GeocodeLookupError, ImproperlyConfigured, SolsokerError
from .places import place_label
from .presentation import format_result, result_to_dict
from .scoring import WindMode
from .services.search import SearchMode

MIN_RADIUS_KM = 5
MAX_RADIUS_KM = 100

logger = logging.getLogger("solsoker")


class CommandError(Exception):
    """Raised for invalid command line usage."""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="solsoker",
        description="Find the spot with the best weather within a radius",
    )
    parser.add_argument("--place", type=str, help="Place name to search around")
    parser.add_argument("--lat", type=float, help="Latitude of the search center")
    parser.add_argument("--lon", type=float, help="Longitude of the search center")
    parser.add_argument("--radius", type=float, default=10.0, help="Search radius in km (5-100)")
    parser.add_argument("--sun", type=float, default=0.7, help="Weight of sunshine")
    parser.add_argument("--temp", type=float, default=0.3, help="Weight of temperature")
    parser.add_argument("--wind", type=float, default=0.0, help="Weight of wind")
    parser.add_argument("--storm", action="store_true", help="Prefer strong wind instead of calm")
    parser.add_argument("--refine", action="store_true", help="Use the iterative refinement search")
    parser.add_argument("--json", action="store_true", help="Print the result as JSON")
    return parser


def resolve_center(app: Application, options: argparse.Namespace) -> GeoPoint:
    if options.place:
        try:
            places = app.geocoder.forward_search(options.place, app.settings.country)
        except GeocodeLookupError as exc:
            raise CommandError(f"Feil ved oppslag av sted: {exc}") from exc
        if not places:
            raise CommandError(f"Fant ikke stedet: {options.place}")
        place = places[0]
        logger.info("Searching around %s", place_label(place))
        return GeoPoint(lat=place.lat, lon=place.lon)
    if options.lat is None or options.lon is None:
        raise CommandError("--lat and --lon are required unless --place is given")
    return GeoPoint(lat=options.lat, lon=options.lon)


def run(options: argparse.Namespace, app: Application) -> str:
    if not MIN_RADIUS_KM <= options.radius <= MAX_RADIUS_KM:
        raise CommandError(f"--radius must be between {MIN_RADIUS_KM} and {MAX_RADIUS_KM} km")
    center = resolve_center(app, options)
    result = app.session.search(
        center,
        options.radius,
        WeightTriple(sun=options.sun, temp=options.temp, wind=options.wind),
        WindMode.STORM if options.storm else WindMode.CALM,
        SearchMode.REFINE if options.refine else SearchMode.SINGLE_PASS,
    )
    if options.json:
        return json.dumps(result_to_dict(result), ensure_ascii=False, indent=2)
    return format_result(result)


def main(argv: Optional[List[str]] = None, app: Optional[Application] = None) -> int:
    options = build_parser().parse_args(argv)
    try:
        app = app or get_application()
    except ImproperlyConfigured as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 2
    logging.basicConfig(level=app.settings.log_level)
    try:
        output = run(options, app)
    except (CommandError, SolsokerError) as exc:
        print(str(exc), file=sys.stderr)
        return 1
    print(output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
