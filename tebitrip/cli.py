#!/usr/bin/env python3
"""
Command line front end for the trip planner.
"""

import argparse
import asyncio
import json
import sys
from datetime import date
from typing import List, Optional

from tebitrip.config.settings import Settings, StorageBackend, get_settings
from tebitrip.core.dependencies import ServiceContainer
from tebitrip.core.exceptions import GenerationError, PersistenceError, TripValidationError
from tebitrip.core.logging import configure_logging
from tebitrip.schemas.trip import Budget, SavedTrip, TravelStyle, TripRouteParams
from tebitrip.services.city_autocomplete import suggest_cities
from tebitrip.services.trip_planner import TripView, parse_trip_request

EXIT_INVALID = 2
EXIT_GENERATION = 3
EXIT_PERSISTENCE = 4
EXIT_RATE_LIMITED = 5


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="tebitrip", description="AI travel itinerary planner")
    parser.add_argument(
        "--storage",
        choices=[b.value for b in StorageBackend],
        default=None,
        help="Persistence backend (overrides config)"
    )
    parser.add_argument(
        "--state-file",
        default=None,
        help="JSON state file for the file backend (overrides config)"
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging"
    )
    sub = parser.add_subparsers(dest="command", required=True)

    plan = sub.add_parser("plan", help="Generate an itinerary")
    plan.add_argument("destination")
    plan.add_argument("--start", required=True, type=date.fromisoformat, help="Start date (YYYY-MM-DD)")
    plan.add_argument("--end", required=True, type=date.fromisoformat, help="End date (YYYY-MM-DD)")
    plan.add_argument("--budget", required=True, choices=[b.value for b in Budget])
    plan.add_argument(
        "--style",
        dest="styles",
        action="append",
        required=True,
        choices=[s.value for s in TravelStyle],
        help="Travel style (repeat for a second one)"
    )
    plan.add_argument("--photos", action="store_true", help="Resolve a photo for every place")
    plan.add_argument("--save", action="store_true", help="Save the generated trip")
    plan.add_argument("--json", action="store_true", help="Print the trip as JSON")

    saved = sub.add_parser("saved", help="Manage saved trips")
    saved_sub = saved.add_subparsers(dest="saved_command", required=True)
    saved_sub.add_parser("list", help="List saved trips")
    show = saved_sub.add_parser("show", help="Show a saved trip")
    show.add_argument("trip_id")
    show.add_argument("--json", action="store_true")
    delete = saved_sub.add_parser("delete", help="Delete a saved trip")
    delete.add_argument("trip_id")

    sub.add_parser("quota", help="Show today's remaining generations")

    cities = sub.add_parser("cities", help="Suggest destinations")
    cities.add_argument("query")

    return parser


def _settings_for(args) -> Settings:
    settings = get_settings().model_copy(deep=True)
    if args.storage:
        settings.storage.backend = StorageBackend(args.storage)
    if args.state_file:
        settings.storage.file_path = args.state_file
    return settings


def _print_trip(view: TripView, photos: Optional[dict] = None) -> None:
    request = view.request
    styles = ", ".join(s.value for s in request.travel_styles)
    print(f"{request.destination}: {request.start_date} to {request.end_date} ({request.budget.value}, {styles})")
    if view.saved_trip:
        print(f"   Saved as {view.saved_trip.id}")

    for day in view.content.itinerary:
        print(f"\nDay {day.day} - {day.date} ({day.location_name})")
        for label, slot in (("Morning", day.morning), ("Afternoon", day.afternoon), ("Evening", day.evening)):
            print(f"  {label}: {slot.place_name} - {slot.description}")
            if photos and photos.get(slot.place_name):
                print(f"     photo: {photos[slot.place_name]}")

    print("\nHotels")
    for hotel in view.content.hotels:
        print(f"  {hotel.name} ({hotel.location}) {hotel.estimated_price}")

    print("\nWeather")
    for w in view.content.weather:
        print(f"  {w.date}: {w.condition} {w.temp_high}/{w.temp_low}F - {w.summary}")

    packing = view.content.packing_list
    print("\nPacking list")
    for label, items in (("Essentials", packing.essentials), ("Clothing", packing.clothing), ("Extras", packing.extras)):
        print(f"  {label}: {', '.join(items)}")


def _print_saved(trips: List[SavedTrip]) -> None:
    if not trips:
        print("No saved trips yet")
        return
    for trip in trips:
        print(f"{trip.id}  {trip.destination}  {trip.start_date} to {trip.end_date}  saved {trip.saved_at:%Y-%m-%d %H:%M}")


async def _run_plan(container: ServiceContainer, args) -> int:
    planner = container.get_planner()
    request = parse_trip_request(
        destination=args.destination,
        start_date=args.start,
        end_date=args.end,
        budget=args.budget,
        travel_styles=args.styles,
    )
    result = await planner.plan(request)
    if not result.accepted:
        print("✗ Daily limit reached. Come back tomorrow!")
        return EXIT_RATE_LIMITED

    view = result.view
    if args.save:
        saved = await planner.save(view.request, view.content)
        view.saved_trip = saved

    if args.json:
        print(json.dumps(view.content.to_wire(), indent=2, ensure_ascii=False))
    else:
        photos = await planner.photos_for(view) if args.photos else None
        _print_trip(view, photos)
        print(f"\n{result.generations_left} generations left today")
    return 0


async def _run_saved(container: ServiceContainer, args) -> int:
    planner = container.get_planner()
    if args.saved_command == "list":
        _print_saved(planner.list_saved())
        return 0

    if args.saved_command == "show":
        saved = planner.saved_trips.get(args.trip_id)
        view = await planner.open(TripRouteParams.from_saved_trip(saved)) if saved else None
        if view is None:
            print(f"✗ No saved trip with id {args.trip_id}")
            return 1
        if args.json:
            print(json.dumps(view.saved_trip.to_wire(), indent=2, ensure_ascii=False))
        else:
            _print_trip(view)
        return 0

    await planner.delete_saved(args.trip_id)
    print(f"✓ Deleted {args.trip_id}")
    return 0


async def _run(args) -> int:
    settings = _settings_for(args)
    configure_logging("DEBUG" if args.debug else settings.log_level.value, settings.log_format)

    async with ServiceContainer(settings=settings) as container:
        try:
            if args.command == "plan":
                return await _run_plan(container, args)
            if args.command == "saved":
                return await _run_saved(container, args)

            quota = await container.get_planner().refresh_quota()
            print(f"{quota['generations_left']} of {quota['max_generations']} generations left today")
            return 0
        except TripValidationError as e:
            print(f"✗ {e.message}")
            return EXIT_INVALID
        except GenerationError as e:
            print("✗ Unable to generate trip, please try again")
            if args.debug:
                print(f"   {e.message}")
            return EXIT_GENERATION
        except PersistenceError as e:
            print(f"✗ {e.message}")
            return EXIT_PERSISTENCE


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point"""
    args = build_parser().parse_args(argv)

    if args.command == "cities":
        for suggestion in suggest_cities(args.query):
            print(suggestion.full_text)
        return 0

    try:
        return asyncio.run(_run(args))
    except PersistenceError as e:
        print(f"✗ {e.message}")
        return EXIT_PERSISTENCE


if __name__ == "__main__":
    sys.exit(main())
