from __future__ import annotations

import argparse
import asyncio
from collections.abc import Sequence

from devkit.observability import configure_logging, configure_otel

from locator.config import LocatorSettings, load_locator_settings
from locator.controller import FacilityLocatorController
from locator.dependencies import build_locator_controller, build_map_container
from locator.errors import InvalidCoordinate
from locator.schemas import LocatorSnapshotView


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="nearby-care-locator", description="Find hospitals and clinics nearby.")
    parser.add_argument("--select", metavar="FACILITY_ID", help="select a facility and centre the map on it")
    parser.add_argument("--navigate", metavar="FACILITY_ID", help="open directions to a facility")
    parser.add_argument("--emergency", action="store_true", help="emergency mode: open the dialer")
    parser.add_argument("--no-map", action="store_true", help="skip writing the map file")
    return parser.parse_args(argv)


async def run_session(controller: FacilityLocatorController, args: argparse.Namespace, render_map: bool) -> str:
    await controller.mount()
    try:
        if args.emergency:
            controller.call_emergency()
        if args.select:
            controller.select_facility(args.select)
        if args.navigate:
            facility = next((f for f in controller.snapshot().facilities if f.id == args.navigate), None)
            if facility is None:
                raise SystemExit(f"unknown facility id: {args.navigate}")
            controller.navigate_to(facility)
        snapshot = controller.snapshot()
        if render_map and snapshot.map_available:
            controller.render_map()
        return LocatorSnapshotView.from_snapshot(snapshot).model_dump_json(indent=2)
    finally:
        controller.unmount()


def main(argv: Sequence[str] | None = None, settings: LocatorSettings | None = None) -> None:
    args = _parse_args(argv)
    settings = settings or load_locator_settings()
    configure_logging(settings.LOG_LEVEL)
    if settings.OTEL_ENABLED:
        configure_otel(service_name=settings.SERVICE_NAME)
    render_map = not args.no_map
    controller = build_locator_controller(
        settings,
        map_container=build_map_container(settings) if render_map else None,
        emergency_mode=args.emergency,
        with_map=render_map,
    )
    try:
        output = asyncio.run(run_session(controller, args, render_map=render_map))
    except InvalidCoordinate as exc:
        raise SystemExit(f"cannot navigate: {exc}") from exc
    print(output)


if __name__ == "__main__":
    main()
