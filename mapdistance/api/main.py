"""
One-shot command-line entrypoint for MapDistance.

Architectural role:
- Runs exactly one submission through `DistanceShell` and exits.
- Suited for scripts: optional JSON output and meaningful exit codes.

Exit codes:
- 0: success.
- 1: adapter failure (not found / request error).
- 2: validation failure (empty origin or destination).

Location handling:
- `--lat/--lng` bias the request directly and skip device lookup.
- `--no-locate` disables the startup lookup entirely.
"""

import argparse
import asyncio
import json
import sys

from mapdistance.api.cli import configure_logging, render_state
from mapdistance.core.adapter import DistanceAdapter
from mapdistance.core.errors import ValidationError
from mapdistance.core.shell import DistanceShell
from mapdistance.core.types import DeviceCoordinate, ResultFormat
from mapdistance.llm.provider_config import load_settings
from mapdistance.location.geolocation import lookup_device_coordinate


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Grounded distance estimate between two places")
    parser.add_argument("origin", help="Origin place name, e.g. 'Curitiba, PR'")
    parser.add_argument("destination", help="Destination place name")
    parser.add_argument(
        "--format",
        choices=[item.value for item in ResultFormat],
        default=None,
        help="Result format (defaults to RESULT_FORMAT)",
    )
    parser.add_argument("--lat", type=float, default=None, help="Latitude bias")
    parser.add_argument("--lng", type=float, default=None, help="Longitude bias")
    parser.add_argument("--no-locate", action="store_true", help="Skip device location lookup")
    parser.add_argument("--json", action="store_true", help="Print the result as JSON")
    return parser


async def run(args, settings, adapter):
    """Start the shell (location lookup) and submit one query."""
    if args.lat is not None and args.lng is not None:
        shell = DistanceShell(adapter, coordinate=DeviceCoordinate(lat=args.lat, lng=args.lng))
    elif args.no_locate:
        shell = DistanceShell(adapter)
    else:
        shell = DistanceShell(adapter, locate=lambda: lookup_device_coordinate(settings))

    await shell.start()
    return await shell.submit(args.origin, args.destination)


def main(argv=None, settings=None, adapter=None) -> int:
    args = build_parser().parse_args(argv)
    settings = settings or load_settings()
    configure_logging(settings.log_level)

    adapter = adapter or DistanceAdapter.from_settings(settings, result_format=args.format)
    if args.format and adapter.result_format.value != args.format:
        adapter = adapter.with_format(args.format)

    state = asyncio.run(run(args, settings, adapter))

    if args.json:
        if state.error is not None:
            print(json.dumps({"error": state.error.message, "kind": state.error.kind}, ensure_ascii=False))
        else:
            print(json.dumps(state.result.to_dict(), ensure_ascii=False))
    else:
        print(render_state(state))

    if isinstance(state.error, ValidationError):
        return 2
    if state.error is not None:
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
