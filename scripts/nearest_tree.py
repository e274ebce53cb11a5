#!/usr/bin/env python3
"""List DUST trees and report the one nearest to you.

Position sourcing:
- ``--lat``/``--lon``: fixed position
- ``--ip``: approximate position from IP geolocation
- neither: no geolocation capability (no nearest tree is reported)

Configuration is read from ``DUST_*`` environment variables, see
``pydust.config.DustConfig.from_env``.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from pydust import DustClient, DustConfig, Location, StaticGeolocationProvider, planar_distance  # noqa: E402
from pydust.geolocation import GeolocationProvider  # noqa: E402


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--base-url", help="Override DUST_BASE_URL")
    parser.add_argument("--lat", type=float, help="Your latitude in degrees")
    parser.add_argument("--lon", type=float, help="Your longitude in degrees")
    parser.add_argument("--ip", action="store_true", help="Locate via IP geolocation")
    parser.add_argument("--json", action="store_true", help="Print machine-readable output")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    args = parser.parse_args(argv)
    if (args.lat is None) != (args.lon is None):
        parser.error("--lat and --lon must be given together")
    if args.lat is not None and args.ip:
        parser.error("--ip cannot be combined with --lat/--lon")
    return args


async def _run(args: argparse.Namespace) -> int:
    overrides = {"base_url": args.base_url.rstrip("/")} if args.base_url else {}
    config = DustConfig.from_env(**overrides)

    provider: GeolocationProvider | None = None
    if args.lat is not None:
        provider = StaticGeolocationProvider(Location(latitude=args.lat, longitude=args.lon))

    async with DustClient(config, geolocation=provider, ip_geolocation=args.ip) as client:
        client.mount()
        await client.wait_settled()

        trees = client.trees.trees
        where = client.location.state
        closest = client.closest_tree

        if args.json:
            print(
                json.dumps(
                    {
                        "trees": [tree.model_dump(exclude={"raw"}) for tree in trees],
                        "locatable": where.locatable,
                        "location": where.location.model_dump() if where.locatable else None,
                        "closest": closest.model_dump(exclude={"raw"}) if closest is not None else None,
                    },
                    indent=2,
                )
            )
            return 0

        print(f"{len(trees)} tree(s):")
        for tree in trees:
            marker = "*" if closest is not None and tree.id == closest.id else " "
            if tree.location is None:
                print(f" {marker} [{tree.id}] {tree.name} (no position)")
            else:
                print(f" {marker} [{tree.id}] {tree.name} ({tree.location.latitude:.5f}, {tree.location.longitude:.5f})")

        if not where.locatable:
            print("Position unknown; cannot pick the nearest tree.")
        elif closest is None or closest.location is None:
            print("No trees with a known position.")
        else:
            offset = planar_distance(closest.location, where.location)
            print(f"Nearest: {closest.name} [{closest.id}] ({offset:.5f}° away, planar)")
    return 0


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    return asyncio.run(_run(args))


if __name__ == "__main__":
    raise SystemExit(main())
