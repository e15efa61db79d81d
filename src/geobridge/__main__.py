"""Command-line entry point: ``python -m geobridge``."""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import logging
import sys
from collections.abc import Sequence

from geobridge.client import GeoBridgeClient
from geobridge.config import GeoBridgeConfig
from geobridge.exceptions import GeoBridgeError
from geobridge.location import StaticLocationSource
from geobridge.models.state import ProbeResult


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="geobridge",
        description="Relay a location fix to a fixed-address device on request.",
    )
    parser.add_argument("--host", help="Device host[:port] (default: GEOBRIDGE_DEVICE_HOST or 192.168.4.1)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("status", help="Probe the device status endpoint")

    for name, help_text in (
        ("send", "Send one location fix to the device"),
        ("listen", "Answer device button presses until interrupted"),
    ):
        cmd = sub.add_parser(name, help=help_text)
        cmd.add_argument("--lat", type=float, required=True, help="Latitude in degrees")
        cmd.add_argument("--lon", type=float, required=True, help="Longitude in degrees")
        cmd.add_argument("--accuracy", type=float, default=0.0, help="Accuracy in meters")
    return parser


async def _run(args: argparse.Namespace, config: GeoBridgeConfig) -> int:
    if args.command == "status":
        source = StaticLocationSource(0.0, 0.0)
    else:
        source = StaticLocationSource(args.lat, args.lon, args.accuracy)

    async with GeoBridgeClient(config, source=source) as client:
        client.status_changed.connect(lambda message: print(message, file=sys.stderr))

        if args.command == "status":
            result = await client.check_connection()
            print(result.value)
            return 0 if result is ProbeResult.REACHABLE else 1

        if args.command == "send":
            record = await client.send_location()
            print(f"Location sent at {record.sent_at.isoformat()}")
            return 0

        await client.start()
        # Keep retrying in the background even when the first probe fails.
        client.supervisor.start()
        stop = asyncio.Event()
        await stop.wait()
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.WARNING)

    overrides = {"device_host": args.host} if args.host else {}
    try:
        config = GeoBridgeConfig.from_env(**overrides)
        with contextlib.suppress(KeyboardInterrupt):
            return asyncio.run(_run(args, config))
    except GeoBridgeError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    except ValueError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    return 130


if __name__ == "__main__":
    sys.exit(main())
