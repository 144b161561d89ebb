"""
Command line driver for the space data agent.

:copyright: (c) 2025 by Meir Miyara.
:license: MPL-2.0, see LICENSE for more details.
"""

import argparse
import asyncio
import json
import logging
import sys
from typing import Any, Dict, Optional, Sequence

from space_data_agent import __version__
from space_data_agent.aggregator import Fetcher
from space_data_agent.client import HttpFetcher
from space_data_agent.config import Config
from space_data_agent.entrypoints import SpaceDataAgent
from space_data_agent.errors import ConfigError, InvalidInputError, UpstreamError

_LOG = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_UPSTREAM = 1
EXIT_INPUT = 2
EXIT_CONFIG = 3


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="space-data-agent",
        description="Aggregated space data from NASA and Open-Notify.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--config", help="Path to a JSON configuration file")
    parser.add_argument("--log-level", help="Logging level (default from config)")

    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("overview", help="Humans in space and today's APOD title")

    apod = commands.add_parser("apod", help="Astronomy Picture of the Day")
    apod.add_argument("--date", help="Date in YYYY-MM-DD format (defaults to today)")

    commands.add_parser("astronauts", help="Humans in space grouped by spacecraft")

    asteroids = commands.add_parser("asteroids", help="Near-Earth objects in a date range")
    asteroids.add_argument("--start-date", help="Start date YYYY-MM-DD (defaults to today)")
    asteroids.add_argument("--end-date", help="End date YYYY-MM-DD (defaults to start + 3 days)")

    commands.add_parser("iss", help="Current ISS location")

    report = commands.add_parser("report", help="Combined space briefing")
    report.add_argument(
        "--no-asteroids",
        dest="include_asteroids",
        action="store_false",
        help="Skip near-Earth objects",
    )

    return parser


def entrypoint_kwargs(args: argparse.Namespace) -> Dict[str, Any]:
    if args.command == "apod":
        return {"apod_date": args.date}
    if args.command == "asteroids":
        return {"start_date": args.start_date, "end_date": args.end_date}
    if args.command == "report":
        return {"include_asteroids": args.include_asteroids}
    return {}


def setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s | %(levelname)8s | %(name)s | %(message)s",
        stream=sys.stderr,
    )
    logging.getLogger("aiohttp").setLevel(logging.WARNING)


async def run(args: argparse.Namespace, config: Config, fetcher: Optional[Fetcher] = None) -> Dict[str, Any]:
    """Run the selected entrypoint, creating an HTTP fetcher unless one is given."""
    if fetcher is not None:
        return await SpaceDataAgent(config, fetcher).call(args.command, **entrypoint_kwargs(args))

    async with HttpFetcher.from_config(config) as http_fetcher:
        agent = SpaceDataAgent(config, http_fetcher)
        return await agent.call(args.command, **entrypoint_kwargs(args))


def main(argv: Optional[Sequence[str]] = None, fetcher: Optional[Fetcher] = None) -> int:
    args = build_parser().parse_args(argv)
    config = Config(args.config)
    setup_logging(args.log_level or config.log_level)

    try:
        output = asyncio.run(run(args, config, fetcher))
    except InvalidInputError as ex:
        print(json.dumps({"error": str(ex)}), file=sys.stderr)
        return EXIT_INPUT
    except ConfigError as ex:
        _LOG.error("Invalid configuration: %s", ex)
        print(json.dumps({"error": "invalid configuration", "detail": str(ex)}), file=sys.stderr)
        return EXIT_CONFIG
    except UpstreamError as ex:
        _LOG.error("%s failed: %s", args.command, ex)
        print(json.dumps({"error": "upstream failure", "failures": ex.to_dict()}), file=sys.stderr)
        return EXIT_UPSTREAM

    print(json.dumps(output, indent=2))
    return EXIT_OK
