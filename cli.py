#!/usr/bin/env python
"""
Command-line interface for osmtile

Usage:
    python cli.py process --input response.json --bounds 51.51 51.50 -0.12 -0.13 --output tile.geojson
    python cli.py process --input response.json --bounds 51.51 51.50 -0.12 -0.13 --seed 42 --summary
"""

import sys
import json
import argparse
from collections import Counter
from dataclasses import replace

from loguru import logger
from pydantic import ValidationError

from osmtile.config import get_config, validate_config
from osmtile.models import Bounds
from osmtile.collectors.osm import OSMCollector, OSMResponseError


def setup_logging(verbose: bool = False):
    """Configure logging"""
    logger.remove()
    level = "DEBUG" if verbose else "INFO"
    logger.add(
        sys.stderr,
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{message}</cyan>",
        level=level
    )


def cmd_process(args):
    """Run the tile pipeline over a saved provider response"""
    setup_logging(args.verbose)

    try:
        with open(args.input, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"Cannot read provider response {args.input}: {e}")
        return 1

    north, south, east, west = args.bounds
    try:
        bounds = Bounds(north=north, south=south, east=east, west=west)
    except ValidationError as e:
        logger.error(f"Invalid bounds: {e}")
        return 1

    config = get_config()
    if args.no_vegetation:
        config = replace(config, procedural_vegetation=False)
    try:
        validate_config(config)
    except ValueError as e:
        logger.error(str(e))
        return 1

    collector = OSMCollector(config)
    try:
        features = collector.process(data, bounds, seed=args.seed)
    except OSMResponseError as e:
        logger.error(f"Failed to process {args.input}: {e}")
        return 1

    collection = collector.to_feature_collection(features)
    if args.output:
        with open(args.output, "w", encoding="utf-8") as f:
            json.dump(collection, f, indent=2, ensure_ascii=False)
        logger.info(f"✓ Wrote {len(features)} features to {args.output}")

    if args.summary or not args.output:
        counts = Counter(feature.type.value for feature in features)
        summary = {
            "input": args.input,
            "bounds": bounds.model_dump(),
            "features": len(features),
            "by_type": dict(sorted(counts.items())),
        }
        print(json.dumps(summary, indent=2))

    return 0


def main():
    parser = argparse.ArgumentParser(
        description="osmtile CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  Clip a saved Overpass response to a tile and write GeoJSON:
    python cli.py process --input response.json --bounds 51.51 51.50 -0.12 -0.13 --output tile.geojson

  Print per-type counts with reproducible vegetation:
    python cli.py process --input response.json --bounds 51.51 51.50 -0.12 -0.13 --seed 7 --summary
        """
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    process_parser = subparsers.add_parser("process", help="Process a saved provider response")
    process_parser.add_argument("--input", "-i", required=True, help="Provider response JSON file")
    process_parser.add_argument(
        "--bounds", "-b", type=float, nargs=4, required=True,
        metavar=("NORTH", "SOUTH", "EAST", "WEST"), help="Tile bounds in degrees"
    )
    process_parser.add_argument("--output", "-o", help="Output GeoJSON file")
    process_parser.add_argument("--seed", type=int, help="Seed for procedural vegetation")
    process_parser.add_argument("--no-vegetation", action="store_true", help="Skip procedural vegetation")
    process_parser.add_argument("--summary", "-s", action="store_true", help="Print summary to stdout")
    process_parser.set_defaults(func=cmd_process)

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return 1

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
