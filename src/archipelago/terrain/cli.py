"""Command-line interface for map generation."""

import argparse
import logging
import sys
import time
from pathlib import Path

import structlog


def _configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Generate layered island maps with cellular automata"
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Verbose logging"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    generate = subparsers.add_parser("generate", help="Generate a new map")
    generate.add_argument(
        "--config",
        type=str,
        default="default",
        help="Path or name of map TOML config (default: default)",
    )
    generate.add_argument(
        "--seed", type=int, default=None, help="Random seed (overrides config)"
    )
    generate.add_argument(
        "--grid-size",
        type=int,
        default=None,
        help="Number of sub-maps per side, 1-4 (overrides config)",
    )
    generate.add_argument(
        "--output",
        "-o",
        type=str,
        default=None,
        help="Directory to save the map into (optional)",
    )

    info = subparsers.add_parser("info", help="Describe a saved map")
    info.add_argument("path", type=str, help="Path to a saved .npz map")
    info.add_argument(
        "--config",
        type=str,
        default="default",
        help="Config used to number islands (default: default)",
    )

    return parser


def _print_summary(result) -> None:
    from .generator import terrain_stats

    config = result.config
    counts = terrain_stats(result.grid, config.layer_count)

    print(f"Map: {result.width}x{result.height}")
    for index, count in enumerate(counts):
        name = config.layers[index].name if index < config.layer_count else ""
        print(f"  layer {index} {name}: {count:,} ({count / result.grid.size:.1%})")
    print(f"Islands: {len(result.islands)}")
    print(f"Placements: {len(result.placements)}")


def main(argv: list[str] | None = None) -> int:
    """CLI entry point for map generation."""
    args = _build_parser().parse_args(argv)
    _configure_logging(args.verbose)

    # Import here to avoid slow startup for --help
    from pydantic import ValidationError

    from ..config import find_config, load_config
    from ..exceptions import ConfigurationError, PersistenceError
    from .config import MapConfig
    from .generator import MapGenerator
    from .persistence import MapStore
    from .validation import validate_terrain

    try:
        config = load_config(find_config(args.config))
        if args.command == "generate":
            overrides = {}
            if args.seed is not None:
                overrides["seed"] = args.seed
            if args.grid_size is not None:
                overrides["grid_size"] = args.grid_size
            if overrides:
                config = MapConfig.model_validate(
                    {**config.model_dump(), **overrides}
                )
    except (FileNotFoundError, ConfigurationError, ValidationError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    if args.command == "info":
        path = Path(args.path)
        generator = MapGenerator(config, store=MapStore(path.parent))
        try:
            result = generator.load(path)
        except PersistenceError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
        _print_summary(result)
        return 0

    store = MapStore(args.output) if args.output else None
    generator = MapGenerator(config, store=store)

    try:
        start_time = time.time()
        result = generator.generate()
        gen_time = time.time() - start_time
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    print(f"Generation complete in {gen_time:.2f}s")
    _print_summary(result)
    validation = validate_terrain(result.grid, result.partition, config)
    if not validation.passed:
        print(f"Validation failed: {len(validation.errors)} errors")

    if args.output:
        try:
            path = generator.save()
        except PersistenceError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
        print(f"Saved to {path}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
