"""CLI entry point

Usage:
    python -m vickrey_housing --preset default --steps 50
    python -m vickrey_housing --preset small_town --seed 3 --export history.json
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from pydantic import ValidationError

from .config.loader import available_presets, load_scenario, preset_path
from .simulation.engine import MarketEngine


def main(argv=None):
    parser = argparse.ArgumentParser(description="Vickrey housing market simulation")
    parser.add_argument("--preset", type=str, default="default",
                        help=f"preset name ({', '.join(available_presets())})")
    parser.add_argument("--preset-dir", type=str, default=None,
                        help="preset directory (overrides --preset)")
    parser.add_argument("--config", type=str, default=None,
                        help="scenario JSON file (overrides --preset/--preset-dir)")
    parser.add_argument("--steps", type=int, default=None,
                        help="number of simulated years")
    parser.add_argument("--seed", type=int, default=None,
                        help="random seed")
    parser.add_argument("--export", type=str, default=None,
                        help="write the statistics history as JSON")
    parser.add_argument("--quiet", action="store_true",
                        help="no progress output; print the JSON summary")
    parser.add_argument("--verbose", action="store_true",
                        help="debug logging (every auction and transaction)")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Resolve scenario source
    if args.config:
        source = Path(args.config)
    elif args.preset_dir:
        source = Path(args.preset_dir)
    else:
        source = preset_path(args.preset)

    try:
        config = load_scenario(source)
        # CLI overrides
        if args.steps is not None:
            config.simulation.num_steps = args.steps
        if args.seed is not None:
            config.simulation.seed = args.seed
    except FileNotFoundError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    except (ValidationError, json.JSONDecodeError) as exc:
        print(f"Error: invalid scenario {source}:\n{exc}", file=sys.stderr)
        return 1

    engine = MarketEngine(config)
    summary = engine.run(progress=not args.quiet)

    if args.export:
        Path(args.export).write_text(engine.history.export_json(), encoding='utf-8')
        if not args.quiet:
            print(f"  History written to {args.export}")

    if args.quiet:
        print(json.dumps(summary, indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
