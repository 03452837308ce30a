from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path

from terrain_tiles.config import TerrainConfig, load_config
from terrain_tiles.errors import TerrainConfigError
from terrain_tiles.grid import generate_grid
from viz.export import export_grid

log = logging.getLogger("generate_tiles")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Generate a tiled terrain with trees and detail layers and export it."
    )
    parser.add_argument("--config", type=Path, help="JSON file with TerrainConfig fields")
    parser.add_argument("-o", "--out", type=Path, default=Path("terrain_out"))
    parser.add_argument("--seed", type=int, help="override the config seed")
    parser.add_argument("--tiles-x", type=int, help="override the tile count on x")
    parser.add_argument("--tiles-z", type=int, help="override the tile count on z")
    parser.add_argument("-v", "--verbose", action="store_true", help="log every tile pass")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        config = load_config(args.config) if args.config else TerrainConfig()
    except (OSError, TerrainConfigError) as exc:
        log.error("could not load config: %s", exc)
        return 2

    overrides = {
        "seed": args.seed,
        "tiles_x": args.tiles_x,
        "tiles_z": args.tiles_z,
    }
    config = replace(config, **{k: v for k, v in overrides.items() if v is not None})

    grid = generate_grid(config)
    export_grid(grid, args.out)
    return 0


if __name__ == "__main__":
    sys.exit(main())
