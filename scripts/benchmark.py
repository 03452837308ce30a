from __future__ import annotations

import time

from terrain_tiles.config import TerrainConfig
from terrain_tiles.grid import generate_grid


def _timeit(label: str, fn) -> float:
    t0 = time.perf_counter()
    fn()
    t1 = time.perf_counter()
    ms = (t1 - t0) * 1000.0
    print(f"{label}: {ms:.2f} ms")
    return ms


def main() -> None:
    """Quick CPU benchmark of full grid generation.

    The default config (2x2 tiles, 513 heightmap, 1024 splat, 512 detail) is
    dominated by the sequential tree walk and the splat steepness lookup.
    """

    small = TerrainConfig(
        tiles_x=2,
        tiles_z=2,
        terrain_size=256,
        heightmap_size=65,
        alphamap_size=128,
        detail_map_size=128,
    )
    _timeit("Grid 2x2, 65 heightmap", lambda: generate_grid(small))
    _timeit("Grid 2x2, default resolutions", lambda: generate_grid(TerrainConfig()))


if __name__ == "__main__":
    main()
