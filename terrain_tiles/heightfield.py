from __future__ import annotations

import numpy as np

from perlin.fractal import NoiseField


def tile_world_axis(resolution: int, tile: int, ratio: float) -> np.ndarray:
    """World coordinates of one axis of a tile's sample grid.

    Consecutive tiles advance by `resolution - 1` samples, so the last sample
    of tile `t` and the first of tile `t + 1` land on the same coordinate.
    """

    n = int(resolution)
    return (np.arange(n, dtype=np.float64) + float(int(tile) * (n - 1))) * float(ratio)


def fill_heights(
    noise: NoiseField,
    *,
    tile_x: int,
    tile_z: int,
    resolution: int,
    terrain_size: float,
    out: np.ndarray | None = None,
) -> np.ndarray:
    """Sample one tile's elevation grid, indexed [z, x].

    elevation = noise.amplitude + noise.sample2D(world_x, world_z), with
    `ratio = terrain_size / resolution`. When `out` is given it is filled in
    place and returned.
    """

    n = int(resolution)
    ratio = float(terrain_size) / float(n)

    xs = tile_world_axis(n, tile_x, ratio)
    zs = tile_world_axis(n, tile_z, ratio)
    wx, wz = np.meshgrid(xs, zs)

    values = float(noise.amplitude) + np.asarray(noise.sample2D(wx, wz), dtype=np.float64)

    if out is None:
        return values
    if out.shape != (n, n):
        raise ValueError(f"out must have shape ({n}, {n})")
    out[...] = values
    return out
