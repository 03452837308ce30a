from __future__ import annotations

import numpy as np

from terrain_tiles.host import TerrainHost

STEEP_CHANNEL = 0
FLAT_CHANNEL = 1


def normalized_axis(resolution: int) -> np.ndarray:
    n = int(resolution)
    if n < 2:
        return np.zeros(max(n, 0), dtype=np.float64)
    return np.arange(n, dtype=np.float64) / float(n - 1)


def compute_alpha_map(host: TerrainHost, resolution: int) -> np.ndarray:
    """Two-channel splat weights from surface steepness, shape (A, A, 2).

    Indexed [z, x, channel]. Channel 0 is angle / 90 (steep texture),
    channel 1 its complement (flat texture), so every cell sums to 1.
    """

    u = normalized_axis(resolution)
    nx, nz = np.meshgrid(u, u)
    frac = np.asarray(host.steepness(nx, nz), dtype=np.float64) / 90.0

    alpha = np.empty((u.size, u.size, 2), dtype=np.float64)
    alpha[..., STEEP_CHANNEL] = frac
    alpha[..., FLAT_CHANNEL] = 1.0 - frac
    return alpha


def fill_alpha_map(host: TerrainHost, resolution: int) -> np.ndarray:
    alpha = compute_alpha_map(host, resolution)
    host.set_alphamaps(int(resolution), alpha)
    return alpha
