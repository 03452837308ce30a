from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np

from perlin.fractal import NoiseField
from terrain_tiles.alphamap import normalized_axis
from terrain_tiles.config import TerrainConfig
from terrain_tiles.heightfield import tile_world_axis
from terrain_tiles.host import TerrainHost
from terrain_tiles.random_state import SCATTER_SEED, SceneRandom

log = logging.getLogger(__name__)

DETAIL_LAYER_COUNT = 3
MAX_STEEPNESS_FRAC = 0.5
# Upper bounds of the first two thirds of [0, 1); the rest goes to layer 2.
LAYER_THRESHOLDS = (0.33, 0.66)


@dataclass(frozen=True)
class DetailLayers:
    """Three (D, D) occupancy grids indexed [z, x]; a cell is set in at most one."""

    layers: tuple[np.ndarray, np.ndarray, np.ndarray]

    @property
    def resolution(self) -> int:
        return int(self.layers[0].shape[0])

    def occupied(self) -> np.ndarray:
        return np.sum(np.stack(self.layers), axis=0) > 0


def pick_layer(r: np.ndarray) -> np.ndarray:
    r = np.asarray(r, dtype=np.float64)
    lo, hi = LAYER_THRESHOLDS
    return np.where(r < lo, 0, np.where(r < hi, 1, 2)).astype(np.int64)


def scatter_details(
    host: TerrainHost,
    noise: NoiseField,
    rng: SceneRandom,
    *,
    tile_x: int,
    tile_z: int,
    resolution: int,
    terrain_size: float,
) -> DetailLayers:
    """Assign each eligible detail cell to exactly one of three layers.

    A cell is eligible when its slope is under 45 degrees and the detail
    noise at its world position is positive. Cells are visited x-major and
    each eligible cell consumes one uniform draw, in visiting order.
    """

    rng.init_state(SCATTER_SEED)

    d = int(resolution)
    layers = tuple(np.zeros((d, d), dtype=np.int32) for _ in range(DETAIL_LAYER_COUNT))
    if d <= 0:
        return DetailLayers(layers)

    u = normalized_axis(d)
    nx, nz = np.meshgrid(u, u)
    frac = np.asarray(host.steepness(nx, nz), dtype=np.float64) / 90.0

    ratio = float(terrain_size) / float(d)
    wx, wz = np.meshgrid(
        tile_world_axis(d, tile_x, ratio), tile_world_axis(d, tile_z, ratio)
    )
    sample = np.asarray(noise.sample2D(wx, wz), dtype=np.float64)

    eligible = (frac < MAX_STEEPNESS_FRAC) & (sample > 0.0)

    # Transposed nonzero yields (x, z) pairs in x-outer, z-inner order.
    xi, zi = np.nonzero(eligible.T)
    choice = pick_layer(rng.values(xi.size))
    for k in range(DETAIL_LAYER_COUNT):
        sel = choice == k
        layers[k][zi[sel], xi[sel]] = 1

    return DetailLayers(layers)


def fill_detail_layers(
    host: TerrainHost,
    config: TerrainConfig,
    noise: NoiseField,
    rng: SceneRandom,
    *,
    tile_x: int,
    tile_z: int,
) -> DetailLayers:
    details = scatter_details(
        host,
        noise,
        rng,
        tile_x=tile_x,
        tile_z=tile_z,
        resolution=config.detail_map_size,
        terrain_size=config.terrain_size,
    )

    host.set_detail_settings(
        waving_grass_strength=config.waving_grass_strength,
        waving_grass_amount=config.waving_grass_amount,
        waving_grass_speed=config.waving_grass_speed,
        waving_grass_tint=config.waving_grass_tint,
        detail_object_density=config.detail_object_density,
        detail_object_distance=config.detail_object_distance,
    )
    host.set_detail_resolution(config.detail_map_size, config.detail_resolution_per_patch)
    for index, layer in enumerate(details.layers):
        host.set_detail_layer(index, layer)

    log.debug(
        "tile (%d, %d): detail cells %s",
        tile_x,
        tile_z,
        [int(layer.sum()) for layer in details.layers],
    )
    return details
