from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np

from perlin.fractal import NoiseField
from terrain_tiles.config import WHITE, Color, TerrainConfig
from terrain_tiles.host import TerrainHost
from terrain_tiles.random_state import SCATTER_SEED, SceneRandom

log = logging.getLogger(__name__)

TREE_PROTOTYPE_COUNT = 3
MAX_STEEPNESS_FRAC = 0.5
MAX_HEIGHT_FRAC = 0.4


@dataclass(frozen=True)
class TreeInstance:
    # (normalized x, world height, normalized z) within the owning tile.
    position: tuple[float, float, float]
    prototype_index: int
    width_scale: float = 1.0
    height_scale: float = 1.0
    color: Color = WHITE
    lightmap_color: Color = WHITE


def scatter_trees(
    host: TerrainHost,
    noise: NoiseField,
    rng: SceneRandom,
    *,
    tile_x: int,
    tile_z: int,
    terrain_size: int,
    terrain_height: float,
    spacing: int,
) -> list[TreeInstance]:
    """Place trees on a jittered `spacing` grid over one tile.

    Each grid point draws an x then a z jitter. Points on slopes of 45
    degrees or more are skipped; the rest become a tree when the tree noise
    at the (unjittered) world point is positive and the ground is below
    40% of the terrain height. Accepted trees draw their prototype last.
    """

    rng.init_state(SCATTER_SEED)

    size = int(terrain_size)
    step = int(spacing)
    if step <= 0 or size <= 1:
        return []

    unit = 1.0 / float(size - 1)
    coords = np.arange(0, size, step, dtype=np.float64)

    # The noise lookup ignores jitter, so the whole lattice is sampled at once.
    wx, wz = np.meshgrid(
        coords + float(int(tile_x) * (size - 1)),
        coords + float(int(tile_z) * (size - 1)),
        indexing="ij",
    )
    noise_grid = np.asarray(noise.sample2D(wx, wz), dtype=np.float64)
    max_height = float(terrain_height) * MAX_HEIGHT_FRAC

    trees: list[TreeInstance] = []
    for i, x in enumerate(coords):
        for j, z in enumerate(coords):
            offset_x = rng.value() * unit * step
            offset_z = rng.value() * unit * step
            nx = x * unit + offset_x
            nz = z * unit + offset_z

            frac = host.steepness(nx, nz) / 90.0
            if frac >= MAX_STEEPNESS_FRAC:
                continue

            ht = host.interpolated_height(nx, nz)
            if noise_grid[i, j] > 0.0 and ht < max_height:
                trees.append(
                    TreeInstance(
                        position=(float(nx), float(ht), float(nz)),
                        prototype_index=rng.range(0, TREE_PROTOTYPE_COUNT),
                    )
                )
    return trees


def fill_tree_instances(
    host: TerrainHost,
    config: TerrainConfig,
    noise: NoiseField,
    rng: SceneRandom,
    *,
    tile_x: int,
    tile_z: int,
) -> list[TreeInstance]:
    trees = scatter_trees(
        host,
        noise,
        rng,
        tile_x=tile_x,
        tile_z=tile_z,
        terrain_size=config.terrain_size,
        terrain_height=config.terrain_height,
        spacing=config.tree_spacing,
    )
    host.add_tree_instances(trees)
    host.set_tree_settings(
        distance=config.tree_distance,
        billboard_distance=config.tree_billboard_distance,
        cross_fade_length=config.tree_cross_fade_length,
        maximum_full_lod_count=config.tree_maximum_full_lod_count,
    )
    log.debug("tile (%d, %d): %d trees", tile_x, tile_z, len(trees))
    return trees
