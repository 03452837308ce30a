from __future__ import annotations

from terrain_tiles.alphamap import compute_alpha_map, fill_alpha_map
from terrain_tiles.config import TerrainConfig, closest_power_of_two, load_config
from terrain_tiles.details import DetailLayers, fill_detail_layers, scatter_details
from terrain_tiles.errors import TerrainConfigError
from terrain_tiles.grid import Tile, TileGrid, build_noises, generate_grid
from terrain_tiles.heightfield import fill_heights
from terrain_tiles.host import HeightmapTerrain, TerrainHost
from terrain_tiles.prototypes import build_prototypes
from terrain_tiles.random_state import SCATTER_SEED, SceneRandom
from terrain_tiles.trees import TreeInstance, fill_tree_instances, scatter_trees

__all__ = [
    "DetailLayers",
    "HeightmapTerrain",
    "SCATTER_SEED",
    "SceneRandom",
    "TerrainConfig",
    "TerrainConfigError",
    "TerrainHost",
    "Tile",
    "TileGrid",
    "TreeInstance",
    "build_noises",
    "build_prototypes",
    "closest_power_of_two",
    "compute_alpha_map",
    "fill_alpha_map",
    "fill_detail_layers",
    "fill_heights",
    "fill_tree_instances",
    "generate_grid",
    "load_config",
    "scatter_details",
    "scatter_trees",
]
