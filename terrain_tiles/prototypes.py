from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from terrain_tiles.config import Color, TerrainConfig


@dataclass(frozen=True)
class SplatPrototype:
    texture: Any
    tile_size: tuple[float, float]


@dataclass(frozen=True)
class TreePrototype:
    prefab: Any


@dataclass(frozen=True)
class DetailPrototype:
    texture: Any
    healthy_color: Color
    dry_color: Color
    render_mode: str = "grass_billboard"


@dataclass(frozen=True)
class PrototypeTables:
    splats: tuple[SplatPrototype, ...]
    trees: tuple[TreePrototype, ...]
    details: tuple[DetailPrototype, ...]


def build_prototypes(config: TerrainConfig) -> PrototypeTables:
    # Two splats (steep, flat), three trees, three detail layers.
    s0, s1 = config.splat_textures
    splats = (
        SplatPrototype(s0, (config.splat_tile_size0, config.splat_tile_size0)),
        SplatPrototype(s1, (config.splat_tile_size1, config.splat_tile_size1)),
    )
    trees = tuple(TreePrototype(prefab) for prefab in config.tree_prefabs)
    details = tuple(
        DetailPrototype(tex, config.grass_healthy_color, config.grass_dry_color)
        for tex in config.detail_textures
    )
    return PrototypeTables(splats=splats, trees=trees, details=details)
