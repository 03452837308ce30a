from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Iterator

import numpy as np

from perlin.fractal import FractalNoise, channel_noise
from terrain_tiles.alphamap import fill_alpha_map
from terrain_tiles.config import TerrainConfig
from terrain_tiles.details import DetailLayers, fill_detail_layers
from terrain_tiles.heightfield import fill_heights
from terrain_tiles.host import HeightmapTerrain, TerrainHost
from terrain_tiles.prototypes import PrototypeTables, build_prototypes
from terrain_tiles.random_state import SceneRandom
from terrain_tiles.trees import TreeInstance, fill_tree_instances

log = logging.getLogger(__name__)


@dataclass(eq=False)
class Tile:
    x: int
    z: int
    host: TerrainHost
    heights: np.ndarray
    alphamap: np.ndarray
    trees: list[TreeInstance]
    details: DetailLayers
    position: tuple[float, float, float]
    left: Tile | None = field(default=None, repr=False)
    right: Tile | None = field(default=None, repr=False)
    top: Tile | None = field(default=None, repr=False)
    bottom: Tile | None = field(default=None, repr=False)

    @property
    def coords(self) -> tuple[int, int]:
        return (self.x, self.z)


@dataclass(frozen=True)
class ChannelNoises:
    ground: FractalNoise
    tree: FractalNoise
    detail: FractalNoise


def build_noises(config: TerrainConfig) -> ChannelNoises:
    seed = int(config.seed)
    return ChannelNoises(
        ground=channel_noise(
            seed,
            config.ground_frequency,
            octaves=config.octaves,
            amplitude=config.ground_amplitude,
        ),
        tree=channel_noise(seed + 1, config.tree_frequency, octaves=config.octaves),
        detail=channel_noise(seed + 2, config.detail_frequency, octaves=config.octaves),
    )


class TileGrid:
    """Builds the tiles_x by tiles_z terrain and links neighboring tiles.

    Tiles are produced x-major. For each tile the height field is submitted
    first; the splat, tree and detail passes then query that host. Neighbor
    references are only assigned once every tile exists.
    """

    def __init__(
        self,
        config: TerrainConfig,
        *,
        host_factory: Callable[[], TerrainHost] = HeightmapTerrain,
        noises: ChannelNoises | None = None,
        rng: SceneRandom | None = None,
    ):
        self.config = config.sanitized()
        self.host_factory = host_factory
        self.noises = noises or build_noises(self.config)
        self.rng = rng or SceneRandom()
        self.offset = self.config.world_offset
        self.prototypes: PrototypeTables = build_prototypes(self.config)
        self._tiles: dict[tuple[int, int], Tile] = {}

    def generate(self) -> TileGrid:
        c = self.config
        self._tiles = {}
        n = c.heightmap_size
        heights = np.zeros((n, n), dtype=np.float64)

        for x in range(c.tiles_x):
            for z in range(c.tiles_z):
                self._tiles[(x, z)] = self._build_tile(x, z, heights)

        self._link_neighbors()
        log.info(
            "generated %dx%d terrain tiles (%d trees)",
            max(c.tiles_x, 0),
            max(c.tiles_z, 0),
            sum(len(t.trees) for t in self._tiles.values()),
        )
        return self

    def _build_tile(self, x: int, z: int, buf: np.ndarray) -> Tile:
        c = self.config
        fill_heights(
            self.noises.ground,
            tile_x=x,
            tile_z=z,
            resolution=c.heightmap_size,
            terrain_size=c.terrain_size,
            out=buf,
        )

        host = self.host_factory()
        host.set_heights(buf)
        host.set_size(c.terrain_size, c.terrain_height)
        host.set_prototypes(self.prototypes)

        alphamap = fill_alpha_map(host, c.alphamap_size)

        position = (
            float(c.terrain_size * x) + self.offset[0],
            0.0,
            float(c.terrain_size * z) + self.offset[1],
        )
        host.set_render_settings(
            position=position,
            pixel_map_error=c.pixel_map_error,
            base_map_distance=c.base_map_distance,
            cast_shadows=c.cast_shadows,
        )

        trees = fill_tree_instances(
            host, c, self.noises.tree, self.rng, tile_x=x, tile_z=z
        )
        details = fill_detail_layers(
            host, c, self.noises.detail, self.rng, tile_x=x, tile_z=z
        )

        return Tile(
            x=x,
            z=z,
            host=host,
            heights=buf.copy(),
            alphamap=alphamap,
            trees=trees,
            details=details,
            position=position,
        )

    def _link_neighbors(self) -> None:
        for (x, z), tile in self._tiles.items():
            tile.left = self._tiles.get((x - 1, z))
            tile.right = self._tiles.get((x + 1, z))
            tile.bottom = self._tiles.get((x, z - 1))
            tile.top = self._tiles.get((x, z + 1))
            tile.host.set_neighbors(
                tile.left.host if tile.left else None,
                tile.top.host if tile.top else None,
                tile.right.host if tile.right else None,
                tile.bottom.host if tile.bottom else None,
            )

    def tile(self, x: int, z: int) -> Tile:
        return self._tiles[(int(x), int(z))]

    def __iter__(self) -> Iterator[Tile]:
        return iter(self._tiles.values())

    def __len__(self) -> int:
        return len(self._tiles)


def generate_grid(config: TerrainConfig, **kwargs) -> TileGrid:
    return TileGrid(config, **kwargs).generate()
