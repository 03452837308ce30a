from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, Sequence

import numpy as np

if TYPE_CHECKING:
    from terrain_tiles.prototypes import PrototypeTables
    from terrain_tiles.trees import TreeInstance


class TerrainHost(Protocol):
    """The per-tile terrain object the generation passes talk to.

    Queries take normalized tile coordinates in [0, 1] and answer against the
    height field most recently passed to `set_heights`.
    """

    heightmap_resolution: int

    def set_heights(self, heights: np.ndarray) -> None: ...

    def set_size(self, size: float, height: float) -> None: ...

    def set_prototypes(self, prototypes: PrototypeTables) -> None: ...

    def steepness(self, nx, nz): ...

    def interpolated_height(self, nx, nz): ...

    def set_alphamaps(self, resolution: int, alphamaps: np.ndarray) -> None: ...

    def add_tree_instances(self, instances: Sequence[TreeInstance]) -> None: ...

    def set_tree_settings(
        self,
        *,
        distance: float,
        billboard_distance: float,
        cross_fade_length: float,
        maximum_full_lod_count: int,
    ) -> None: ...

    def set_detail_resolution(self, resolution: int, resolution_per_patch: int) -> None: ...

    def set_detail_layer(self, index: int, layer: np.ndarray) -> None: ...

    def set_detail_settings(self, **settings: Any) -> None: ...

    def set_render_settings(self, **settings: Any) -> None: ...

    def set_neighbors(
        self,
        left: TerrainHost | None,
        top: TerrainHost | None,
        right: TerrainHost | None,
        bottom: TerrainHost | None,
    ) -> None: ...


def _bilinear(grid: np.ndarray, nx, nz):
    # grid is indexed [z, x]; coordinates outside [0, 1] clamp to the border.
    n = grid.shape[0]
    fx = np.clip(np.asarray(nx, dtype=np.float64), 0.0, 1.0) * (n - 1)
    fz = np.clip(np.asarray(nz, dtype=np.float64), 0.0, 1.0) * (n - 1)

    x0 = np.minimum(np.floor(fx).astype(np.int64), max(n - 2, 0))
    z0 = np.minimum(np.floor(fz).astype(np.int64), max(n - 2, 0))
    x1 = np.minimum(x0 + 1, n - 1)
    z1 = np.minimum(z0 + 1, n - 1)
    tx = fx - x0
    tz = fz - z0

    h0 = grid[z0, x0] + (grid[z0, x1] - grid[z0, x0]) * tx
    h1 = grid[z1, x0] + (grid[z1, x1] - grid[z1, x0]) * tx
    out = h0 + (h1 - h0) * tz
    if out.ndim == 0:
        return float(out)
    return out


class HeightmapTerrain:
    """In-memory terrain host backed by a square normalized height grid.

    Heights are stored in [0, 1] and scaled by the terrain height on query.
    Steepness is the surface angle in degrees, taken from the finite
    difference gradient of the scaled field and interpolated bilinearly.
    """

    def __init__(self) -> None:
        self.heightmap_resolution = 0
        self.size = 1.0
        self.height = 1.0
        self._heights = np.zeros((0, 0), dtype=np.float64)
        self._steepness: np.ndarray | None = None
        self._scaled: np.ndarray | None = None

        self.prototypes: PrototypeTables | None = None
        self.alphamap_resolution = 0
        self.alphamaps: np.ndarray | None = None
        self.tree_instances: list[TreeInstance] = []
        self.tree_settings: dict[str, float] = {}
        self.detail_resolution = 0
        self.detail_resolution_per_patch = 0
        self.detail_layers: dict[int, np.ndarray] = {}
        self.detail_settings: dict[str, Any] = {}
        self.render_settings: dict[str, Any] = {}
        self.neighbors: tuple[Any, Any, Any, Any] = (None, None, None, None)

    @property
    def heights(self) -> np.ndarray:
        """Normalized heights, indexed [z, x]."""
        return self._heights

    def set_heights(self, heights: np.ndarray) -> None:
        h = np.asarray(heights, dtype=np.float64)
        if h.ndim != 2 or h.shape[0] != h.shape[1]:
            raise ValueError("heights must be a square 2D array")
        # Copy: the synthesizer reuses its buffer for the next tile.
        self._heights = np.clip(h, 0.0, 1.0)
        self.heightmap_resolution = int(h.shape[0])
        self._steepness = None
        self._scaled = None

    def set_size(self, size: float, height: float) -> None:
        self.size = float(size)
        self.height = float(height)
        self._steepness = None
        self._scaled = None

    def set_prototypes(self, prototypes: PrototypeTables) -> None:
        self.prototypes = prototypes

    def _scaled_heights(self) -> np.ndarray:
        if self._scaled is None:
            self._scaled = self._heights * self.height
        return self._scaled

    def _steepness_grid(self) -> np.ndarray:
        if self._steepness is None:
            n = self.heightmap_resolution
            if n < 2:
                self._steepness = np.zeros((max(n, 1), max(n, 1)), dtype=np.float64)
            else:
                spacing = self.size / float(n - 1)
                dz, dx = np.gradient(self._scaled_heights(), spacing)
                self._steepness = np.degrees(np.arctan(np.hypot(dx, dz)))
        return self._steepness

    def steepness(self, nx, nz):
        """Surface angle in degrees (0 flat, 90 vertical)."""
        return _bilinear(self._steepness_grid(), nx, nz)

    def interpolated_height(self, nx, nz):
        """Height in world units at normalized (nx, nz)."""
        return _bilinear(self._scaled_heights(), nx, nz)

    def set_alphamaps(self, resolution: int, alphamaps: np.ndarray) -> None:
        self.alphamap_resolution = int(resolution)
        self.alphamaps = np.asarray(alphamaps, dtype=np.float64)

    def add_tree_instances(self, instances: Sequence[TreeInstance]) -> None:
        self.tree_instances.extend(instances)

    def set_tree_settings(
        self,
        *,
        distance: float,
        billboard_distance: float,
        cross_fade_length: float,
        maximum_full_lod_count: int,
    ) -> None:
        self.tree_settings = {
            "distance": float(distance),
            "billboard_distance": float(billboard_distance),
            "cross_fade_length": float(cross_fade_length),
            "maximum_full_lod_count": int(maximum_full_lod_count),
        }

    def set_detail_resolution(self, resolution: int, resolution_per_patch: int) -> None:
        self.detail_resolution = int(resolution)
        self.detail_resolution_per_patch = int(resolution_per_patch)

    def set_detail_layer(self, index: int, layer: np.ndarray) -> None:
        self.detail_layers[int(index)] = np.asarray(layer)

    def set_detail_settings(self, **settings: Any) -> None:
        self.detail_settings.update(settings)

    def set_render_settings(self, **settings: Any) -> None:
        self.render_settings.update(settings)

    def set_neighbors(self, left, top, right, bottom) -> None:
        self.neighbors = (left, top, right, bottom)
