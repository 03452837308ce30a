from __future__ import annotations

import io
import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Sequence

import numpy as np
from PIL import Image

if TYPE_CHECKING:
    from terrain_tiles.details import DetailLayers
    from terrain_tiles.grid import TileGrid
    from terrain_tiles.trees import TreeInstance

log = logging.getLogger(__name__)


def _png(img: np.ndarray) -> bytes:
    # uint8 HxW saves as L, HxWx3 as RGB.
    out = io.BytesIO()
    Image.fromarray(img).save(out, format="PNG")
    return out.getvalue()


def array_to_png_bytes(z: np.ndarray) -> bytes:
    """Convert a 2D array to an 8-bit grayscale PNG.

    Values are min/max normalized to [0, 255]; a constant array becomes all
    zeros. Row 0 of the array is the top image row.
    """

    z = np.asarray(z, dtype=np.float64)
    if z.ndim != 2:
        raise ValueError("expected a 2D array")

    zmin = float(np.min(z))
    zmax = float(np.max(z))
    if zmax == zmin:
        img = np.zeros(z.shape, dtype=np.uint8)
    else:
        img = np.clip((z - zmin) / (zmax - zmin) * 255.0, 0.0, 255.0).astype(np.uint8)
    return _png(img)


def alphamap_to_png_bytes(alpha: np.ndarray) -> bytes:
    """Splat weights as RGB: steep channel in red, flat channel in green."""

    a = np.asarray(alpha, dtype=np.float64)
    if a.ndim != 3 or a.shape[2] != 2:
        raise ValueError("alphamap must be HxWx2")

    rgb = np.zeros((a.shape[0], a.shape[1], 3), dtype=np.uint8)
    rgb[..., :2] = np.clip(a * 255.0, 0.0, 255.0).astype(np.uint8)
    return _png(rgb)


def detail_layers_to_png_bytes(details: DetailLayers) -> bytes:
    """Layer 0/1/2 occupancy as red/green/blue."""

    stacked = np.stack([np.asarray(layer) for layer in details.layers], axis=-1)
    rgb = (stacked > 0).astype(np.uint8) * np.uint8(255)
    return _png(rgb)


def array_to_npy_bytes(z: np.ndarray) -> bytes:
    out = io.BytesIO()
    np.save(out, np.asarray(z))
    return out.getvalue()


def heightmap_to_obj_bytes(
    z: np.ndarray, *, size: float = 1.0, z_scale: float = 1.0
) -> bytes:
    """Triangulated OBJ of a [row, col] height grid spanning `size` world units."""

    z = np.asarray(z, dtype=np.float64)
    if z.ndim != 2:
        raise ValueError("expected a 2D array")
    h, w = z.shape
    if h < 2 or w < 2:
        raise ValueError("heightmap must be at least 2x2")

    sx = float(size) / float(w - 1)
    sz = float(size) / float(h - 1)
    z_scale = float(z_scale)

    def vid(c: int, r: int) -> int:
        return r * w + c + 1

    lines = [f"# terrain tile heightmap {w}x{h}\n"]
    for r in range(h):
        for c in range(w):
            lines.append(f"v {c * sx:.6f} {z[r, c] * z_scale:.6f} {r * sz:.6f}\n")

    for r in range(h - 1):
        for c in range(w - 1):
            v00 = vid(c, r)
            v10 = vid(c + 1, r)
            v01 = vid(c, r + 1)
            v11 = vid(c + 1, r + 1)
            lines.append(f"f {v00} {v01} {v10}\n")
            lines.append(f"f {v10} {v01} {v11}\n")

    return "".join(lines).encode("utf-8")


def trees_to_json_bytes(trees: Sequence[TreeInstance]) -> bytes:
    items = [
        {
            "position": list(t.position),
            "prototype_index": int(t.prototype_index),
            "width_scale": float(t.width_scale),
            "height_scale": float(t.height_scale),
        }
        for t in trees
    ]
    return json.dumps(items, indent=2).encode("utf-8")


def stitched_heights(grid: TileGrid) -> np.ndarray:
    """One [z, x] mosaic of every tile's heights.

    Neighboring tiles share their border samples, so each tile after the
    first along an axis contributes `resolution - 1` new rows or columns.
    """

    c = grid.config
    n = c.heightmap_size
    tx = max(int(c.tiles_x), 0)
    tz = max(int(c.tiles_z), 0)
    if tx == 0 or tz == 0:
        return np.zeros((0, 0), dtype=np.float64)

    out = np.zeros((tz * (n - 1) + 1, tx * (n - 1) + 1), dtype=np.float64)
    for tile in grid:
        r0 = tile.z * (n - 1)
        c0 = tile.x * (n - 1)
        out[r0 : r0 + n, c0 : c0 + n] = tile.heights
    return out


def export_grid(grid: TileGrid, out_dir: str | Path) -> list[Path]:
    """Write per-tile heightmap/splat/detail PNGs, heights .npy and trees .json."""

    root = Path(out_dir)
    root.mkdir(parents=True, exist_ok=True)
    written: list[Path] = []

    def write(name: str, data: bytes) -> None:
        p = root / name
        p.write_bytes(data)
        written.append(p)

    for tile in grid:
        stem = f"tile_{tile.x}_{tile.z}"
        write(f"{stem}_height.png", array_to_png_bytes(tile.heights))
        write(f"{stem}_height.npy", array_to_npy_bytes(tile.heights))
        write(f"{stem}_splat.png", alphamap_to_png_bytes(tile.alphamap))
        write(f"{stem}_detail.png", detail_layers_to_png_bytes(tile.details))
        write(f"{stem}_trees.json", trees_to_json_bytes(tile.trees))

    if len(grid):
        write("world_height.png", array_to_png_bytes(stitched_heights(grid)))

    log.info("exported %d files to %s", len(written), root)
    return written
