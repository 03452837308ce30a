from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path
from typing import Any, Mapping

from terrain_tiles.errors import TerrainConfigError

log = logging.getLogger(__name__)

Color = tuple[float, float, float, float]

WHITE: Color = (1.0, 1.0, 1.0, 1.0)

MIN_DETAIL_RESOLUTION_PER_PATCH = 8


def closest_power_of_two(value: int) -> int:
    """Nearest power of two; an exact tie between two powers rounds up."""

    v = int(value)
    if v <= 1:
        return 1
    upper = 1 << (v - 1).bit_length()
    lower = upper >> 1
    if v - lower < upper - v:
        return lower
    return upper


@dataclass(frozen=True)
class TerrainConfig:
    seed: int = 0

    # Noise.
    ground_frequency: float = 0.001
    tree_frequency: float = 0.005
    detail_frequency: float = 0.01
    octaves: int = 6
    ground_amplitude: float = 0.1

    # Tile grid.
    tiles_x: int = 2
    tiles_z: int = 2
    pixel_map_error: float = 6.0
    base_map_distance: float = 1000.0
    cast_shadows: bool = False

    # Per-tile maps.
    heightmap_size: int = 513
    alphamap_size: int = 1024
    terrain_size: int = 2048
    terrain_height: int = 512
    detail_map_size: int = 512

    # Trees.
    tree_spacing: int = 32
    tree_distance: float = 2000.0
    tree_billboard_distance: float = 400.0
    tree_cross_fade_length: float = 20.0
    tree_maximum_full_lod_count: int = 400

    # Detail layers.
    detail_object_distance: int = 400
    detail_object_density: float = 4.0
    detail_resolution_per_patch: int = 32
    waving_grass_strength: float = 0.4
    waving_grass_amount: float = 0.2
    waving_grass_speed: float = 0.4
    waving_grass_tint: Color = WHITE
    grass_healthy_color: Color = WHITE
    grass_dry_color: Color = WHITE

    # Prototype handles. Opaque to generation; passed through to the host.
    splat_textures: tuple[Any, Any] = (None, None)
    splat_tile_size0: float = 10.0
    splat_tile_size1: float = 2.0
    tree_prefabs: tuple[Any, Any, Any] = (None, None, None)
    detail_textures: tuple[Any, Any, Any] = (None, None, None)

    def sanitized(self) -> TerrainConfig:
        """Coerce map resolutions to what the host accepts.

        Heightmaps become 2^n + 1, alpha and detail maps 2^n, and the detail
        patch resolution is raised to at least 8. Never raises.
        """

        out = replace(
            self,
            heightmap_size=closest_power_of_two(self.heightmap_size) + 1,
            alphamap_size=closest_power_of_two(self.alphamap_size),
            detail_map_size=closest_power_of_two(self.detail_map_size),
            detail_resolution_per_patch=max(
                int(self.detail_resolution_per_patch), MIN_DETAIL_RESOLUTION_PER_PATCH
            ),
        )
        if out != self:
            log.debug(
                "sanitized resolutions: height %d->%d alpha %d->%d detail %d->%d",
                self.heightmap_size,
                out.heightmap_size,
                self.alphamap_size,
                out.alphamap_size,
                self.detail_map_size,
                out.detail_map_size,
            )
        return out

    @property
    def world_offset(self) -> tuple[float, float]:
        """(x, z) shift that centers the whole tile grid on the origin."""
        return (
            -float(self.terrain_size) * float(self.tiles_x) * 0.5,
            -float(self.terrain_size) * float(self.tiles_z) * 0.5,
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> TerrainConfig:
        if not isinstance(data, Mapping):
            raise TerrainConfigError("config must be a mapping")

        known = {f.name: f for f in fields(cls)}
        unknown = sorted(set(data) - set(known))
        if unknown:
            raise TerrainConfigError(f"unknown config keys: {', '.join(unknown)}")

        kwargs: dict[str, Any] = {}
        for key, value in data.items():
            kwargs[key] = _coerce_field(key, getattr(cls, key), value)
        return cls(**kwargs)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _coerce_field(key: str, default: Any, value: Any) -> Any:
    """Check a loaded value against the type of the field's default."""

    if isinstance(default, bool):
        if not isinstance(value, bool):
            raise TerrainConfigError(f"{key} must be a boolean, got {value!r}")
        return value
    if isinstance(default, int):
        if not isinstance(value, int) or isinstance(value, bool):
            raise TerrainConfigError(f"{key} must be an integer, got {value!r}")
        return value
    if isinstance(default, float):
        if not _is_number(value):
            raise TerrainConfigError(f"{key} must be a number, got {value!r}")
        return float(value)
    if isinstance(default, tuple):
        # JSON has no tuples; colors and handle tables arrive as lists.
        if not isinstance(value, (list, tuple)):
            raise TerrainConfigError(f"{key} must be a list, got {value!r}")
        if len(value) != len(default):
            raise TerrainConfigError(
                f"{key} expects {len(default)} values, got {len(value)}"
            )
        # Colors are numeric; prototype handles are opaque.
        if all(isinstance(d, float) for d in default):
            if not all(_is_number(v) for v in value):
                raise TerrainConfigError(f"{key} must hold numbers, got {value!r}")
            return tuple(float(v) for v in value)
        return tuple(value)
    return value


def load_config(path: str | Path) -> TerrainConfig:
    p = Path(path)
    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise TerrainConfigError(f"{p}: not a UTF-8 JSON file ({exc})") from exc
    log.info("loaded terrain config from %s", p)
    return TerrainConfig.from_dict(data)
