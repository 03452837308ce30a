from __future__ import annotations

import json

import pytest

from terrain_tiles.config import TerrainConfig, closest_power_of_two, load_config
from terrain_tiles.errors import TerrainConfigError


@pytest.mark.parametrize(
    "value,expected",
    [(0, 1), (1, 1), (3, 4), (64, 64), (65, 64), (96, 128), (500, 512), (513, 512), (1000, 1024)],
)
def test_closest_power_of_two(value: int, expected: int) -> None:
    assert closest_power_of_two(value) == expected


def test_sanitized_resolutions() -> None:
    c = TerrainConfig(
        heightmap_size=500,
        alphamap_size=1000,
        detail_map_size=300,
        detail_resolution_per_patch=4,
    ).sanitized()
    assert c.heightmap_size == 513
    assert c.alphamap_size == 1024
    assert c.detail_map_size == 256
    assert c.detail_resolution_per_patch == 8


def test_sanitized_keeps_valid_config() -> None:
    c = TerrainConfig()
    assert c.sanitized() == c
    assert c.sanitized().sanitized() == c


def test_world_offset_centers_grid() -> None:
    c = TerrainConfig(tiles_x=3, tiles_z=2, terrain_size=100)
    assert c.world_offset == (-150.0, -100.0)


def test_from_dict_converts_lists_to_tuples() -> None:
    c = TerrainConfig.from_dict({"seed": 4, "waving_grass_tint": [0.5, 0.5, 0.5, 1.0]})
    assert c.seed == 4
    assert c.waving_grass_tint == (0.5, 0.5, 0.5, 1.0)


def test_from_dict_rejects_unknown_keys() -> None:
    with pytest.raises(TerrainConfigError, match="unknown config keys: bogus"):
        TerrainConfig.from_dict({"seed": 1, "bogus": 2})


def test_from_dict_rejects_wrong_tuple_length() -> None:
    with pytest.raises(TerrainConfigError):
        TerrainConfig.from_dict({"tree_prefabs": ["a", "b"]})


def test_to_dict_round_trips() -> None:
    c = TerrainConfig(seed=9, tiles_x=3)
    assert TerrainConfig.from_dict(json.loads(json.dumps(c.to_dict()))) == c


def test_load_config(tmp_path) -> None:
    p = tmp_path / "terrain.json"
    p.write_text(json.dumps({"seed": 7, "tiles_x": 1}), encoding="utf-8")
    c = load_config(p)
    assert c.seed == 7
    assert c.tiles_x == 1


def test_load_config_invalid_json(tmp_path) -> None:
    p = tmp_path / "broken.json"
    p.write_text("{seed: ", encoding="utf-8")
    with pytest.raises(TerrainConfigError):
        load_config(p)


def test_load_config_requires_object(tmp_path) -> None:
    p = tmp_path / "list.json"
    p.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(TerrainConfigError):
        load_config(p)


@pytest.mark.parametrize(
    "data",
    [
        {"tiles_x": "2"},
        {"tiles_x": 2.0},
        {"seed": True},
        {"ground_frequency": "0.01"},
        {"cast_shadows": 0},
        {"waving_grass_tint": ["white", 1.0, 1.0, 1.0]},
        {"tree_prefabs": "oak"},
    ],
)
def test_from_dict_rejects_wrong_value_types(data) -> None:
    with pytest.raises(TerrainConfigError):
        TerrainConfig.from_dict(data)


def test_from_dict_accepts_ints_for_float_fields() -> None:
    c = TerrainConfig.from_dict({"tree_distance": 1500, "grass_dry_color": [1, 0, 0, 1]})
    assert c.tree_distance == 1500.0
    assert isinstance(c.tree_distance, float)
    assert c.grass_dry_color == (1.0, 0.0, 0.0, 1.0)


def test_load_config_rejects_non_utf8(tmp_path) -> None:
    p = tmp_path / "binary.json"
    p.write_bytes(b"\xff\xfe{}")
    with pytest.raises(TerrainConfigError):
        load_config(p)
