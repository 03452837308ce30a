import json

from scripts.generate_tiles import main


def _write_config(path, **overrides):
    params = {
        "tiles_x": 1,
        "tiles_z": 1,
        "terrain_size": 64,
        "heightmap_size": 17,
        "alphamap_size": 16,
        "detail_map_size": 16,
        "tree_spacing": 16,
    }
    params.update(overrides)
    path.write_text(json.dumps(params), encoding="utf-8")
    return path


def test_main_exports_grid(tmp_path):
    cfg = _write_config(tmp_path / "terrain.json")
    out = tmp_path / "out"
    assert main(["--config", str(cfg), "-o", str(out), "--tiles-x", "2", "--seed", "7"]) == 0
    names = {p.name for p in out.iterdir()}
    assert "tile_0_0_height.png" in names
    assert "tile_1_0_trees.json" in names
    assert "world_height.png" in names


def test_main_rejects_unknown_config_key(tmp_path):
    cfg = _write_config(tmp_path / "bad.json", mountains=True)
    assert main(["--config", str(cfg), "-o", str(tmp_path / "out")]) == 2
    assert not (tmp_path / "out").exists()


def test_main_rejects_missing_config(tmp_path):
    assert main(["--config", str(tmp_path / "missing.json"), "-o", str(tmp_path / "out")]) == 2


def test_main_rejects_non_utf8_config(tmp_path):
    cfg = tmp_path / "binary.json"
    cfg.write_bytes(b"\xff\xfe{}")
    assert main(["--config", str(cfg), "-o", str(tmp_path / "out")]) == 2


def test_main_rejects_wrongly_typed_value(tmp_path):
    cfg = _write_config(tmp_path / "typed.json", tiles_x="2")
    assert main(["--config", str(cfg), "-o", str(tmp_path / "out")]) == 2
    assert not (tmp_path / "out").exists()
