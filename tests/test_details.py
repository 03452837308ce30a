from __future__ import annotations

import numpy as np

from perlin.fractal import channel_noise
from terrain_tiles.config import TerrainConfig
from terrain_tiles.details import fill_detail_layers, pick_layer, scatter_details
from terrain_tiles.host import HeightmapTerrain
from terrain_tiles.random_state import SCATTER_SEED, SceneRandom

SIZE = 256.0


def _host(heights: np.ndarray, height: float = 256.0) -> HeightmapTerrain:
    host = HeightmapTerrain()
    host.set_heights(heights)
    host.set_size(SIZE, height)
    return host


def _hilly_host(n: int = 33) -> HeightmapTerrain:
    rng = np.random.default_rng(11)
    return _host(rng.random((n, n)) * 0.08)


def _reference_walk(host, noise, *, tile_x, tile_z, resolution):
    # Straight cell-by-cell walk, one draw per eligible cell.
    rng = SceneRandom()
    rng.init_state(SCATTER_SEED)
    d = resolution
    ratio = SIZE / d
    layers = [np.zeros((d, d), dtype=np.int32) for _ in range(3)]
    for x in range(d):
        for z in range(d):
            if host.steepness(x / (d - 1), z / (d - 1)) / 90.0 >= 0.5:
                continue
            wx = (x + tile_x * (d - 1)) * ratio
            wz = (z + tile_z * (d - 1)) * ratio
            if noise.sample2D(wx, wz) > 0.0:
                r = rng.value()
                k = 0 if r < 0.33 else (1 if r < 0.66 else 2)
                layers[k][z, x] = 1
    return layers


def test_values_consume_stream_like_single_draws() -> None:
    a = SceneRandom()
    b = SceneRandom()
    batch = a.values(50)
    single = np.array([b.value() for _ in range(50)])
    assert np.array_equal(batch, single)


def test_pick_layer_thirds() -> None:
    out = pick_layer(np.array([0.0, 0.329, 0.33, 0.659, 0.66, 0.999]))
    assert out.tolist() == [0, 0, 1, 1, 2, 2]


def test_matches_sequential_walk() -> None:
    host = _hilly_host()
    noise = channel_noise(2, 0.02)
    got = scatter_details(
        host, noise, SceneRandom(), tile_x=1, tile_z=0, resolution=32, terrain_size=SIZE
    )
    want = _reference_walk(host, noise, tile_x=1, tile_z=0, resolution=32)
    for k in range(3):
        assert np.array_equal(got.layers[k], want[k])


def test_layers_are_mutually_exclusive() -> None:
    details = scatter_details(
        _hilly_host(),
        channel_noise(5, 0.02),
        SceneRandom(),
        tile_x=0,
        tile_z=0,
        resolution=64,
        terrain_size=SIZE,
    )
    total = np.sum(np.stack(details.layers), axis=0)
    assert set(np.unique(total).tolist()) <= {0, 1}
    assert np.array_equal(details.occupied(), total == 1)
    assert all(int(layer.sum()) > 0 for layer in details.layers)


def test_no_detail_on_steep_cells() -> None:
    host = _hilly_host()
    details = scatter_details(
        host, channel_noise(5, 0.02), SceneRandom(), tile_x=0, tile_z=0, resolution=64, terrain_size=SIZE
    )
    u = np.linspace(0.0, 1.0, 64)
    nx, nz = np.meshgrid(u, u)
    frac = host.steepness(nx, nz) / 90.0
    assert np.any(frac >= 0.5)
    assert not np.any(details.occupied() & (frac >= 0.5))


def test_negative_noise_leaves_layers_empty() -> None:
    class Negative:
        amplitude = 1.0

        def sample2D(self, x, y):
            return -np.ones(np.broadcast(np.asarray(x), np.asarray(y)).shape)

    details = scatter_details(
        _host(np.zeros((9, 9))), Negative(), SceneRandom(), tile_x=0, tile_z=0, resolution=16, terrain_size=SIZE
    )
    assert details.resolution == 16
    assert not details.occupied().any()


def test_fill_detail_layers_pushes_to_host() -> None:
    host = _host(np.zeros((17, 17)))
    config = TerrainConfig(terrain_size=int(SIZE), detail_map_size=16, detail_resolution_per_patch=8)
    details = fill_detail_layers(host, config, channel_noise(2, 0.02), SceneRandom(), tile_x=0, tile_z=0)
    assert host.detail_resolution == 16
    assert host.detail_resolution_per_patch == 8
    for k in range(3):
        assert np.array_equal(host.detail_layers[k], details.layers[k])
    assert host.detail_settings["waving_grass_strength"] == 0.4
    assert host.detail_settings["detail_object_density"] == 4.0
    assert host.detail_settings["detail_object_distance"] == 400


def _choices(details) -> np.ndarray:
    # Layer index of each occupied cell, in x-major visiting order.
    stacked = np.stack(details.layers).transpose(0, 2, 1)
    return np.argmax(stacked, axis=0)[details.occupied().T]


def test_reseeds_a_used_generator() -> None:
    host = _hilly_host()
    noise = channel_noise(2, 0.02)
    kw = dict(tile_x=0, tile_z=0, resolution=32, terrain_size=SIZE)

    used = SceneRandom()
    used.values(1000)
    got = scatter_details(host, noise, used, **kw)
    want = scatter_details(host, noise, SceneRandom(), **kw)
    for k in range(3):
        assert np.array_equal(got.layers[k], want.layers[k])


def test_neighboring_tiles_repeat_layer_choices() -> None:
    host = _hilly_host()
    noise = channel_noise(2, 0.02)
    rng = SceneRandom()
    a = scatter_details(host, noise, rng, tile_x=0, tile_z=0, resolution=32, terrain_size=SIZE)
    b = scatter_details(host, noise, rng, tile_x=1, tile_z=0, resolution=32, terrain_size=SIZE)

    # Both tiles restart the same stream: the k-th eligible cell of each
    # takes the k-th draw.
    ca = _choices(a)
    cb = _choices(b)
    n = min(ca.size, cb.size)
    assert n > 0
    assert np.array_equal(ca[:n], cb[:n])


def test_matching_eligibility_gives_identical_layers() -> None:
    class Positive:
        amplitude = 1.0

        def sample2D(self, x, y):
            return np.ones(np.broadcast(np.asarray(x), np.asarray(y)).shape)

    host = _host(np.full((17, 17), 0.1))
    rng = SceneRandom()
    a = scatter_details(host, Positive(), rng, tile_x=0, tile_z=0, resolution=16, terrain_size=SIZE)
    b = scatter_details(host, Positive(), rng, tile_x=1, tile_z=0, resolution=16, terrain_size=SIZE)
    assert a.occupied().all()
    for k in range(3):
        assert np.array_equal(a.layers[k], b.layers[k])
