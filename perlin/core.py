from __future__ import annotations

import numpy as np


def fade(t: np.ndarray) -> np.ndarray:
    """Quintic smoothstep (6t^5 - 15t^4 + 10t^3) used between lattice corners."""
    return t * t * t * (t * (t * 6.0 - 15.0) + 10.0)


def lerp(a: np.ndarray, b: np.ndarray, t: np.ndarray) -> np.ndarray:
    return a + t * (b - a)


def make_permutation(seed: int) -> np.ndarray:
    """Seeded 0..255 shuffle, doubled so `p[p[i] + j]` never wraps."""
    rng = np.random.default_rng(int(seed) & 0xFFFFFFFF)
    p = rng.permutation(256).astype(np.int32)
    return np.concatenate([p, p])


# Eight unit gradients: the four axes and the four diagonals.
GRAD2 = np.array(
    [
        [1.0, 0.0],
        [-1.0, 0.0],
        [0.0, 1.0],
        [0.0, -1.0],
        [1.0, 1.0],
        [-1.0, 1.0],
        [1.0, -1.0],
        [-1.0, -1.0],
    ],
    dtype=np.float64,
)
GRAD2 /= np.linalg.norm(GRAD2, axis=1, keepdims=True)


def grad2_from_hash(h: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    g = GRAD2[(h & 7).astype(np.int32)]
    return g[..., 0], g[..., 1]
