from __future__ import annotations

from typing import Protocol

import numpy as np

from .core import fade, grad2_from_hash, lerp, make_permutation


class Noise2D(Protocol):
    def noise(self, x: np.ndarray, y: np.ndarray) -> np.ndarray:  # pragma: no cover
        ...


class Perlin2D:
    """Gradient noise on the unit lattice, scaled by a base frequency.

    Inputs broadcast like any numpy expression; output is roughly in [-1, 1].
    """

    def __init__(self, *, seed: int = 0, frequency: float = 1.0):
        self.seed = int(seed)
        self.frequency = float(frequency)
        self.perm = make_permutation(self.seed)

    def noise(self, x: np.ndarray, y: np.ndarray) -> np.ndarray:
        x = np.asarray(x, dtype=np.float64) * self.frequency
        y = np.asarray(y, dtype=np.float64) * self.frequency

        fx = np.floor(x)
        fy = np.floor(y)
        xi0 = fx.astype(np.int64) & 255
        yi0 = fy.astype(np.int64) & 255
        xi1 = (xi0 + 1) & 255
        yi1 = (yi0 + 1) & 255

        xf = x - fx
        yf = y - fy
        u = fade(xf)
        v = fade(yf)

        p = self.perm
        aa = p[p[xi0] + yi0]
        ab = p[p[xi0] + yi1]
        ba = p[p[xi1] + yi0]
        bb = p[p[xi1] + yi1]

        gxaa, gyaa = grad2_from_hash(aa)
        gxab, gyab = grad2_from_hash(ab)
        gxba, gyba = grad2_from_hash(ba)
        gxbb, gybb = grad2_from_hash(bb)

        d00 = gxaa * xf + gyaa * yf
        d01 = gxab * xf + gyab * (yf - 1.0)
        d10 = gxba * (xf - 1.0) + gyba * yf
        d11 = gxbb * (xf - 1.0) + gybb * (yf - 1.0)

        return lerp(lerp(d00, d10, u), lerp(d01, d11, u), v)


def fbm2(
    noise: Noise2D,
    x: np.ndarray,
    y: np.ndarray,
    *,
    octaves: int = 4,
    lacunarity: float = 2.0,
    gain: float = 0.5,
    amplitude: float = 1.0,
) -> np.ndarray:
    """Sum of octaves, first octave weighted by `amplitude`.

    The sum is not renormalized: the result spans roughly
    `[-amplitude * 2, amplitude * 2]` for the default gain.
    """

    x = np.asarray(x, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)

    amp = float(amplitude)
    freq = 1.0
    total = np.zeros(np.broadcast(x, y).shape, dtype=np.float64)

    for _ in range(max(int(octaves), 1)):
        total += amp * noise.noise(x * freq, y * freq)
        amp *= float(gain)
        freq *= float(lacunarity)

    return total
