from __future__ import annotations

from typing import Protocol, overload

import numpy as np

from .noise_2d import Perlin2D, fbm2


class NoiseField(Protocol):
    """What the terrain passes need from a noise source."""

    amplitude: float

    def sample2D(self, x, y):  # pragma: no cover
        ...


class FractalNoise:
    """Octave sum of a frequency-scaled Perlin lattice.

    `sample2D` returns a plain float for scalar inputs and an array when
    given arrays, so the same field serves per-point queries and whole grids.
    """

    def __init__(
        self,
        noise: Perlin2D,
        *,
        octaves: int = 6,
        lacunarity: float = 2.0,
        gain: float = 0.5,
        amplitude: float = 1.0,
    ):
        self.noise = noise
        self.octaves = int(octaves)
        self.lacunarity = float(lacunarity)
        self.gain = float(gain)
        self.amplitude = float(amplitude)

    @overload
    def sample2D(self, x: float, y: float) -> float: ...

    @overload
    def sample2D(self, x: np.ndarray, y: np.ndarray) -> np.ndarray: ...

    def sample2D(self, x, y):
        out = fbm2(
            self.noise,
            x,
            y,
            octaves=self.octaves,
            lacunarity=self.lacunarity,
            gain=self.gain,
            amplitude=self.amplitude,
        )
        if out.ndim == 0:
            return float(out)
        return out


def channel_noise(
    seed: int, frequency: float, *, octaves: int = 6, amplitude: float = 1.0
) -> FractalNoise:
    return FractalNoise(
        Perlin2D(seed=int(seed), frequency=float(frequency)),
        octaves=int(octaves),
        amplitude=float(amplitude),
    )
