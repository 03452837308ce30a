from .fractal import FractalNoise, NoiseField, channel_noise
from .noise_2d import Perlin2D, fbm2

__all__ = ["FractalNoise", "NoiseField", "Perlin2D", "channel_noise", "fbm2"]
