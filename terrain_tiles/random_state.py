from __future__ import annotations

import numpy as np

# Every scatter pass restarts from this state, on every tile.
SCATTER_SEED = 0


class SceneRandom:
    """Reseedable uniform generator shared by the scatter passes.

    Draws come from a numpy PCG64 stream. `values(n)` consumes the stream
    exactly as `n` successive `value()` calls would.
    """

    def __init__(self, seed: int = SCATTER_SEED):
        self._rng = np.random.default_rng(int(seed))

    def init_state(self, seed: int) -> None:
        self._rng = np.random.default_rng(int(seed))

    def value(self) -> float:
        """Uniform float in [0, 1)."""
        return float(self._rng.random())

    def values(self, n: int) -> np.ndarray:
        return self._rng.random(int(n))

    def range(self, low: int, high: int) -> int:
        """Uniform int in [low, high), built from a single `value()` draw."""
        span = int(high) - int(low)
        if span <= 0:
            return int(low)
        return int(low) + int(self.value() * span)
