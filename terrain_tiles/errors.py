from __future__ import annotations


class TerrainConfigError(ValueError):
    """Raised when a configuration mapping or file cannot be turned into a config."""
