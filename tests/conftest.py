"""Shared test fixtures for map generation tests."""

import tempfile
from pathlib import Path

import numpy as np
import pytest

from archipelago.terrain.config import (
    IslandConfig,
    LayerConfig,
    MapConfig,
    ObjectPlacementRule,
)


class LowestRollGenerator:
    """Stand-in for np.random.Generator whose integer draws always hit the low bound."""

    def integers(self, low, high=None, size=None):
        if size is None:
            return low
        return np.full(size, low, dtype=np.int64)

    def uniform(self, low=0.0, high=1.0, size=None):
        return 0.0 if size is None else np.zeros(size)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def lowest_roll_rng() -> LowestRollGenerator:
    """Generator that makes every percentage roll succeed."""
    return LowestRollGenerator()


@pytest.fixture
def small_config() -> MapConfig:
    """Seeded three-layer config on a single 30x30 sub-map."""
    return MapConfig(
        seed=7,
        grid_size=1,
        sub_width=30,
        sub_height=30,
        layers=[
            LayerConfig(name="water", saturation=0),
            LayerConfig(name="sand", saturation=50, iterations=5),
            LayerConfig(name="grass", saturation=55, distance=1, iterations=2),
        ],
        islands=IslandConfig(minimum_land_tiles=10, minimum_water_tiles=6),
        objects=[
            ObjectPlacementRule(object="tree", layer=2, saturation=20, distance=1),
            ObjectPlacementRule(object="shell", layer=1, saturation=10, distance=0),
        ],
    )


@pytest.fixture
def tiled_config(small_config: MapConfig) -> MapConfig:
    """small_config tiled as a 2x2 grid of 20x25 sub-maps."""
    return small_config.model_copy(
        update={"grid_size": 2, "sub_width": 20, "sub_height": 25}
    )
