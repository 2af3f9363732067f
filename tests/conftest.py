"""Shared test fixtures for tile map tests."""

from typing import Callable

import numpy as np
import pytest

from tileworld.grid import TileGrid
from tileworld.terrain.classification import classify_heights
from tileworld.terrain.config import (
    ClimateConfig,
    HeightBandConfig,
    NoiseConfig,
    RiverConfig,
    TerrainConfig,
)
from tileworld.terrain.fields import HeightField
from tileworld.tile_types import HeightType


def make_field(data: np.ndarray) -> HeightField:
    """Wrap a sample array as a HeightField with its own min/max."""
    data = np.asarray(data, dtype=np.float64)
    return HeightField(data=data, min=float(data.min()), max=float(data.max()))


def make_grid(data: np.ndarray, config: HeightBandConfig | None = None) -> TileGrid:
    """Classify a sample array into a grid (default bands unless given)."""
    return classify_heights(make_field(data), config or HeightBandConfig())


class ConstantNoise:
    """Noise stand-in that returns the same value everywhere."""

    def __init__(self, value: float = 0.25) -> None:
        self.value = value

    def get(self, x, y, z, w) -> np.ndarray:
        shape = np.broadcast(
            np.asarray(x), np.asarray(y), np.asarray(z), np.asarray(w)
        ).shape
        return np.full(shape, self.value, dtype=np.float64)


@pytest.fixture
def field_factory() -> Callable[[np.ndarray], HeightField]:
    """Build HeightFields from raw arrays."""
    return make_field


@pytest.fixture
def grid_factory() -> Callable[..., TileGrid]:
    """Build classified grids from raw height arrays."""
    return make_grid


@pytest.fixture
def two_band_config() -> HeightBandConfig:
    """Water below 0.5, grass at or above it."""
    return HeightBandConfig(
        bands=[HeightType.DEEP_WATER, HeightType.GRASS],
        thresholds=[0.5],
    )


@pytest.fixture
def flat_noise() -> ConstantNoise:
    """Noise field with no variation."""
    return ConstantNoise()


@pytest.fixture
def small_config() -> TerrainConfig:
    """16x16 map with cheap noise and a few rivers."""
    return TerrainConfig(
        seed=1234,
        width=16,
        height=16,
        noise=NoiseConfig(octaves=3),
        climate=ClimateConfig(
            heat_noise=NoiseConfig(octaves=2),
            moisture_noise=NoiseConfig(octaves=2),
        ),
        rivers=RiverConfig(count=3, min_length=2, min_source_height=0.5),
        validate_output=True,
    )
