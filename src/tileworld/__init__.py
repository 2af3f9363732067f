"""Seamless procedural tile map generation."""

from .exceptions import (
    ConfigurationError,
    PipelineOrderError,
    TileOutOfBoundsError,
    TileWorldError,
)
from .grid import GenerationStage, Tile, TileGrid
from .tile_types import BiomeType, HeatType, HeightType, MoistureType
from .types import DIRECTION_DELTAS, RIVER_DIRECTION_PRIORITY, Direction, Position

__all__ = [
    # Types
    "Direction",
    "Position",
    "DIRECTION_DELTAS",
    "RIVER_DIRECTION_PRIORITY",
    # Bands
    "HeightType",
    "HeatType",
    "MoistureType",
    "BiomeType",
    # Grid
    "TileGrid",
    "Tile",
    "GenerationStage",
    # Exceptions
    "TileWorldError",
    "ConfigurationError",
    "PipelineOrderError",
    "TileOutOfBoundsError",
]
