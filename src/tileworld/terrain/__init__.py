"""Procedural terrain generation package.

This package implements seamless noise-based tile map generation: height
sampling on a 4D torus, band classification, region segmentation, river
carving and rendering bitmasks.
"""

from .config import TerrainConfig, validate_config
from .generator import GenerationResult, generate_terrain
from .hydrology import River, TerminationReason
from .regions import Region, RegionSet, RegionType
from .validation import ValidationResult, validate_regions, validate_rivers

__all__ = [
    "GenerationResult",
    "Region",
    "RegionSet",
    "RegionType",
    "River",
    "TerminationReason",
    "TerrainConfig",
    "ValidationResult",
    "generate_terrain",
    "validate_config",
    "validate_regions",
    "validate_rivers",
]
