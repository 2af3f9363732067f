"""Terrain generation configuration models."""

import math
from enum import Enum

from pydantic import BaseModel, Field

from ..exceptions import ConfigurationError
from ..tile_types import HeightType


class FractalType(str, Enum):
    """How octaves of the basis function are combined."""

    FBM = "fbm"
    RIDGED_MULTI = "ridged_multi"
    BILLOW = "billow"
    MULTI = "multi"


class BasisType(str, Enum):
    """Per-octave noise basis."""

    SIMPLEX = "simplex"
    VALUE = "value"


class InterpolationType(str, Enum):
    """Lattice interpolation for the value basis."""

    NONE = "none"
    LINEAR = "linear"
    CUBIC = "cubic"
    QUINTIC = "quintic"


class SourcePolicy(str, Enum):
    """How river sources are chosen."""

    HIGHEST = "highest"
    RANDOM_HIGH = "random_high"


class NoiseConfig(BaseModel):
    """Noise generation parameters for a single field."""

    fractal_type: FractalType = Field(
        default=FractalType.MULTI, description="Octave combination"
    )
    basis_type: BasisType = Field(default=BasisType.SIMPLEX, description="Noise basis")
    interpolation_type: InterpolationType = Field(
        default=InterpolationType.QUINTIC,
        description="Lattice interpolation (value basis only)",
    )
    octaves: int = Field(default=6, description="Number of octaves")
    frequency: float = Field(default=1.25, description="Base frequency")
    lacunarity: float = Field(default=2.0, description="Frequency multiplier per octave")
    gain: float = Field(default=0.5, description="Amplitude multiplier per octave")


class HeightBandConfig(BaseModel):
    """Height band cut points.

    A normalized height belongs to the first band whose threshold it is
    strictly below; anything at or above the last threshold gets the final
    band.
    """

    bands: list[HeightType] = Field(
        default_factory=lambda: [
            HeightType.DEEP_WATER,
            HeightType.SHALLOW_WATER,
            HeightType.SAND,
            HeightType.GRASS,
            HeightType.FOREST,
            HeightType.ROCK,
            HeightType.SNOW,
        ],
        description="Bands from lowest to highest",
    )
    thresholds: list[float] = Field(
        default_factory=lambda: [0.1, 0.2, 0.3, 0.5, 0.8, 0.9],
        description="Strictly increasing cut points, one fewer than bands",
    )


class ClimateConfig(BaseModel):
    """Heat and moisture fields used for biome classification."""

    enabled: bool = Field(default=True, description="Generate heat/moisture/biomes")
    heat_noise: NoiseConfig = Field(
        default_factory=lambda: NoiseConfig(
            fractal_type=FractalType.FBM, octaves=4, frequency=3.0
        )
    )
    moisture_noise: NoiseConfig = Field(
        default_factory=lambda: NoiseConfig(
            fractal_type=FractalType.BILLOW, octaves=4, frequency=3.0
        )
    )
    heat_thresholds: list[float] = Field(
        default_factory=lambda: [0.05, 0.18, 0.4, 0.6, 0.8],
        description="Cut points for the six heat bands",
    )
    moisture_thresholds: list[float] = Field(
        default_factory=lambda: [0.27, 0.4, 0.6, 0.8, 0.9],
        description="Cut points for the six moisture bands",
    )
    altitude_cooling: float = Field(
        default=0.25, description="Heat removed per unit of normalized land height"
    )


class RiverConfig(BaseModel):
    """River routing and carving parameters."""

    count: int = Field(default=10, description="Number of rivers to carve")
    width_min: int = Field(default=1, description="Minimum river width class (1-4)")
    width_max: int = Field(default=4, description="Maximum river width class (1-4)")
    max_steps: int = Field(
        default=1000, description="Maximum moves when tracing one river"
    )
    min_length: int = Field(default=5, description="Shorter paths are discarded")
    max_attempts: int = Field(
        default=100, description="Maximum sources tried across all rivers"
    )
    source_policy: SourcePolicy = Field(
        default=SourcePolicy.HIGHEST, description="River source selection"
    )
    min_source_height: float = Field(
        default=0.6, description="Minimum normalized height for a source"
    )


class BitmaskConfig(BaseModel):
    """Bitmask annotation options."""

    collidable_only: bool = Field(
        default=False, description="Leave non-collidable tiles at 0"
    )


class TerrainConfig(BaseModel):
    """Complete terrain generation configuration."""

    seed: int = Field(default=42, description="Random seed for reproducibility")
    width: int = Field(default=256, description="Map width in tiles")
    height: int = Field(default=256, description="Map height in tiles")
    coordinate_radius: float = Field(
        default=1.0 / math.pi,
        description="Radius of the circles the map is wrapped onto in noise space",
    )

    noise: NoiseConfig = Field(default_factory=NoiseConfig)
    height_bands: HeightBandConfig = Field(default_factory=HeightBandConfig)
    climate: ClimateConfig = Field(default_factory=ClimateConfig)
    rivers: RiverConfig = Field(default_factory=RiverConfig)
    bitmask: BitmaskConfig = Field(default_factory=BitmaskConfig)

    validate_output: bool = Field(
        default=False, description="Run invariant checks after each stage"
    )


def check_thresholds(thresholds: list[float], band_count: int, name: str) -> None:
    """Check cut points are strictly increasing, inside (0, 1), and sized right.

    Raises:
        ConfigurationError: If any check fails.
    """
    if len(thresholds) != band_count - 1:
        raise ConfigurationError(
            f"{name}: expected {band_count - 1} thresholds for {band_count} bands, "
            f"got {len(thresholds)}"
        )
    for value in thresholds:
        if not 0.0 < value < 1.0:
            raise ConfigurationError(f"{name}: threshold {value} outside (0, 1)")
    for low, high in zip(thresholds, thresholds[1:]):
        if not low < high:
            raise ConfigurationError(
                f"{name}: thresholds must be strictly increasing ({low} >= {high})"
            )


def validate_config(config: TerrainConfig) -> None:
    """Semantic checks that pydantic's type validation cannot express.

    Raises:
        ConfigurationError: On the first invalid setting.
    """
    if config.width <= 0 or config.height <= 0:
        raise ConfigurationError(
            f"Map dimensions must be positive, got {config.width}x{config.height}"
        )
    if config.coordinate_radius <= 0:
        raise ConfigurationError("coordinate_radius must be positive")

    for name, noise in (
        ("noise", config.noise),
        ("climate.heat_noise", config.climate.heat_noise),
        ("climate.moisture_noise", config.climate.moisture_noise),
    ):
        if noise.octaves < 1:
            raise ConfigurationError(f"{name}.octaves must be at least 1")

    bands = config.height_bands.bands
    if not bands:
        raise ConfigurationError("height_bands.bands must not be empty")
    if HeightType.RIVER in bands:
        raise ConfigurationError("RIVER is reserved for carved rivers")
    check_thresholds(config.height_bands.thresholds, len(bands), "height_bands")

    if config.climate.enabled:
        check_thresholds(config.climate.heat_thresholds, 6, "climate.heat")
        check_thresholds(config.climate.moisture_thresholds, 6, "climate.moisture")

    rivers = config.rivers
    if rivers.count < 0:
        raise ConfigurationError("rivers.count must not be negative")
    if not 1 <= rivers.width_min <= rivers.width_max <= 4:
        raise ConfigurationError(
            f"River widths must satisfy 1 <= min <= max <= 4, "
            f"got {rivers.width_min}..{rivers.width_max}"
        )
    if rivers.max_steps < 1:
        raise ConfigurationError("rivers.max_steps must be at least 1")
    if rivers.min_length < 0:
        raise ConfigurationError("rivers.min_length must not be negative")
    if rivers.max_attempts < 0:
        raise ConfigurationError("rivers.max_attempts must not be negative")
    if not 0.0 <= rivers.min_source_height <= 1.0:
        raise ConfigurationError(
            f"rivers.min_source_height must be in [0, 1], "
            f"got {rivers.min_source_height}"
        )
