"""Coherent 4D noise for seamless map sampling.

Provides fBm, ridged multifractal, billow and multiplicative fractals over
either an OpenSimplex or a hashed value-lattice basis.
"""

import itertools
from typing import Callable, Iterator

import numpy as np
from numpy.typing import ArrayLike, NDArray
from opensimplex import OpenSimplex

from .config import BasisType, FractalType, InterpolationType, NoiseConfig

Basis = Callable[..., NDArray[np.float64]]


def _fade_none(t: NDArray[np.float64]) -> NDArray[np.float64]:
    return np.zeros_like(t)


def _fade_linear(t: NDArray[np.float64]) -> NDArray[np.float64]:
    return t


def _fade_cubic(t: NDArray[np.float64]) -> NDArray[np.float64]:
    return t * t * (3.0 - 2.0 * t)


def _fade_quintic(t: NDArray[np.float64]) -> NDArray[np.float64]:
    return t * t * t * (t * (t * 6.0 - 15.0) + 10.0)


_FADES: dict[InterpolationType, Callable[[NDArray[np.float64]], NDArray[np.float64]]] = {
    InterpolationType.NONE: _fade_none,
    InterpolationType.LINEAR: _fade_linear,
    InterpolationType.CUBIC: _fade_cubic,
    InterpolationType.QUINTIC: _fade_quintic,
}


class ValueNoise4D:
    """Hashed value noise on a 4D integer lattice.

    Each lattice point gets a pseudo-random value in [-1, 1] from a seeded
    permutation table; points between lattice corners are blended with the
    configured interpolation curve.
    """

    def __init__(self, seed: int, interpolation: InterpolationType) -> None:
        rng = np.random.default_rng(seed)
        self._perm = rng.permutation(256).astype(np.int64)
        self._values = rng.uniform(-1.0, 1.0, 256)
        self._fade = _FADES[interpolation]

    def __call__(
        self,
        x: NDArray[np.float64],
        y: NDArray[np.float64],
        z: NDArray[np.float64],
        w: NDArray[np.float64],
    ) -> NDArray[np.float64]:
        coords = (x, y, z, w)
        cells = [np.floor(c).astype(np.int64) for c in coords]
        fracs = [self._fade(c - cell) for c, cell in zip(coords, cells)]

        result = np.zeros(np.shape(x), dtype=np.float64)
        for corner in itertools.product((0, 1), repeat=4):
            weight = np.ones(np.shape(x), dtype=np.float64)
            for frac, bit in zip(fracs, corner):
                weight = weight * (frac if bit else 1.0 - frac)
            lattice = [cell + bit for cell, bit in zip(cells, corner)]
            result += weight * self._lattice_value(*lattice)
        return result

    def _lattice_value(
        self,
        xi: NDArray[np.int64],
        yi: NDArray[np.int64],
        zi: NDArray[np.int64],
        wi: NDArray[np.int64],
    ) -> NDArray[np.float64]:
        perm = self._perm
        h = perm[xi & 255]
        h = perm[(h + yi) & 255]
        h = perm[(h + zi) & 255]
        h = perm[(h + wi) & 255]
        return self._values[h]


def _simplex_basis(seed: int) -> Basis:
    """Vectorised OpenSimplex 4D sampler returning values in [-1, 1]."""
    generator = OpenSimplex(seed=seed)
    return np.vectorize(generator.noise4, otypes=[np.float64])


def make_basis(
    basis_type: BasisType,
    seed: int,
    interpolation: InterpolationType = InterpolationType.QUINTIC,
) -> Basis:
    """Build a single-octave basis function.

    Interpolation only applies to the value basis; simplex noise has no
    lattice blend to configure.
    """
    if basis_type == BasisType.SIMPLEX:
        return _simplex_basis(seed)
    return ValueNoise4D(seed, interpolation)


class NoiseField:
    """Fractal noise function over 4D space.

    Each octave gets its own basis seeded with ``seed + i * 1000``, so a
    given (config, seed) pair always produces the same field.
    """

    def __init__(self, config: NoiseConfig, seed: int) -> None:
        self.config = config
        self.seed = seed
        self._octaves = [
            make_basis(config.basis_type, seed + i * 1000, config.interpolation_type)
            for i in range(config.octaves)
        ]

    def get(
        self,
        x: ArrayLike,
        y: ArrayLike,
        z: ArrayLike,
        w: ArrayLike,
    ) -> NDArray[np.float64]:
        """Sample the field at broadcastable 4D coordinates.

        Args:
            x, y, z, w: Coordinate arrays (or scalars).

        Returns:
            Array of noise values with the broadcast shape of the inputs.
        """
        frequency = self.config.frequency
        coords = list(
            np.broadcast_arrays(
                *(np.asarray(c, dtype=np.float64) * frequency for c in (x, y, z, w))
            )
        )
        fractal = self.config.fractal_type

        if fractal == FractalType.FBM:
            return self._fbm(coords)
        if fractal == FractalType.RIDGED_MULTI:
            return self._ridged(coords)
        if fractal == FractalType.BILLOW:
            return self._billow(coords)
        return self._multi(coords)

    def _octave_samples(
        self, coords: list[NDArray[np.float64]]
    ) -> Iterator[tuple[NDArray[np.float64], float]]:
        """Yield (octave noise, amplitude) pairs at increasing frequency."""
        scale = 1.0
        amplitude = 1.0
        for basis in self._octaves:
            yield basis(*(c * scale for c in coords)), amplitude
            scale *= self.config.lacunarity
            amplitude *= self.config.gain

    def _fbm(self, coords: list[NDArray[np.float64]]) -> NDArray[np.float64]:
        result = np.zeros(coords[0].shape, dtype=np.float64)
        for noise, amplitude in self._octave_samples(coords):
            result += noise * amplitude
        return result

    def _ridged(self, coords: list[NDArray[np.float64]]) -> NDArray[np.float64]:
        result = np.zeros(coords[0].shape, dtype=np.float64)
        weight = np.ones(coords[0].shape, dtype=np.float64)
        for noise, amplitude in self._octave_samples(coords):
            # Convert to ridge: 1 - |noise|, then square
            signal = 1.0 - np.abs(noise)
            signal = signal * signal * weight
            result += signal * amplitude
            weight = np.clip(signal * 2.0, 0.0, 1.0)
        return result

    def _billow(self, coords: list[NDArray[np.float64]]) -> NDArray[np.float64]:
        result = np.zeros(coords[0].shape, dtype=np.float64)
        for noise, amplitude in self._octave_samples(coords):
            result += (2.0 * np.abs(noise) - 1.0) * amplitude
        return result

    def _multi(self, coords: list[NDArray[np.float64]]) -> NDArray[np.float64]:
        result = np.ones(coords[0].shape, dtype=np.float64)
        for noise, amplitude in self._octave_samples(coords):
            result *= noise * amplitude + 1.0
        return result
