"""
Plane-Wave Turbulence — Field Evaluator
========================================

``PlaneWaveTurbulence`` is the field object handed to a particle
propagator.  Construction samples the wave modes once; afterwards the
object is read-only and ``get_field`` may be called from any number of
threads without locking.

Evaluation strategies
---------------------
REFERENCE    Loop over modes with ``numpy.cos``.
ACCELERATED  Lane kernel with the fast cos(pi x) of ``fastmath``;
             agrees with REFERENCE to within
             ``fastmath.COS_PI_MAX_ABS_ERROR * sum|A_i|``.
AUTO         ACCELERATED if the one-time capability check passes,
             REFERENCE otherwise.

Both strategies feed the same geometry post-processing, so switching
between them changes run time, not results beyond the documented
tolerance.

Seeding
-------
``seed=None`` draws fresh OS entropy; the value actually used is stored in
``field.seed`` and logged, so an unseeded run can be reproduced by passing
it back.  Any non-negative integer, 0 included, is a deterministic seed.
Alternatively pass a ready ``numpy.random.Generator`` as ``rng``.

Example
-------
>>> from planewave_turbulence import PlaneWaveTurbulence, SpectrumModel
>>> from planewave_turbulence.units import muG, pc
>>> spectrum = SpectrumModel(1 * muG, 0.1 * pc, 100 * pc)
>>> turbulence = PlaneWaveTurbulence(spectrum, 256, seed=42)
>>> b = turbulence.get_field([0.0, 0.0, 0.0])
"""

from __future__ import annotations

import enum
import logging
from typing import Optional, Union

import numpy as np
from numpy.typing import ArrayLike, NDArray

from . import config
from .errors import ConfigError
from .fastmath import LaneArena, accelerated_supported
from .geometry import GeometryMask
from .modes import TurbulenceType, WaveModes, sample_wave_modes
from .spectrum import SpectrumModel

logger = logging.getLogger(__name__)


class EvaluationStrategy(enum.Enum):
    AUTO = 'auto'
    REFERENCE = 'reference'
    ACCELERATED = 'accelerated'

    @classmethod
    def parse(cls, value: Union['EvaluationStrategy', str, None]) -> 'EvaluationStrategy':
        if value is None:
            value = config.DEFAULT_STRATEGY
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise ConfigError(
                f"Unknown evaluation strategy {value!r}; expected one of "
                f"{[m.value for m in cls]}") from None


def resolve_strategy(requested: EvaluationStrategy) -> EvaluationStrategy:
    """Map AUTO / unsupported ACCELERATED onto the strategy that will run."""
    if requested is EvaluationStrategy.REFERENCE:
        return requested
    if accelerated_supported():
        return EvaluationStrategy.ACCELERATED
    if requested is EvaluationStrategy.ACCELERATED:
        logger.warning("Accelerated strategy requested but unavailable; "
                       "using the reference strategy")
    return EvaluationStrategy.REFERENCE


def _make_rng(seed: Optional[int],
              rng: Optional[np.random.Generator]):
    """(generator, seed actually used); seed is None when rng was given."""
    if rng is not None:
        if seed is not None:
            raise ConfigError("Pass either seed or rng, not both")
        return rng, None
    if seed is None:
        seed = int(np.random.SeedSequence().entropy)
        logger.info("No seed given; drew seed %d from OS entropy", seed)
    elif isinstance(seed, bool) or not isinstance(seed, (int, np.integer)) or seed < 0:
        raise ConfigError(f"Seed must be a non-negative integer, got {seed!r}")
    seed = int(seed)
    return np.random.default_rng(seed), seed


class PlaneWaveTurbulence:
    """Turbulent magnetic field from a superposition of plane waves.

    Parameters
    ----------
    spectrum : SpectrumModel
        Turbulence spectrum to approximate.
    n_modes : int
        Number of wave modes (>= 2).
    seed : int, optional
        Deterministic seed (0 allowed).  None draws OS entropy.
    turbulence_type : TurbulenceType or str
        ISOTROPIC_3D ('3D'), SLAB ('slab') or CYLINDRICAL ('cylindrical').
    geometry : GeometryMask, optional
        Confinement geometry; None means unconfined.
    strategy : EvaluationStrategy or str, optional
        Defaults to ``config.DEFAULT_STRATEGY`` (env PWTURB_STRATEGY).
    rng : numpy.random.Generator, optional
        Random stream to draw modes from, instead of ``seed``.

    Raises
    ------
    ConfigError
        n_modes <= 1, malformed seed, unknown type or strategy.
    """

    def __init__(self,
                 spectrum: SpectrumModel,
                 n_modes: int,
                 seed: Optional[int] = None,
                 turbulence_type: Union[TurbulenceType, str] = TurbulenceType.ISOTROPIC_3D,
                 geometry: Optional[GeometryMask] = None,
                 strategy: Union[EvaluationStrategy, str, None] = None,
                 rng: Optional[np.random.Generator] = None):
        if n_modes <= 1:
            raise ConfigError(
                f"PlaneWaveTurbulence: n_modes = {n_modes}. Specify at least two "
                f"wave modes in order to generate the k distribution properly.")
        self.spectrum = spectrum
        self.n_modes = int(n_modes)
        self.turbulence_type = TurbulenceType.parse(turbulence_type)
        self.geometry = geometry if geometry is not None else GeometryMask()
        self.requested_strategy = EvaluationStrategy.parse(strategy)

        generator, self.seed = _make_rng(seed, rng)
        self.modes: WaveModes = sample_wave_modes(
            spectrum, self.n_modes, generator, self.turbulence_type)

        self.strategy = resolve_strategy(self.requested_strategy)
        self._arena: Optional[LaneArena] = None
        if self.strategy is EvaluationStrategy.ACCELERATED:
            self._arena = LaneArena.pack(self.modes)

        logger.info("PlaneWaveTurbulence: %d %s modes, seed %s, %s strategy",
                    self.n_modes, self.turbulence_type.value, self.seed,
                    self.strategy.value)

    # -- raw superposition ------------------------------------------------

    def _superpose_reference(self, positions: NDArray) -> NDArray:
        m = self.modes
        b = np.zeros((len(positions), 3))
        for i in range(m.n_modes):
            phase = m.k[i] * (positions @ m.kappa[i]) + m.beta[i]
            b += np.outer(np.cos(phase), m.amplitude[i] * m.xi[i])
        return b

    def superpose(self, positions: ArrayLike) -> NDArray:
        """Raw plane-wave sum at positions (n, 3), before geometry."""
        positions = np.asarray(positions, dtype=float).reshape(-1, 3)
        if self._arena is not None:
            return self._arena.superpose(positions)
        return self._superpose_reference(positions)

    # -- public evaluation ------------------------------------------------

    def get_fields(self, positions: ArrayLike) -> NDArray:
        """Field at many positions, (n, 3) -> (n, 3) [T].

        Evaluated in chunks of ``config.CHUNK_SIZE`` positions to bound the
        (chunk x n_modes) work arrays.
        """
        positions = np.asarray(positions, dtype=float).reshape(-1, 3)
        out = np.empty_like(positions)
        for start in range(0, len(positions), config.CHUNK_SIZE):
            chunk = positions[start:start + config.CHUNK_SIZE]
            raw = self.superpose(chunk)
            out[start:start + len(chunk)] = self.geometry.apply(
                chunk, raw, self.turbulence_type)
        return out

    def get_field(self, position: ArrayLike, redshift: float = 0.0) -> NDArray:
        """Field vector at one position [T].  ``redshift`` is accepted for
        interface compatibility and does not affect the result."""
        return self.get_fields(np.asarray(position, dtype=float).reshape(1, 3))[0]

    # -- accessors --------------------------------------------------------

    def get_modes(self) -> WaveModes:
        return self.modes

    def get_spectrum(self) -> SpectrumModel:
        return self.spectrum

    def get_correlation_length(self) -> float:
        return self.spectrum.get_correlation_length()

    def get_description(self) -> str:
        return (f"PlaneWaveTurbulence: {self.n_modes} modes, "
                f"type = {self.turbulence_type.value}, seed = {self.seed}, "
                f"strategy = {self.strategy.value}; "
                f"{self.spectrum.get_description()}; "
                f"geometry: {self.geometry.get_description()}")

    def __repr__(self) -> str:
        return (f"PlaneWaveTurbulence(n_modes={self.n_modes}, "
                f"turbulence_type={self.turbulence_type.value!r}, seed={self.seed})")
