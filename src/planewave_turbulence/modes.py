"""
Plane-Wave Turbulence — Wave-Mode Sampler
==========================================

Draws the finite ensemble of plane waves whose superposition
approximates a turbulence spectrum (Tautz & Dosch 2013, "TD13").

For each mode i = 0..Nm-1:

    k_i      log-spaced in [2 pi/lmax, 2 pi/lmin] (inclusive)
    kappa_i  unit propagation direction
    xi_i     unit polarisation, perpendicular to kappa_i
    A_i      amplitude, sum(A_i^2) = 2 Brms^2
    beta_i   phase in [0, 2 pi)

The field at x is then sum_i xi_i A_i cos(k_i kappa_i . x + beta_i), whose
spatial mean square is sum(A_i^2)/2 = Brms^2.

Draw order
----------
All randomness comes from one ``numpy.random.Generator``, consumed
strictly sequentially, mode by mode, in the order phi, cos(theta), alpha,
beta.  Draws that a turbulence type does not need are skipped, not
consumed.  Changing this order changes every seeded field.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Tuple, Union

import numpy as np
from numpy.typing import NDArray

from .errors import ConfigError
from .spectrum import SpectrumModel

logger = logging.getLogger(__name__)

# Largest |kappa . xi| accepted when checking perpendicularity
ORTHOGONALITY_TOLERANCE: float = 1e-12


class TurbulenceType(enum.Enum):
    """Geometry of the sampled wave vectors."""
    ISOTROPIC_3D = '3D'
    SLAB = 'slab'
    CYLINDRICAL = 'cylindrical'

    @classmethod
    def parse(cls, value: Union['TurbulenceType', str]) -> 'TurbulenceType':
        """Accept an enum member or its legacy string tag ('3D', 'slab', ...)."""
        if isinstance(value, cls):
            return value
        for member in cls:
            if str(value).lower() in (member.value.lower(), member.name.lower()):
                return member
        raise ConfigError(
            f"Unknown turbulence type {value!r}; expected one of "
            f"{[m.value for m in cls]}")


@dataclass(frozen=True, eq=False)
class WaveModes:
    """Frozen table of sampled plane waves (arrays are read-only)."""
    k: NDArray
    kappa: NDArray
    xi: NDArray
    amplitude: NDArray
    beta: NDArray
    phi: NDArray
    costheta: NDArray
    turbulence_type: TurbulenceType

    def __post_init__(self):
        for name in ('k', 'kappa', 'xi', 'amplitude', 'beta', 'phi', 'costheta'):
            getattr(self, name).setflags(write=False)

    @property
    def n_modes(self) -> int:
        return int(self.k.shape[0])

    def mean_square_field(self) -> float:
        """Spatial mean of |B|^2 implied by the table (sum A^2 / 2)."""
        return float(0.5 * np.sum(self.amplitude**2))


# ======================================================================
# Wavenumbers and weights
# ======================================================================

def log_spaced_wavenumbers(spectrum: SpectrumModel, n_modes: int) -> NDArray:
    """Nm wavenumbers, log-spaced from kmin to kmax inclusive.

    logspace can miss the end points by an ulp; they are pinned so that a
    spectrum with a hard cutoff at kmin / kmax still sees both of them.
    """
    k = np.logspace(np.log10(spectrum.kmin), np.log10(spectrum.kmax), n_modes)
    k[0] = spectrum.kmin
    k[-1] = spectrum.kmax
    return k


def mode_weights(spectrum: SpectrumModel, k: NDArray) -> NDArray:
    """Unnormalised A_i^2:  G(k_i) * dk_i.

    G(k) = E(k) * (1 + (k Lb)^2) converts the 3D energy spectrum into the
    1D spectrum the superposition needs (TD13 eq. 5 lacks the +1 in the
    exponent of the denominator).  dk_i = k_i (k_1 - k_0)/k_1 is the bin
    width of the log grid.
    """
    khat = k * spectrum.lbendover
    g = np.asarray(spectrum.energy_spectrum(k)) * (1.0 + khat * khat)
    delta_k0 = (k[1] - k[0]) / k[1]
    return g * delta_k0 * k


# ======================================================================
# Angles, directions and polarisations
# ======================================================================

def _draw_angles(turbulence_type: TurbulenceType,
                 rng: np.random.Generator) -> Tuple[float, float, float, float]:
    """(phi, costheta, alpha, beta) for one mode."""
    phi = rng.uniform(-np.pi, np.pi)
    if turbulence_type is TurbulenceType.ISOTROPIC_3D:
        costheta = rng.uniform(-1.0, 1.0)
        alpha = rng.uniform(0.0, 2.0 * np.pi)
    elif turbulence_type in (TurbulenceType.SLAB, TurbulenceType.CYLINDRICAL):
        # wave vectors along the z axis
        costheta = 1.0
        alpha = 0.0
    else:
        raise ValueError(f"Unhandled turbulence type {turbulence_type!r}")
    beta = rng.uniform(0.0, 2.0 * np.pi)
    return phi, costheta, alpha, beta


def directions(phi: NDArray, costheta: NDArray) -> NDArray:
    """Unit propagation vectors kappa, shape (Nm, 3)."""
    sintheta = np.sqrt(1.0 - costheta * costheta)
    return np.column_stack([sintheta * np.cos(phi),
                            sintheta * np.sin(phi),
                            costheta])


def polarizations(phi: NDArray, costheta: NDArray, alpha: NDArray) -> NDArray:
    """Unit polarisation vectors xi perpendicular to kappa, shape (Nm, 3).

    TD13's psi vector: the rotation of the theta unit vector by alpha
    about kappa.
    """
    sintheta = np.sqrt(1.0 - costheta * costheta)
    cphi, sphi = np.cos(phi), np.sin(phi)
    calpha, salpha = np.cos(alpha), np.sin(alpha)
    return np.column_stack([costheta * cphi * calpha + sphi * salpha,
                            costheta * sphi * calpha - cphi * salpha,
                            -sintheta * calpha])


# ======================================================================
# Sampler
# ======================================================================

def sample_wave_modes(spectrum: SpectrumModel,
                      n_modes: int,
                      rng: np.random.Generator,
                      turbulence_type: TurbulenceType = TurbulenceType.ISOTROPIC_3D,
                      ) -> WaveModes:
    """Draw the mode ensemble for ``spectrum``.

    Parameters
    ----------
    spectrum : SpectrumModel
        Statistical target.
    n_modes : int
        Number of plane waves, at least 2.
    rng : numpy.random.Generator
        Random stream owned by the caller; consumed sequentially.
    turbulence_type : TurbulenceType
        ISOTROPIC_3D, SLAB or CYLINDRICAL.

    Returns
    -------
    WaveModes
        Read-only table with amplitudes normalised to sum(A^2) = 2 Brms^2.
    """
    if n_modes <= 1:
        raise ConfigError(
            f"n_modes = {n_modes}: specify at least two wave modes in order "
            f"to generate the k distribution properly.")
    turbulence_type = TurbulenceType.parse(turbulence_type)

    k = log_spaced_wavenumbers(spectrum, n_modes)
    weights = mode_weights(spectrum, k)

    angles = np.empty((n_modes, 4))
    for i in range(n_modes):
        angles[i] = _draw_angles(turbulence_type, rng)
    phi, costheta, alpha, beta = angles.T.copy()

    kappa = directions(phi, costheta)
    xi = polarizations(phi, costheta, alpha)

    overlap = np.abs(np.einsum('ij,ij->i', kappa, xi))
    if overlap.max() > ORTHOGONALITY_TOLERANCE:
        raise RuntimeError(
            f"Polarisation not perpendicular to propagation direction "
            f"(max |kappa.xi| = {overlap.max():.3e})")

    # Second pass: normalisation needs the global sum
    total = weights.sum()
    if total > 0:
        amplitude = np.sqrt(2.0 * weights / total) * spectrum.brms
    else:
        amplitude = np.zeros(n_modes)

    logger.debug("Sampled %d %s modes, k in [%.3e, %.3e] 1/m",
                 n_modes, turbulence_type.value, k[0], k[-1])

    return WaveModes(k=k, kappa=kappa, xi=xi, amplitude=amplitude,
                     beta=beta, phi=phi, costheta=costheta,
                     turbulence_type=turbulence_type)
