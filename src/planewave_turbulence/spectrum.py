"""
Plane-Wave Turbulence — Turbulence Spectrum Models
===================================================

The statistical target every synthesized field tries to reproduce.

Wavenumber convention
---------------------
``k = 2 pi / L``.  A spectrum between ``lmin`` and ``lmax`` therefore
covers ``k`` in ``[2 pi / lmax, 2 pi / lmin]``.

Spectrum shape
--------------
``SpectrumModel`` is the bent power law of Giacalone & Jokipii (1999) as
used by Tautz & Dosch (2013, TD13)::

                    (k Lb)^q
    E(k) = N * ---------------------------
               (1 + (k Lb)^2)^((s+q)/2 + 1)

Low-k slope ``q`` (energy-containing range), high-k slope ``-s-2``
(3D inertial range, i.e. ``-s`` after the usual k^2 shell factor),
bend-over at ``k ~ 1/Lb``.  ``N`` is chosen such that the integral over
all ``k`` equals ``Brms^2``.

``SimpleSpectrumModel`` is a pure ``k^(-s-2)`` power law between
``kmin`` and ``kmax``.

Sections
--------
=====  ============================================================
S      Contents
=====  ============================================================
1      Correlation-length helpers (Harari 2002, bent power law)
2      SpectrumModel
3      SimpleSpectrumModel
=====  ============================================================

Key references
--------------
- Giacalone & Jokipii (1999) ApJ 520, 204
- Harari, Mollerach & Roulet (2002) JHEP 03, 045
- Tautz & Dosch (2013) Phys. Plasmas 20, 022302
- Schlegel et al. (2020) ApJ 889, 123
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Union

import numpy as np
from numpy.typing import ArrayLike, NDArray
from scipy.special import beta as beta_fn
from scipy.special import gamma

from .errors import ConfigError

# -- Spectral defaults (Kolmogorov inertial range, GJ99 bend) -----------
DEFAULT_SINDEX: float = 5.0 / 3.0
DEFAULT_QINDEX: float = 4.0


# ======================================================================
# S1  CORRELATION LENGTH
# ======================================================================

def turbulent_correlation_length(lmin: float,
                                 lmax: float,
                                 alpha: float = -11.0 / 3.0) -> float:
    """Correlation length of a pure power law (Harari et al. 2002).

    Lc = lmax/2 * (a-1)/a * (1 - r^a) / (1 - r^(a-1)),
    with r = lmin/lmax and a = -alpha - 2.

    For Kolmogorov (alpha = -11/3) and lmin << lmax this tends to lmax/5.

    Parameters
    ----------
    lmin, lmax : float
        Length-scale bounds of the power law.
    alpha : float
        3D spectral index of the power law (E(k) ~ k^alpha).
    """
    r = lmin / lmax
    a = -alpha - 2.0
    return lmax / 2.0 * (a - 1.0) / a * (1.0 - r**a) / (1.0 - r**(a - 1.0))


def bent_power_law_correlation_length(lbendover: float,
                                      sindex: float,
                                      qindex: float) -> float:
    """Correlation length of the bent power law in the limit
    lmin -> 0, lmax -> inf.

    Lc = pi/2 * Lb * Gamma(q/2) Gamma(s/2) / (Gamma((q+1)/2) Gamma((s-1)/2))

    For s = 5/3, q = 4 this is 0.498 Lb.  Diverges for s <= 1.
    """
    if sindex <= 1.0:
        return np.inf
    num = gamma(qindex / 2.0) * gamma(sindex / 2.0)
    den = gamma((qindex + 1.0) / 2.0) * gamma((sindex - 1.0) / 2.0)
    return float(0.5 * np.pi * lbendover * num / den)


def _as_output(values: NDArray) -> Union[float, NDArray]:
    return values if values.ndim else float(values)


# ======================================================================
# S2  BENT POWER LAW
# ======================================================================

@dataclass(frozen=True)
class SpectrumModel:
    """Bent power-law turbulence spectrum.

    Attributes
    ----------
    brms : target rms field strength [T]
    lmin, lmax : smallest / largest turbulent length scale [m]
    lbendover : bend-over scale [m]; defaults to ``lmin``
    sindex : high-k spectral index s (default 5/3)
    qindex : low-k spectral index q (default 4)
    """
    brms: float
    lmin: float
    lmax: float
    lbendover: Optional[float] = None
    sindex: float = DEFAULT_SINDEX
    qindex: float = DEFAULT_QINDEX
    _norm: float = field(init=False, repr=False, compare=False, default=0.0)

    def __post_init__(self):
        if not (self.lmin > 0 and self.lmax > 0):
            raise ConfigError(
                f"Spectrum length scales must be positive "
                f"(lmin={self.lmin}, lmax={self.lmax})")
        if self.lmin >= self.lmax:
            raise ConfigError(
                f"Spectrum requires lmin < lmax (lmin={self.lmin}, lmax={self.lmax})")
        if self.brms < 0:
            raise ConfigError(f"Spectrum requires brms >= 0, got {self.brms}")
        if self.lbendover is None:
            object.__setattr__(self, 'lbendover', self.lmin)
        if not self.lbendover > 0:
            raise ConfigError(f"Bend-over scale must be positive, got {self.lbendover}")
        if self.sindex <= -1 or self.qindex <= -1:
            raise ConfigError(
                f"Spectral indices must exceed -1 (s={self.sindex}, q={self.qindex})")
        object.__setattr__(self, '_norm', self._normalization())

    def _normalization(self) -> float:
        # int_0^inf x^q (1+x^2)^-(q+s+2)/2 dx = B((q+1)/2, (s+1)/2) / 2
        integral = 0.5 * beta_fn((self.qindex + 1.0) / 2.0,
                                 (self.sindex + 1.0) / 2.0) / self.lbendover
        return self.brms**2 / integral

    # -- accessors ------------------------------------------------------

    def get_brms(self) -> float:
        return self.brms

    def get_lmin(self) -> float:
        return self.lmin

    def get_lmax(self) -> float:
        return self.lmax

    def get_lbendover(self) -> float:
        return self.lbendover

    def get_sindex(self) -> float:
        return self.sindex

    def get_qindex(self) -> float:
        return self.qindex

    @property
    def kmin(self) -> float:
        return 2.0 * np.pi / self.lmax

    @property
    def kmax(self) -> float:
        return 2.0 * np.pi / self.lmin

    # -- physics --------------------------------------------------------

    def energy_spectrum(self, k: ArrayLike) -> Union[float, NDArray]:
        """Energy spectrum E(k) [T^2 m], normalised to Brms^2 over all k."""
        k = np.asarray(k, dtype=float)
        khat = k * self.lbendover
        shape = khat**self.qindex / (1.0 + khat * khat)**(
            (self.sindex + self.qindex) / 2.0 + 1.0)
        return _as_output(self._norm * shape)

    def get_correlation_length(self) -> float:
        """Correlation length; independent of lmin / lmax."""
        return bent_power_law_correlation_length(
            self.lbendover, self.sindex, self.qindex)

    def get_description(self) -> str:
        return (f"{type(self).__name__}: Brms = {self.brms:.4g} T, "
                f"lmin = {self.lmin:.4g} m, lmax = {self.lmax:.4g} m, "
                f"lbendover = {self.lbendover:.4g} m, "
                f"s = {self.sindex:.4g}, q = {self.qindex:.4g}")


# ======================================================================
# S3  SIMPLE POWER LAW
# ======================================================================

@dataclass(frozen=True)
class SimpleSpectrumModel(SpectrumModel):
    """Pure power law E(k) ~ k^(-s-2) on [2 pi/lmax, 2 pi/lmin].

    The bend-over scale is pinned to ``lmax`` and ``q`` to 0, so that the
    plane-wave correction factor (1 + (k Lb)^2) ~ (k Lb)^2 over the whole
    range and the sampled 1D spectrum is k^(-s).
    """
    brms: float
    lmin: float
    lmax: float
    sindex: float = DEFAULT_SINDEX
    lbendover: Optional[float] = field(init=False, default=None)
    qindex: float = field(init=False, default=0.0)

    def __post_init__(self):
        object.__setattr__(self, 'lbendover', self.lmax)
        super().__post_init__()

    def _normalization(self) -> float:
        p = self.sindex + 1.0
        integral = (self.kmin**-p - self.kmax**-p) / p
        return self.brms**2 / integral

    def energy_spectrum(self, k: ArrayLike) -> Union[float, NDArray]:
        k = np.asarray(k, dtype=float)
        inside = (k >= self.kmin) & (k <= self.kmax)
        with np.errstate(divide='ignore'):
            values = np.where(inside, self._norm * k**(-self.sindex - 2.0), 0.0)
        return _as_output(values)

    def get_correlation_length(self) -> float:
        return turbulent_correlation_length(self.lmin, self.lmax,
                                            -self.sindex - 2.0)
