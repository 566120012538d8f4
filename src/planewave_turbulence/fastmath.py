"""
Plane-Wave Turbulence — Accelerated Superposition Kernel
=========================================================

Vectorised evaluation of sum_i A_i xi_i cos(k_i kappa_i . x + beta_i)
with a fast approximate cosine.

Why cos(pi x)
-------------
Computing cos(pi x) instead of cos(x) turns argument reduction into a
rounding operation.  With q = round(x) and s = x - q (|s| <= 1/2, and s is
exact in floating point):

    cos(pi x) = (-1)^q cos(pi s)

q marks the centre of a half-wave; odd q are the negative half-waves.
cos(pi s) is even in s, so it is evaluated as a polynomial in s^2.

Parity extraction
-----------------
Adding 1.5 * 2^52 to an integral double |q| < 2^51 moves the ones' digit
of q into the last mantissa bit (the exponent becomes exactly 2^52 and
the extra 2^51 keeps negative q positive without changing parity).  The
low bit of the raw IEEE-754 word is then the parity of q.  For
|q| >= 2^51 the spacing of doubles is >= 1/2, i.e. a quarter period, and
the result is meaningless anyway: such arguments are outside the
supported domain.

Polynomial
----------
A truncated Taylor (Maclaurin) series, not a minimax fit: degree 7 in
s^2 with coefficients (-1)^n pi^2n / (2n)!.  The series alternates with
decreasing terms on |s| <= 1/2, so the truncation error is below the
first omitted term, pi^16/16! * 4^-8 = 6.6e-11.  A minimax fit of the
same degree would be tighter still; a degree-4 one (about 2e-7) is not
enough for COS_PI_MAX_ABS_ERROR, which documents the bound with margin
for rounding.

Lanes
-----
Mode data is packed once into a ``LaneArena``: component-major arrays
padded to a multiple of LANE_WIDTH with zero-amplitude modes (a padded
mode contributes cos(...) * 0 = 0).  Each lane keeps its own accumulator,
summing every LANE_WIDTH-th mode; lanes are reduced horizontally at the end.

Capability
----------
``accelerated_supported()`` runs once per process and checks that float64
is IEEE binary64 and that the kernel reproduces known values.  Callers
fall back to the reference loop when it returns False.
"""

from __future__ import annotations

import functools
import logging
import math
from dataclasses import dataclass

import numpy as np
from numpy.typing import ArrayLike, NDArray

from .modes import WaveModes

logger = logging.getLogger(__name__)

LANE_WIDTH: int = 4

COS_PI_MAX_ABS_ERROR: float = 1e-9
COS_PI_MAX_ARGUMENT: float = 2.0**51

# 1.5 * 2^52: pins the exponent so that bit 0 of the mantissa is q's ones' digit
_PARITY_SHIFT: float = float(0x0018000000000000)
_ONE = np.uint64(1)

# Taylor coefficients of cos(pi s) = sum_n c_n s^2n, highest order first for Horner
_COS_PI_COEFFS = tuple(
    (-1)**n * math.pi**(2 * n) / math.factorial(2 * n) for n in range(7, -1, -1)
)


def half_wave_parity(q: NDArray) -> NDArray:
    """1 where the integral-valued q is odd, 0 where even (uint64)."""
    shifted = np.asarray(q, dtype=np.float64) + _PARITY_SHIFT
    return shifted.view(np.uint64) & _ONE


def cos_pi(x: ArrayLike) -> NDArray:
    """Fast approximation of cos(pi x), |error| <= COS_PI_MAX_ABS_ERROR.

    Valid for finite |x| < 2^51.
    """
    x = np.asarray(x, dtype=np.float64)
    shape = x.shape
    x = np.atleast_1d(x)
    q = np.rint(x)
    s = x - q
    s = s * s

    u = np.full_like(s, _COS_PI_COEFFS[0])
    for c in _COS_PI_COEFFS[1:]:
        u = u * s + c

    # flip the sign bit on odd half-waves
    invert = half_wave_parity(q) << np.uint64(63)
    return (u.view(np.uint64) ^ invert).view(np.float64).reshape(shape)


@functools.lru_cache(maxsize=None)
def accelerated_supported() -> bool:
    """One-time capability check for the accelerated kernel."""
    info = np.finfo(np.float64)
    if info.nmant != 52 or info.nexp != 11:
        logger.info("Accelerated plane-wave kernel disabled: float64 is not binary64")
        return False
    probe = np.array([0.0, 0.5, 1.0, -1.0, 2.0, -3.0, 1.0 / 3.0, 12345.25])
    expected = np.array([1.0, 0.0, -1.0, -1.0, 1.0, -1.0, 0.5, -np.cos(0.25 * np.pi)])
    ok = bool(np.all(np.abs(cos_pi(probe) - expected) <= COS_PI_MAX_ABS_ERROR))
    if ok:
        logger.debug("Accelerated plane-wave kernel available (lane width %d)", LANE_WIDTH)
    else:
        logger.info("Accelerated plane-wave kernel disabled: self-test failed")
    return ok


@dataclass(frozen=True, eq=False)
class LaneArena:
    """Mode table packed for the lane kernel.

    Attributes
    ----------
    a_xi : (3, n_padded) amplitude times polarisation, per component
    k_kappa : (3, n_padded) k kappa / pi, per component
    beta : (n_padded,) phase / pi
    n_modes : number of real (non-padding) modes
    width : lane width
    """
    a_xi: NDArray
    k_kappa: NDArray
    beta: NDArray
    n_modes: int
    width: int = LANE_WIDTH

    @classmethod
    def pack(cls, modes: WaveModes, width: int = LANE_WIDTH) -> 'LaneArena':
        n = modes.n_modes
        n_padded = -(-n // width) * width
        a_xi = np.zeros((3, n_padded))
        k_kappa = np.zeros((3, n_padded))
        beta = np.zeros(n_padded)
        a_xi[:, :n] = (modes.amplitude[:, None] * modes.xi).T
        # the kernel computes cos(pi x): divide pi out of k and beta
        k_kappa[:, :n] = (modes.k[:, None] / np.pi * modes.kappa).T
        beta[:n] = modes.beta / np.pi
        for arr in (a_xi, k_kappa, beta):
            arr.setflags(write=False)
        return cls(a_xi=a_xi, k_kappa=k_kappa, beta=beta, n_modes=n, width=width)

    @property
    def n_padded(self) -> int:
        return int(self.beta.shape[0])

    def superpose(self, positions: NDArray) -> NDArray:
        """Raw field at positions (n, 3) -> (n, 3)."""
        positions = np.asarray(positions, dtype=np.float64)
        n_blocks = self.n_padded // self.width

        arg = positions @ self.k_kappa + self.beta
        u = cos_pi(arg).reshape(len(positions), n_blocks, self.width)

        # one accumulator per lane and component, then horizontal sum
        a_xi = self.a_xi.reshape(3, n_blocks, self.width)
        acc = np.einsum('nbw,cbw->ncw', u, a_xi)
        return acc.sum(axis=-1)
