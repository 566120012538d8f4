"""
Plane-Wave Turbulence — Confinement Geometry
=============================================

Optional cylindrical confinement applied to the raw plane-wave
superposition.  The cylinder axis is parallel to z and passes through
``center``; "transverse distance" d is measured in the x-y plane.

Stages, in order:

1. Axial cutoff   z > L                      -> B = 0 exactly
2. Axial scaling  L > 0 and not constant     -> B *= z / L
3. Radial shape
   - 3D / slab:    d > R -> B *= T(d)
                   T(d) = 2 (1 - sigmoid((d-R)/delta)) * exp(-(d-R)/decay)
                   T(R) = 1 and T decreases monotonically to 0.
   - cylindrical:  (Bx, By) replaced by the azimuthal unit vector times
                   |B_raw| times 1/2 (1 - tanh((r-R)/delta)); closed field
                   lines around the axis, no radial component.

``radius = inf`` disables the radial stage and ``axial_length <= 0`` the
axial ones.  Everything here is plain arithmetic on validated parameters
and never raises at evaluation time.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Tuple

import numpy as np
from numpy.typing import ArrayLike, NDArray
from scipy.special import expit

from .errors import ConfigError
from .modes import TurbulenceType

# Regularises the azimuthal direction on the axis itself [m]
AXIS_EPSILON: float = 1e-8


@dataclass(frozen=True)
class GeometryMask:
    """Cylindrical confinement parameters.

    Attributes
    ----------
    center : point on the cylinder axis [m]; only x, y are used
    radius : cylinder radius R [m] (inf = no radial shaping)
    transition_width : logistic / tanh width delta [m] (0 = hard edge)
    decay_length : exponential tail length beyond R [m] (inf = no tail)
    axial_length : axial extent L [m] (<= 0 = no axial cutoff / scaling)
    axial_constant : if False, scale linearly with z / L inside the cutoff
    """
    center: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    radius: float = np.inf
    transition_width: float = 1.0
    decay_length: float = np.inf
    axial_length: float = 0.0
    axial_constant: bool = True
    _center: NDArray = field(init=False, repr=False, compare=False, default=None)

    def __post_init__(self):
        center = np.asarray(self.center, dtype=float)
        if center.shape != (3,):
            raise ConfigError(f"Geometry center must be a 3-vector, got {self.center!r}")
        object.__setattr__(self, 'center', tuple(float(c) for c in center))
        center.setflags(write=False)
        object.__setattr__(self, '_center', center)
        for name in ('radius', 'transition_width', 'decay_length'):
            value = getattr(self, name)
            if np.isnan(value) or value < 0:
                raise ConfigError(f"Geometry {name} must be non-negative, got {value}")
        if np.isnan(self.axial_length):
            raise ConfigError("Geometry axial_length must be a number")

    @property
    def radial_enabled(self) -> bool:
        return np.isfinite(self.radius)

    @property
    def axial_enabled(self) -> bool:
        return self.axial_length > 0.0

    # -- stages ----------------------------------------------------------

    def transverse_offset(self, positions: NDArray) -> NDArray:
        """(x - cx, y - cy) for positions (n, 3) -> (n, 2)."""
        return positions[:, :2] - self._center[:2]

    def axial_factor(self, z: NDArray) -> NDArray:
        """Cutoff and optional linear scaling along the axis."""
        if not self.axial_enabled:
            return np.ones_like(z)
        scale = np.ones_like(z) if self.axial_constant else z / self.axial_length
        return np.where(z > self.axial_length, 0.0, scale)

    def radial_factor(self, d: NDArray) -> NDArray:
        """Smooth suppression beyond R: 1 inside, T(d) outside."""
        if not self.radial_enabled:
            return np.ones_like(d)
        excess = d - self.radius
        outside = excess > 0.0
        excess = np.where(outside, excess, 0.0)
        if self.transition_width > 0.0:
            transition = 2.0 * expit(-excess / self.transition_width)
        else:
            transition = np.where(outside, 0.0, 1.0)
        if self.decay_length > 0.0:
            tail = np.exp(-excess / self.decay_length)
        else:
            tail = np.where(outside, 0.0, 1.0)
        return np.where(outside, transition * tail, 1.0)

    def cylinder_envelope(self, r: NDArray) -> NDArray:
        """1/2 (1 - tanh((r - R)/delta)): ~1 inside R, 1/2 at R, 0 outside."""
        if not self.radial_enabled:
            return np.ones_like(r)
        if self.transition_width > 0.0:
            return 0.5 * (1.0 - np.tanh((r - self.radius) / self.transition_width))
        return np.where(r < self.radius, 1.0, np.where(r == self.radius, 0.5, 0.0))

    def solenoidal(self, positions: NDArray, b_raw: NDArray) -> NDArray:
        """Replace (Bx, By) by an azimuthal field of magnitude |B_raw|."""
        offset = self.transverse_offset(positions)
        r = np.hypot(offset[:, 0], offset[:, 1])
        magnitude = np.linalg.norm(b_raw, axis=1)
        scale = magnitude * self.cylinder_envelope(r) / (r + AXIS_EPSILON)
        out = b_raw.copy()
        out[:, 0] = -offset[:, 1] * scale
        out[:, 1] = offset[:, 0] * scale
        return out

    def apply(self,
              positions: ArrayLike,
              b_raw: NDArray,
              turbulence_type: TurbulenceType) -> NDArray:
        """Full post-processing of the raw superposition, (n, 3) -> (n, 3)."""
        positions = np.asarray(positions, dtype=float)
        if turbulence_type is TurbulenceType.CYLINDRICAL:
            b = self.solenoidal(positions, b_raw)
            factor = self.axial_factor(positions[:, 2])
        elif turbulence_type in (TurbulenceType.ISOTROPIC_3D, TurbulenceType.SLAB):
            b = b_raw
            offset = self.transverse_offset(positions)
            d = np.hypot(offset[:, 0], offset[:, 1])
            factor = self.axial_factor(positions[:, 2]) * self.radial_factor(d)
        else:
            raise ValueError(f"Unhandled turbulence type {turbulence_type!r}")
        return b * factor[:, None]

    def get_description(self) -> str:
        if not (self.radial_enabled or self.axial_enabled):
            return "no confinement"
        parts = [f"center = {self.center}"]
        if self.radial_enabled:
            parts.append(f"R = {self.radius:.4g} m, delta = {self.transition_width:.4g} m, "
                         f"decay = {self.decay_length:.4g} m")
        if self.axial_enabled:
            mode = "constant" if self.axial_constant else "linear"
            parts.append(f"L = {self.axial_length:.4g} m ({mode})")
        return ", ".join(parts)
