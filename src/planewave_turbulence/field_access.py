"""
Plane-Wave Turbulence — Field-Access Boundary
==============================================

What a particle propagator calls instead of ``field.get_field``.

A propagation step must never abort because a field read failed.  Rather
than catching exceptions ad hoc inside every integrator, the read returns
a ``FieldResult``: either a value, or the failure reason together with the
zero vector the step should use.  Failures are logged and reported as an
``EvaluationWarning`` through the standard ``warnings`` machinery, so
callers can escalate them (``warnings.simplefilter('error',
EvaluationWarning)``) while debugging.

Any object with a ``get_field(position, redshift)`` method is accepted.
"""

from __future__ import annotations

import logging
import warnings
from dataclasses import dataclass
from typing import Any, Optional

import numpy as np
from numpy.typing import ArrayLike, NDArray

from .errors import EvaluationWarning

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class FieldResult:
    """Outcome of one field read.

    Attributes
    ----------
    value : field vector (3,); the zero vector when the read failed
    error : description of the failure, None on success
    """
    value: NDArray
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def value_or_zero(self) -> NDArray:
        return self.value if self.ok else np.zeros(3)


def sample_field(field: Any,
                 position: ArrayLike,
                 redshift: float = 0.0) -> FieldResult:
    """Read the field at ``position`` without ever raising.

    A missing field (None) reads as zero.  Any exception from the field,
    or a result that is not a 3-vector, gives a failed result
    carrying the zero vector.
    """
    if field is None:
        return FieldResult(np.zeros(3))
    try:
        value = np.asarray(field.get_field(position, redshift), dtype=float)
        if value.shape != (3,):
            raise ValueError(f"field returned shape {value.shape}, expected (3,)")
    except Exception as exc:  # noqa: BLE001 -- any field failure is absorbed here
        reason = f"{type(exc).__name__}: {exc}"
        logger.error("Exception in field evaluation at %s: %s",
                     np.asarray(position).tolist(), reason)
        warnings.warn(f"Field evaluation failed, using zero field ({reason})",
                      EvaluationWarning, stacklevel=2)
        return FieldResult(np.zeros(3), reason)
    return FieldResult(value)
