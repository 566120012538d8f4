"""
Plane-Wave Turbulence — Synthetic Turbulent Magnetic Fields
============================================================

Random magnetic-field realizations with a prescribed turbulence power
spectrum, built as a superposition of plane waves (Giacalone & Jokipii
1999; Tautz & Dosch 2013) and evaluated at arbitrary positions for
charged-particle propagation codes.

Modules
-------
spectrum      : Turbulence spectra (bent power law, simple power law)
modes         : Wave-mode sampler (wavenumbers, directions, amplitudes)
fastmath      : Accelerated cos(pi x) kernel and lane-packed mode arena
geometry      : Cylindrical confinement (axial cutoff, radial blending)
field         : PlaneWaveTurbulence field evaluator
field_access  : Failure-tolerant field reads for propagators
diagnostics   : Field statistics, structure function, figures
units         : SI unit constants (muG, pc, kpc, ...)
config        : Environment-driven defaults
"""

from .errors import ConfigError, EvaluationWarning
from .spectrum import (
    SpectrumModel,
    SimpleSpectrumModel,
    turbulent_correlation_length,
)
from .modes import TurbulenceType, WaveModes, sample_wave_modes
from .geometry import GeometryMask
from .field import EvaluationStrategy, PlaneWaveTurbulence
from .field_access import FieldResult, sample_field

__version__ = "1.0.0"
