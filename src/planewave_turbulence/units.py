"""
Plane-Wave Turbulence — Units
==============================

SI base units throughout: lengths in metres, field strengths in tesla.
Multiply a number by a unit to convert *into* the internal system and
divide by it to convert back out::

    brms = 1 * muG
    lmax = 10 * kpc
    print(lmax / pc)
"""

from __future__ import annotations

from scipy import constants

# -- Base ----------------------------------------------------------------
meter: float = 1.0
tesla: float = 1.0

# -- Length ----------------------------------------------------------------
km: float = 1e3 * meter
au: float = constants.astronomical_unit * meter
pc: float = constants.parsec * meter
kpc: float = 1e3 * pc
Mpc: float = 1e6 * pc
Gpc: float = 1e9 * pc

# -- Magnetic field --------------------------------------------------------
gauss: float = 1e-4 * tesla
muG: float = 1e-6 * gauss
nG: float = 1e-9 * gauss
