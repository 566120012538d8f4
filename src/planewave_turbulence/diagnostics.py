"""
Plane-Wave Turbulence — Diagnostics & Figures
==============================================

Statistical checks of a synthesized field and the figures produced by
``python -m planewave_turbulence``.

Sections
--------
=====  ============================================================
S      Contents
=====  ============================================================
1      Sampling helpers (positions, isotropic directions)
2      One-point statistics: mean vector, rms magnitude
3      Two-point statistics: structure function, slope fit
4      Figures (``make_field_figures``)
=====  ============================================================

Expected behaviour
------------------
- <B> -> 0 and sqrt(<|B|^2>) -> Brms over many correlation lengths.
- D(r) = <|B(x) - B(x+r)|^2> / Brms^2 grows like r^(s-1) for
  lmin << r << lmax (r^(2/3) for Kolmogorov), and like r^2 below lmin.
"""

from __future__ import annotations

import logging
import os
from typing import Dict, List, Optional

import numpy as np
import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
from numpy.typing import ArrayLike, NDArray

from . import config

logger = logging.getLogger(__name__)


# ============================================================
# SECTION 1: Sampling helpers
# ============================================================

def random_positions(n: int, box_size: float,
                     rng: np.random.Generator) -> NDArray:
    """n positions uniform in the cube [-box/2, box/2]^3."""
    return rng.uniform(-0.5 * box_size, 0.5 * box_size, size=(n, 3))


def random_directions(n: int, rng: np.random.Generator) -> NDArray:
    """n isotropic unit vectors."""
    v = rng.normal(size=(n, 3))
    return v / np.linalg.norm(v, axis=1, keepdims=True)


# ============================================================
# SECTION 2: One-point statistics
# ============================================================

def field_statistics(field, positions: ArrayLike) -> Dict[str, object]:
    """Mean vector and rms magnitude of the field over ``positions``.

    Returns
    -------
    dict with 'mean' (3,), 'rms', 'n_samples'
    """
    b = field.get_fields(positions)
    return {
        'mean': b.mean(axis=0),
        'rms': float(np.sqrt(np.mean(np.sum(b * b, axis=1)))),
        'n_samples': int(len(b)),
    }


# ============================================================
# SECTION 3: Two-point statistics
# ============================================================

def structure_function(field,
                       separations: ArrayLike,
                       n_samples: int = 10_000,
                       box_size: Optional[float] = None,
                       seed: int = 0) -> NDArray:
    """Normalised second-order structure function D(r).

    D(r) = <|B(x) - B(x + r n)|^2> / Brms^2, averaged over random x in a
    cube of side ``box_size`` (default 10 lmax) and isotropic n.
    """
    spectrum = field.get_spectrum()
    if box_size is None:
        box_size = 10.0 * spectrum.lmax
    separations = np.atleast_1d(np.asarray(separations, dtype=float))
    rng = np.random.default_rng(seed)

    x0 = random_positions(n_samples, box_size, rng)
    n_hat = random_directions(n_samples, rng)
    b0 = field.get_fields(x0)
    brms2 = spectrum.brms**2

    out = np.empty_like(separations)
    for j, r in enumerate(separations):
        diff = field.get_fields(x0 + r * n_hat) - b0
        out[j] = np.mean(np.sum(diff * diff, axis=1)) / brms2
    return out


def fit_power_law_slope(x: ArrayLike, y: ArrayLike) -> float:
    """Least-squares slope of log(y) against log(x)."""
    slope, _ = np.polyfit(np.log(np.asarray(x, float)),
                          np.log(np.asarray(y, float)), 1)
    return float(slope)


# ============================================================
# SECTION 4: Figures
# ============================================================

plt.rcParams.update({
    'font.size': 11,
    'axes.labelsize': 13,
    'axes.titlesize': 13,
    'legend.fontsize': 9,
    'figure.dpi': 150,
    'savefig.dpi': 150,
})


def plot_field_slice(field, n_grid: int = 128,
                     extent: Optional[float] = None,
                     z: float = 0.0) -> plt.Figure:
    """Map of |B| and in-plane field direction on the plane z = const."""
    spectrum = field.get_spectrum()
    if extent is None:
        extent = 2.0 * spectrum.lmax
    axis = np.linspace(-0.5 * extent, 0.5 * extent, n_grid)
    xx, yy = np.meshgrid(axis, axis)
    pos = np.column_stack([xx.ravel(), yy.ravel(), np.full(xx.size, z)])
    b = field.get_fields(pos).reshape(n_grid, n_grid, 3) / spectrum.brms

    fig, ax = plt.subplots(figsize=(6.5, 5.5))
    mag = np.linalg.norm(b, axis=-1)
    im = ax.imshow(mag, origin='lower', cmap='magma',
                   extent=[axis[0], axis[-1], axis[0], axis[-1]])
    step = max(n_grid // 24, 1)
    ax.quiver(xx[::step, ::step], yy[::step, ::step],
              b[::step, ::step, 0], b[::step, ::step, 1],
              color='w', alpha=0.7, scale=40)
    fig.colorbar(im, ax=ax, label=r'$|B| / B_{\rm rms}$')
    ax.set_xlabel(r'$x$ [m]')
    ax.set_ylabel(r'$y$ [m]')
    ax.set_title(f'{field.turbulence_type.value} turbulence, $z = {z:.3g}$ m')
    fig.tight_layout()
    return fig


def plot_structure_function(field, n_samples: int = 5_000,
                            n_points: int = 16) -> plt.Figure:
    """log-log D(r) with the fitted inertial-range slope."""
    spectrum = field.get_spectrum()
    r = np.logspace(np.log10(spectrum.lmin / 10), np.log10(spectrum.lmax), n_points)
    d = structure_function(field, r, n_samples=n_samples)

    inertial = (r > 3 * spectrum.lmin) & (r < spectrum.lmax / 3)
    fig, ax = plt.subplots(figsize=(6.5, 4.5))
    ax.loglog(r, d, 'o-', color='C0', label='synthesized field')
    if inertial.sum() >= 2:
        slope = fit_power_law_slope(r[inertial], d[inertial])
        expected = spectrum.sindex - 1.0
        ref = d[inertial][0] * (r / r[inertial][0])**expected
        ax.loglog(r, ref, '--', color='0.4',
                  label=rf'$r^{{{expected:.2f}}}$ (fit: {slope:.2f})')
    ax.set_xlabel(r'$r$ [m]')
    ax.set_ylabel(r'$D(r) / B_{\rm rms}^2$')
    ax.legend()
    ax.grid(True, which='both', alpha=0.3)
    fig.tight_layout()
    return fig


def make_field_figures(field, output_dir: Optional[str] = None,
                       quick: bool = False) -> List[str]:
    """Save the slice map and structure function; returns the file paths."""
    output_dir = output_dir or config.OUTPUT_DIR
    os.makedirs(output_dir, exist_ok=True)
    paths = []

    fig = plot_field_slice(field, n_grid=64 if quick else 128)
    path = os.path.join(output_dir, 'field_slice.png')
    fig.savefig(path)
    plt.close(fig)
    paths.append(path)

    fig = plot_structure_function(field, n_samples=1_000 if quick else 5_000)
    path = os.path.join(output_dir, 'structure_function.png')
    fig.savefig(path)
    plt.close(fig)
    paths.append(path)

    logger.info("Saved %d figures to %s", len(paths), output_dir)
    return paths
