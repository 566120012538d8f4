"""
Plane-Wave Turbulence — Command-line Entry Point
=================================================

Build one field realization, print its statistics and save figures:

    python -m planewave_turbulence [--quick] [--output-dir DIR]
                                   [--seed N] [--type 3D|slab|cylindrical]

Options:
    --quick        256 modes and 2,000 samples instead of 1024 / 20,000
    --output-dir   Directory for figures (default: PWTURB_OUTPUT_DIR or cwd)
    --seed         Mode seed (default: fresh OS entropy, printed)
    --type         Turbulence type (default: 3D)
"""

import argparse
import os
import time

import numpy as np

from . import config
from .diagnostics import field_statistics, make_field_figures, random_positions
from .errors import ConfigError
from .field import PlaneWaveTurbulence
from .logging_config import setup_logging
from .spectrum import SpectrumModel
from .units import muG, pc


def main():
    parser = argparse.ArgumentParser(
        prog='python -m planewave_turbulence',
        description='Plane-wave turbulent magnetic field synthesis',
    )
    parser.add_argument(
        '--quick', action='store_true',
        help='Quick run: 256 modes, 2,000 samples',
    )
    parser.add_argument(
        '--output-dir', default=config.OUTPUT_DIR,
        help='Output directory for figures',
    )
    parser.add_argument('--seed', type=int, default=None, help='Mode seed')
    parser.add_argument(
        '--type', default='3D', choices=['3D', 'slab', 'cylindrical'],
        help='Turbulence type',
    )
    args = parser.parse_args()

    setup_logging()

    n_modes = 256 if args.quick else 1024
    n_samples = 2_000 if args.quick else 20_000
    output_dir = os.path.abspath(args.output_dir)

    spectrum = SpectrumModel(brms=1 * muG, lmin=0.1 * pc, lmax=100 * pc,
                             lbendover=10 * pc)
    try:
        field = PlaneWaveTurbulence(spectrum, n_modes, seed=args.seed,
                                    turbulence_type=args.type)
    except ConfigError as exc:
        parser.error(str(exc))

    print('=' * 70)
    print('  Plane-Wave Turbulence')
    print('=' * 70)
    print(f'  {field.get_description()}')
    print(f'  Correlation length : {spectrum.get_correlation_length() / pc:.3f} pc')
    print(f'  Output directory   : {output_dir}')
    print('=' * 70)

    t0 = time.time()
    rng = np.random.default_rng(0)
    stats = field_statistics(field, random_positions(n_samples, 1e3 * spectrum.lmax, rng))
    print(f'  <B> / Brms         : {np.array2string(stats["mean"] / spectrum.brms, precision=4)}')
    print(f'  B_rms / Brms       : {stats["rms"] / spectrum.brms:.4f} '
          f'({stats["n_samples"]:,} samples, {time.time() - t0:.1f} s)')

    t0 = time.time()
    paths = make_field_figures(field, output_dir, quick=args.quick)
    print(f'  {len(paths)} figures saved ({time.time() - t0:.1f} s)')
    print('=' * 70)


if __name__ == '__main__':
    main()
