"""
Plane-Wave Turbulence — Diagnostics, Units & Configuration Tests
=================================================================

Run with:
    pytest tests/test_diagnostics.py -v
"""

import importlib
import io
import logging
import os

import numpy as np
import pytest

from planewave_turbulence import ConfigError, PlaneWaveTurbulence, SpectrumModel
from planewave_turbulence import config, units
from planewave_turbulence.diagnostics import (
    field_statistics,
    fit_power_law_slope,
    make_field_figures,
    random_directions,
    random_positions,
)
from planewave_turbulence.logging_config import setup_logging


@pytest.fixture(scope='module')
def small_field():
    spectrum = SpectrumModel(brms=2.0, lmin=1.0, lmax=50.0, lbendover=5.0)
    return PlaneWaveTurbulence(spectrum, 32, seed=3)


# ============================================================
# 1. Sampling helpers and statistics
# ============================================================

class TestDiagnostics:

    def test_random_positions_in_box(self):
        pos = random_positions(1000, 10.0, np.random.default_rng(0))
        assert pos.shape == (1000, 3)
        assert np.all(np.abs(pos) <= 5.0)

    def test_random_directions_unit(self):
        n = random_directions(500, np.random.default_rng(0))
        np.testing.assert_allclose(np.linalg.norm(n, axis=1), 1.0, rtol=1e-12)

    def test_field_statistics_keys(self, small_field):
        stats = field_statistics(small_field, np.zeros((4, 3)))
        assert set(stats) == {'mean', 'rms', 'n_samples'}
        assert stats['n_samples'] == 4
        np.testing.assert_allclose(stats['mean'], small_field.get_field([0, 0, 0]))
        assert stats['rms'] == pytest.approx(np.linalg.norm(small_field.get_field([0, 0, 0])))

    def test_slope_of_exact_power_law(self):
        x = np.logspace(-2, 3, 20)
        assert fit_power_law_slope(x, 7.0 * x**-1.25) == pytest.approx(-1.25, abs=1e-10)

    def test_figures_written(self, small_field, tmp_path):
        paths = make_field_figures(small_field, str(tmp_path), quick=True)
        assert len(paths) == 2
        for path in paths:
            assert os.path.isfile(path)
            assert os.path.getsize(path) > 0
        assert {os.path.basename(p) for p in paths} == {'field_slice.png',
                                                        'structure_function.png'}


# ============================================================
# 2. Units
# ============================================================

class TestUnits:

    def test_parsec(self):
        assert units.pc == pytest.approx(3.0857e16, rel=1e-4)
        assert units.kpc / units.pc == pytest.approx(1e3)

    def test_microgauss(self):
        assert units.muG == pytest.approx(1e-10)
        assert units.nG == pytest.approx(1e-13)


# ============================================================
# 3. Environment configuration
# ============================================================

class TestConfig:

    @pytest.fixture
    def reload_config(self, monkeypatch):
        """Reload config under a patched environment, restore afterwards."""
        def _reload(**env):
            for key, value in env.items():
                monkeypatch.setenv(key, value)
            return importlib.reload(config)
        yield _reload
        for key in ('PWTURB_STRATEGY', 'PWTURB_CHUNK_SIZE', 'PWTURB_LOG_LEVEL'):
            monkeypatch.delenv(key, raising=False)
        importlib.reload(config)

    def test_overrides(self, reload_config):
        cfg = reload_config(PWTURB_STRATEGY='Reference', PWTURB_CHUNK_SIZE='128',
                            PWTURB_LOG_LEVEL='debug')
        assert cfg.DEFAULT_STRATEGY == 'reference'
        assert cfg.CHUNK_SIZE == 128
        assert cfg.LOG_LEVEL == logging.DEBUG

    @pytest.mark.parametrize('key, value', [
        ('PWTURB_STRATEGY', 'gpu'),
        ('PWTURB_CHUNK_SIZE', 'many'),
        ('PWTURB_CHUNK_SIZE', '0'),
        ('PWTURB_LOG_LEVEL', 'loud'),
    ])
    def test_invalid(self, reload_config, key, value):
        with pytest.raises(ConfigError):
            reload_config(**{key: value})

    def test_env_strategy_reaches_field(self, reload_config):
        reload_config(PWTURB_STRATEGY='reference')
        spectrum = SpectrumModel(brms=1.0, lmin=1.0, lmax=10.0)
        f = PlaneWaveTurbulence(spectrum, 8, seed=0)
        assert f.strategy.value == 'reference'


# ============================================================
# 4. Logging
# ============================================================

class TestLogging:

    @pytest.fixture
    def package_logger(self):
        logger = logging.getLogger('planewave_turbulence')
        level = logger.level
        mpl_level = logging.getLogger('matplotlib').level
        yield logger
        for handler in list(logger.handlers):
            handler.close()
            logger.removeHandler(handler)
        logger.setLevel(level)
        logging.getLogger('matplotlib').setLevel(mpl_level)

    def test_setup_is_idempotent(self, package_logger, tmp_path):
        log_file = tmp_path / 'run.log'
        setup_logging(logging.INFO, str(log_file))
        logger = setup_logging(logging.INFO, str(log_file))
        assert logger is package_logger
        assert len(logger.handlers) == 2
        logger.info("hello from the test")
        for handler in logger.handlers:
            handler.flush()
        assert 'hello from the test' in log_file.read_text(encoding='utf-8')

    def test_level_by_name_and_stream(self, package_logger):
        stream = io.StringIO()
        logger = setup_logging('debug', stream=stream)
        assert logger.level == logging.DEBUG
        PlaneWaveTurbulence(SpectrumModel(1.0, 1.0, 10.0), 4, seed=0)
        text = stream.getvalue()
        assert 'planewave_turbulence.field - INFO' in text
        assert 'seed 0' in text

    def test_unknown_level(self, package_logger):
        with pytest.raises(ConfigError):
            setup_logging('chatty')

    def test_matplotlib_kept_at_warning(self, package_logger):
        setup_logging(logging.DEBUG, stream=io.StringIO())
        assert logging.getLogger('matplotlib').level == logging.WARNING
