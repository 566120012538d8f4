"""
Plane-Wave Turbulence — Confinement Geometry Tests
===================================================

Run with:
    pytest tests/test_geometry.py -v
"""

from dataclasses import FrozenInstanceError

import numpy as np
import pytest

from planewave_turbulence import ConfigError, GeometryMask, TurbulenceType


def _points(xy, z=0.0):
    xy = np.atleast_2d(np.asarray(xy, dtype=float))
    return np.column_stack([xy, np.full(len(xy), z)])


# ============================================================
# 1. Construction
# ============================================================

class TestConstruction:

    def test_defaults_disable_everything(self):
        g = GeometryMask()
        assert not g.radial_enabled
        assert not g.axial_enabled
        assert g.get_description() == "no confinement"

    @pytest.mark.parametrize('kwargs', [
        dict(radius=-1.0),
        dict(transition_width=-0.1),
        dict(decay_length=-2.0),
        dict(radius=np.nan),
        dict(axial_length=np.nan),
        dict(center=(1.0, 2.0)),
    ])
    def test_invalid(self, kwargs):
        with pytest.raises(ConfigError):
            GeometryMask(**kwargs)

    def test_frozen(self):
        with pytest.raises(FrozenInstanceError):
            GeometryMask().radius = 3.0

    def test_center_normalised(self):
        g = GeometryMask(center=np.array([1, 2, 3]))
        assert g.center == (1.0, 2.0, 3.0)

    def test_description(self):
        text = GeometryMask(radius=5.0, axial_length=10.0,
                            axial_constant=False).get_description()
        assert 'R = 5' in text
        assert 'L = 10' in text
        assert 'linear' in text


# ============================================================
# 2. Unconfined pass-through
# ============================================================

class TestPassThrough:

    @pytest.mark.parametrize('tt', [TurbulenceType.ISOTROPIC_3D, TurbulenceType.SLAB])
    def test_identity(self, tt):
        rng = np.random.default_rng(0)
        pos = rng.uniform(-1e3, 1e3, size=(50, 3))
        b = rng.normal(size=(50, 3))
        np.testing.assert_array_equal(GeometryMask().apply(pos, b, tt), b)


# ============================================================
# 3. Axial stages
# ============================================================

class TestAxial:

    def test_cutoff_exact_zero(self):
        g = GeometryMask(axial_length=10.0)
        z = np.array([-5.0, 0.0, 10.0, 10.0001, 50.0])
        np.testing.assert_array_equal(g.axial_factor(z), [1, 1, 1, 0, 0])

    def test_linear_scaling(self):
        g = GeometryMask(axial_length=10.0, axial_constant=False)
        z = np.array([0.0, 2.5, 5.0, 10.0, 11.0])
        np.testing.assert_allclose(g.axial_factor(z), [0.0, 0.25, 0.5, 1.0, 0.0])

    def test_disabled_for_non_positive_length(self):
        g = GeometryMask(axial_length=-1.0, axial_constant=False)
        np.testing.assert_array_equal(g.axial_factor(np.array([1e9, -3.0])), 1.0)


# ============================================================
# 4. Radial blending (3D / slab)
# ============================================================

class TestRadial:

    def test_unity_inside_and_at_radius(self):
        g = GeometryMask(radius=10.0, transition_width=2.0, decay_length=5.0)
        d = np.array([0.0, 3.0, 9.999, 10.0])
        np.testing.assert_array_equal(g.radial_factor(d), 1.0)

    def test_monotonic_to_zero(self):
        g = GeometryMask(radius=10.0, transition_width=2.0, decay_length=5.0)
        d = np.linspace(10.0, 100.0, 500)
        t = g.radial_factor(d)
        assert np.all(np.diff(t) <= 0)
        assert t[-1] < 1e-10
        assert t[0] == pytest.approx(1.0)

    def test_logistic_only(self):
        """Without a tail T(d) = 2 (1 - sigmoid((d-R)/delta))."""
        g = GeometryMask(radius=1.0, transition_width=0.5)
        d = np.array([1.5, 2.0])
        expected = 2.0 / (1.0 + np.exp((d - 1.0) / 0.5))
        np.testing.assert_allclose(g.radial_factor(d), expected, rtol=1e-12)

    def test_hard_edge(self):
        g = GeometryMask(radius=1.0, transition_width=0.0)
        np.testing.assert_array_equal(
            g.radial_factor(np.array([0.5, 1.0, 1.0 + 1e-9])), [1.0, 1.0, 0.0])

    def test_uses_transverse_distance_only(self):
        g = GeometryMask(center=(5.0, -2.0, 100.0), radius=1.0)
        pos = np.array([[5.0, -2.0, -1e6], [5.5, -2.0, 3.0], [10.0, -2.0, 0.0]])
        b = np.ones((3, 3))
        out = g.apply(pos, b, TurbulenceType.ISOTROPIC_3D)
        np.testing.assert_array_equal(out[:2], 1.0)
        assert np.all(out[2] < 0.1)


# ============================================================
# 5. Cylindrical (solenoidal) shaping
# ============================================================

class TestCylindrical:

    def test_azimuthal_direction(self):
        g = GeometryMask()
        rng = np.random.default_rng(1)
        pos = _points(rng.uniform(-10, 10, size=(200, 2)))
        b_raw = rng.normal(size=(200, 3))
        out = g.apply(pos, b_raw, TurbulenceType.CYLINDRICAL)
        radial = np.einsum('ij,ij->i', out[:, :2], pos[:, :2])
        np.testing.assert_allclose(radial, 0.0, atol=1e-12)
        np.testing.assert_array_equal(out[:, 2], b_raw[:, 2])

    def test_counter_clockwise(self):
        out = GeometryMask().apply(_points([1.0, 0.0]), np.array([[3.0, 4.0, 0.0]]),
                                   TurbulenceType.CYLINDRICAL)
        assert out[0, 1] > 0
        assert out[0, 0] == 0.0

    def test_planar_magnitude_is_raw_magnitude(self):
        g = GeometryMask()
        b_raw = np.array([[1.0, 2.0, 2.0]])
        out = g.apply(_points([3.0, 4.0]), b_raw, TurbulenceType.CYLINDRICAL)
        assert np.hypot(out[0, 0], out[0, 1]) == pytest.approx(3.0, rel=1e-8)

    def test_envelope(self):
        g = GeometryMask(radius=10.0, transition_width=1.0)
        r = np.array([0.0, 10.0, 30.0])
        np.testing.assert_allclose(g.cylinder_envelope(r), [1.0, 0.5, 0.0], atol=1e-8)

    def test_envelope_hard_edge(self):
        g = GeometryMask(radius=2.0, transition_width=0.0)
        np.testing.assert_array_equal(
            g.cylinder_envelope(np.array([1.0, 2.0, 3.0])), [1.0, 0.5, 0.0])

    def test_on_axis_finite(self):
        out = GeometryMask().apply(_points([0.0, 0.0]), np.array([[1.0, 1.0, 1.0]]),
                                   TurbulenceType.CYLINDRICAL)
        assert np.all(np.isfinite(out))
        np.testing.assert_array_equal(out[0, :2], 0.0)

    def test_axial_cutoff_applies(self):
        g = GeometryMask(axial_length=1.0)
        out = g.apply(_points([1.0, 1.0], z=2.0), np.ones((1, 3)),
                      TurbulenceType.CYLINDRICAL)
        np.testing.assert_array_equal(out, 0.0)
