"""
Unit tests for CFL step estimates, control-volume selection and max norms.
"""

import math

import pytest

import numpy as np

from pylsm.geometry.grid import IndexBox
from pylsm.utils.exceptions import ContractViolationError, DimensionMismatchError
from pylsm.utils.numerical import (
    UNCONSTRAINED_DT,
    compute_stable_advection_dt,
    compute_stable_const_normal_vel_dt,
    compute_stable_normal_vel_dt,
    control_volume_selector,
    control_volume_weights,
    max_norm_diff,
)

BOX = IndexBox(((2, 7), (2, 9)))
SHAPE = (10, 12)
SPACING = (0.1, 0.2)


# =============================================================================
# Advection
# =============================================================================


class TestAdvectionDt:
    def test_uniform_velocity(self):
        u = np.full(SHAPE, 2.0)
        v = np.full(SHAPE, -1.0)
        dt = compute_stable_advection_dt([u, v], BOX, SPACING, 0.5)
        # bound = 2/0.1 + 1/0.2 = 25
        assert dt == pytest.approx(0.5 / 25.0)

    def test_ghost_cells_ignored(self):
        u = np.zeros(SHAPE)
        v = np.zeros(SHAPE)
        u[0, 0] = 1.0e6
        u[4, 5] = 1.0
        dt = compute_stable_advection_dt([u, v], BOX, SPACING, 0.8)
        assert dt == pytest.approx(0.8 * 0.1)

    def test_zero_velocity_is_unconstrained(self):
        zero = np.zeros(SHAPE)
        dt = compute_stable_advection_dt([zero, zero], BOX, SPACING, 0.5)
        assert dt == UNCONSTRAINED_DT
        assert math.isinf(dt)

    def test_dt_scales_with_cfl(self):
        u = np.random.default_rng(0).uniform(-1, 1, SHAPE)
        v = np.ones(SHAPE)
        dt1 = compute_stable_advection_dt([u, v], BOX, SPACING, 0.25)
        dt2 = compute_stable_advection_dt([u, v], BOX, SPACING, 0.5)
        assert dt2 == pytest.approx(2.0 * dt1)

    def test_control_volume_excludes_cells(self):
        u = np.ones(SHAPE)
        u[3, 3] = 10.0
        v = np.zeros(SHAPE)
        cv = np.ones(SHAPE)
        cv[3, 3] = 0.0

        assert compute_stable_advection_dt([u, v], BOX, SPACING, 1.0) == pytest.approx(0.01)
        assert compute_stable_advection_dt([u, v], BOX, SPACING, 1.0, control_volume=cv) == pytest.approx(0.1)

    def test_negative_control_volume_sign(self):
        u = np.ones(SHAPE)
        u[3, 3] = 10.0
        v = np.zeros(SHAPE)
        cv = np.ones(SHAPE)
        cv[3, 3] = -1.0
        dt = compute_stable_advection_dt([u, v], BOX, SPACING, 1.0, control_volume=cv, control_volume_sign=-1)
        assert dt == pytest.approx(0.01)

    def test_empty_selection_is_unconstrained(self):
        u = np.ones(SHAPE)
        cv = np.zeros(SHAPE)
        dt = compute_stable_advection_dt([u, u], BOX, SPACING, 0.5, control_volume=cv)
        assert dt == UNCONSTRAINED_DT

    def test_invalid_arguments(self):
        u = np.ones(SHAPE)
        with pytest.raises(ContractViolationError, match="CFL number"):
            compute_stable_advection_dt([u, u], BOX, SPACING, 0.0)
        with pytest.raises(DimensionMismatchError):
            compute_stable_advection_dt([u, np.ones((10, 10))], BOX, SPACING, 0.5)
        with pytest.raises(ContractViolationError, match="spacing"):
            compute_stable_advection_dt([u, u], BOX, (0.1,), 0.5)
        with pytest.raises(ContractViolationError, match="control_volume_sign"):
            compute_stable_advection_dt([u, u], BOX, SPACING, 0.5, control_volume=u, control_volume_sign=0)


# =============================================================================
# Normal velocity
# =============================================================================


class TestNormalVelocityDt:
    def _gradients(self):
        gp = [np.full(SHAPE, 1.0), np.full(SHAPE, -0.5)]
        gm = [np.full(SHAPE, -2.0), np.full(SHAPE, 0.25)]
        return gp, gm

    def test_variable_normal_velocity(self):
        gp, gm = self._gradients()
        vel_n = np.full(SHAPE, 0.5)
        vel_n[5, 5] = -2.0
        dt = compute_stable_normal_vel_dt(vel_n, gp, gm, BOX, SPACING, 0.5)
        # gradient sum = 2/0.1 + 0.5/0.2 = 22.5, max |Vn| = 2
        assert dt == pytest.approx(0.5 / (2.0 * 22.5))

    def test_constant_normal_velocity(self):
        gp, gm = self._gradients()
        dt = compute_stable_const_normal_vel_dt(-1.5, gp, gm, BOX, SPACING, 0.9)
        assert dt == pytest.approx(0.9 / (1.5 * 22.5))

    def test_constant_matches_variable(self):
        gp, gm = self._gradients()
        dt_const = compute_stable_const_normal_vel_dt(0.7, gp, gm, BOX, SPACING, 0.5)
        dt_var = compute_stable_normal_vel_dt(np.full(SHAPE, 0.7), gp, gm, BOX, SPACING, 0.5)
        assert dt_const == pytest.approx(dt_var)

    def test_zero_speed_is_unconstrained(self):
        gp, gm = self._gradients()
        assert compute_stable_const_normal_vel_dt(0.0, gp, gm, BOX, SPACING, 0.5) == UNCONSTRAINED_DT
        flat = [np.zeros(SHAPE), np.zeros(SHAPE)]
        assert compute_stable_normal_vel_dt(np.ones(SHAPE), flat, flat, BOX, SPACING, 0.5) == UNCONSTRAINED_DT

    def test_mismatched_gradient_lists(self):
        gp, gm = self._gradients()
        with pytest.raises(ContractViolationError):
            compute_stable_const_normal_vel_dt(1.0, gp, gm[:1], BOX, SPACING, 0.5)


# =============================================================================
# Control volumes and norms
# =============================================================================


class TestControlVolume:
    def test_selector_without_control_volume(self):
        sel = control_volume_selector(np.zeros(SHAPE), BOX)
        assert sel.shape == BOX.shape
        assert sel.all()

    def test_selector_by_sign(self):
        cv = np.zeros(SHAPE)
        cv[2:5, :] = 1.0
        cv[5:, :] = -0.5
        pos = control_volume_selector(cv, BOX, cv, 1)
        neg = control_volume_selector(cv, BOX, cv, -1)
        assert pos.sum() == 3 * 8
        assert neg.sum() == 3 * 8
        assert not (pos & neg).any()

    def test_weights_are_magnitudes(self):
        cv = np.full(SHAPE, -0.25)
        w = control_volume_weights(cv, BOX, cv, -1)
        assert np.allclose(w, 0.25)
        assert np.allclose(control_volume_weights(cv, BOX, cv, 1), 0.0)


class TestMaxNormDiff:
    def test_max_norm(self):
        a = np.zeros(SHAPE)
        b = np.zeros(SHAPE)
        b[4, 4] = -3.0
        b[0, 0] = 100.0
        assert max_norm_diff(a, b, BOX) == pytest.approx(3.0)

    def test_max_norm_with_control_volume(self):
        a = np.zeros(SHAPE)
        b = np.zeros(SHAPE)
        b[4, 4] = 3.0
        b[6, 6] = 1.0
        cv = np.ones(SHAPE)
        cv[4, 4] = 0.0
        assert max_norm_diff(a, b, BOX, control_volume=cv) == pytest.approx(1.0)
        assert max_norm_diff(a, b, BOX, control_volume=np.zeros(SHAPE)) == 0.0

    def test_shape_mismatch(self):
        with pytest.raises(DimensionMismatchError):
            max_norm_diff(np.zeros(SHAPE), np.zeros((4, 4)), BOX)
