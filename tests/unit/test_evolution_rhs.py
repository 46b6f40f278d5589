"""
Unit tests for evolution right-hand-side terms and the Godunov gradient magnitude.
"""

import pytest

import numpy as np

from pylsm.geometry.grid import IndexBox
from pylsm.geometry.level_set import (
    add_advection_term,
    add_const_normal_velocity_term,
    add_normal_velocity_term,
    zero_rhs,
)
from pylsm.operators.differential import godunov_gradient_magnitude, upwind_hj_gradient
from pylsm.utils.exceptions import ContractViolationError, DimensionMismatchError


def _constant_gradients(shape, plus_values, minus_values):
    grad_plus = [np.full(shape, p) for p in plus_values]
    grad_minus = [np.full(shape, m) for m in minus_values]
    return grad_plus, grad_minus


# =============================================================================
# Godunov magnitude
# =============================================================================


class TestGodunovMagnitude:
    @pytest.mark.parametrize(
        ("plus", "minus", "sign", "expected"),
        [
            (1.0, 1.0, 1.0, 1.0),
            (0.7, 0.5, 1.0, 0.5),
            (0.7, 0.5, -1.0, 0.7),
            (1.0, -2.0, 1.0, 0.0),
            (1.0, -2.0, -1.0, 2.0),
            (-1.0, 2.0, 1.0, 2.0),
            (-1.0, 2.0, -1.0, 0.0),
            (-0.3, -0.4, 0.0, 0.3),
        ],
    )
    def test_single_axis_cases(self, plus, minus, sign, expected):
        mag = godunov_gradient_magnitude([np.array([plus])], [np.array([minus])], sign)
        assert mag[0] == pytest.approx(expected)

    def test_combines_axes(self):
        gp, gm = _constant_gradients((3, 3), [0.6, 0.8], [0.6, 0.8])
        assert np.allclose(godunov_gradient_magnitude(gp, gm, 1.0), 1.0)

    def test_field_sign(self):
        gp = [np.array([1.0, 1.0])]
        gm = [np.array([-2.0, -2.0])]
        mag = godunov_gradient_magnitude(gp, gm, np.array([1.0, -1.0]))
        assert np.allclose(mag, [0.0, 2.0])

    def test_mismatched_lists(self):
        with pytest.raises(DimensionMismatchError):
            godunov_gradient_magnitude([np.zeros(2), np.zeros(2)], [np.zeros(2)], 1.0)


# =============================================================================
# Right-hand-side terms
# =============================================================================


class TestAdvectionTerm:
    def test_linear_field(self, grid_2d):
        X, Y = grid_2d.meshgrid()
        phi = 2.0 * X - Y
        gp, gm = upwind_hj_gradient(phi, grid_2d.fillbox, grid_2d.dx, grid_2d.accuracy)
        velocity = [np.full(grid_2d.shape, 1.0), np.full(grid_2d.shape, -2.0)]

        rhs = add_advection_term(zero_rhs(phi), gp, gm, velocity, grid_2d.fillbox)

        c = grid_2d.fillbox.slices()
        assert np.allclose(rhs[c], -4.0)
        outside = np.ones(grid_2d.shape, dtype=bool)
        outside[c] = False
        assert np.all(rhs[outside] == 0.0)

    def test_upwind_side_selection(self):
        shape = (6, 6)
        box_rhs = zero_rhs(np.zeros(shape))
        gp, gm = _constant_gradients(shape, [10.0, 10.0], [1.0, 1.0])
        u = np.zeros(shape)
        u[2, 2] = 1.0
        u[3, 3] = -1.0
        v = np.zeros(shape)

        add_advection_term(box_rhs, gp, gm, [u, v], IndexBox(((1, 4), (1, 4))))

        assert box_rhs[2, 2] == pytest.approx(-1.0)
        assert box_rhs[3, 3] == pytest.approx(10.0)
        assert box_rhs[2, 3] == 0.0

    def test_accumulates(self, grid_3d):
        phi = np.zeros(grid_3d.shape)
        gp, gm = _constant_gradients(grid_3d.shape, [1.0, 1.0, 1.0], [1.0, 1.0, 1.0])
        velocity = [np.ones(grid_3d.shape)] * 3
        rhs = np.full(grid_3d.shape, 5.0)

        add_advection_term(rhs, gp, gm, velocity, grid_3d.fillbox)

        assert np.allclose(rhs[grid_3d.fillbox.slices()], 2.0)
        assert rhs[0, 0, 0] == 5.0

    def test_wrong_number_of_components(self, grid_2d):
        phi = np.zeros(grid_2d.shape)
        gp, gm = _constant_gradients(grid_2d.shape, [0.0, 0.0], [0.0, 0.0])
        with pytest.raises(ContractViolationError, match="velocity components"):
            add_advection_term(zero_rhs(phi), gp, gm, [phi], grid_2d.fillbox)
        with pytest.raises(ContractViolationError, match="gradient components"):
            add_advection_term(zero_rhs(phi), gp[:1], gm, [phi, phi], grid_2d.fillbox)


class TestNormalVelocityTerm:
    def test_expanding_circle_speed(self, grid_2d, circle_sdf):
        gp, gm = upwind_hj_gradient(circle_sdf, grid_2d.fillbox, grid_2d.dx, grid_2d.accuracy)
        vel_n = np.full(grid_2d.shape, 0.5)

        rhs = add_normal_velocity_term(zero_rhs(circle_sdf), gp, gm, vel_n, grid_2d.fillbox)

        # away from the centre |grad phi| = 1, so phi_t = -Vn
        X, Y = grid_2d.meshgrid()
        band = (np.hypot(X, Y) > 0.3) & (np.hypot(X, Y) < 0.8)
        c = grid_2d.fillbox.slices()
        assert np.allclose(rhs[c][band[c]], -0.5, atol=1e-2)

    def test_constant_matches_variable(self, grid_2d, circle_sdf):
        gp, gm = upwind_hj_gradient(circle_sdf, grid_2d.fillbox, grid_2d.dx, grid_2d.accuracy)
        variable = add_normal_velocity_term(
            zero_rhs(circle_sdf), gp, gm, np.full(grid_2d.shape, -0.75), grid_2d.fillbox
        )
        constant = add_const_normal_velocity_term(zero_rhs(circle_sdf), gp, gm, -0.75, grid_2d.fillbox)
        assert np.allclose(variable, constant)

    def test_godunov_upwinding(self):
        shape = (5, 5)
        box = IndexBox(((1, 3), (1, 3)))
        gp, gm = _constant_gradients(shape, [1.0, 0.0], [-2.0, 0.0])

        rhs_pos = add_const_normal_velocity_term(zero_rhs(np.zeros(shape)), gp, gm, 1.0, box)
        rhs_neg = add_const_normal_velocity_term(zero_rhs(np.zeros(shape)), gp, gm, -1.0, box)

        assert np.allclose(rhs_pos[box.slices()], 0.0)
        assert np.allclose(rhs_neg[box.slices()], 2.0)

    def test_shape_mismatch(self, grid_2d):
        phi = np.zeros(grid_2d.shape)
        gp, gm = _constant_gradients(grid_2d.shape, [0.0, 0.0], [0.0, 0.0])
        with pytest.raises(DimensionMismatchError):
            add_normal_velocity_term(zero_rhs(phi), gp, gm, np.zeros((3, 3)), grid_2d.fillbox)
