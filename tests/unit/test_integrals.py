"""
Unit tests for smoothed indicators and level set integrals.
"""

import pytest

import numpy as np

from pylsm.operators.differential import central_gradient
from pylsm.utils.exceptions import ContractViolationError, DimensionMismatchError
from pylsm.utils.numerical import (
    default_epsilon,
    smoothed_delta,
    smoothed_heaviside,
    surface_integral,
    volume_integral_phi_greater_than_zero,
    volume_integral_phi_less_than_zero,
)


class TestSmoothedIndicators:
    def test_heaviside_values(self):
        eps = 0.2
        H = smoothed_heaviside(np.array([-1.0, -eps, 0.0, eps, 1.0]), eps)
        assert H == pytest.approx([0.0, 0.0, 0.5, 1.0, 1.0], abs=1e-15)

    def test_heaviside_is_monotone(self):
        phi = np.linspace(-1.0, 1.0, 401)
        assert np.all(np.diff(smoothed_heaviside(phi, 0.3)) >= 0.0)

    def test_heaviside_symmetry(self):
        phi = np.linspace(-0.5, 0.5, 101)
        assert np.allclose(smoothed_heaviside(phi, 0.25) + smoothed_heaviside(-phi, 0.25), 1.0)

    def test_delta_support_and_mass(self):
        eps = 0.1
        h = 1e-4
        s = np.arange(-0.2, 0.2 + h / 2, h)
        delta = smoothed_delta(s, eps)
        assert np.all(delta[np.abs(s) > eps + h] == 0.0)
        assert smoothed_delta(np.array([0.0]), eps)[0] == pytest.approx(1.0 / eps)
        assert np.sum(delta) * h == pytest.approx(1.0, rel=1e-6)

    @pytest.mark.parametrize("eps", [0.0, -0.1])
    def test_epsilon_must_be_positive(self, eps):
        with pytest.raises(ContractViolationError, match="epsilon must be positive"):
            smoothed_heaviside(np.zeros(3), eps)
        with pytest.raises(ContractViolationError):
            smoothed_delta(np.zeros(3), eps)

    def test_default_epsilon(self):
        assert default_epsilon((0.1, 0.2)) == pytest.approx(0.3)
        assert default_epsilon(0.05) == pytest.approx(0.075)


class TestVolumeIntegrals:
    def test_inside_plus_outside_is_domain(self, grid_2d, circle_sdf):
        eps = default_epsilon(grid_2d.dx)
        inside = volume_integral_phi_less_than_zero(1.0, circle_sdf, grid_2d.fillbox, grid_2d.dx, eps)
        outside = volume_integral_phi_greater_than_zero(1.0, circle_sdf, grid_2d.fillbox, grid_2d.dx, eps)
        assert inside + outside == pytest.approx(4.0)

    def test_scalar_and_array_integrands_agree(self, grid_2d, circle_sdf):
        eps = default_epsilon(grid_2d.dx)
        scalar = volume_integral_phi_less_than_zero(2.5, circle_sdf, grid_2d.fillbox, grid_2d.dx, eps)
        array = volume_integral_phi_less_than_zero(
            np.full(grid_2d.shape, 2.5), circle_sdf, grid_2d.fillbox, grid_2d.dx, eps
        )
        assert scalar == pytest.approx(array)

    def test_ghost_cells_ignored(self, grid_2d):
        phi = np.full(grid_2d.shape, -1.0)
        phi[: grid_2d.ghost_width, :] = 1.0
        eps = default_epsilon(grid_2d.dx)
        area = volume_integral_phi_less_than_zero(1.0, phi, grid_2d.fillbox, grid_2d.dx, eps)
        assert area == pytest.approx(4.0)

    def test_partitioned_control_volumes_add_up(self, grid_2d, circle_sdf, rng):
        eps = default_epsilon(grid_2d.dx)
        integrand = rng.uniform(0.5, 1.5, grid_2d.shape)
        X, _ = grid_2d.meshgrid()
        cv = np.where(X < 0.1, 1.0, -1.0)

        total = volume_integral_phi_less_than_zero(integrand, circle_sdf, grid_2d.fillbox, grid_2d.dx, eps)
        left = volume_integral_phi_less_than_zero(
            integrand, circle_sdf, grid_2d.fillbox, grid_2d.dx, eps, control_volume=cv, control_volume_sign=1
        )
        right = volume_integral_phi_less_than_zero(
            integrand, circle_sdf, grid_2d.fillbox, grid_2d.dx, eps, control_volume=cv, control_volume_sign=-1
        )

        assert left > 0.0 and right > 0.0
        assert left + right == pytest.approx(total)

    def test_control_volume_weights_scale_contributions(self, grid_2d, circle_sdf):
        eps = default_epsilon(grid_2d.dx)
        full = volume_integral_phi_less_than_zero(1.0, circle_sdf, grid_2d.fillbox, grid_2d.dx, eps)
        half = volume_integral_phi_less_than_zero(
            1.0, circle_sdf, grid_2d.fillbox, grid_2d.dx, eps, control_volume=np.full(grid_2d.shape, 0.5)
        )
        assert half == pytest.approx(0.5 * full)

    def test_integrand_shape_mismatch(self, grid_2d, circle_sdf):
        with pytest.raises(DimensionMismatchError):
            volume_integral_phi_less_than_zero(np.ones((3, 3)), circle_sdf, grid_2d.fillbox, grid_2d.dx, 0.1)


class TestSurfaceIntegral:
    def test_precomputed_gradient_matches_default(self, grid_2d, circle_sdf):
        eps = default_epsilon(grid_2d.dx)
        grad = central_gradient(circle_sdf, grid_2d.fillbox, grid_2d.dx)
        a = surface_integral(1.0, circle_sdf, grid_2d.fillbox, grid_2d.dx, eps)
        b = surface_integral(1.0, circle_sdf, grid_2d.fillbox, grid_2d.dx, eps, grad_phi=grad)
        assert a == pytest.approx(b)

    def test_partitioned_control_volumes_add_up(self, grid_2d, circle_sdf):
        eps = default_epsilon(grid_2d.dx)
        _, Y = grid_2d.meshgrid()
        cv = np.where(Y > -0.2, 1.0, -1.0)
        total = surface_integral(1.0, circle_sdf, grid_2d.fillbox, grid_2d.dx, eps)
        upper = surface_integral(1.0, circle_sdf, grid_2d.fillbox, grid_2d.dx, eps, control_volume=cv)
        lower = surface_integral(
            1.0, circle_sdf, grid_2d.fillbox, grid_2d.dx, eps, control_volume=cv, control_volume_sign=-1
        )
        assert upper + lower == pytest.approx(total)

    def test_no_interface_gives_zero(self, grid_2d):
        phi = np.full(grid_2d.shape, 1.0)
        assert surface_integral(1.0, phi, grid_2d.fillbox, grid_2d.dx, 0.1) == 0.0

    def test_wrong_gradient_count(self, grid_2d, circle_sdf):
        with pytest.raises(ContractViolationError, match="gradient components"):
            surface_integral(1.0, circle_sdf, grid_2d.fillbox, grid_2d.dx, 0.1, grad_phi=[circle_sdf])
