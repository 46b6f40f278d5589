"""
Reductions over two overlapping patches whose control volumes partition the domain.

Patch A covers x in [-1, 0.2], patch B covers x in [-0.2, 1]; the overlap is
masked out of B. Summed integrals and the minimum stable dt over the two
patches must equal the single-grid values on [-1, 1]^2.
"""

import pytest

import numpy as np

from pylsm.geometry.grid import Grid
from pylsm.operators.differential import upwind_hj_gradient
from pylsm.utils.numerical import (
    compute_stable_advection_dt,
    compute_stable_const_normal_vel_dt,
    compute_stable_normal_vel_dt,
    default_epsilon,
    surface_integral,
    volume_integral_phi_less_than_zero,
)

CFL = 0.5


def _patch(x_lo, x_hi, n_x):
    return Grid.from_cell_counts(2, [n_x, 40], [x_lo, -1.0], [x_hi, 1.0], "VERY_HIGH")


def _phi(grid):
    X, Y = grid.meshgrid()
    return np.hypot(X - 0.1, Y + 0.05) - 0.55


def _velocity(grid):
    X, Y = grid.meshgrid()
    return [1.0 + 0.5 * np.sin(3.0 * X), Y**2 - 0.3]


def _normal_speed(grid):
    X, Y = grid.meshgrid()
    return 1.0 + 0.8 * X * Y


@pytest.fixture
def patches():
    union = _patch(-1.0, 1.0, 40)
    a = _patch(-1.0, 0.2, 24)
    b = _patch(-0.2, 1.0, 24)
    X_b, _ = b.meshgrid()
    cv_a = np.ones(a.shape)
    cv_b = np.where(X_b > 0.2, 1.0, 0.0)
    return union, [(a, cv_a), (b, cv_b)]


@pytest.mark.integration
def test_patch_spacing_matches_union(patches):
    union, parts = patches
    for grid, _ in parts:
        assert grid.dx == pytest.approx(union.dx, rel=1e-14)


@pytest.mark.integration
def test_volume_integral_partition(patches):
    union, parts = patches
    eps = default_epsilon(union.dx)
    X_u, _ = union.meshgrid()

    expected = volume_integral_phi_less_than_zero(1.0 + X_u**2, _phi(union), union.fillbox, union.dx, eps)
    total = 0.0
    for grid, cv in parts:
        X, _ = grid.meshgrid()
        total += volume_integral_phi_less_than_zero(
            1.0 + X**2, _phi(grid), grid.fillbox, grid.dx, eps, control_volume=cv
        )

    assert total == pytest.approx(expected, rel=1e-12)


@pytest.mark.integration
def test_surface_integral_partition(patches):
    union, parts = patches
    eps = default_epsilon(union.dx)

    expected = surface_integral(1.0, _phi(union), union.fillbox, union.dx, eps)
    total = sum(
        surface_integral(1.0, _phi(grid), grid.fillbox, grid.dx, eps, control_volume=cv) for grid, cv in parts
    )

    assert total == pytest.approx(expected, rel=1e-12)


@pytest.mark.integration
def test_advection_dt_partition(patches):
    union, parts = patches
    expected = compute_stable_advection_dt(_velocity(union), union.fillbox, union.dx, CFL)
    dts = [
        compute_stable_advection_dt(_velocity(grid), grid.fillbox, grid.dx, CFL, control_volume=cv)
        for grid, cv in parts
    ]
    assert min(dts) == pytest.approx(expected, rel=1e-12)


@pytest.mark.integration
def test_normal_velocity_dt_partition(patches):
    union, parts = patches

    def dt(grid, cv=None):
        grad_plus, grad_minus = upwind_hj_gradient(_phi(grid), grid.fillbox, grid.dx, grid.accuracy)
        return compute_stable_normal_vel_dt(
            _normal_speed(grid), grad_plus, grad_minus, grid.fillbox, grid.dx, CFL, control_volume=cv
        )

    assert min(dt(grid, cv) for grid, cv in parts) == pytest.approx(dt(union), rel=1e-12)


@pytest.mark.integration
def test_const_normal_velocity_dt_partition(patches):
    union, parts = patches

    def dt(grid, cv=None):
        grad_plus, grad_minus = upwind_hj_gradient(_phi(grid), grid.fillbox, grid.dx, grid.accuracy)
        return compute_stable_const_normal_vel_dt(
            0.7, grad_plus, grad_minus, grid.fillbox, grid.dx, CFL, control_volume=cv
        )

    assert min(dt(grid, cv) for grid, cv in parts) == pytest.approx(dt(union), rel=1e-12)


@pytest.mark.integration
def test_masked_patch_alone_misses_the_overlap(patches):
    union, parts = patches
    eps = default_epsilon(union.dx)
    _, (b, cv_b) = parts
    full_b = volume_integral_phi_less_than_zero(1.0, _phi(b), b.fillbox, b.dx, eps)
    masked_b = volume_integral_phi_less_than_zero(1.0, _phi(b), b.fillbox, b.dx, eps, control_volume=cv_b)
    assert masked_b < full_b
