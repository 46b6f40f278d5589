"""
ENO one-sided derivatives for Hamilton-Jacobi equations.

Computes the forward (plus) and backward (minus) biased derivative of a level
set function along one axis with first, second or third order ENO
reconstruction.

Mathematical Background:
    ENO builds the Newton divided-difference interpolant of phi one order at
    a time. Starting from the upwind first difference, each extra order adds
    one point to the stencil, on whichever side has the smaller magnitude
    higher difference. The stencil therefore grows away from kinks in phi
    and the estimate never differences across one.

    With undivided differences D1, D2, D3 (see operators.stencils.undivided):

    ENO1:
        phi_x^- = D1_{i-1/2} / dx
        phi_x^+ = D1_{i+1/2} / dx

    ENO2 (c = smaller-magnitude of the two candidate D2):
        phi_x^- = (D1_{i-1/2} + c/2) / dx,   c from {D2_{i-1}, D2_i}
        phi_x^+ = (D1_{i+1/2} - c/2) / dx,   c from {D2_i, D2_{i+1}}

    ENO3 adds a D3 correction whose coefficient depends on the D2 choice:
        left D2 chosen for phi_x^-:  +1/3 · D3 from {D3_{i-3/2}, D3_{i-1/2}}
        right D2 chosen for phi_x^-: -1/6 · D3 from {D3_{i-1/2}, D3_{i+1/2}}
        left D2 chosen for phi_x^+:  -1/6 · D3 from {D3_{i-1/2}, D3_{i+1/2}}
        right D2 chosen for phi_x^+: +1/3 · D3 from {D3_{i+1/2}, D3_{i+3/2}}

    Ties in magnitude go to the left candidate.

Ghost cells read: ENO1 1, ENO2 2, ENO3 3.

References:
    - Osher & Shu (1991): High-Order Essentially Nonoscillatory Schemes for
      Hamilton-Jacobi Equations
    - Osher & Fedkiw (2003): Level Set Methods, Chapter 3
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from pylsm.operators.stencils.undivided import undivided_differences
from pylsm.utils.exceptions import validate_fill_box, validate_spacing

if TYPE_CHECKING:
    from numpy.typing import NDArray

    from pylsm.geometry.grid import IndexBox


def select_smaller(left: NDArray[np.float64], right: NDArray[np.float64]) -> NDArray[np.float64]:
    """Pick the smaller-magnitude candidate per point (ties go left)."""
    return np.where(np.abs(left) <= np.abs(right), left, right)


def _prepare(phi, axis, fill_box, dx, width, component):
    phi = np.asarray(phi, dtype=np.float64)
    validate_fill_box(fill_box, phi.shape, ghost_width=width, component=component, axes=(axis,))
    (dx,) = validate_spacing([dx], 1, component=component)
    return phi, dx


def hj_eno1_axis(
    phi: NDArray[np.float64],
    axis: int,
    fill_box: IndexBox,
    dx: float,
) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
    """
    First-order one-sided derivatives along one axis.

    Args:
        phi: Level set buffer over the ghost box (1 ghost cell needed along ``axis``)
        axis: Axis to differentiate along
        fill_box: Points at which derivatives are computed
        dx: Spacing along ``axis``

    Returns:
        (phi_plus, phi_minus): ghost-box-sized buffers, zero outside the fill box
    """
    phi, dx = _prepare(phi, axis, fill_box, dx, 1, "hj_eno1")
    (d1,) = undivided_differences(phi, axis, order=1)

    c = fill_box.slices()
    phi_plus = np.zeros_like(phi)
    phi_minus = np.zeros_like(phi)
    phi_plus[c] = d1[fill_box.shifted(axis, 1)] / dx
    phi_minus[c] = d1[c] / dx
    return phi_plus, phi_minus


def hj_eno2_axis(
    phi: NDArray[np.float64],
    axis: int,
    fill_box: IndexBox,
    dx: float,
) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
    """Second-order ENO one-sided derivatives along one axis (2 ghost cells)."""
    phi, dx = _prepare(phi, axis, fill_box, dx, 2, "hj_eno2")
    d1, d2 = undivided_differences(phi, axis, order=2)

    c = fill_box.slices()
    m1 = fill_box.shifted(axis, -1)
    p1 = fill_box.shifted(axis, 1)

    phi_plus = np.zeros_like(phi)
    phi_minus = np.zeros_like(phi)
    phi_minus[c] = (d1[c] + 0.5 * select_smaller(d2[m1], d2[c])) / dx
    phi_plus[c] = (d1[p1] - 0.5 * select_smaller(d2[c], d2[p1])) / dx
    return phi_plus, phi_minus


def hj_eno3_axis(
    phi: NDArray[np.float64],
    axis: int,
    fill_box: IndexBox,
    dx: float,
) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
    """Third-order ENO one-sided derivatives along one axis (3 ghost cells)."""
    phi, dx = _prepare(phi, axis, fill_box, dx, 3, "hj_eno3")
    d1, d2, d3 = undivided_differences(phi, axis, order=3)

    c = fill_box.slices()
    m1 = fill_box.shifted(axis, -1)
    p1 = fill_box.shifted(axis, 1)
    p2 = fill_box.shifted(axis, 2)

    phi_plus = np.zeros_like(phi)
    phi_minus = np.zeros_like(phi)

    # backward: D2 candidates at i-1 (left) and i (right)
    left = np.abs(d2[m1]) <= np.abs(d2[c])
    d2_sel = np.where(left, d2[m1], d2[c])
    d3_sel = np.where(left, select_smaller(d3[m1], d3[c]), select_smaller(d3[c], d3[p1]))
    d3_coef = np.where(left, 1.0 / 3.0, -1.0 / 6.0)
    phi_minus[c] = (d1[c] + 0.5 * d2_sel + d3_coef * d3_sel) / dx

    # forward: D2 candidates at i (left) and i+1 (right)
    left = np.abs(d2[c]) <= np.abs(d2[p1])
    d2_sel = np.where(left, d2[c], d2[p1])
    d3_sel = np.where(left, select_smaller(d3[c], d3[p1]), select_smaller(d3[p1], d3[p2]))
    d3_coef = np.where(left, -1.0 / 6.0, 1.0 / 3.0)
    phi_plus[c] = (d1[p1] - 0.5 * d2_sel + d3_coef * d3_sel) / dx
    return phi_plus, phi_minus
