"""
Upwind Hamilton-Jacobi gradients.

Dispatches the per-axis ENO/WENO kernels according to a spatial derivative
accuracy level and assembles one-sided gradients over every axis, plus the
Godunov gradient magnitude used by normal-velocity and reinitialization
Hamiltonians.

Godunov selection for H = s·|grad phi|, per axis:
    s > 0:  max( max(phi_x^-, 0)^2, min(phi_x^+, 0)^2 )
    s < 0:  max( min(phi_x^-, 0)^2, max(phi_x^+, 0)^2 )
    |grad phi| = sqrt(sum over axes)

Usage:
    >>> grad_plus, grad_minus = upwind_hj_gradient(phi, grid.fillbox, grid.dx, grid.accuracy)
    >>> mag = godunov_gradient_magnitude(grad_plus, grad_minus, upwind_sign=phi0)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from pylsm.geometry.grid import SpatialDerivativeAccuracy, SpatialDerivativeScheme, ghost_width, scheme_for
from pylsm.operators.reconstruction.eno import hj_eno1_axis, hj_eno2_axis, hj_eno3_axis
from pylsm.operators.reconstruction.weno import hj_weno5_axis
from pylsm.utils.exceptions import DimensionMismatchError, validate_fill_box, validate_spacing

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from numpy.typing import NDArray

    from pylsm.geometry.grid import IndexBox

AXIS_KERNELS: dict[SpatialDerivativeScheme, Callable] = {
    SpatialDerivativeScheme.ENO1: hj_eno1_axis,
    SpatialDerivativeScheme.ENO2: hj_eno2_axis,
    SpatialDerivativeScheme.ENO3: hj_eno3_axis,
    SpatialDerivativeScheme.WENO5: hj_weno5_axis,
}


def upwind_hj_gradient(
    phi: NDArray[np.float64],
    fill_box: IndexBox,
    spacing: Sequence[float],
    accuracy: SpatialDerivativeAccuracy | int | str = SpatialDerivativeAccuracy.VERY_HIGH,
) -> tuple[list[NDArray[np.float64]], list[NDArray[np.float64]]]:
    """
    Forward and backward one-sided gradients of phi on every axis.

    Args:
        phi: Level set buffer over the ghost box, ghost cells already populated
        fill_box: Points at which derivatives are computed
        spacing: Grid spacing per axis
        accuracy: Selects ENO1/ENO2/ENO3/WENO5

    Returns:
        (grad_plus, grad_minus): one ghost-box-sized buffer per axis each,
        zero outside the fill box

    Raises:
        ContractViolationError: If spacing or fill box are invalid
        InsufficientGhostWidthError: If the fill box is too close to the ghost box faces
    """
    phi = np.asarray(phi, dtype=np.float64)
    spacing = validate_spacing(spacing, phi.ndim, component="upwind_hj_gradient")
    validate_fill_box(fill_box, phi.shape, ghost_width=ghost_width(accuracy), component="upwind_hj_gradient")

    kernel = AXIS_KERNELS[scheme_for(accuracy)]
    grad_plus = []
    grad_minus = []
    for axis, dx in enumerate(spacing):
        plus, minus = kernel(phi, axis, fill_box, dx)
        grad_plus.append(plus)
        grad_minus.append(minus)
    return grad_plus, grad_minus


def central_gradient(
    phi: NDArray[np.float64],
    fill_box: IndexBox,
    spacing: Sequence[float],
) -> list[NDArray[np.float64]]:
    """Second-order centred gradient on every axis (1 ghost cell), zero outside the fill box."""
    phi = np.asarray(phi, dtype=np.float64)
    spacing = validate_spacing(spacing, phi.ndim, component="central_gradient")
    validate_fill_box(fill_box, phi.shape, ghost_width=1, component="central_gradient")

    c = fill_box.slices()
    grad = []
    for axis, dx in enumerate(spacing):
        g = np.zeros_like(phi)
        g[c] = (phi[fill_box.shifted(axis, 1)] - phi[fill_box.shifted(axis, -1)]) / (2.0 * dx)
        grad.append(g)
    return grad


def godunov_gradient_magnitude(
    grad_plus: Sequence[NDArray[np.float64]],
    grad_minus: Sequence[NDArray[np.float64]],
    upwind_sign: NDArray[np.float64] | float,
) -> NDArray[np.float64]:
    """
    Godunov |grad phi| for the Hamiltonian s·|grad phi|.

    Args:
        grad_plus, grad_minus: One-sided gradients per axis
        upwind_sign: Field (or scalar) whose sign is s; zero is treated as positive

    Returns:
        Gradient magnitude with the shape of the gradient buffers
    """
    if len(grad_plus) != len(grad_minus):
        raise DimensionMismatchError(
            "grad_minus", (len(grad_minus),), (len(grad_plus),), component="godunov_gradient_magnitude"
        )
    positive = np.asarray(upwind_sign) >= 0.0
    total = np.zeros(np.shape(grad_plus[0]))
    for plus, minus in zip(grad_plus, grad_minus, strict=True):
        pos_term = np.maximum(np.maximum(minus, 0.0) ** 2, np.minimum(plus, 0.0) ** 2)
        neg_term = np.maximum(np.minimum(minus, 0.0) ** 2, np.maximum(plus, 0.0) ** 2)
        total += np.where(positive, pos_term, neg_term)
    return np.sqrt(total)
