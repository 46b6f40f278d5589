"""
Right-hand-side terms for level set evolution.

The level set equation is assembled as phi_t = rhs with

    rhs = - v · grad phi          (external advection)
          - Vn |grad phi|         (motion in the normal direction)

Each term uses the one-sided gradients from upwind_hj_gradient and picks the
upwind side per cell:

    Advection, per axis:  v_a > 0 -> phi_a^-,  v_a < 0 -> phi_a^+,  v_a = 0 -> 0
    Normal velocity:      Godunov |grad phi| with sign(Vn) as the upwind sign

All add_* functions update ``rhs`` in place on the fill box and return it.

References:
    - Osher & Fedkiw (2003): Level Set Methods, Chapters 3 and 6
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from pylsm.operators.differential.upwind_hj import godunov_gradient_magnitude
from pylsm.utils.exceptions import ContractViolationError, validate_fill_box, validate_same_shape

if TYPE_CHECKING:
    from collections.abc import Sequence

    from numpy.typing import NDArray

    from pylsm.geometry.grid import IndexBox


def zero_rhs(like: NDArray[np.float64]) -> NDArray[np.float64]:
    """Zero right-hand side over the ghost box of ``like``."""
    return np.zeros(np.shape(like), dtype=np.float64)


def _check_gradients(rhs, grad_plus, grad_minus, fill_box, component):
    if len(grad_plus) != len(grad_minus) or len(grad_plus) != rhs.ndim:
        raise ContractViolationError(
            f"Expected {rhs.ndim} forward and backward gradient components, "
            f"got {len(grad_plus)} and {len(grad_minus)}",
            component=component,
        )
    buffers = {f"grad_plus[{a}]": g for a, g in enumerate(grad_plus)}
    buffers.update({f"grad_minus[{a}]": g for a, g in enumerate(grad_minus)})
    validate_same_shape(rhs, component=component, **buffers)
    validate_fill_box(fill_box, rhs.shape, component=component)


def add_advection_term(
    rhs: NDArray[np.float64],
    grad_plus: Sequence[NDArray[np.float64]],
    grad_minus: Sequence[NDArray[np.float64]],
    velocity: Sequence[NDArray[np.float64]],
    fill_box: IndexBox,
) -> NDArray[np.float64]:
    """
    Subtract the upwinded advection term v · grad phi from ``rhs``.

    Args:
        rhs: Right-hand side buffer, updated in place
        grad_plus, grad_minus: One-sided gradients per axis
        velocity: One velocity component buffer per axis
        fill_box: Region to update

    Returns:
        ``rhs``
    """
    component = "add_advection_term"
    _check_gradients(rhs, grad_plus, grad_minus, fill_box, component)
    if len(velocity) != rhs.ndim:
        raise ContractViolationError(
            f"Expected {rhs.ndim} velocity components, got {len(velocity)}", component=component
        )
    validate_same_shape(rhs, component=component, **{f"velocity[{a}]": v for a, v in enumerate(velocity)})

    c = fill_box.slices()
    for plus, minus, v in zip(grad_plus, grad_minus, velocity, strict=True):
        v_c = np.asarray(v)[c]
        upwind = np.where(v_c > 0.0, minus[c], np.where(v_c < 0.0, plus[c], 0.0))
        rhs[c] -= v_c * upwind
    return rhs


def add_normal_velocity_term(
    rhs: NDArray[np.float64],
    grad_plus: Sequence[NDArray[np.float64]],
    grad_minus: Sequence[NDArray[np.float64]],
    vel_n: NDArray[np.float64],
    fill_box: IndexBox,
) -> NDArray[np.float64]:
    """Subtract Vn |grad phi| (Godunov) from ``rhs`` for a normal velocity field."""
    component = "add_normal_velocity_term"
    _check_gradients(rhs, grad_plus, grad_minus, fill_box, component)
    validate_same_shape(rhs, component=component, vel_n=vel_n)

    c = fill_box.slices()
    vn_c = np.asarray(vel_n)[c]
    magnitude = godunov_gradient_magnitude([g[c] for g in grad_plus], [g[c] for g in grad_minus], vn_c)
    rhs[c] -= vn_c * magnitude
    return rhs


def add_const_normal_velocity_term(
    rhs: NDArray[np.float64],
    grad_plus: Sequence[NDArray[np.float64]],
    grad_minus: Sequence[NDArray[np.float64]],
    vel_n: float,
    fill_box: IndexBox,
) -> NDArray[np.float64]:
    """Subtract Vn |grad phi| (Godunov) from ``rhs`` for a constant normal velocity."""
    component = "add_const_normal_velocity_term"
    _check_gradients(rhs, grad_plus, grad_minus, fill_box, component)

    c = fill_box.slices()
    vel_n = float(vel_n)
    magnitude = godunov_gradient_magnitude([g[c] for g in grad_plus], [g[c] for g in grad_minus], vel_n)
    rhs[c] -= vel_n * magnitude
    return rhs
