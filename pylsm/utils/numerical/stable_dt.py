"""
CFL-based stable time step estimates for level set evolution.

Mathematical Background:
    For an explicit upwind discretization of phi_t + H(grad phi) = 0 the
    step must satisfy

        dt · max over cells of  sum_a |dH/dphi_a| / dx_a  <=  cfl_number

    Advection (H = v · grad phi):
        bound = sum_a |v_a| / dx_a
    Normal velocity (H = Vn |grad phi|):
        bound = |Vn| · sum_a max(|phi_a^+|, |phi_a^-|) / dx_a

    The axis-wise sum is a conservative (not Euclidean) bound. Each estimate
    returns dt = cfl_number / max(bound). Multiplying through by min(dx)
    recovers the form cfl_number · min(dx) / (max wave speed in cells per
    unit time).

    A region with zero wave speed everywhere imposes no constraint; the
    estimate then returns UNCONSTRAINED_DT, which is neutral under the
    driver's global minimum over patches.

References:
    - Osher & Fedkiw (2003): Level Set Methods, Chapter 3.5 and 6.1
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

import numpy as np

from pylsm.utils.exceptions import ContractViolationError, validate_fill_box, validate_same_shape, validate_spacing
from pylsm.utils.numerical.control_volume import control_volume_selector

if TYPE_CHECKING:
    from collections.abc import Sequence

    from numpy.typing import NDArray

    from pylsm.geometry.grid import IndexBox

UNCONSTRAINED_DT = math.inf


def _check_cfl(cfl_number: float, component: str) -> float:
    if not cfl_number > 0.0:
        raise ContractViolationError(f"CFL number must be positive, got {cfl_number}", component=component)
    return float(cfl_number)


def _dt_from_bound(bound: NDArray[np.float64], selector: NDArray[np.bool_], cfl_number: float) -> float:
    if not selector.any():
        return UNCONSTRAINED_DT
    max_bound = float(np.max(np.where(selector, bound, 0.0)))
    if max_bound <= 0.0:
        return UNCONSTRAINED_DT
    return cfl_number / max_bound


def compute_stable_advection_dt(
    velocity: Sequence[NDArray[np.float64]],
    fill_box: IndexBox,
    spacing: Sequence[float],
    cfl_number: float,
    control_volume: NDArray[np.float64] | None = None,
    control_volume_sign: int = 1,
) -> float:
    """
    Stable step for phi_t + v · grad phi = 0.

    Args:
        velocity: One velocity component buffer per axis
        fill_box: Cells over which the bound is maximised
        spacing: Grid spacing per axis
        cfl_number: Safety fraction of the stability limit
        control_volume: Optional per-cell control volume
        control_volume_sign: +1 or -1, selects cells with sign·cv > 0

    Returns:
        Largest stable dt on this patch, or UNCONSTRAINED_DT
    """
    component = "compute_stable_advection_dt"
    cfl_number = _check_cfl(cfl_number, component)
    velocity = [np.asarray(v, dtype=np.float64) for v in velocity]
    spacing = validate_spacing(spacing, len(velocity), component=component)
    ref = velocity[0]
    validate_same_shape(ref, component=component, **{f"velocity[{a}]": v for a, v in enumerate(velocity)})
    validate_fill_box(fill_box, ref.shape, component=component)

    c = fill_box.slices()
    bound = sum(np.abs(v[c]) / dx for v, dx in zip(velocity, spacing, strict=True))
    selector = control_volume_selector(ref, fill_box, control_volume, control_volume_sign)
    return _dt_from_bound(bound, selector, cfl_number)


def compute_stable_normal_vel_dt(
    vel_n: NDArray[np.float64],
    grad_plus: Sequence[NDArray[np.float64]],
    grad_minus: Sequence[NDArray[np.float64]],
    fill_box: IndexBox,
    spacing: Sequence[float],
    cfl_number: float,
    control_volume: NDArray[np.float64] | None = None,
    control_volume_sign: int = 1,
) -> float:
    """
    Stable step for phi_t + Vn |grad phi| = 0 with a spatially varying Vn.

    Args:
        vel_n: Normal velocity buffer
        grad_plus, grad_minus: One-sided gradients of phi per axis
        fill_box: Cells over which the bound is maximised
        spacing: Grid spacing per axis
        cfl_number: Safety fraction of the stability limit
        control_volume: Optional per-cell control volume
        control_volume_sign: +1 or -1

    Returns:
        Largest stable dt on this patch, or UNCONSTRAINED_DT
    """
    component = "compute_stable_normal_vel_dt"
    cfl_number = _check_cfl(cfl_number, component)
    vel_n = np.asarray(vel_n, dtype=np.float64)
    spacing = validate_spacing(spacing, len(grad_plus), component=component)
    validate_same_shape(vel_n, component=component, **_gradient_buffers(grad_plus, grad_minus))
    validate_fill_box(fill_box, vel_n.shape, component=component)

    c = fill_box.slices()
    bound = np.abs(vel_n[c]) * _gradient_sum(grad_plus, grad_minus, spacing, c)
    selector = control_volume_selector(vel_n, fill_box, control_volume, control_volume_sign)
    return _dt_from_bound(bound, selector, cfl_number)


def compute_stable_const_normal_vel_dt(
    vel_n: float,
    grad_plus: Sequence[NDArray[np.float64]],
    grad_minus: Sequence[NDArray[np.float64]],
    fill_box: IndexBox,
    spacing: Sequence[float],
    cfl_number: float,
    control_volume: NDArray[np.float64] | None = None,
    control_volume_sign: int = 1,
) -> float:
    """Stable step for phi_t + Vn |grad phi| = 0 with a constant Vn."""
    component = "compute_stable_const_normal_vel_dt"
    cfl_number = _check_cfl(cfl_number, component)
    ref = np.asarray(grad_plus[0])
    spacing = validate_spacing(spacing, len(grad_plus), component=component)
    validate_same_shape(ref, component=component, **_gradient_buffers(grad_plus, grad_minus))
    validate_fill_box(fill_box, ref.shape, component=component)

    c = fill_box.slices()
    bound = abs(float(vel_n)) * _gradient_sum(grad_plus, grad_minus, spacing, c)
    selector = control_volume_selector(ref, fill_box, control_volume, control_volume_sign)
    return _dt_from_bound(bound, selector, cfl_number)


def _gradient_buffers(grad_plus, grad_minus) -> dict[str, NDArray[np.float64]]:
    if len(grad_plus) != len(grad_minus):
        raise ContractViolationError(
            f"Got {len(grad_plus)} forward and {len(grad_minus)} backward gradient components",
            component="stable_dt",
        )
    buffers = {f"grad_plus[{a}]": g for a, g in enumerate(grad_plus)}
    buffers.update({f"grad_minus[{a}]": g for a, g in enumerate(grad_minus)})
    return buffers


def _gradient_sum(grad_plus, grad_minus, spacing, c):
    return sum(
        np.maximum(np.abs(plus[c]), np.abs(minus[c])) / dx
        for plus, minus, dx in zip(grad_plus, grad_minus, spacing, strict=True)
    )
