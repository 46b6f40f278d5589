"""
Smoothed-indicator volume and surface integrals over level set regions.

Mathematical Background:
    Smoothed Heaviside with half-width eps:

        H(phi) = 0                                           phi < -eps
               = 1/2 (1 + phi/eps + sin(pi phi/eps)/pi)      |phi| <= eps
               = 1                                           phi > eps

    and its derivative, the smoothed delta:

        delta(phi) = 1/(2 eps) (1 + cos(pi phi/eps))         |phi| <= eps
                   = 0                                       otherwise

    Volume over {phi < 0}:  sum F · H(-phi) · dV
    Volume over {phi > 0}:  sum F · H(phi) · dV
    Surface {phi = 0}:      sum F · delta(phi) · |grad phi| · dV   (co-area)

    Errors are O(eps) + O(dx); eps is usually a small multiple of dx.

Control-volume variants weight each summand by |cv| and keep only cells with
control_volume_sign · cv > 0, so partial sums over patches that partition a
region add up to the integral over the region.

References:
    - Osher & Fedkiw (2003): Level Set Methods, Chapter 1.5
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from pylsm.operators.differential.upwind_hj import central_gradient
from pylsm.utils.exceptions import ContractViolationError, validate_fill_box, validate_same_shape, validate_spacing
from pylsm.utils.numerical.control_volume import control_volume_weights

if TYPE_CHECKING:
    from collections.abc import Sequence

    from numpy.typing import NDArray

    from pylsm.geometry.grid import IndexBox

# Smoothing half-width in units of the largest grid spacing
DEFAULT_EPSILON_CELLS = 1.5


def default_epsilon(spacing: Sequence[float]) -> float:
    """Smoothing half-width 1.5·max(dx)."""
    return DEFAULT_EPSILON_CELLS * max(float(h) for h in np.atleast_1d(spacing))


def _check_epsilon(epsilon: float) -> float:
    if not epsilon > 0.0:
        raise ContractViolationError(f"Smoothing width epsilon must be positive, got {epsilon}", component="integrals")
    return float(epsilon)


def smoothed_heaviside(phi: NDArray[np.float64], epsilon: float) -> NDArray[np.float64]:
    epsilon = _check_epsilon(epsilon)
    phi = np.asarray(phi, dtype=np.float64)
    inner = 0.5 * (1.0 + phi / epsilon + np.sin(np.pi * phi / epsilon) / np.pi)
    return np.where(phi < -epsilon, 0.0, np.where(phi > epsilon, 1.0, inner))


def smoothed_delta(phi: NDArray[np.float64], epsilon: float) -> NDArray[np.float64]:
    epsilon = _check_epsilon(epsilon)
    phi = np.asarray(phi, dtype=np.float64)
    inner = 0.5 / epsilon * (1.0 + np.cos(np.pi * phi / epsilon))
    return np.where(np.abs(phi) > epsilon, 0.0, inner)


def _integrand_values(integrand, phi, c, component):
    if np.isscalar(integrand):
        return float(integrand)
    integrand = np.asarray(integrand, dtype=np.float64)
    validate_same_shape(phi, component=component, integrand=integrand)
    return integrand[c]


def _volume_integral(integrand, phi, fill_box, spacing, epsilon, control_volume, control_volume_sign, sign, component):
    phi = np.asarray(phi, dtype=np.float64)
    spacing = validate_spacing(spacing, phi.ndim, component=component)
    validate_fill_box(fill_box, phi.shape, component=component)

    c = fill_box.slices()
    f = _integrand_values(integrand, phi, c, component)
    weights = control_volume_weights(phi, fill_box, control_volume, control_volume_sign)
    dv = float(np.prod(spacing))
    return float(np.sum(f * smoothed_heaviside(sign * phi[c], epsilon) * weights) * dv)


def volume_integral_phi_less_than_zero(
    integrand: NDArray[np.float64] | float,
    phi: NDArray[np.float64],
    fill_box: IndexBox,
    spacing: Sequence[float],
    epsilon: float,
    control_volume: NDArray[np.float64] | None = None,
    control_volume_sign: int = 1,
) -> float:
    """
    Integral of ``integrand`` over the region {phi < 0}.

    Args:
        integrand: Buffer over the ghost box, or a constant
        phi: Level set buffer over the ghost box
        fill_box: Cells to sum over
        spacing: Grid spacing per axis
        epsilon: Smoothing half-width (see default_epsilon)
        control_volume: Optional per-cell control volume
        control_volume_sign: +1 or -1

    Returns:
        Partial integral over this patch
    """
    return _volume_integral(
        integrand,
        phi,
        fill_box,
        spacing,
        epsilon,
        control_volume,
        control_volume_sign,
        sign=-1.0,
        component="volume_integral_phi_less_than_zero",
    )


def volume_integral_phi_greater_than_zero(
    integrand: NDArray[np.float64] | float,
    phi: NDArray[np.float64],
    fill_box: IndexBox,
    spacing: Sequence[float],
    epsilon: float,
    control_volume: NDArray[np.float64] | None = None,
    control_volume_sign: int = 1,
) -> float:
    """Integral of ``integrand`` over the region {phi > 0}."""
    return _volume_integral(
        integrand,
        phi,
        fill_box,
        spacing,
        epsilon,
        control_volume,
        control_volume_sign,
        sign=1.0,
        component="volume_integral_phi_greater_than_zero",
    )


def surface_integral(
    integrand: NDArray[np.float64] | float,
    phi: NDArray[np.float64],
    fill_box: IndexBox,
    spacing: Sequence[float],
    epsilon: float,
    grad_phi: Sequence[NDArray[np.float64]] | None = None,
    control_volume: NDArray[np.float64] | None = None,
    control_volume_sign: int = 1,
) -> float:
    """
    Integral of ``integrand`` over the zero level set of phi.

    Args:
        integrand: Buffer over the ghost box, or a constant
        phi: Level set buffer over the ghost box
        fill_box: Cells to sum over
        spacing: Grid spacing per axis
        epsilon: Smoothing half-width
        grad_phi: Gradient components of phi; if omitted a centred gradient
            is computed (phi then needs one valid ghost cell around the fill box)
        control_volume: Optional per-cell control volume
        control_volume_sign: +1 or -1

    Returns:
        Partial surface integral over this patch
    """
    component = "surface_integral"
    phi = np.asarray(phi, dtype=np.float64)
    spacing = validate_spacing(spacing, phi.ndim, component=component)
    validate_fill_box(fill_box, phi.shape, component=component)

    if grad_phi is None:
        grad_phi = central_gradient(phi, fill_box, spacing)
    elif len(grad_phi) != phi.ndim:
        raise ContractViolationError(
            f"Expected {phi.ndim} gradient components, got {len(grad_phi)}", component=component
        )
    else:
        validate_same_shape(phi, component=component, **{f"grad_phi[{a}]": g for a, g in enumerate(grad_phi)})

    c = fill_box.slices()
    f = _integrand_values(integrand, phi, c, component)
    grad_norm = np.sqrt(sum(np.square(np.asarray(g)[c]) for g in grad_phi))
    weights = control_volume_weights(phi, fill_box, control_volume, control_volume_sign)
    dv = float(np.prod(spacing))
    return float(np.sum(f * smoothed_delta(phi[c], epsilon) * grad_norm * weights) * dv)
