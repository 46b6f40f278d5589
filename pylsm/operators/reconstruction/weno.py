"""
WENO5 one-sided derivatives for Hamilton-Jacobi equations.

Provides 5th-order accurate forward (plus) and backward (minus) biased
derivatives of a level set function along one axis.

Mathematical Background:
    HJ-WENO5 (Jiang & Peng) blends three third-order ENO candidates built
    from five consecutive first differences v1..v5:

        phi^1 =  v1/3 - 7 v2/6 + 11 v3/6
        phi^2 = -v2/6 + 5 v3/6 +    v4/3
        phi^3 =  v3/3 + 5 v4/6 -    v5/6

    Smoothness indicators:
        S1 = 13/12 (v1 - 2v2 + v3)^2 + 1/4 (v1 - 4v2 + 3v3)^2
        S2 = 13/12 (v2 - 2v3 + v4)^2 + 1/4 (v2 - v4)^2
        S3 = 13/12 (v3 - 2v4 + v5)^2 + 1/4 (3v3 - 4v4 + v5)^2

    Nonlinear weights:
        alpha_k = d_k / (S_k + eps)^2,  d = (0.1, 0.6, 0.3)
        w_k = alpha_k / sum(alpha)

    A candidate whose stencil straddles a kink has a large S_k and its weight
    vanishes as dx -> 0; in smooth regions the weights approach d_k and the
    blend is fifth-order accurate.

    Backward derivative at i:
        v1..v5 = D1 at i-2, i-1, i, i+1, i+2 (divided by dx)
    Forward derivative at i (mirrored stencil):
        v1..v5 = D1 at i+3, i+2, i+1, i, i-1 (divided by dx)

Ghost cells read: 3.

References:
    - Jiang & Peng (2000): Weighted ENO Schemes for Hamilton-Jacobi Equations
    - Jiang & Shu (1996): Efficient Implementation of Weighted ENO Schemes
    - Osher & Fedkiw (2003): Level Set Methods, Chapter 3.4
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from pylsm.operators.stencils.undivided import undivided_differences
from pylsm.utils.exceptions import validate_fill_box, validate_spacing

if TYPE_CHECKING:
    from numpy.typing import NDArray

    from pylsm.geometry.grid import IndexBox

# Ideal (linear) weights of the three candidates
WENO5_IDEAL_WEIGHTS = (0.1, 0.6, 0.3)


def weno5_smoothness_indicators(v1, v2, v3, v4, v5):
    """Jiang-Shu smoothness indicators (S1, S2, S3) of the three candidates."""
    s1 = 13.0 / 12.0 * (v1 - 2.0 * v2 + v3) ** 2 + 0.25 * (v1 - 4.0 * v2 + 3.0 * v3) ** 2
    s2 = 13.0 / 12.0 * (v2 - 2.0 * v3 + v4) ** 2 + 0.25 * (v2 - v4) ** 2
    s3 = 13.0 / 12.0 * (v3 - 2.0 * v4 + v5) ** 2 + 0.25 * (3.0 * v3 - 4.0 * v4 + v5) ** 2
    return s1, s2, s3


def weno5_weights(v1, v2, v3, v4, v5, epsilon: float | None = None):
    """
    Nonlinear WENO5 weights (w1, w2, w3).

    Args:
        v1..v5: Consecutive first differences (scalars or arrays)
        epsilon: Smoothness regulariser. Default is the scale-aware
            1e-6 * max(v_k^2) + 1e-99 evaluated per point.

    Returns:
        Tuple of weights summing to one at every point
    """
    s1, s2, s3 = weno5_smoothness_indicators(v1, v2, v3, v4, v5)
    if epsilon is None:
        epsilon = 1e-6 * np.maximum.reduce([np.square(v) for v in (v1, v2, v3, v4, v5)]) + 1e-99

    d1, d2, d3 = WENO5_IDEAL_WEIGHTS
    a1 = d1 / (s1 + epsilon) ** 2
    a2 = d2 / (s2 + epsilon) ** 2
    a3 = d3 / (s3 + epsilon) ** 2
    total = a1 + a2 + a3
    return a1 / total, a2 / total, a3 / total


def hj_weno5_combine(v1, v2, v3, v4, v5, epsilon: float | None = None):
    """Weighted blend of the three third-order candidates."""
    phi1 = v1 / 3.0 - 7.0 * v2 / 6.0 + 11.0 * v3 / 6.0
    phi2 = -v2 / 6.0 + 5.0 * v3 / 6.0 + v4 / 3.0
    phi3 = v3 / 3.0 + 5.0 * v4 / 6.0 - v5 / 6.0
    w1, w2, w3 = weno5_weights(v1, v2, v3, v4, v5, epsilon)
    return w1 * phi1 + w2 * phi2 + w3 * phi3


def weno5_stencil_differences(
    phi: NDArray[np.float64],
    axis: int,
    fill_box: IndexBox,
    dx: float,
    side: str,
) -> tuple[NDArray[np.float64], ...]:
    """
    First differences v1..v5 (divided by dx) feeding the WENO5 blend.

    Args:
        side: "minus" for the backward-biased stencil, "plus" for the forward one

    Returns:
        Five arrays shaped like the fill box
    """
    (d1,) = undivided_differences(phi, axis, order=1)
    if side == "minus":
        offsets = (-2, -1, 0, 1, 2)
    elif side == "plus":
        offsets = (3, 2, 1, 0, -1)
    else:
        raise ValueError(f"Invalid side '{side}', must be 'minus' or 'plus'")
    return tuple(d1[fill_box.shifted(axis, k)] / dx for k in offsets)


def hj_weno5_axis(
    phi: NDArray[np.float64],
    axis: int,
    fill_box: IndexBox,
    dx: float,
    epsilon: float | None = None,
) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
    """
    Fifth-order WENO one-sided derivatives along one axis.

    Args:
        phi: Level set buffer over the ghost box (3 ghost cells needed along ``axis``)
        axis: Axis to differentiate along
        fill_box: Points at which derivatives are computed
        dx: Spacing along ``axis``
        epsilon: Smoothness regulariser (default: scale-aware, see weno5_weights)

    Returns:
        (phi_plus, phi_minus): ghost-box-sized buffers, zero outside the fill box
    """
    phi = np.asarray(phi, dtype=np.float64)
    validate_fill_box(fill_box, phi.shape, ghost_width=3, component="hj_weno5", axes=(axis,))
    (dx,) = validate_spacing([dx], 1, component="hj_weno5")

    c = fill_box.slices()
    phi_plus = np.zeros_like(phi)
    phi_minus = np.zeros_like(phi)
    phi_minus[c] = hj_weno5_combine(*weno5_stencil_differences(phi, axis, fill_box, dx, "minus"), epsilon=epsilon)
    phi_plus[c] = hj_weno5_combine(*weno5_stencil_differences(phi, axis, fill_box, dx, "plus"), epsilon=epsilon)
    return phi_plus, phi_minus
