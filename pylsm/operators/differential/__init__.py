"""Gradient operators assembled from the per-axis reconstructions."""

from pylsm.operators.differential.upwind_hj import (
    AXIS_KERNELS,
    central_gradient,
    godunov_gradient_magnitude,
    upwind_hj_gradient,
)

__all__ = [
    "AXIS_KERNELS",
    "central_gradient",
    "godunov_gradient_magnitude",
    "upwind_hj_gradient",
]
