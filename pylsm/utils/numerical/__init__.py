"""
Numerical toolbox: stable time steps, integrals and norms.

All reductions return per-patch partial results; combining them across
patches (minimum dt, summed integrals) is the driver's job.
"""

from pylsm.utils.numerical.control_volume import control_volume_selector, control_volume_weights
from pylsm.utils.numerical.integrals import (
    default_epsilon,
    smoothed_delta,
    smoothed_heaviside,
    surface_integral,
    volume_integral_phi_greater_than_zero,
    volume_integral_phi_less_than_zero,
)
from pylsm.utils.numerical.norms import max_norm_diff
from pylsm.utils.numerical.stable_dt import (
    UNCONSTRAINED_DT,
    compute_stable_advection_dt,
    compute_stable_const_normal_vel_dt,
    compute_stable_normal_vel_dt,
)

__all__ = [
    "UNCONSTRAINED_DT",
    "compute_stable_advection_dt",
    "compute_stable_const_normal_vel_dt",
    "compute_stable_normal_vel_dt",
    "control_volume_selector",
    "control_volume_weights",
    "default_epsilon",
    "max_norm_diff",
    "smoothed_delta",
    "smoothed_heaviside",
    "surface_integral",
    "volume_integral_phi_greater_than_zero",
    "volume_integral_phi_less_than_zero",
]
