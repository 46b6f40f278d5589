"""
Spatial derivative engine.

Organization:
    stencils/         - Undivided differences
    reconstruction/   - ENO1-3 and WENO5 one-sided derivatives
    differential/     - Accuracy dispatch, centred gradient, Godunov magnitude

Conceptual Hierarchy:
    Stencils (fixed differences) -> Reconstruction (adaptive) -> Differential Operators
"""

from pylsm.operators.differential import central_gradient, godunov_gradient_magnitude, upwind_hj_gradient
from pylsm.operators.reconstruction import hj_eno1_axis, hj_eno2_axis, hj_eno3_axis, hj_weno5_axis
from pylsm.operators.stencils import undivided_differences

__all__ = [
    "central_gradient",
    "godunov_gradient_magnitude",
    "hj_eno1_axis",
    "hj_eno2_axis",
    "hj_eno3_axis",
    "hj_weno5_axis",
    "undivided_differences",
    "upwind_hj_gradient",
]
