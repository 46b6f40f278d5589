"""
High-order reconstruction of one-sided derivatives.

    - ENO (Essentially Non-Oscillatory): stencil selection, orders 1-3
    - WENO (Weighted ENO): smoothness-weighted blend, order 5

Usage:
    >>> from pylsm.operators.reconstruction import hj_weno5_axis
    >>> phi_plus, phi_minus = hj_weno5_axis(phi, axis=0, fill_box=grid.fillbox, dx=grid.dx[0])
"""

from pylsm.operators.reconstruction.eno import hj_eno1_axis, hj_eno2_axis, hj_eno3_axis, select_smaller
from pylsm.operators.reconstruction.weno import (
    WENO5_IDEAL_WEIGHTS,
    hj_weno5_axis,
    hj_weno5_combine,
    weno5_smoothness_indicators,
    weno5_stencil_differences,
    weno5_weights,
)

__all__ = [
    "WENO5_IDEAL_WEIGHTS",
    "hj_eno1_axis",
    "hj_eno2_axis",
    "hj_eno3_axis",
    "hj_weno5_axis",
    "hj_weno5_combine",
    "select_smaller",
    "weno5_smoothness_indicators",
    "weno5_stencil_differences",
    "weno5_weights",
]
