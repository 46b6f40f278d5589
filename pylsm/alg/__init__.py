"""
Time integration algorithms.

Usage:
    >>> from pylsm.alg import TVDRungeKutta
    >>> phi = TVDRungeKutta(order=3).advance(phi, rhs, dt, grid.fillbox, refresh_ghosts=bc)
"""

from pylsm.alg.tvd_runge_kutta import (
    TVDRungeKutta,
    tvd_rk1_step,
    tvd_rk2_stage1,
    tvd_rk2_stage2,
    tvd_rk3_stage1,
    tvd_rk3_stage2,
    tvd_rk3_stage3,
)

__all__ = [
    "TVDRungeKutta",
    "tvd_rk1_step",
    "tvd_rk2_stage1",
    "tvd_rk2_stage2",
    "tvd_rk3_stage1",
    "tvd_rk3_stage2",
    "tvd_rk3_stage3",
]
