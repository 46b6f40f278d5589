"""
TVD (strong-stability-preserving) Runge-Kutta time integration.

Mathematical Background:
    For du/dt = L(u), the Shu-Osher TVD Runge-Kutta schemes are convex
    combinations of forward Euler steps, so any stability property that holds
    for forward Euler at step dt holds for them at the same dt.

    RK1:  u^{n+1} = u^n + dt L(u^n)

    RK2:  u^(1)   = u^n + dt L(u^n)
          u^{n+1} = 1/2 u^n + 1/2 (u^(1) + dt L(u^(1)))

    RK3:  u^(1)   = u^n + dt L(u^n)
          u^(2)   = 3/4 u^n + 1/4 (u^(1) + dt L(u^(1)))
          u^{n+1} = 1/3 u^n + 2/3 (u^(2) + dt L(u^(2)))

    The right-hand side is re-evaluated on each intermediate state, so the
    ghost cells of every stage must be refreshed before the next evaluation.

Stage kernels write only inside the fill box. The returned buffer carries the
ghost cells of the stage's input state until the caller refreshes them.

References:
    - Shu & Osher (1988): Efficient Implementation of Essentially
      Non-oscillatory Shock-Capturing Schemes
    - Gottlieb & Shu (1998): Total Variation Diminishing Runge-Kutta Schemes
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from pylsm.utils.exceptions import ContractViolationError, validate_fill_box, validate_same_shape

if TYPE_CHECKING:
    from collections.abc import Callable

    from numpy.typing import NDArray

    from pylsm.geometry.grid import IndexBox


def _check(component, fill_box, state, **others):
    validate_same_shape(state, component=component, **others)
    validate_fill_box(fill_box, state.shape, component=component)


def tvd_rk1_step(
    u_cur: NDArray[np.float64],
    rhs: NDArray[np.float64],
    dt: float,
    fill_box: IndexBox,
) -> NDArray[np.float64]:
    """Forward Euler step: u_next = u_cur + dt·rhs on the fill box."""
    _check("tvd_rk1_step", fill_box, u_cur, rhs=rhs)
    c = fill_box.slices()
    u_next = np.array(u_cur, dtype=np.float64, copy=True)
    u_next[c] = u_cur[c] + dt * rhs[c]
    return u_next


def tvd_rk2_stage1(u_cur, rhs, dt, fill_box):
    """First RK2 stage (a forward Euler step)."""
    return tvd_rk1_step(u_cur, rhs, dt, fill_box)


def tvd_rk2_stage2(
    u_stage1: NDArray[np.float64],
    rhs: NDArray[np.float64],
    u_cur: NDArray[np.float64],
    dt: float,
    fill_box: IndexBox,
) -> NDArray[np.float64]:
    """Second RK2 stage: u_next = (u_cur + u_stage1 + dt·L(u_stage1)) / 2."""
    _check("tvd_rk2_stage2", fill_box, u_stage1, rhs=rhs, u_cur=u_cur)
    c = fill_box.slices()
    u_next = np.array(u_stage1, dtype=np.float64, copy=True)
    u_next[c] = 0.5 * (u_cur[c] + u_stage1[c] + dt * rhs[c])
    return u_next


def tvd_rk3_stage1(u_cur, rhs, dt, fill_box):
    """First RK3 stage (a forward Euler step)."""
    return tvd_rk1_step(u_cur, rhs, dt, fill_box)


def tvd_rk3_stage2(
    u_stage1: NDArray[np.float64],
    rhs: NDArray[np.float64],
    u_cur: NDArray[np.float64],
    dt: float,
    fill_box: IndexBox,
) -> NDArray[np.float64]:
    """Second RK3 stage: u_stage2 = 3/4 u_cur + 1/4 (u_stage1 + dt·L(u_stage1))."""
    _check("tvd_rk3_stage2", fill_box, u_stage1, rhs=rhs, u_cur=u_cur)
    c = fill_box.slices()
    u_next = np.array(u_stage1, dtype=np.float64, copy=True)
    u_next[c] = 0.75 * u_cur[c] + 0.25 * (u_stage1[c] + dt * rhs[c])
    return u_next


def tvd_rk3_stage3(
    u_stage2: NDArray[np.float64],
    rhs: NDArray[np.float64],
    u_cur: NDArray[np.float64],
    dt: float,
    fill_box: IndexBox,
) -> NDArray[np.float64]:
    """Third RK3 stage: u_next = 1/3 u_cur + 2/3 (u_stage2 + dt·L(u_stage2))."""
    _check("tvd_rk3_stage3", fill_box, u_stage2, rhs=rhs, u_cur=u_cur)
    c = fill_box.slices()
    u_next = np.array(u_stage2, dtype=np.float64, copy=True)
    u_next[c] = u_cur[c] / 3.0 + 2.0 / 3.0 * (u_stage2[c] + dt * rhs[c])
    return u_next


class TVDRungeKutta:
    """
    Stage-wise TVD Runge-Kutta driver of order 1, 2 or 3.

    Example:
        >>> rk = TVDRungeKutta(order=3)
        >>> phi = rk.advance(phi, rhs=lambda u: -u, dt=0.1, fill_box=grid.fillbox,
        ...                  refresh_ghosts=lambda u: signed_linear_extrapolation(u, grid.fillbox))
    """

    def __init__(self, order: int = 3):
        if order not in (1, 2, 3):
            raise ContractViolationError(
                f"TVD Runge-Kutta order must be 1, 2 or 3, got {order}",
                component="TVDRungeKutta",
                suggested_action="Set tvd_rk_order to 1, 2 or 3",
            )
        self.order = order

    @property
    def num_stages(self) -> int:
        return self.order

    def advance(
        self,
        state: NDArray[np.float64],
        rhs: Callable[[NDArray[np.float64]], NDArray[np.float64]],
        dt: float,
        fill_box: IndexBox,
        refresh_ghosts: Callable[[NDArray[np.float64]], object] | None = None,
    ) -> NDArray[np.float64]:
        """
        Advance ``state`` by one step of size ``dt``.

        Args:
            state: Current buffer over the ghost box (not modified)
            rhs: Maps a stage state to its right-hand side buffer
            dt: Step size
            fill_box: Region updated by each stage
            refresh_ghosts: Called in place on every stage result

        Returns:
            New buffer holding the advanced state
        """
        u_cur = np.asarray(state, dtype=np.float64)

        def refresh(u):
            if refresh_ghosts is not None:
                refresh_ghosts(u)
            return u

        u1 = refresh(tvd_rk1_step(u_cur, rhs(u_cur), dt, fill_box))
        if self.order == 1:
            return u1
        if self.order == 2:
            return refresh(tvd_rk2_stage2(u1, rhs(u1), u_cur, dt, fill_box))

        u2 = refresh(tvd_rk3_stage2(u1, rhs(u1), u_cur, dt, fill_box))
        return refresh(tvd_rk3_stage3(u2, rhs(u2), u_cur, dt, fill_box))

    def __repr__(self) -> str:
        return f"TVDRungeKutta(order={self.order})"
