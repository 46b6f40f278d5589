"""
Time stepping loop for level set evolution on one grid block.

LevelSetStepper drives the kernels for a problem described by a PatchModule:

    velocity -> one-sided gradients -> RHS -> CFL dt -> TVD Runge-Kutta
    (module boundary condition between stages) -> periodic reinitialization

The velocity returned by the module selects the equation:
    sequence of per-axis buffers:  phi_t + v · grad phi = 0
    single buffer:                 phi_t + Vn |grad phi| = 0
    float:                         phi_t + Vn |grad phi| = 0, Vn constant

Example:
    >>> stepper = LevelSetStepper(grid, ExpandingCircle(), LevelSetOptions(reinit_interval=10))
    >>> result = stepper.run(t_final=0.25)
    >>> result.phi, result.time, result.num_steps
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import numpy as np

from pylsm.alg.tvd_runge_kutta import TVDRungeKutta
from pylsm.config.core import LevelSetOptions
from pylsm.core.patch_module import PatchModule
from pylsm.geometry.grid import ghost_width
from pylsm.geometry.level_set.evolution import (
    add_advection_term,
    add_const_normal_velocity_term,
    add_normal_velocity_term,
    zero_rhs,
)
from pylsm.geometry.level_set.reinitialization import reinitialize
from pylsm.operators.differential.upwind_hj import upwind_hj_gradient
from pylsm.utils.exceptions import (
    ContractViolationError,
    DimensionMismatchError,
    InsufficientGhostWidthError,
)
from pylsm.utils.lsm_logging import LoggedOperation, get_logger, log_kernel_configuration, log_stepping_progress
from pylsm.utils.numerical.stable_dt import (
    compute_stable_advection_dt,
    compute_stable_const_normal_vel_dt,
    compute_stable_normal_vel_dt,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from numpy.typing import NDArray

    from pylsm.geometry.grid import Grid

logger = get_logger(__name__)

ADVECTION = "advection"
NORMAL_VELOCITY = "normal_velocity"
CONST_NORMAL_VELOCITY = "const_normal_velocity"


@dataclass
class StepperResult:
    """Final state of a stepping run."""

    phi: NDArray[np.float64]
    time: float
    num_steps: int
    dt_history: list[float] = field(default_factory=list)
    num_reinitializations: int = 0


class LevelSetStepper:
    """
    Evolve a level set function with the hooks of a patch module.

    Attributes:
        grid: Grid all buffers live on
        module: PatchModule supplying initial data, boundary condition and velocity
        options: LevelSetOptions (accuracy, CFL, RK order, reinitialization schedule)
    """

    def __init__(self, grid: Grid, module: PatchModule, options: LevelSetOptions | None = None):
        if not isinstance(module, PatchModule):
            raise TypeError(
                f"{type(module).__name__} does not implement PatchModule "
                "(initialize, boundary_condition, velocity)"
            )
        self.grid = grid
        self.module = module
        self.options = options or LevelSetOptions()
        self.accuracy = self.options.accuracy_level

        required = ghost_width(self.accuracy)
        if grid.ghost_width < required:
            raise InsufficientGhostWidthError(
                axis=0, required_width=required, available_width=grid.ghost_width, component="LevelSetStepper"
            )

        self.rk = TVDRungeKutta(self.options.tvd_rk_order)
        logger.debug(f"LevelSetStepper initialized: {grid.num_dims}D, dims={grid.grid_dims}, {self.rk}")

    # ------------------------------------------------------------------
    # Velocity handling
    # ------------------------------------------------------------------

    def classify_velocity(self, velocity: Any) -> tuple[str, Any]:
        """Return (kind, value) for a velocity in the patch-module convention."""
        if np.isscalar(velocity):
            return CONST_NORMAL_VELOCITY, float(velocity)
        if isinstance(velocity, np.ndarray) and velocity.shape == self.grid.shape:
            return NORMAL_VELOCITY, velocity
        components = [np.asarray(v, dtype=np.float64) for v in velocity]
        if len(components) != self.grid.num_dims:
            raise ContractViolationError(
                f"Expected {self.grid.num_dims} velocity components, got {len(components)}",
                component="LevelSetStepper",
            )
        for axis, v in enumerate(components):
            if v.shape != self.grid.shape:
                raise DimensionMismatchError(f"velocity[{axis}]", v.shape, self.grid.shape, component="LevelSetStepper")
        return ADVECTION, components

    def rhs_function(self, kind: str, velocity: Any) -> Callable[[NDArray[np.float64]], NDArray[np.float64]]:
        """Right-hand side operator L(phi) for one velocity."""
        grid = self.grid

        def rhs(phi):
            grad_plus, grad_minus = upwind_hj_gradient(phi, grid.fillbox, grid.dx, self.accuracy)
            out = zero_rhs(phi)
            if kind == ADVECTION:
                return add_advection_term(out, grad_plus, grad_minus, velocity, grid.fillbox)
            if kind == NORMAL_VELOCITY:
                return add_normal_velocity_term(out, grad_plus, grad_minus, velocity, grid.fillbox)
            return add_const_normal_velocity_term(out, grad_plus, grad_minus, velocity, grid.fillbox)

        return rhs

    def stable_dt(self, phi: NDArray[np.float64], kind: str, velocity: Any) -> float:
        """CFL-limited step for the current state (may be UNCONSTRAINED_DT)."""
        grid = self.grid
        cfl = self.options.cfl_number
        if kind == ADVECTION:
            return compute_stable_advection_dt(velocity, grid.fillbox, grid.dx, cfl)
        grad_plus, grad_minus = upwind_hj_gradient(phi, grid.fillbox, grid.dx, self.accuracy)
        if kind == NORMAL_VELOCITY:
            return compute_stable_normal_vel_dt(velocity, grad_plus, grad_minus, grid.fillbox, grid.dx, cfl)
        return compute_stable_const_normal_vel_dt(velocity, grad_plus, grad_minus, grid.fillbox, grid.dx, cfl)

    # ------------------------------------------------------------------
    # Stepping
    # ------------------------------------------------------------------

    def initial_state(self, time: float = 0.0) -> NDArray[np.float64]:
        """Initial phi from the module, with its boundary condition applied."""
        phi = np.array(self.module.initialize(self.grid), dtype=np.float64)
        if phi.shape != self.grid.shape:
            raise DimensionMismatchError("phi", phi.shape, self.grid.shape, component="LevelSetStepper")
        self.module.boundary_condition(phi, self.grid, time)
        return phi

    def step(
        self,
        phi: NDArray[np.float64],
        time: float,
        dt: float | None = None,
        max_dt: float | None = None,
    ) -> tuple[NDArray[np.float64], float]:
        """
        Advance phi by one step.

        Args:
            phi: Current state over the ghost box (not modified)
            time: Current time
            dt: Step size; None selects the CFL-limited step
            max_dt: Upper bound applied to the CFL-limited step

        Returns:
            (new phi, dt used)

        Raises:
            ContractViolationError: If no finite step size can be determined
        """
        kind, velocity = self.classify_velocity(self.module.velocity(self.grid, time))
        if dt is None:
            dt = self.stable_dt(phi, kind, velocity)
            if max_dt is not None:
                dt = min(dt, max_dt)
        if not (math.isfinite(dt) and dt > 0.0):
            raise ContractViolationError(
                f"No usable step size (dt = {dt})",
                component="LevelSetStepper",
                suggested_action="The velocity imposes no CFL limit; pass dt or max_dt explicitly",
            )

        def refresh(u):
            self.module.boundary_condition(u, self.grid, time)

        phi_new = self.rk.advance(phi, self.rhs_function(kind, velocity), dt, self.grid.fillbox, refresh_ghosts=refresh)
        return phi_new, dt

    def run(
        self,
        t_final: float,
        max_steps: int | None = None,
        phi: NDArray[np.float64] | None = None,
        t_start: float = 0.0,
        mask: NDArray[np.bool_] | None = None,
    ) -> StepperResult:
        """
        Step from t_start to t_final (or until max_steps steps).

        Args:
            t_final: End time
            max_steps: Optional cap on the number of steps
            phi: Starting state (default: the module's initial state); its ghost
                cells are refilled with the module's boundary condition at t_start
            t_start: Starting time
            mask: Cells frozen during reinitialization (used when options.use_mask)

        Returns:
            StepperResult
        """
        level = logging.INFO if self.options.verbose else logging.DEBUG
        log_kernel_configuration(
            logger,
            "LevelSetStepper.run",
            {
                "accuracy": self.accuracy.name,
                "tvd_rk_order": self.options.tvd_rk_order,
                "cfl_number": self.options.cfl_number,
                "reinit_interval": self.options.reinit_interval,
                "t_final": t_final,
            },
        )

        if phi is None:
            phi = self.initial_state(t_start)
        else:
            phi = np.array(phi, dtype=np.float64)
            if phi.shape != self.grid.shape:
                raise DimensionMismatchError("phi", phi.shape, self.grid.shape, component="LevelSetStepper")
            self.module.boundary_condition(phi, self.grid, t_start)
        time = t_start
        result = StepperResult(phi=phi, time=time, num_steps=0)
        tolerance = 1e-12 * max(1.0, abs(t_final))
        reinit_mask = mask if self.options.use_mask else None

        with LoggedOperation(logger, f"level set stepping to t = {t_final}", log_level=level):
            while time < t_final - tolerance:
                if max_steps is not None and result.num_steps >= max_steps:
                    break
                phi, dt = self.step(phi, time, max_dt=t_final - time)
                time += dt
                result.num_steps += 1
                result.dt_history.append(dt)
                log_stepping_progress(logger, result.num_steps, time, dt)

                interval = self.options.reinit_interval
                if interval and result.num_steps % interval == 0:
                    phi = reinitialize(phi, self.grid, accuracy=self.accuracy, mask=reinit_mask, options=self.options)
                    self.module.boundary_condition(phi, self.grid, time)
                    result.num_reinitializations += 1

        result.phi = phi
        result.time = time
        return result

    def __repr__(self) -> str:
        return (
            f"LevelSetStepper(\n"
            f"  dimension={self.grid.num_dims},\n"
            f"  accuracy={self.accuracy.name},\n"
            f"  rk_order={self.rk.order},\n"
            f"  cfl={self.options.cfl_number}\n"
            f")"
        )
