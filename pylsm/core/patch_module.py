"""
Patch-module capability protocol.

A patch module supplies the problem-specific pieces of a level set
computation on one grid block: the initial level set function, the physical
boundary condition, and the velocity field. The stepping loop only depends on
this protocol, never on a particular grid-management framework.

Velocity convention:
    A sequence with one buffer per axis is an external advection velocity
    (phi_t + v · grad phi = 0). A single buffer, or a float, is a normal
    velocity (phi_t + Vn |grad phi| = 0).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence

    import numpy as np
    from numpy.typing import NDArray

    from pylsm.geometry.grid import Grid


@runtime_checkable
class PatchModule(Protocol):
    """
    Protocol for problem-specific hooks injected into LevelSetStepper.

    Methods:
        - initialize(grid) -> phi buffer over the ghost box
        - boundary_condition(phi, grid, time) -> fills ghost cells in place
        - velocity(grid, time) -> advection components, normal velocity buffer or float
    """

    def initialize(self, grid: Grid) -> NDArray[np.float64]:
        """Initial level set function over the grid's ghost box."""
        ...

    def boundary_condition(self, phi: NDArray[np.float64], grid: Grid, time: float) -> None:
        """Fill the ghost cells of ``phi`` in place."""
        ...

    def velocity(
        self, grid: Grid, time: float
    ) -> Sequence[NDArray[np.float64]] | NDArray[np.float64] | float:
        """Velocity at ``time``; see the module docstring for the convention."""
        ...
