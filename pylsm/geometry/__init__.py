"""
Grids, boundary enforcement and level set drivers.

Organization:
    grid.py       - Grid descriptor, IndexBox and the accuracy table
    grid_io.py    - Lossless text/binary grid persistence
    boundary/     - Ghost-cell extrapolation
    level_set/    - Reinitialization, field extension, evolution terms, stepping loop
"""

from pylsm.geometry.grid import (
    ACCURACY_TABLE,
    Grid,
    IndexBox,
    SpatialDerivativeAccuracy,
    SpatialDerivativeScheme,
    as_accuracy,
    ghost_width,
    index_space_limits,
    scheme_for,
)
from pylsm.geometry.grid_io import read_grid_binary, read_grid_text, write_grid_binary, write_grid_text
from pylsm.geometry.boundary import ALL_BOUNDARIES, linear_extrapolation, signed_linear_extrapolation
from pylsm.geometry.level_set import (
    LevelSetStepper,
    StepperResult,
    extend_field,
    impose_mask,
    reinitialize,
    reinitialize_with_info,
)

__all__ = [
    "ACCURACY_TABLE",
    "ALL_BOUNDARIES",
    "Grid",
    "IndexBox",
    "LevelSetStepper",
    "SpatialDerivativeAccuracy",
    "SpatialDerivativeScheme",
    "StepperResult",
    "as_accuracy",
    "extend_field",
    "ghost_width",
    "impose_mask",
    "index_space_limits",
    "linear_extrapolation",
    "read_grid_binary",
    "read_grid_text",
    "reinitialize",
    "reinitialize_with_info",
    "scheme_for",
    "signed_linear_extrapolation",
    "write_grid_binary",
    "write_grid_text",
]
