"""
Boundary enforcement for level set buffers.

Usage:
    >>> from pylsm.geometry.boundary import signed_linear_extrapolation
    >>> signed_linear_extrapolation(phi, grid.fillbox)  # fills every ghost cell in place
"""

from pylsm.geometry.boundary.extrapolation import (
    ALL_BOUNDARIES,
    BOUNDARY_LOCATIONS,
    linear_extrapolation,
    selected_faces,
    signed_linear_extrapolation,
)

__all__ = [
    "ALL_BOUNDARIES",
    "BOUNDARY_LOCATIONS",
    "linear_extrapolation",
    "selected_faces",
    "signed_linear_extrapolation",
]
