"""
Ghost-cell extrapolation for level set buffers.

Two boundary policies fill the ghost layer of a buffer from its fill box:

    linear_extrapolation:
        u_ghost = u_b + m (u_b - u_{b∓1})
    signed_linear_extrapolation:
        u_ghost = u_b + m sign(u_b) |u_b - u_{b∓1}|

where b is the boundary cell of the fill box, b∓1 its interior neighbour
along the face normal and m the distance (in cells) of the ghost cell from b.

The signed variant keeps |phi| growing away from the domain, so it never
creates a spurious zero crossing in the ghost layer and keeps the gradient
magnitude near one for a signed distance function. For a distance function
whose interface lies inside the domain it coincides with plain linear
extrapolation.

Faces use the boundary location indices

    0: x_lo   1: x_hi   2: y_lo   3: y_hi   4: z_lo   5: z_hi

or ALL_BOUNDARIES. Axes are processed in order, each one over the range
already extended along earlier axes, so edge and corner ghost cells are
filled from face values.

Both functions work in place and return the buffer.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from pylsm.utils.exceptions import ContractViolationError, validate_fill_box

if TYPE_CHECKING:
    from collections.abc import Sequence

    from numpy.typing import NDArray

    from pylsm.geometry.grid import IndexBox

ALL_BOUNDARIES = -1

BOUNDARY_LOCATIONS = {
    0: "x_lo",
    1: "x_hi",
    2: "y_lo",
    3: "y_hi",
    4: "z_lo",
    5: "z_hi",
}


def linear_extrapolation(
    phi: NDArray[np.float64],
    fill_box: IndexBox,
    faces: int | Sequence[int] = ALL_BOUNDARIES,
) -> NDArray[np.float64]:
    """
    Fill ghost cells by two-point linear extrapolation along the face normal.

    Reproduces any field that is linear on the fill box exactly.

    Args:
        phi: Buffer over the ghost box, modified in place
        fill_box: Region holding valid values (at least 2 cells per axis)
        faces: Boundary location index, list of them, or ALL_BOUNDARIES

    Returns:
        ``phi``
    """
    return _extrapolate(phi, fill_box, faces, signed=False, component="linear_extrapolation")


def signed_linear_extrapolation(
    phi: NDArray[np.float64],
    fill_box: IndexBox,
    faces: int | Sequence[int] = ALL_BOUNDARIES,
) -> NDArray[np.float64]:
    """
    Fill ghost cells by linear extrapolation that keeps the sign of phi.

    Args:
        phi: Buffer over the ghost box, modified in place
        fill_box: Region holding valid values (at least 2 cells per axis)
        faces: Boundary location index, list of them, or ALL_BOUNDARIES

    Returns:
        ``phi``
    """
    return _extrapolate(phi, fill_box, faces, signed=True, component="signed_linear_extrapolation")


def selected_faces(faces: int | Sequence[int], ndim: int) -> set[int]:
    """Normalize a face selection to a set of boundary location indices."""
    if isinstance(faces, (int, np.integer)):
        faces = [int(faces)]
    faces = [int(f) for f in faces]
    if ALL_BOUNDARIES in faces:
        return set(range(2 * ndim))
    for f in faces:
        if not 0 <= f < 2 * ndim:
            valid = ", ".join(f"{i} ({BOUNDARY_LOCATIONS.get(i, i)})" for i in range(2 * ndim))
            raise ContractViolationError(
                f"Boundary location index {f} is invalid for a {ndim}-D buffer",
                component="boundary",
                suggested_action=f"Use one of {valid} or ALL_BOUNDARIES",
            )
    return set(faces)


def _extrapolate(phi, fill_box, faces, signed, component):
    validate_fill_box(fill_box, phi.shape, component=component)
    ndim = phi.ndim
    faces = selected_faces(faces, ndim)
    ranges = [(lo, hi + 1) for lo, hi in fill_box.ranges]

    for axis in range(ndim):
        lo, hi = fill_box.ranges[axis]
        n = phi.shape[axis]
        if hi - lo < 1:
            raise ContractViolationError(
                f"Extrapolation along axis {axis} needs at least 2 fill-box cells, got {hi - lo + 1}",
                component=component,
            )

        def index(sl, axis=axis):
            return tuple(sl if d == axis else slice(*ranges[d]) for d in range(ndim))

        def distances(values, axis=axis):
            shape = [1] * ndim
            shape[axis] = len(values)
            return np.asarray(values, dtype=np.float64).reshape(shape)

        if 2 * axis in faces and lo > 0:
            boundary = phi[index(slice(lo, lo + 1))]
            neighbour = phi[index(slice(lo + 1, lo + 2))]
            m = distances(np.arange(lo, 0, -1))
            phi[index(slice(0, lo))] = _ghost_values(boundary, neighbour, m, signed)

        if 2 * axis + 1 in faces and hi < n - 1:
            boundary = phi[index(slice(hi, hi + 1))]
            neighbour = phi[index(slice(hi - 1, hi))]
            m = distances(np.arange(1, n - hi))
            phi[index(slice(hi + 1, n))] = _ghost_values(boundary, neighbour, m, signed)

        ranges[axis] = (0, n)

    return phi


def _ghost_values(boundary, neighbour, m, signed):
    if signed:
        return boundary + m * np.sign(boundary) * np.abs(boundary - neighbour)
    return boundary + m * (boundary - neighbour)
