"""
Undivided differences along one axis.

Undivided differences are the building blocks of the ENO/WENO Hamilton-Jacobi
derivatives. They carry no 1/dx factor; the reconstruction divides once at
the end.

Storage convention (index i of the returned arrays):
    D1[i] = phi[i] - phi[i-1]                  difference across i-1/2
    D2[i] = D1[i+1] - D1[i]                    centred on i
    D3[i] = D2[i] - D2[i-1]                    centred on i-1/2

Valid ranges along the differenced axis (N = buffer length):
    D1: [1, N-1]    D2: [1, N-2]    D3: [2, N-2]

Each differencing stage erodes the valid range by one cell. Entries outside
the valid range are NaN so that an out-of-range read cannot go unnoticed.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from pylsm.utils.exceptions import ContractViolationError

if TYPE_CHECKING:
    from numpy.typing import NDArray


def along(axis: int, ndim: int, index: slice | int) -> tuple[slice | int, ...]:
    """Index tuple selecting ``index`` on ``axis`` and everything on other axes."""
    return tuple(index if d == axis else slice(None) for d in range(ndim))


def undivided_differences(
    phi: NDArray[np.float64],
    axis: int,
    order: int = 3,
) -> list[NDArray[np.float64]]:
    """
    Compute undivided differences D1..D_order of ``phi`` along ``axis``.

    Args:
        phi: Ghost-box-sized field buffer
        axis: Axis to difference along
        order: Highest difference order (1, 2 or 3)

    Returns:
        [D1, ..., D_order], each the shape of ``phi``

    Raises:
        ContractViolationError: If order is not in 1..3 or the axis is too short
    """
    if order not in (1, 2, 3):
        raise ContractViolationError(
            f"Undivided difference order must be 1, 2 or 3, got {order}", component="undivided_differences"
        )
    ndim = phi.ndim
    if not 0 <= axis < ndim:
        raise ContractViolationError(
            f"Axis {axis} out of range for a {ndim}-D buffer", component="undivided_differences"
        )
    n = phi.shape[axis]
    if n < order + 1:
        raise ContractViolationError(
            f"Axis {axis} has {n} cells, too few for order {order} differences",
            component="undivided_differences",
        )

    phi = np.asarray(phi, dtype=np.float64)

    d1 = np.full(phi.shape, np.nan)
    d1[along(axis, ndim, slice(1, n))] = np.diff(phi, axis=axis)
    diffs = [d1]
    if order == 1:
        return diffs

    d2 = np.full(phi.shape, np.nan)
    d2[along(axis, ndim, slice(1, n - 1))] = np.diff(d1[along(axis, ndim, slice(1, n))], axis=axis)
    diffs.append(d2)
    if order == 2:
        return diffs

    d3 = np.full(phi.shape, np.nan)
    d3[along(axis, ndim, slice(2, n - 1))] = np.diff(d2[along(axis, ndim, slice(1, n - 1))], axis=axis)
    diffs.append(d3)
    return diffs
