"""
Control-volume masks.

A control volume is a per-cell weight that a patch-managing driver uses to
exclude cells owned by another patch (covered or duplicated cells) from
reductions. Its sign selects a sub-region:

    control_volume_sign = +1:  cells with cv > 0 contribute
    control_volume_sign = -1:  cells with cv < 0 contribute

Contributing cells are weighted by |cv| in integrals; for a 0/1 mask the
weight is one on every included cell.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from pylsm.utils.exceptions import ContractViolationError, validate_same_shape

if TYPE_CHECKING:
    from numpy.typing import NDArray

    from pylsm.geometry.grid import IndexBox


def _check_sign(control_volume_sign: int) -> int:
    if control_volume_sign not in (1, -1):
        raise ContractViolationError(
            f"control_volume_sign must be +1 or -1, got {control_volume_sign}",
            component="control_volume",
        )
    return control_volume_sign


def control_volume_selector(
    reference: NDArray[np.float64],
    fill_box: IndexBox,
    control_volume: NDArray[np.float64] | None = None,
    control_volume_sign: int = 1,
) -> NDArray[np.bool_]:
    """
    Boolean array over the fill box: True where a cell contributes.

    Args:
        reference: Any buffer over the same ghost box (used for the shape check)
        fill_box: Region of interest
        control_volume: Per-cell control volume, or None to include every cell
        control_volume_sign: +1 or -1, see module docstring
    """
    _check_sign(control_volume_sign)
    if control_volume is None:
        return np.ones(fill_box.shape, dtype=bool)
    validate_same_shape(reference, component="control_volume", control_volume=control_volume)
    return control_volume_sign * np.asarray(control_volume)[fill_box.slices()] > 0.0


def control_volume_weights(
    reference: NDArray[np.float64],
    fill_box: IndexBox,
    control_volume: NDArray[np.float64] | None = None,
    control_volume_sign: int = 1,
) -> NDArray[np.float64]:
    """Per-cell weights over the fill box: |cv| on contributing cells, 0 elsewhere."""
    selector = control_volume_selector(reference, fill_box, control_volume, control_volume_sign)
    if control_volume is None:
        return selector.astype(np.float64)
    return np.where(selector, np.abs(np.asarray(control_volume)[fill_box.slices()]), 0.0)
