"""Norms over fill boxes (optionally control-volume masked)."""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from pylsm.utils.exceptions import validate_fill_box, validate_same_shape
from pylsm.utils.numerical.control_volume import control_volume_selector

if TYPE_CHECKING:
    from numpy.typing import NDArray

    from pylsm.geometry.grid import IndexBox


def max_norm_diff(
    field1: NDArray[np.float64],
    field2: NDArray[np.float64],
    fill_box: IndexBox,
    control_volume: NDArray[np.float64] | None = None,
    control_volume_sign: int = 1,
) -> float:
    """
    Max-norm of field1 - field2 over the fill box.

    Cells excluded by the control volume do not contribute; if no cell
    contributes the result is 0.
    """
    field1 = np.asarray(field1, dtype=np.float64)
    validate_same_shape(field1, component="max_norm_diff", field2=field2)
    validate_fill_box(fill_box, field1.shape, component="max_norm_diff")

    c = fill_box.slices()
    selector = control_volume_selector(field1, fill_box, control_volume, control_volume_sign)
    diff = np.where(selector, np.abs(field1[c] - np.asarray(field2)[c]), 0.0)
    return float(np.max(diff)) if diff.size else 0.0
