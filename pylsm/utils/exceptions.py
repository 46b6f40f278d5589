"""
Exception classes for pylsm with actionable error messages.

Every kernel treats a violated calling contract (mismatched extents, index
ranges outside the ghost box, too few ghost cells for the requested scheme,
non-positive spacing) as fatal: the error is raised immediately and no
partial result is returned. Nothing inside the kernels retries.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import numpy as np

if TYPE_CHECKING:
    from collections.abc import Sequence


class LSMError(Exception):
    """
    Base exception for pylsm errors with context and suggestions.

    Provides structured error information including:
    - Clear error description
    - Component (kernel or driver) that raised it
    - Suggested action for resolution
    - Optional diagnostic data
    """

    def __init__(
        self,
        message: str,
        component: str | None = None,
        suggested_action: str | None = None,
        error_code: str | None = None,
        diagnostic_data: dict[str, Any] | None = None,
    ):
        self.component = component or "pylsm"
        self.suggested_action = suggested_action
        self.error_code = error_code
        self.diagnostic_data = diagnostic_data or {}

        full_message = f"[{self.component}] {message}"

        if self.suggested_action:
            full_message += f"\nSuggestion: {self.suggested_action}"

        if self.error_code:
            full_message += f"\nError Code: {self.error_code}"

        if self.diagnostic_data:
            full_message += "\nDiagnostic Information:"
            for key, value in self.diagnostic_data.items():
                full_message += f"\n   - {key}: {value}"

        super().__init__(full_message)


class ContractViolationError(LSMError, ValueError):
    """Raised when a kernel is called with arguments that break its calling contract."""

    def __init__(
        self,
        message: str,
        component: str | None = None,
        suggested_action: str | None = None,
        diagnostic_data: dict[str, Any] | None = None,
        error_code: str = "CONTRACT_VIOLATION",
    ):
        super().__init__(
            message=message,
            component=component,
            suggested_action=suggested_action,
            error_code=error_code,
            diagnostic_data=diagnostic_data,
        )


class DimensionMismatchError(ContractViolationError):
    """Raised when buffer shapes don't match each other or the grid."""

    def __init__(
        self,
        array_name: str,
        provided_shape: tuple,
        expected_shape: tuple,
        component: str | None = None,
    ):
        diagnostic_data = {
            "array_name": array_name,
            "provided_shape": str(provided_shape),
            "expected_shape": str(expected_shape),
        }

        if len(provided_shape) != len(expected_shape):
            suggested_action = (
                f"{array_name} has {len(provided_shape)} axes but {len(expected_shape)} are expected; "
                "check the axis convention (axis d is spatial axis d)"
            )
        else:
            suggested_action = f"Allocate {array_name} over the same ghost box as the other buffers: {expected_shape}"

        super().__init__(
            message=f"Dimension mismatch for {array_name}",
            component=component,
            suggested_action=suggested_action,
            diagnostic_data=diagnostic_data,
            error_code="DIMENSION_MISMATCH",
        )


class InsufficientGhostWidthError(ContractViolationError):
    """Raised when the fill box sits too close to the ghost box for the requested stencil."""

    def __init__(
        self,
        axis: int,
        required_width: int,
        available_width: int,
        component: str | None = None,
    ):
        super().__init__(
            message=f"Axis {axis} provides {available_width} ghost cells but the scheme needs {required_width}",
            component=component,
            suggested_action="Build the grid with the same accuracy level as the derivative scheme",
            diagnostic_data={
                "axis": axis,
                "required_ghost_width": required_width,
                "available_ghost_width": available_width,
            },
            error_code="INSUFFICIENT_GHOST_WIDTH",
        )


class GridFileError(LSMError, ValueError):
    """Raised when a persisted grid file is foreign, truncated or corrupt."""

    def __init__(self, path: Any, reason: str):
        super().__init__(
            message=f"Cannot read grid from {path}: {reason}",
            component="grid_io",
            suggested_action="Only read files produced by the matching pylsm grid writer",
            error_code="GRID_FILE_INVALID",
        )
        self.path = path
        self.reason = reason


# Validation helpers shared by the kernels


def validate_spacing(spacing: Sequence[float], ndim: int, component: str | None = None) -> tuple[float, ...]:
    """Check that one positive, finite spacing is given per axis."""
    spacing = tuple(float(h) for h in np.atleast_1d(spacing))
    if len(spacing) != ndim:
        raise ContractViolationError(
            f"Expected {ndim} spacing values, got {len(spacing)}",
            component=component,
            diagnostic_data={"spacing": spacing},
        )
    for axis, h in enumerate(spacing):
        if not np.isfinite(h) or h <= 0.0:
            raise ContractViolationError(
                f"Spacing along axis {axis} must be positive, got {h}",
                component=component,
                suggested_action="Pass the grid spacing dx per axis",
            )
    return spacing


def validate_same_shape(reference: np.ndarray, component: str | None = None, **arrays: np.ndarray | None) -> None:
    """Check that every named buffer has the shape of the reference buffer."""
    for name, array in arrays.items():
        if array is None:
            continue
        if np.shape(array) != reference.shape:
            raise DimensionMismatchError(
                array_name=name,
                provided_shape=np.shape(array),
                expected_shape=reference.shape,
                component=component,
            )


def validate_fill_box(
    fill_box: Any,
    shape: tuple[int, ...],
    ghost_width: int = 0,
    component: str | None = None,
    axes: Sequence[int] | None = None,
) -> None:
    """
    Check that a fill box lies inside a buffer with enough ghost cells around it.

    Args:
        fill_box: IndexBox (or anything with ``ranges``) over the buffer
        shape: Shape of the ghost-box-sized buffer
        ghost_width: Number of ghost cells the stencil reads on each side
        component: Name of the calling kernel, for error messages
        axes: Axes on which the ghost width is required (default: all)

    Raises:
        ContractViolationError: If the fill box dimension or ranges are invalid
        InsufficientGhostWidthError: If a face has fewer than ``ghost_width`` cells
    """
    ranges = fill_box.ranges
    if len(ranges) != len(shape):
        raise ContractViolationError(
            f"Fill box has {len(ranges)} axes but the buffer has {len(shape)}",
            component=component,
            diagnostic_data={"fill_box": ranges, "shape": shape},
        )
    for axis, ((lo, hi), n) in enumerate(zip(ranges, shape, strict=True)):
        if lo > hi or lo < 0 or hi > n - 1:
            raise ContractViolationError(
                f"Fill box range ({lo}, {hi}) on axis {axis} is outside the ghost box (0, {n - 1})",
                component=component,
            )
        if axes is not None and axis not in axes:
            continue
        available = min(lo, n - 1 - hi)
        if available < ghost_width:
            raise InsufficientGhostWidthError(
                axis=axis, required_width=ghost_width, available_width=available, component=component
            )
