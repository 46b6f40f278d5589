#!/usr/bin/env python3
"""
Unit tests for pylsm/utils/exceptions.py

Tests the structured exception hierarchy and the contract validation helpers:
- LSMError (base exception)
- ContractViolationError, DimensionMismatchError, InsufficientGhostWidthError
- GridFileError
- validate_spacing, validate_same_shape, validate_fill_box
"""

import pytest

import numpy as np

from pylsm.geometry.grid import IndexBox
from pylsm.utils.exceptions import (
    ContractViolationError,
    DimensionMismatchError,
    GridFileError,
    InsufficientGhostWidthError,
    LSMError,
    validate_fill_box,
    validate_same_shape,
    validate_spacing,
)

# =============================================================================
# Test LSMError (Base Exception)
# =============================================================================


@pytest.mark.unit
def test_lsm_error_basic():
    """Test basic LSMError creation."""
    error = LSMError("Test error message", component="hj_weno5")

    assert "hj_weno5" in str(error)
    assert "Test error message" in str(error)
    assert error.component == "hj_weno5"


@pytest.mark.unit
def test_lsm_error_default_component():
    error = LSMError("Something failed")
    assert str(error).startswith("[pylsm]")


@pytest.mark.unit
def test_lsm_error_with_suggestion_and_code():
    error = LSMError("Error occurred", suggested_action="Use a finer grid", error_code="ERR001")

    error_str = str(error)
    assert "Suggestion: Use a finer grid" in error_str
    assert "Error Code: ERR001" in error_str
    assert error.error_code == "ERR001"


@pytest.mark.unit
def test_lsm_error_with_diagnostics():
    error = LSMError("Diagnostic test", diagnostic_data={"axis": 1, "width": 2})

    error_str = str(error)
    assert "Diagnostic Information" in error_str
    assert "axis: 1" in error_str
    assert "width: 2" in error_str


# =============================================================================
# Test subclasses
# =============================================================================


@pytest.mark.unit
def test_contract_violation_is_value_error():
    error = ContractViolationError("bad box", component="kernel")
    assert isinstance(error, ValueError)
    assert isinstance(error, LSMError)
    assert error.error_code == "CONTRACT_VIOLATION"


@pytest.mark.unit
def test_dimension_mismatch_error():
    error = DimensionMismatchError("phi", (10, 12), (10, 10), component="reinitialize")

    assert error.error_code == "DIMENSION_MISMATCH"
    assert error.diagnostic_data["provided_shape"] == "(10, 12)"
    assert "same ghost box" in str(error)
    assert isinstance(error, ContractViolationError)


@pytest.mark.unit
def test_dimension_mismatch_error_axis_count():
    error = DimensionMismatchError("phi", (10,), (10, 10))
    assert "axis convention" in str(error)


@pytest.mark.unit
def test_insufficient_ghost_width_error():
    error = InsufficientGhostWidthError(axis=1, required_width=3, available_width=2)

    assert error.error_code == "INSUFFICIENT_GHOST_WIDTH"
    assert error.diagnostic_data["required_ghost_width"] == 3
    assert "Axis 1 provides 2 ghost cells" in str(error)


@pytest.mark.unit
def test_grid_file_error():
    error = GridFileError("grid.yaml", "bad header")

    assert isinstance(error, ValueError)
    assert error.path == "grid.yaml"
    assert error.reason == "bad header"
    assert error.error_code == "GRID_FILE_INVALID"


# =============================================================================
# Validation helpers
# =============================================================================


@pytest.mark.unit
def test_validate_spacing_accepts_positive():
    assert validate_spacing([0.1, 0.2], 2) == (0.1, 0.2)


@pytest.mark.unit
@pytest.mark.parametrize("spacing", [[0.1, 0.0], [0.1, -1.0], [0.1, np.inf], [np.nan, 0.1]])
def test_validate_spacing_rejects_non_positive(spacing):
    with pytest.raises(ContractViolationError, match="must be positive"):
        validate_spacing(spacing, 2)


@pytest.mark.unit
def test_validate_spacing_wrong_length():
    with pytest.raises(ContractViolationError, match="Expected 3 spacing values"):
        validate_spacing([0.1, 0.1], 3)


@pytest.mark.unit
def test_validate_same_shape():
    ref = np.zeros((5, 6))
    validate_same_shape(ref, a=np.ones((5, 6)), b=None)

    with pytest.raises(DimensionMismatchError, match="Dimension mismatch for b"):
        validate_same_shape(ref, a=np.ones((5, 6)), b=np.ones((6, 5)))


@pytest.mark.unit
def test_validate_fill_box_ok():
    validate_fill_box(IndexBox(((3, 12), (3, 12))), (16, 16), ghost_width=3)


@pytest.mark.unit
def test_validate_fill_box_outside():
    with pytest.raises(ContractViolationError, match="outside the ghost box"):
        validate_fill_box(IndexBox(((0, 16),)), (16,))


@pytest.mark.unit
def test_validate_fill_box_wrong_dimension():
    with pytest.raises(ContractViolationError, match="Fill box has 1 axes"):
        validate_fill_box(IndexBox(((0, 3),)), (4, 4))


@pytest.mark.unit
def test_validate_fill_box_insufficient_ghost_width():
    with pytest.raises(InsufficientGhostWidthError) as exc_info:
        validate_fill_box(IndexBox(((3, 12), (2, 12))), (16, 16), ghost_width=3)
    assert exc_info.value.diagnostic_data["axis"] == 1


@pytest.mark.unit
def test_validate_fill_box_only_checks_requested_axes():
    box = IndexBox(((3, 12), (0, 15)))
    validate_fill_box(box, (16, 16), ghost_width=3, axes=(0,))
    with pytest.raises(InsufficientGhostWidthError):
        validate_fill_box(box, (16, 16), ghost_width=3, axes=(1,))
