"""
Unit tests for undivided differences and their valid ranges.
"""

import pytest

import numpy as np

from pylsm.operators.stencils import along, undivided_differences
from pylsm.utils.exceptions import ContractViolationError


@pytest.mark.unit
def test_quadratic_differences_1d():
    i = np.arange(8, dtype=float)
    d1, d2, d3 = undivided_differences(i**2, axis=0)

    assert np.isnan(d1[0])
    assert np.array_equal(d1[1:], 2.0 * i[1:] - 1.0)

    assert np.isnan(d2[0]) and np.isnan(d2[-1])
    assert np.allclose(d2[1:-1], 2.0)

    assert np.isnan(d3[:2]).all() and np.isnan(d3[-1])
    assert np.allclose(d3[2:-1], 0.0)


@pytest.mark.unit
def test_cubic_third_difference_is_constant():
    i = np.arange(10, dtype=float)
    _, _, d3 = undivided_differences(i**3, axis=0)
    assert np.allclose(d3[2:-1], 6.0)


@pytest.mark.unit
def test_storage_convention():
    phi = np.array([0.0, 1.0, 4.0, 2.0, 7.0, 3.0])
    d1, d2, d3 = undivided_differences(phi, axis=0)
    for k in range(2, 5):
        assert d2[k] == pytest.approx(d1[k + 1] - d1[k])
    for k in range(2, 5):
        assert d3[k] == pytest.approx(d2[k] - d2[k - 1])


@pytest.mark.unit
def test_second_axis_of_2d_buffer():
    x = np.arange(5, dtype=float)[:, None]
    y = np.arange(7, dtype=float)[None, :]
    phi = x + 3.0 * y**2
    d1, d2 = undivided_differences(phi, axis=1, order=2)

    assert d1.shape == phi.shape
    assert np.isnan(d1[:, 0]).all()
    assert np.allclose(d1[:, 1:], 3.0 * (2.0 * y[:, 1:] - 1.0))
    assert np.allclose(d2[:, 1:-1], 6.0)


@pytest.mark.unit
def test_order_limits_output():
    assert len(undivided_differences(np.zeros(5), axis=0, order=1)) == 1
    assert len(undivided_differences(np.zeros(5), axis=0, order=2)) == 2


@pytest.mark.unit
def test_invalid_arguments():
    with pytest.raises(ContractViolationError, match="order must be 1, 2 or 3"):
        undivided_differences(np.zeros(5), axis=0, order=4)
    with pytest.raises(ContractViolationError, match="out of range"):
        undivided_differences(np.zeros((5, 5)), axis=2)
    with pytest.raises(ContractViolationError, match="too few"):
        undivided_differences(np.zeros((3, 5)), axis=0, order=3)


@pytest.mark.unit
def test_along():
    assert along(1, 3, slice(2, 4)) == (slice(None), slice(2, 4), slice(None))
    assert along(0, 2, 5) == (5, slice(None))
