"""
Pytest configuration and shared fixtures for the pylsm test suite.

This module provides common fixtures (grids, circle level sets) and the
path-based marker assignment used across the suite.
"""

import pytest

import numpy as np

from pylsm.geometry.grid import Grid, SpatialDerivativeAccuracy

# =============================================================================
# Test Configuration
# =============================================================================


def pytest_configure(config):
    """Configure pytest with custom markers and settings."""
    config.addinivalue_line("markers", "unit: Unit tests (fast, isolated)")
    config.addinivalue_line("markers", "integration: Integration tests (slower, cross-component)")
    config.addinivalue_line("markers", "mathematical: Mathematical property validation tests")
    config.addinivalue_line("markers", "slow: Slow tests (may take >10 seconds)")


def pytest_collection_modifyitems(config, items):
    """Modify test collection to add markers based on test paths."""
    for item in items:
        test_path = str(item.fspath)

        if "/unit/" in test_path:
            item.add_marker(pytest.mark.unit)
        elif "/integration/" in test_path:
            item.add_marker(pytest.mark.integration)
        elif "/mathematical/" in test_path:
            item.add_marker(pytest.mark.mathematical)

        # Mark slow tests based on name patterns
        if "large" in item.name or "slow" in item.name or "convergence" in item.name:
            item.add_marker(pytest.mark.slow)


# =============================================================================
# Grid Fixtures
# =============================================================================


@pytest.fixture
def grid_2d():
    """40x40 cells on [-1, 1]^2 with WENO5 ghost width."""
    return Grid.from_cell_counts(2, [40, 40], [-1.0, -1.0], [1.0, 1.0], SpatialDerivativeAccuracy.VERY_HIGH)


@pytest.fixture
def grid_3d():
    """Small 3D grid with ENO2 ghost width."""
    return Grid.from_cell_counts(3, [8, 10, 12], [0.0, 0.0, 0.0], [1.0, 1.25, 1.5], SpatialDerivativeAccuracy.MEDIUM)


@pytest.fixture(params=list(SpatialDerivativeAccuracy))
def accuracy(request):
    """Every accuracy level."""
    return request.param


# =============================================================================
# Level Set Fixtures
# =============================================================================


def circle_distance(grid: Grid, radius: float, center=(0.0, 0.0)) -> np.ndarray:
    """Signed distance to a circle over the grid's ghost box (negative inside)."""
    X, Y = grid.meshgrid()
    return np.sqrt((X - center[0]) ** 2 + (Y - center[1]) ** 2) - radius


@pytest.fixture
def circle_sdf(grid_2d):
    """Signed distance function of a circle of radius 0.5 on grid_2d."""
    return circle_distance(grid_2d, 0.5)


@pytest.fixture
def rng():
    """Seeded random generator."""
    return np.random.default_rng(20240611)
