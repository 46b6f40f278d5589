"""
Utilities for pylsm.

    exceptions     - Structured errors and contract validation helpers
    lsm_logging    - Logging configuration
    numerical      - CFL estimates, integrals, norms, control-volume masks
"""

from pylsm.utils.exceptions import (
    ContractViolationError,
    DimensionMismatchError,
    GridFileError,
    InsufficientGhostWidthError,
    LSMError,
)
from pylsm.utils.lsm_logging import configure_logging, get_logger

__all__ = [
    "ContractViolationError",
    "DimensionMismatchError",
    "GridFileError",
    "InsufficientGhostWidthError",
    "LSMError",
    "configure_logging",
    "get_logger",
]
