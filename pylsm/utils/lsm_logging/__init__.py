"""
Logging utilities for pylsm.

Usage:
    >>> from pylsm.utils.lsm_logging import get_logger, configure_logging
    >>> logger = get_logger(__name__)
    >>> configure_logging(level="DEBUG")
    >>> logger.info("Starting reinitialization...")
"""

from __future__ import annotations

from .logger import (
    LoggedOperation,
    LSMFormatter,
    LSMLogger,
    configure_logging,
    get_logger,
    log_kernel_configuration,
    log_stepping_progress,
)

__all__ = [
    "LSMFormatter",
    "LSMLogger",
    "LoggedOperation",
    "configure_logging",
    "get_logger",
    "log_kernel_configuration",
    "log_stepping_progress",
]
