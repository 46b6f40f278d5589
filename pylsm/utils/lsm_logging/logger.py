#!/usr/bin/env python3
"""
Logging for pylsm.

All pylsm loggers share one console handler setup (optionally colored through
colorlog) and, when configured, one log file. Numerical kernels only ever log
at DEBUG level; drivers (reinitialization, field extension, stepping loops)
log INFO summaries when their options ask for verbose output.
"""

from __future__ import annotations

import inspect
import logging
import sys
import threading
import time
from pathlib import Path
from typing import Any, ClassVar

import colorlog

from pylsm.utils.exceptions import ContractViolationError

_FORMAT = "%(asctime)s - %(name)-20s - %(levelname)-8s - %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
_LOG_COLORS = {
    "DEBUG": "cyan",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "red,bg_white",
}


class LSMFormatter(logging.Formatter):
    """Record formatter with optional level colors and source location."""

    def __init__(self, use_colors: bool = False, include_location: bool = False):
        fmt = _FORMAT + (" [%(filename)s:%(lineno)d]" if include_location else "")
        super().__init__(fmt, datefmt=_DATE_FORMAT)
        self.use_colors = use_colors
        self.include_location = include_location
        self._colored = (
            colorlog.ColoredFormatter("%(log_color)s" + fmt, datefmt=_DATE_FORMAT, log_colors=_LOG_COLORS)
            if use_colors
            else None
        )

    def format(self, record):
        if self._colored is not None:
            return self._colored.format(record)
        return super().format(record)


class LSMLogger:
    """
    Registry of pylsm loggers and the settings they share.

    Loggers handed out by get_logger() are set up on first use and set up
    again whenever configure() changes the settings. The registry is guarded
    by a lock so patches stepped on several threads may ask for loggers
    concurrently.
    """

    _lock: ClassVar[threading.Lock] = threading.Lock()
    _loggers: ClassVar[dict[str, logging.Logger]] = {}
    _level: ClassVar[int] = logging.INFO
    _log_file_path: ClassVar[Path | None] = None
    _use_colors: ClassVar[bool] = True
    _include_location: ClassVar[bool] = False

    @classmethod
    def configure(
        cls,
        level: str | int = "INFO",
        log_to_file: bool = False,
        log_file_path: str | Path | None = None,
        use_colors: bool = True,
        include_location: bool = False,
    ):
        """
        Change the shared settings and apply them to every existing logger.

        Raises:
            ContractViolationError: If log_to_file is set without a log_file_path
        """
        if log_to_file and log_file_path is None:
            raise ContractViolationError(
                "log_to_file requires a log_file_path",
                component="configure_logging",
                suggested_action="Pass log_file_path='run.log' or leave log_to_file off",
            )
        with cls._lock:
            cls._level = getattr(logging, level.upper()) if isinstance(level, str) else level
            cls._use_colors = use_colors
            cls._include_location = include_location
            cls._log_file_path = None
            if log_to_file:
                cls._log_file_path = Path(log_file_path)
                cls._log_file_path.parent.mkdir(parents=True, exist_ok=True)

            for logger in cls._loggers.values():
                cls._setup_logger(logger)

    @classmethod
    def get_logger(cls, name: str) -> logging.Logger:
        if name in cls._loggers:
            return cls._loggers[name]
        with cls._lock:
            if name not in cls._loggers:
                logger = logging.getLogger(name)
                cls._setup_logger(logger)
                cls._loggers[name] = logger
        return cls._loggers[name]

    @classmethod
    def _setup_logger(cls, logger: logging.Logger):
        for handler in logger.handlers:
            handler.close()
        logger.handlers.clear()
        logger.setLevel(cls._level)

        console = logging.StreamHandler(sys.stdout)
        console.setFormatter(LSMFormatter(use_colors=cls._use_colors, include_location=cls._include_location))
        logger.addHandler(console)

        if cls._log_file_path is not None:
            file_handler = logging.FileHandler(cls._log_file_path)
            # no color escapes in files
            file_handler.setFormatter(LSMFormatter(use_colors=False, include_location=cls._include_location))
            logger.addHandler(file_handler)

        logger.propagate = False


def get_logger(name: str | None = None) -> logging.Logger:
    """
    Get the pylsm logger for a module.

    Args:
        name: Logger name; None uses the calling module's __name__
    """
    if name is None:
        frame = inspect.currentframe()
        caller = frame.f_back if frame else None
        name = caller.f_globals.get("__name__", "pylsm") if caller else "pylsm"
    return LSMLogger.get_logger(name)


def configure_logging(**kwargs):
    """
    Configure pylsm logging.

    Keyword Args:
        level: Logging level name or number
        log_to_file: Also write records to log_file_path
        log_file_path: Log file (parent directories are created)
        use_colors: Colored console output
        include_location: Append [file:line] to each record
    """
    LSMLogger.configure(**kwargs)


def log_kernel_configuration(logger: logging.Logger, kernel_name: str, config: dict[str, Any]):
    """Log the scheme parameters a driver is about to run with."""
    logger.info(f"Running {kernel_name}")
    for key, value in config.items():
        logger.debug(f"  {key}: {value}")


def log_stepping_progress(logger: logging.Logger, step: int, time_value: float, dt: float, extra: dict[str, Any] | None = None):
    """Log one step of a time-stepping loop."""
    msg = f"Step {step}: t = {time_value:.6e}, dt = {dt:.3e}"
    if extra:
        msg += " - " + ", ".join(f"{k}: {v}" for k, v in extra.items())
    logger.debug(msg)


class LoggedOperation:
    """Context manager that logs the start, end and duration of an operation."""

    def __init__(self, logger: logging.Logger, operation_name: str, log_level: int = logging.INFO):
        self.logger = logger
        self.operation_name = operation_name
        self.log_level = log_level
        self.start_time: float | None = None
        self.duration: float | None = None

    def __enter__(self):
        self.logger.log(self.log_level, f"Starting {self.operation_name}")
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.duration = time.perf_counter() - (self.start_time or 0.0)
        if exc_type is None:
            self.logger.log(self.log_level, f"Completed {self.operation_name} in {self.duration:.3f}s")
        else:
            self.logger.error(f"Failed {self.operation_name} after {self.duration:.3f}s: {exc_val}")
        return False
