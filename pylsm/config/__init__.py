"""
Configuration for pylsm.

Usage:
    >>> from pylsm.config import LevelSetOptions, load_options
    >>> options = LevelSetOptions(accuracy="HIGH", tvd_rk_order=2)
    >>> options.to_yaml("run.yaml")
    >>> assert load_options("run.yaml") == options
"""

from pylsm.config.core import LevelSetOptions
from pylsm.config.io import load_options, save_options, validate_yaml_options

__all__ = [
    "LevelSetOptions",
    "load_options",
    "save_options",
    "validate_yaml_options",
]
