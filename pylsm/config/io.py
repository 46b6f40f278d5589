"""
YAML I/O for level set options.

YAML Format
-----------
accuracy: VERY_HIGH
cfl_number: 0.5
tvd_rk_order: 3
reinit_interval: 10
reinit_band_cells: 10.0
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import yaml
from pydantic import ValidationError

if TYPE_CHECKING:
    from .core import LevelSetOptions


def load_options(path: str | Path) -> LevelSetOptions:
    """
    Load level set options from a YAML file.

    Parameters
    ----------
    path : str | Path
        Path to YAML options file

    Returns
    -------
    LevelSetOptions
        Validated options

    Raises
    ------
    FileNotFoundError
        If the file doesn't exist
    yaml.YAMLError
        If YAML syntax is invalid
    ValueError
        If the options are invalid

    Examples
    --------
    >>> options = load_options("runs/circle.yaml")
    >>> phi = reinitialize(phi, grid, options=options)
    """
    from .core import LevelSetOptions

    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Options file not found: {path}")

    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise yaml.YAMLError(f"Invalid YAML syntax in {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid options in {path}: expected a mapping, got {type(data).__name__}")

    try:
        return LevelSetOptions.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"Invalid options in {path}:\n{e}") from e


def save_options(options: LevelSetOptions, path: str | Path) -> None:
    """
    Save level set options to a YAML file.

    Parameters
    ----------
    options : LevelSetOptions
        Options to save
    path : str | Path
        Output file path
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    options_dict = options.model_dump(exclude_none=True, mode="json")

    with open(path, "w") as f:
        yaml.dump(options_dict, f, default_flow_style=False, sort_keys=False, indent=2)


def validate_yaml_options(path: str | Path) -> tuple[bool, str]:
    """
    Validate a YAML options file without keeping the result.

    Returns
    -------
    tuple[bool, str]
        (is_valid, message)
    """
    try:
        load_options(path)
        return True, "Options are valid"
    except FileNotFoundError as e:
        return False, str(e)
    except yaml.YAMLError as e:
        return False, f"YAML syntax error: {e}"
    except ValueError as e:
        return False, f"Validation error: {e}"
