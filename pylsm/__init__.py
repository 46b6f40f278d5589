from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pylsm")  # Matches the name in pyproject.toml
except PackageNotFoundError:
    # package is not installed
    __version__ = "0.0.0-dev"

from .alg import TVDRungeKutta
from .config import LevelSetOptions, load_options, save_options
from .core import PatchModule
from .geometry import (
    ALL_BOUNDARIES,
    Grid,
    IndexBox,
    LevelSetStepper,
    SpatialDerivativeAccuracy,
    SpatialDerivativeScheme,
    extend_field,
    ghost_width,
    linear_extrapolation,
    reinitialize,
    scheme_for,
    signed_linear_extrapolation,
)
from .operators import upwind_hj_gradient
from .utils.exceptions import (
    ContractViolationError,
    DimensionMismatchError,
    GridFileError,
    InsufficientGhostWidthError,
    LSMError,
)
from .utils.lsm_logging import configure_logging, get_logger

__all__ = [
    "ALL_BOUNDARIES",
    "ContractViolationError",
    "DimensionMismatchError",
    "Grid",
    "GridFileError",
    "IndexBox",
    "InsufficientGhostWidthError",
    "LSMError",
    "LevelSetOptions",
    "LevelSetStepper",
    "PatchModule",
    "SpatialDerivativeAccuracy",
    "SpatialDerivativeScheme",
    "TVDRungeKutta",
    "__version__",
    "configure_logging",
    "extend_field",
    "get_logger",
    "ghost_width",
    "linear_extrapolation",
    "load_options",
    "reinitialize",
    "save_options",
    "scheme_for",
    "signed_linear_extrapolation",
    "upwind_hj_gradient",
]
