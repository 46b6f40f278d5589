"""
Options bundle for level set computations.

Options specify HOW kernels and drivers run (scheme accuracy, step-size
safety factors, reinitialization schedule), never WHAT is computed; the
level set function, velocities and grids are supplied by the caller.

Defaults follow the usual high-accuracy configuration: WENO5 spatial
derivatives, third-order TVD Runge-Kutta and CFL number 0.5.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from pylsm.utils.exceptions import ContractViolationError

if TYPE_CHECKING:
    from pathlib import Path

    from pylsm.geometry.grid import SpatialDerivativeAccuracy

AccuracyName = Literal["LOW", "MEDIUM", "HIGH", "VERY_HIGH"]


class LevelSetOptions(BaseModel):
    """
    Immutable per-run options.

    Attributes
    ----------
    accuracy : {"LOW", "MEDIUM", "HIGH", "VERY_HIGH"}
        Spatial derivative accuracy (ENO1/ENO2/ENO3/WENO5), default VERY_HIGH.
        Enum members, integers 0..3 and lowercase names are accepted.
    cfl_number : float
        Safety fraction of the stable step for evolution (0 < c <= 1)
    tvd_rk_order : int
        TVD Runge-Kutta order for evolution (1..3)
    reinit_horizon : float | None
        Pseudo-time horizon for reinitialization; None means
        reinit_band_cells · max(dx)
    reinit_cfl_number : float
        Pseudo-time step as a fraction of min(dx)
    reinit_tvd_rk_order : int
        TVD Runge-Kutta order for reinitialization (1..3)
    reinit_interval : int
        Reinitialize every this many evolution steps (0 = never)
    reinit_band_cells : float
        Width, in cells, of the band that the default horizon reaches
    use_mask : bool
        Freeze cells flagged by the caller's mask during reinitialization
    verbose : bool
        Log INFO summaries from drivers
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    accuracy: AccuracyName = "VERY_HIGH"
    cfl_number: float = Field(default=0.5, gt=0, le=1.0)
    tvd_rk_order: int = Field(default=3, ge=1, le=3)
    reinit_horizon: float | None = Field(default=None, gt=0)
    reinit_cfl_number: float = Field(default=0.5, gt=0, le=1.0)
    reinit_tvd_rk_order: int = Field(default=2, ge=1, le=3)
    reinit_interval: int = Field(default=0, ge=0)
    reinit_band_cells: float = Field(default=10.0, gt=0)
    use_mask: bool = False
    verbose: bool = False

    @field_validator("accuracy", mode="before")
    @classmethod
    def normalize_accuracy(cls, value: Any) -> str:
        """Accept enum members, integers and case-insensitive names."""
        from pylsm.geometry.grid import as_accuracy

        try:
            return as_accuracy(value).name
        except ContractViolationError as e:
            raise ValueError(f"Unknown accuracy level {value!r}") from e

    @property
    def accuracy_level(self) -> SpatialDerivativeAccuracy:
        from pylsm.geometry.grid import SpatialDerivativeAccuracy

        return SpatialDerivativeAccuracy[self.accuracy]

    def reinitialization_horizon(self, spacing) -> float:
        """Pseudo-time horizon for reinitialization on a grid with the given spacing."""
        if self.reinit_horizon is not None:
            return self.reinit_horizon
        return self.reinit_band_cells * max(float(h) for h in spacing)

    def to_yaml(self, path: str | Path) -> None:
        """Save options to a YAML file."""
        from .io import save_options

        save_options(self, path)

    @classmethod
    def from_yaml(cls, path: str | Path) -> LevelSetOptions:
        """Load options from a YAML file."""
        from .io import load_options

        return load_options(path)
