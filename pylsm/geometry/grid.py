"""
Structured grid descriptor for level set kernels.

A Grid describes the index space and geometry shared by every field buffer of
one computation: the physical bounds of the interior and of the ghost-extended
domain, cell counts, spacing, and the index boxes kernels read and write.

Conventions:
    - Cell-centred: interior cell n on axis a sits at x_lo[a] + (n + 1/2)·dx[a].
    - Ghost-box index i on axis a sits at x_lo_ghostbox[a] + i·dx[a].
    - Array axis d is spatial axis d (phi[i, j, k] with i along x), C-ordered.
    - Index boxes hold inclusive (lo, hi) ranges; the ghost box starts at 0.
    - Undivided difference scratch buffers: D1 stored at index i is the
      difference across i-1/2, D2 at i is centred on i, D3 at i is centred
      on i-1/2. Each differencing stage erodes the valid range by one cell.

The ghost width is a pure function of the spatial derivative accuracy:

    ======== ======= ===========
    accuracy scheme  ghost width
    ======== ======= ===========
    LOW      ENO1    1
    MEDIUM   ENO2    2
    HIGH     ENO3    3
    VERY_HIGH WENO5  3
    ======== ======= ===========

References:
    - Osher & Fedkiw (2003): Level Set Methods and Dynamic Implicit Surfaces
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from enum import Enum, IntEnum
from types import MappingProxyType
from typing import TYPE_CHECKING

import numpy as np

from pylsm.utils.exceptions import ContractViolationError
from pylsm.utils.lsm_logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from numpy.typing import NDArray

logger = get_logger(__name__)


class SpatialDerivativeAccuracy(IntEnum):
    """Accuracy level for spatial derivatives (selects scheme and ghost width)."""

    LOW = 0
    MEDIUM = 1
    HIGH = 2
    VERY_HIGH = 3


class SpatialDerivativeScheme(Enum):
    """Hamilton-Jacobi upwind derivative schemes."""

    ENO1 = "eno1"
    ENO2 = "eno2"
    ENO3 = "eno3"
    WENO5 = "weno5"


ACCURACY_TABLE = MappingProxyType(
    {
        SpatialDerivativeAccuracy.LOW: (SpatialDerivativeScheme.ENO1, 1),
        SpatialDerivativeAccuracy.MEDIUM: (SpatialDerivativeScheme.ENO2, 2),
        SpatialDerivativeAccuracy.HIGH: (SpatialDerivativeScheme.ENO3, 3),
        SpatialDerivativeAccuracy.VERY_HIGH: (SpatialDerivativeScheme.WENO5, 3),
    }
)


def as_accuracy(accuracy: SpatialDerivativeAccuracy | int | str) -> SpatialDerivativeAccuracy:
    """
    Normalize an accuracy argument.

    Accepts the enum, its integer value (0-3) or its case-insensitive name
    ("low", "medium", "high", "very_high").
    """
    if isinstance(accuracy, SpatialDerivativeAccuracy):
        return accuracy
    if isinstance(accuracy, str):
        try:
            return SpatialDerivativeAccuracy[accuracy.strip().upper()]
        except KeyError:
            raise ContractViolationError(
                f"Unknown accuracy level '{accuracy}'",
                component="grid",
                suggested_action=f"Use one of {[a.name for a in SpatialDerivativeAccuracy]}",
            ) from None
    try:
        return SpatialDerivativeAccuracy(int(accuracy))
    except (TypeError, ValueError):
        raise ContractViolationError(
            f"Unknown accuracy level {accuracy!r}",
            component="grid",
            suggested_action="Use an integer in 0..3 or a SpatialDerivativeAccuracy member",
        ) from None


def ghost_width(accuracy: SpatialDerivativeAccuracy | int | str) -> int:
    """Number of ghost cells required by the scheme of an accuracy level."""
    return ACCURACY_TABLE[as_accuracy(accuracy)][1]


def scheme_for(accuracy: SpatialDerivativeAccuracy | int | str) -> SpatialDerivativeScheme:
    """Derivative scheme used at an accuracy level."""
    return ACCURACY_TABLE[as_accuracy(accuracy)][0]


@dataclass(frozen=True)
class IndexBox:
    """
    Inclusive per-axis index ranges over a ghost-box-sized buffer.

    Example:
        >>> box = IndexBox(((3, 12), (3, 12)))
        >>> phi[box.slices()]           # the 10x10 block
        >>> phi[box.shifted(0, +1)]     # same block moved one cell along x
    """

    ranges: tuple[tuple[int, int], ...]

    def __post_init__(self):
        normalized = tuple((int(lo), int(hi)) for lo, hi in self.ranges)
        object.__setattr__(self, "ranges", normalized)

    @classmethod
    def from_shape(cls, shape: Sequence[int]) -> IndexBox:
        """Box covering a whole buffer."""
        return cls(tuple((0, int(n) - 1) for n in shape))

    @property
    def ndim(self) -> int:
        return len(self.ranges)

    @property
    def lo(self) -> tuple[int, ...]:
        return tuple(lo for lo, _ in self.ranges)

    @property
    def hi(self) -> tuple[int, ...]:
        return tuple(hi for _, hi in self.ranges)

    @property
    def shape(self) -> tuple[int, ...]:
        return tuple(hi - lo + 1 for lo, hi in self.ranges)

    def slices(self) -> tuple[slice, ...]:
        return tuple(slice(lo, hi + 1) for lo, hi in self.ranges)

    def shifted(self, axis: int, offset: int) -> tuple[slice, ...]:
        """Slices of this box translated by ``offset`` cells along ``axis``."""
        return tuple(
            slice(lo + offset, hi + offset + 1) if d == axis else slice(lo, hi + 1)
            for d, (lo, hi) in enumerate(self.ranges)
        )

    def grow(self, width: int | Sequence[int], axis: int | None = None) -> IndexBox:
        """Box enlarged by ``width`` cells on both sides (of one axis, or all)."""
        widths = [width] * self.ndim if np.isscalar(width) else list(width)
        return IndexBox(
            tuple(
                (lo - w, hi + w) if axis is None or d == axis else (lo, hi)
                for d, ((lo, hi), w) in enumerate(zip(self.ranges, widths, strict=True))
            )
        )

    def contains(self, other: IndexBox) -> bool:
        return other.ndim == self.ndim and all(
            slo <= olo and ohi <= shi for (slo, shi), (olo, ohi) in zip(self.ranges, other.ranges, strict=True)
        )


@dataclass(frozen=True)
class Grid:
    """
    Index space and spacing descriptor shared by all field buffers.

    Build with :meth:`from_spacing` or :meth:`from_cell_counts`; a Grid is
    immutable once built, compares by value, and :meth:`copy` returns a deep,
    independent copy.

    Attributes:
        num_dims: Spatial dimension (2 or 3)
        x_lo, x_hi: Physical bounds of the interior
        x_lo_ghostbox, x_hi_ghostbox: Centres of the first/last ghost-box cells
        grid_dims: Interior cell counts per axis
        grid_dims_ghostbox: Ghost-extended cell counts per axis
        dx: Spacing per axis
        num_gridpts: Total number of ghost-box cells
        ghostbox, fillbox: Index boxes for buffers and for the interior
        fillbox_d1, fillbox_d2, fillbox_d3: Valid ranges of undivided differences
        accuracy: Spatial derivative accuracy the ghost width was sized for
    """

    num_dims: int
    x_lo: tuple[float, ...]
    x_hi: tuple[float, ...]
    x_lo_ghostbox: tuple[float, ...]
    x_hi_ghostbox: tuple[float, ...]
    grid_dims: tuple[int, ...]
    grid_dims_ghostbox: tuple[int, ...]
    dx: tuple[float, ...]
    num_gridpts: int
    ghostbox: IndexBox
    fillbox: IndexBox
    fillbox_d1: IndexBox
    fillbox_d2: IndexBox
    fillbox_d3: IndexBox
    accuracy: SpatialDerivativeAccuracy

    def __post_init__(self):
        if not self.ghostbox.contains(self.fillbox):
            raise ContractViolationError(
                "Fill box must lie inside the ghost box",
                component="grid",
                diagnostic_data={"ghostbox": self.ghostbox.ranges, "fillbox": self.fillbox.ranges},
            )

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def from_spacing(
        cls,
        num_dims: int,
        dx: float | Sequence[float],
        x_lo: Sequence[float],
        x_hi: Sequence[float],
        accuracy: SpatialDerivativeAccuracy | int | str = SpatialDerivativeAccuracy.VERY_HIGH,
    ) -> Grid:
        """
        Build a grid from the desired spacing.

        Cell counts are ceil((x_hi - x_lo)/dx), and x_hi is moved up to
        x_lo + count·dx so that the domain length is an exact multiple of the
        spacing. The upper bound may therefore be widened (never narrowed).

        Args:
            num_dims: 2 or 3
            dx: Spacing, one value for all axes or one per axis
            x_lo: Lower corner of the interior
            x_hi: Requested upper corner of the interior
            accuracy: Accuracy level that sizes the ghost layer
        """
        num_dims = _check_num_dims(num_dims)
        x_lo_t, x_hi_t = _check_bounds(num_dims, x_lo, x_hi)
        dx_t = tuple(float(h) for h in np.broadcast_to(np.asarray(dx, dtype=float), (num_dims,)))
        for axis, h in enumerate(dx_t):
            if not np.isfinite(h) or h <= 0.0:
                raise ContractViolationError(
                    f"Spacing along axis {axis} must be positive, got {h}", component="grid"
                )

        grid_dims = []
        new_hi = []
        for lo, hi, h in zip(x_lo_t, x_hi_t, dx_t, strict=True):
            ratio = (hi - lo) / h
            n = round(ratio)
            if not math.isclose(ratio, n, rel_tol=1e-10, abs_tol=1e-10):
                n = math.ceil(ratio)
            n = max(int(n), 1)
            grid_dims.append(n)
            new_hi.append(lo + n * h)

        if any(not math.isclose(a, b, rel_tol=1e-12, abs_tol=0.0) for a, b in zip(new_hi, x_hi_t, strict=True)):
            logger.debug(f"Upper bound widened from {x_hi_t} to {tuple(new_hi)} to fit spacing {dx_t}")
        else:
            new_hi = list(x_hi_t)

        return cls._build(num_dims, x_lo_t, tuple(new_hi), tuple(grid_dims), dx_t, as_accuracy(accuracy))

    @classmethod
    def from_cell_counts(
        cls,
        num_dims: int,
        grid_dims: Sequence[int],
        x_lo: Sequence[float],
        x_hi: Sequence[float],
        accuracy: SpatialDerivativeAccuracy | int | str = SpatialDerivativeAccuracy.VERY_HIGH,
    ) -> Grid:
        """Build a grid from interior cell counts; spacing is (x_hi - x_lo)/count."""
        num_dims = _check_num_dims(num_dims)
        x_lo_t, x_hi_t = _check_bounds(num_dims, x_lo, x_hi)
        if len(grid_dims) != num_dims:
            raise ContractViolationError(
                f"Expected {num_dims} cell counts, got {len(grid_dims)}", component="grid"
            )
        dims = tuple(int(n) for n in grid_dims)
        if any(n < 1 for n in dims):
            raise ContractViolationError(f"Cell counts must be positive, got {dims}", component="grid")
        dx_t = tuple((hi - lo) / n for lo, hi, n in zip(x_lo_t, x_hi_t, dims, strict=True))
        return cls._build(num_dims, x_lo_t, x_hi_t, dims, dx_t, as_accuracy(accuracy))

    @classmethod
    def _build(
        cls,
        num_dims: int,
        x_lo: tuple[float, ...],
        x_hi: tuple[float, ...],
        grid_dims: tuple[int, ...],
        dx: tuple[float, ...],
        accuracy: SpatialDerivativeAccuracy,
    ) -> Grid:
        g = ghost_width(accuracy)
        dims_gb = tuple(n + 2 * g for n in grid_dims)
        x_lo_gb = tuple(lo - (g - 0.5) * h for lo, h in zip(x_lo, dx, strict=True))
        x_hi_gb = tuple(hi + (g - 0.5) * h for hi, h in zip(x_hi, dx, strict=True))
        limits = index_space_limits(grid_dims, accuracy)

        return cls(
            num_dims=num_dims,
            x_lo=x_lo,
            x_hi=x_hi,
            x_lo_ghostbox=x_lo_gb,
            x_hi_ghostbox=x_hi_gb,
            grid_dims=grid_dims,
            grid_dims_ghostbox=dims_gb,
            dx=dx,
            num_gridpts=int(np.prod(dims_gb)),
            accuracy=accuracy,
            **limits,
        )

    # ------------------------------------------------------------------
    # Derived quantities
    # ------------------------------------------------------------------

    @property
    def ghost_width(self) -> int:
        return ghost_width(self.accuracy)

    @property
    def shape(self) -> tuple[int, ...]:
        """Shape of a field buffer over the ghost box."""
        return self.grid_dims_ghostbox

    @property
    def cell_volume(self) -> float:
        return float(np.prod(self.dx))

    @property
    def min_spacing(self) -> float:
        return min(self.dx)

    def coordinates(self, axis: int) -> NDArray[np.float64]:
        """Cell-centre coordinates of every ghost-box index along one axis."""
        return self.x_lo_ghostbox[axis] + np.arange(self.grid_dims_ghostbox[axis]) * self.dx[axis]

    def meshgrid(self) -> tuple[NDArray[np.float64], ...]:
        """Ghost-box coordinate arrays with "ij" indexing."""
        return tuple(np.meshgrid(*(self.coordinates(a) for a in range(self.num_dims)), indexing="ij"))

    def allocate(self, fill_value: float = 0.0) -> NDArray[np.float64]:
        """New float64 buffer over the ghost box."""
        return np.full(self.shape, fill_value, dtype=np.float64)

    def copy(self) -> Grid:
        """Deep, independent copy (all fields are immutable values)."""
        return replace(self)

    def describe(self) -> str:
        """Human-readable listing of every grid field."""
        lines = [
            f"Grid ({self.num_dims}D, accuracy={self.accuracy.name}, ghost width={self.ghost_width})",
            f"  x_lo            = {self.x_lo}",
            f"  x_hi            = {self.x_hi}",
            f"  x_lo_ghostbox   = {self.x_lo_ghostbox}",
            f"  x_hi_ghostbox   = {self.x_hi_ghostbox}",
            f"  grid_dims       = {self.grid_dims}",
            f"  grid_dims_gb    = {self.grid_dims_ghostbox}",
            f"  dx              = {self.dx}",
            f"  num_gridpts     = {self.num_gridpts}",
            f"  ghostbox        = {self.ghostbox.ranges}",
            f"  fillbox         = {self.fillbox.ranges}",
            f"  fillbox_D1      = {self.fillbox_d1.ranges}",
            f"  fillbox_D2      = {self.fillbox_d2.ranges}",
            f"  fillbox_D3      = {self.fillbox_d3.ranges}",
        ]
        return "\n".join(lines)

    # ------------------------------------------------------------------
    # Persistence (see pylsm.geometry.grid_io)
    # ------------------------------------------------------------------

    def to_text(self, path: str | Path) -> None:
        from pylsm.geometry.grid_io import write_grid_text

        write_grid_text(self, path)

    @classmethod
    def from_text(cls, path: str | Path) -> Grid:
        from pylsm.geometry.grid_io import read_grid_text

        return read_grid_text(path)

    def to_binary(self, path: str | Path) -> None:
        from pylsm.geometry.grid_io import write_grid_binary

        write_grid_binary(self, path)

    @classmethod
    def from_binary(cls, path: str | Path) -> Grid:
        from pylsm.geometry.grid_io import read_grid_binary

        return read_grid_binary(path)


def index_space_limits(
    grid_dims: Sequence[int], accuracy: SpatialDerivativeAccuracy | int | str
) -> dict[str, IndexBox]:
    """
    Ghost box, fill box and undivided-difference fill boxes for interior cell counts.

    Returns:
        Mapping with keys ghostbox, fillbox, fillbox_d1, fillbox_d2, fillbox_d3
    """
    g = ghost_width(accuracy)
    dims_gb = [int(n) + 2 * g for n in grid_dims]
    return {
        "ghostbox": IndexBox(tuple((0, n - 1) for n in dims_gb)),
        "fillbox": IndexBox(tuple((g, g + int(n) - 1) for n in grid_dims)),
        "fillbox_d1": IndexBox(tuple((1, n - 1) for n in dims_gb)),
        "fillbox_d2": IndexBox(tuple((1, n - 2) for n in dims_gb)),
        "fillbox_d3": IndexBox(tuple((2, n - 2) for n in dims_gb)),
    }


def _check_num_dims(num_dims: int) -> int:
    if num_dims not in (2, 3):
        raise ContractViolationError(
            f"Grid dimension must be 2 or 3, got {num_dims}",
            component="grid",
            suggested_action="1-D problems can call the kernels directly on 1-D buffers with an IndexBox",
        )
    return int(num_dims)


def _check_bounds(
    num_dims: int, x_lo: Sequence[float], x_hi: Sequence[float]
) -> tuple[tuple[float, ...], tuple[float, ...]]:
    if len(x_lo) != num_dims or len(x_hi) != num_dims:
        raise ContractViolationError(
            f"x_lo and x_hi must have length {num_dims}, got {len(x_lo)} and {len(x_hi)}",
            component="grid",
        )
    lo = tuple(float(v) for v in x_lo)
    hi = tuple(float(v) for v in x_hi)
    for axis, (a, b) in enumerate(zip(lo, hi, strict=True)):
        if not b > a:
            raise ContractViolationError(
                f"x_hi must exceed x_lo on axis {axis}: ({a}, {b})",
                component="grid",
            )
    return lo, hi
