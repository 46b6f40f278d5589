"""
Lossless text and binary persistence for Grid descriptors.

Text format:
    A YAML document with a ``format: pylsm-grid`` / ``version: 1`` header
    followed by every Grid field. Floats are written at repr precision, so
    reading back reproduces every value bit for bit.

Binary format:
    One fixed-size little-endian record described by a numpy structured
    dtype: 8-byte magic ``PYLSMGRD``, version, then every Grid field with
    per-axis entries padded to three axes.

Reading a file that was not produced by the matching writer (wrong header,
wrong size, missing or extra keys, values that disagree with the geometry
they claim to describe) raises GridFileError. Nothing is auto-repaired.
"""

from __future__ import annotations

import math
from pathlib import Path
from typing import TYPE_CHECKING, Any, Literal

import numpy as np
import yaml
from pydantic import BaseModel, ConfigDict, ValidationError

from pylsm.geometry.grid import (
    Grid,
    IndexBox,
    SpatialDerivativeAccuracy,
    as_accuracy,
    ghost_width,
    index_space_limits,
)
from pylsm.utils.exceptions import ContractViolationError, GridFileError
from pylsm.utils.lsm_logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Sequence

logger = get_logger(__name__)

TEXT_FORMAT_NAME = "pylsm-grid"
FORMAT_VERSION = 1
BINARY_MAGIC = b"PYLSMGRD"
MAX_DIMS = 3

_BOX_FIELDS = ("ghostbox", "fillbox", "fillbox_d1", "fillbox_d2", "fillbox_d3")
_FLOAT_FIELDS = ("x_lo", "x_hi", "x_lo_ghostbox", "x_hi_ghostbox", "dx")
_INT_FIELDS = ("grid_dims", "grid_dims_ghostbox")

BINARY_DTYPE = np.dtype(
    [
        ("magic", "S8"),
        ("version", "<u4"),
        ("num_dims", "<u4"),
        ("accuracy", "<u4"),
        ("x_lo", "<f8", (MAX_DIMS,)),
        ("x_hi", "<f8", (MAX_DIMS,)),
        ("x_lo_ghostbox", "<f8", (MAX_DIMS,)),
        ("x_hi_ghostbox", "<f8", (MAX_DIMS,)),
        ("dx", "<f8", (MAX_DIMS,)),
        ("grid_dims", "<i8", (MAX_DIMS,)),
        ("grid_dims_ghostbox", "<i8", (MAX_DIMS,)),
        ("num_gridpts", "<i8"),
        ("ghostbox", "<i8", (MAX_DIMS, 2)),
        ("fillbox", "<i8", (MAX_DIMS, 2)),
        ("fillbox_d1", "<i8", (MAX_DIMS, 2)),
        ("fillbox_d2", "<i8", (MAX_DIMS, 2)),
        ("fillbox_d3", "<i8", (MAX_DIMS, 2)),
    ]
)


class GridRecord(BaseModel):
    """Schema of the YAML grid record."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    format: Literal["pylsm-grid"]
    version: Literal[1]
    num_dims: int
    accuracy: str
    x_lo: list[float]
    x_hi: list[float]
    x_lo_ghostbox: list[float]
    x_hi_ghostbox: list[float]
    grid_dims: list[int]
    grid_dims_ghostbox: list[int]
    dx: list[float]
    num_gridpts: int
    ghostbox: list[tuple[int, int]]
    fillbox: list[tuple[int, int]]
    fillbox_d1: list[tuple[int, int]]
    fillbox_d2: list[tuple[int, int]]
    fillbox_d3: list[tuple[int, int]]


# ---------------------------------------------------------------------------
# Text format
# ---------------------------------------------------------------------------


def write_grid_text(grid: Grid, path: str | Path) -> None:
    """Write a grid as a human-readable YAML record."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    record: dict[str, Any] = {
        "format": TEXT_FORMAT_NAME,
        "version": FORMAT_VERSION,
        "num_dims": grid.num_dims,
        "accuracy": grid.accuracy.name,
    }
    for name in _FLOAT_FIELDS:
        record[name] = [float(v) for v in getattr(grid, name)]
    for name in _INT_FIELDS:
        record[name] = [int(v) for v in getattr(grid, name)]
    record["num_gridpts"] = grid.num_gridpts
    for name in _BOX_FIELDS:
        record[name] = [[lo, hi] for lo, hi in getattr(grid, name).ranges]

    with open(path, "w") as f:
        yaml.safe_dump(record, f, default_flow_style=None, sort_keys=False)

    logger.debug(f"Wrote grid text record to {path}")


def read_grid_text(path: str | Path) -> Grid:
    """
    Read a grid written by :func:`write_grid_text`.

    Raises:
        FileNotFoundError: If the file does not exist
        GridFileError: If the file is not a valid pylsm grid record
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Grid file not found: {path}")

    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise GridFileError(path, f"invalid YAML syntax: {e}") from e
    except UnicodeDecodeError as e:
        raise GridFileError(path, "file is not text") from e

    if not isinstance(data, dict):
        raise GridFileError(path, "expected a mapping of grid fields")

    try:
        record = GridRecord.model_validate(data)
    except ValidationError as e:
        raise GridFileError(path, f"schema validation failed:\n{e}") from e

    fields = record.model_dump(exclude={"format", "version"})
    try:
        fields["accuracy"] = as_accuracy(fields["accuracy"])
    except ContractViolationError as e:
        raise GridFileError(path, f"unknown accuracy level {record.accuracy!r}") from e
    return _grid_from_fields(path, fields)


# ---------------------------------------------------------------------------
# Binary format
# ---------------------------------------------------------------------------


def write_grid_binary(grid: Grid, path: str | Path) -> None:
    """Write a grid as one fixed-layout little-endian record."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    rec = np.zeros((), dtype=BINARY_DTYPE)
    rec["magic"] = BINARY_MAGIC
    rec["version"] = FORMAT_VERSION
    rec["num_dims"] = grid.num_dims
    rec["accuracy"] = int(grid.accuracy)
    n = grid.num_dims
    for name in _FLOAT_FIELDS + _INT_FIELDS:
        rec[name][:n] = getattr(grid, name)
    rec["num_gridpts"] = grid.num_gridpts
    for name in _BOX_FIELDS:
        rec[name][:n] = getattr(grid, name).ranges

    path.write_bytes(rec.tobytes())
    logger.debug(f"Wrote grid binary record to {path} ({BINARY_DTYPE.itemsize} bytes)")


def read_grid_binary(path: str | Path) -> Grid:
    """
    Read a grid written by :func:`write_grid_binary`.

    Raises:
        FileNotFoundError: If the file does not exist
        GridFileError: If the record size, magic, version or contents are invalid
    """
    path = Path(path)
    data = path.read_bytes()
    if len(data) != BINARY_DTYPE.itemsize:
        raise GridFileError(path, f"expected {BINARY_DTYPE.itemsize} bytes, found {len(data)}")

    rec = np.frombuffer(data, dtype=BINARY_DTYPE)[0]
    if bytes(rec["magic"]) != BINARY_MAGIC:
        raise GridFileError(path, "bad magic number")
    if int(rec["version"]) != FORMAT_VERSION:
        raise GridFileError(path, f"unsupported format version {int(rec['version'])}")

    n = int(rec["num_dims"])
    if n not in (2, 3):
        raise GridFileError(path, f"invalid dimension {n}")
    try:
        accuracy = SpatialDerivativeAccuracy(int(rec["accuracy"]))
    except ValueError as e:
        raise GridFileError(path, f"unknown accuracy level {int(rec['accuracy'])}") from e

    fields: dict[str, Any] = {"num_dims": n, "accuracy": accuracy, "num_gridpts": int(rec["num_gridpts"])}
    for name in _FLOAT_FIELDS:
        fields[name] = [float(v) for v in rec[name][:n]]
    for name in _INT_FIELDS:
        fields[name] = [int(v) for v in rec[name][:n]]
    for name in _BOX_FIELDS:
        fields[name] = [(int(lo), int(hi)) for lo, hi in rec[name][:n]]
    return _grid_from_fields(path, fields)


# ---------------------------------------------------------------------------
# Shared consistency check
# ---------------------------------------------------------------------------


def _grid_from_fields(path: Path, fields: dict[str, Any]) -> Grid:
    """Build a Grid from stored fields after checking they describe one consistent grid."""
    n = fields["num_dims"]
    if n not in (2, 3):
        raise GridFileError(path, f"invalid dimension {n}")
    for name in _FLOAT_FIELDS + _INT_FIELDS + _BOX_FIELDS:
        if len(fields[name]) != n:
            raise GridFileError(path, f"field '{name}' has {len(fields[name])} entries, expected {n}")

    accuracy = fields["accuracy"]
    g = ghost_width(accuracy)
    dims = fields["grid_dims"]
    if any(d < 1 for d in dims):
        raise GridFileError(path, f"non-positive cell counts {dims}")
    if any(h <= 0.0 or not math.isfinite(h) for h in fields["dx"]):
        raise GridFileError(path, f"non-positive spacing {fields['dx']}")
    for axis, (lo, hi, n_cells, h) in enumerate(zip(fields["x_lo"], fields["x_hi"], dims, fields["dx"], strict=True)):
        if not hi > lo:
            raise GridFileError(path, f"x_hi[{axis}] = {hi} is not above x_lo[{axis}] = {lo}")
        scale = max(abs(lo), abs(hi), n_cells * h)
        if not math.isclose(hi, lo + n_cells * h, rel_tol=1e-12, abs_tol=1e-12 * scale):
            raise GridFileError(path, f"interior bounds along axis {axis} disagree with cell count and spacing")
    if list(fields["grid_dims_ghostbox"]) != [d + 2 * g for d in dims]:
        raise GridFileError(path, "ghost-box cell counts disagree with cell counts and accuracy")
    if fields["num_gridpts"] != int(np.prod(fields["grid_dims_ghostbox"])):
        raise GridFileError(path, "num_gridpts disagrees with ghost-box cell counts")

    expected_gb_lo = [lo - (g - 0.5) * h for lo, h in zip(fields["x_lo"], fields["dx"], strict=True)]
    expected_gb_hi = [hi + (g - 0.5) * h for hi, h in zip(fields["x_hi"], fields["dx"], strict=True)]
    if not (_all_close(fields["x_lo_ghostbox"], expected_gb_lo) and _all_close(fields["x_hi_ghostbox"], expected_gb_hi)):
        raise GridFileError(path, "ghost-box bounds disagree with interior bounds and spacing")

    limits = index_space_limits(dims, accuracy)
    boxes = {name: IndexBox(tuple(tuple(r) for r in fields[name])) for name in _BOX_FIELDS}
    for name in _BOX_FIELDS:
        if boxes[name] != limits[name]:
            raise GridFileError(path, f"index box '{name}' disagrees with cell counts and accuracy")

    try:
        return Grid(
            num_dims=n,
            x_lo=tuple(fields["x_lo"]),
            x_hi=tuple(fields["x_hi"]),
            x_lo_ghostbox=tuple(fields["x_lo_ghostbox"]),
            x_hi_ghostbox=tuple(fields["x_hi_ghostbox"]),
            grid_dims=tuple(dims),
            grid_dims_ghostbox=tuple(fields["grid_dims_ghostbox"]),
            dx=tuple(fields["dx"]),
            num_gridpts=fields["num_gridpts"],
            accuracy=accuracy,
            **boxes,
        )
    except ContractViolationError as e:
        raise GridFileError(path, str(e)) from e


def _all_close(a: Sequence[float], b: Sequence[float]) -> bool:
    return all(math.isclose(x, y, rel_tol=1e-12, abs_tol=1e-14) for x, y in zip(a, b, strict=True))
