"""Undivided difference stencils (D1, D2, D3) along one axis."""

from pylsm.operators.stencils.undivided import along, undivided_differences

__all__ = ["along", "undivided_differences"]
