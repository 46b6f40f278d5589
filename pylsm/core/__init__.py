"""Capability interfaces between the kernels and a driving framework."""

from pylsm.core.patch_module import PatchModule

__all__ = ["PatchModule"]
