"""
Level set drivers: reinitialization, field extension, evolution right-hand sides and stepping.

Mathematical Background:
    Level set evolution:
        phi_t + v · grad phi + Vn |grad phi| = 0

    Reinitialization (restore the signed distance property):
        phi_tau = S(phi_0) (1 - |grad phi|)

    Field extension (make F constant along normals):
        F_tau + S(phi) N · grad F = 0

References:
- Osher & Sethian (1988): Fronts propagating with curvature-dependent speed
- Osher & Fedkiw (2003): Level Set Methods and Dynamic Implicit Surfaces
"""

from pylsm.geometry.level_set.evolution import (
    add_advection_term,
    add_const_normal_velocity_term,
    add_normal_velocity_term,
    zero_rhs,
)
from pylsm.geometry.level_set.field_extension import (
    FieldExtensionResult,
    extend_field,
    extend_field_with_info,
    extension_velocity,
    field_extension_rhs,
)
from pylsm.geometry.level_set.reinitialization import (
    ReinitializationResult,
    impose_mask,
    reinitialization_rhs,
    reinitialize,
    reinitialize_with_info,
    smoothed_sign,
)
from pylsm.geometry.level_set.stepping import LevelSetStepper, StepperResult

__all__ = [
    "FieldExtensionResult",
    "LevelSetStepper",
    "ReinitializationResult",
    "StepperResult",
    "add_advection_term",
    "add_const_normal_velocity_term",
    "add_normal_velocity_term",
    "extend_field",
    "extend_field_with_info",
    "extension_velocity",
    "field_extension_rhs",
    "impose_mask",
    "reinitialization_rhs",
    "reinitialize",
    "reinitialize_with_info",
    "smoothed_sign",
    "zero_rhs",
]
