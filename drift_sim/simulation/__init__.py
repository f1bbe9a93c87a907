"""Interaction models for drifting charge carriers."""

from .boundary import BoundaryInteractionEngine, specular_reflection
from .fields import FieldSampler, MeshPotentialField, UniformField
from .geometry import BoxNavigator, GeometryDatabase, Volume
from .intervalley import InterValleyScatteringModel
from .surfaces import SurfacePolicy, SurfacePolicyStore
from .types import (
    Absorbed,
    Carrier,
    CarrierType,
    ElectrodeHit,
    ForceCondition,
    InteractionOutcome,
    NoAction,
    Reflected,
    StepContext,
    StepStatus,
    ValleyReassigned,
)
from .valley import ValleyTable, ValleyTransform, transform_for

__all__ = [
    "Absorbed",
    "BoundaryInteractionEngine",
    "BoxNavigator",
    "Carrier",
    "CarrierType",
    "ElectrodeHit",
    "FieldSampler",
    "ForceCondition",
    "GeometryDatabase",
    "InteractionOutcome",
    "InterValleyScatteringModel",
    "MeshPotentialField",
    "NoAction",
    "Reflected",
    "StepContext",
    "StepStatus",
    "SurfacePolicy",
    "SurfacePolicyStore",
    "UniformField",
    "ValleyReassigned",
    "ValleyTable",
    "ValleyTransform",
    "Volume",
    "specular_reflection",
    "transform_for",
]
