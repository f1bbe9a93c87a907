"""Typed carrier, step and outcome models shared by the interaction processes."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, ClassVar

import numpy as np

if TYPE_CHECKING:
    from .geometry import Volume


class CarrierType(str, Enum):
    ELECTRON = "electron"
    HOLE = "hole"
    PHONON = "phonon"


class StepStatus(Enum):
    """What limited the step that just finished."""

    GEOM_BOUNDARY = "geom_boundary"
    POST_STEP_PROC = "post_step_proc"
    ALONG_STEP_PROC = "along_step_proc"
    USER_LIMITED = "user_limited"
    UNDEFINED = "undefined"


class ForceCondition(Enum):
    NOT_FORCED = "not_forced"
    FORCED = "forced"


def _vec3(value: Any) -> np.ndarray:
    vec = np.array(value, dtype=np.float64)
    if vec.shape != (3,):
        raise ValueError(f"expected a 3-vector, got shape {vec.shape}")
    return vec


@dataclass(eq=False)
class Carrier:
    """A drifting charge carrier (or other transport particle) for one track.

    The valley index is deliberately not stored here; it lives in the
    :class:`~drift_sim.simulation.valley.ValleyTable` owned by the kernel.
    ``lattice`` is the kernel's reference to the crystal the track is
    currently drifting in.
    """

    track_id: int
    carrier_type: CarrierType
    position: np.ndarray
    direction: np.ndarray
    kinetic_energy: float
    wave_vector: np.ndarray
    lattice: Any = None
    weight: float = 1.0
    global_time: float = 0.0
    local_time: float = 0.0
    vertex_position: np.ndarray | None = None
    vertex_kinetic_energy: float | None = None
    alive: bool = True

    def __post_init__(self) -> None:
        self.carrier_type = CarrierType(self.carrier_type)
        self.position = _vec3(self.position)
        self.direction = _vec3(self.direction)
        self.wave_vector = _vec3(self.wave_vector)
        self.kinetic_energy = float(self.kinetic_energy)
        if self.vertex_position is None:
            self.vertex_position = self.position.copy()
        else:
            self.vertex_position = _vec3(self.vertex_position)
        if self.vertex_kinetic_energy is None:
            self.vertex_kinetic_energy = self.kinetic_energy

    @property
    def name(self) -> str:
        return f"drift_{self.carrier_type.value}"


@dataclass(eq=False)
class StepContext:
    """Snapshot of one finished step as seen by the post-step processes."""

    carrier: Carrier
    step_length: float
    status: StepStatus
    pre_volume: "Volume | None"
    post_volume: "Volume | None"
    post_position: np.ndarray
    post_velocity: float = 0.0

    def __post_init__(self) -> None:
        self.post_position = _vec3(self.post_position)
        self.step_length = float(self.step_length)
        self.post_velocity = float(self.post_velocity)


@dataclass(frozen=True)
class InteractionOutcome:
    """Base for the tagged result of a single process invocation."""

    terminates_track: ClassVar[bool] = False


@dataclass(frozen=True)
class NoAction(InteractionOutcome):
    pass


@dataclass(frozen=True)
class ValleyReassigned(InteractionOutcome):
    valley: int


@dataclass(frozen=True)
class Absorbed(InteractionOutcome):
    energy_deposit: float

    terminates_track: ClassVar[bool] = True


@dataclass(frozen=True, eq=False)
class Reflected(InteractionOutcome):
    direction: np.ndarray = field(default_factory=lambda: np.zeros(3))


@dataclass(frozen=True)
class ElectrodeHit(InteractionOutcome):
    energy_deposit: float

    terminates_track: ClassVar[bool] = True
