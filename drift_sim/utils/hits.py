"""Hit records handed to the hit/energy-deposit sink."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from ..simulation.types import ElectrodeHit, InteractionOutcome, StepContext


@dataclass(frozen=True, eq=False)
class HitRecord:
    """Summary of a terminated carrier track.

    Positions are expressed in the local frame of the pre-step volume so hits
    from identical detectors placed at different spots can be compared.
    """

    track_id: int
    particle_name: str
    start_time: float
    final_time: float
    start_energy: float
    energy_deposit: float
    weight: float
    start_position: np.ndarray
    final_position: np.ndarray
    collected: bool


def fill_hit(step: StepContext, outcome: InteractionOutcome) -> HitRecord:
    """Build a :class:`HitRecord` for the carrier of *step* ended by *outcome*."""

    carrier = step.carrier
    volume = step.pre_volume
    if volume is not None:
        start_position = volume.to_local(carrier.vertex_position)
        final_position = volume.to_local(step.post_position)
    else:
        start_position = np.array(carrier.vertex_position, dtype=np.float64)
        final_position = np.array(step.post_position, dtype=np.float64)

    return HitRecord(
        track_id=carrier.track_id,
        particle_name=carrier.name,
        start_time=carrier.global_time - carrier.local_time,
        final_time=carrier.global_time,
        start_energy=float(carrier.vertex_kinetic_energy),
        energy_deposit=float(getattr(outcome, "energy_deposit", 0.0)),
        weight=carrier.weight,
        start_position=start_position,
        final_position=final_position,
        collected=isinstance(outcome, ElectrodeHit),
    )


class HitCollection:
    """In-memory hit sink."""

    def __init__(self) -> None:
        self.hits: list[HitRecord] = []

    def record(self, hit: HitRecord) -> None:
        self.hits.append(hit)

    def collected(self) -> list[HitRecord]:
        return [hit for hit in self.hits if hit.collected]

    def total_deposit(self) -> float:
        return float(sum(hit.energy_deposit * hit.weight for hit in self.hits))

    def clear(self) -> None:
        self.hits.clear()

    def __len__(self) -> int:
        return len(self.hits)
