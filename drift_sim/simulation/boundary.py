"""Absorption, electrode collection and reflection of carriers at volume borders."""

from __future__ import annotations

import logging
import math
from typing import Any

import numpy as np
from numba import njit

from ..config.models import TransportSettings
from .geometry import GeometryDatabase, Navigator
from .process import DiscreteProcess
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
)

logger = logging.getLogger(__name__)

_CHARGE_CARRIERS = (CarrierType.ELECTRON, CarrierType.HOLE)


@njit
def specular_reflection(direction, normal):
    """Mirror *direction* about the plane with unit *normal*."""
    mom_norm = direction[0] * normal[0] + direction[1] * normal[1] + direction[2] * normal[2]
    out = np.empty(3)
    for i in range(3):
        out[i] = direction[i] - 2.0 * mom_norm * normal[i]
    return out


class BoundaryInteractionEngine(DiscreteProcess):
    """Decide what happens to a carrier reaching the edge of its crystal.

    One engine serves one carrier type. It never competes on path length; it
    is forced at every step and only acts when the step ended on a geometric
    boundary leaving the carrier's own lattice. The cascade is, in order:
    a flat absorption chance, a wave-vector threshold along the outward
    normal, electrode collection from the sampled potential, and finally
    specular reflection of outbound carriers.

    Parameters
    ----------
    carrier_type : CarrierType
        ``ELECTRON`` or ``HOLE``.
    surfaces : SurfacePolicyStore
        Border-surface lookup.
    geometry : GeometryDatabase
        Lattice and field models per volume.
    navigator : Navigator
        Provides outward normals at crossing points.
    settings : TransportSettings, optional
        Surface tolerance and electrode-face criteria.
    rng : numpy.random.Generator, optional
    """

    def __init__(
        self,
        carrier_type: CarrierType,
        surfaces: SurfacePolicyStore,
        geometry: GeometryDatabase,
        navigator: Navigator,
        settings: TransportSettings | None = None,
        rng: np.random.Generator | None = None,
    ):
        super().__init__(rng)
        carrier_type = CarrierType(carrier_type)
        if carrier_type not in _CHARGE_CARRIERS:
            raise ValueError(
                f"boundary engine needs an electron or hole type, got {carrier_type.value}"
            )
        self.carrier_type = carrier_type
        self.surfaces = surfaces
        self.geometry = geometry
        self.navigator = navigator
        self.settings = settings if settings is not None else TransportSettings()
        self.process_name = f"Drift{carrier_type.value.capitalize()}Boundary"

        self._lattice: Any = None
        self._loaded = False

    def applicable(self, carrier_type: CarrierType) -> bool:
        return carrier_type is self.carrier_type

    def mean_free_path(self, step: StepContext) -> tuple[float, ForceCondition]:
        return math.inf, ForceCondition.FORCED

    def load_data_for_track(self, carrier: Carrier) -> bool:
        """Pre-step hook: validate the track type and remember its lattice."""

        if carrier.carrier_type is not self.carrier_type:
            logger.error(
                "%s: track type %s not valid",
                self.process_name,
                carrier.carrier_type.value,
            )
            return False

        self._lattice = carrier.lattice
        self._loaded = True
        return True

    def _uniform(self) -> float:
        # (0, 1], so a zero probability never absorbs and one always does
        return 1.0 - float(self.rng.random())

    def _absorb(self, carrier: Carrier, reason: str) -> Absorbed:
        logger.debug("%s: track %d absorbed (%s)", self.process_name, carrier.track_id, reason)
        return Absorbed(energy_deposit=carrier.kinetic_energy)

    def do_interaction(self, step: StepContext) -> InteractionOutcome:
        carrier = step.carrier
        if carrier.carrier_type is not self.carrier_type or not self._loaded:
            logger.error(
                "%s: rejected %s track %d",
                self.process_name,
                carrier.carrier_type.value,
                carrier.track_id,
            )
            return NoAction()

        # Not limited by a volume boundary, or the null step after a reflection
        if (
            step.status is not StepStatus.GEOM_BOUNDARY
            or step.step_length <= self.settings.surface_tolerance / 2.0
        ):
            return NoAction()

        logger.debug("%s: boundary step length %g", self.process_name, step.step_length)

        pre_volume = step.pre_volume
        post_volume = step.post_volume
        if pre_volume is None or post_volume is None:
            logger.error("%s: boundary step without pre or post volume", self.process_name)
            return NoAction()
        if pre_volume is post_volume:
            logger.error(
                "%s: boundary status set, but pre- and post-step volumes are identical (%s)",
                self.process_name,
                pre_volume.name,
            )
            return NoAction()

        if self.geometry.lattice_for(pre_volume) is not self._lattice:
            logger.debug("%s: track inbound after reflection", self.process_name)
            return NoAction()

        policy = self.surfaces.policy_for(pre_volume.name, post_volume.name)
        if policy is None:
            logger.debug(
                "%s: no border surface defined for %s to %s",
                self.process_name,
                pre_volume.name,
                post_volume.name,
            )
            return NoAction()

        return self._apply_policy(step, policy)

    def _apply_policy(self, step: StepContext, policy: SurfacePolicy) -> InteractionOutcome:
        carrier = step.carrier
        pre_volume = step.pre_volume

        if self._uniform() <= policy.absorption_probability:
            return self._absorb(carrier, "absorption probability")

        normal = self.navigator.global_exit_normal(step.post_position)
        if normal is None:
            logger.error(
                "%s: cannot get normal at surface of %s @ %s",
                self.process_name,
                pre_volume.name,
                step.post_position,
            )
            return NoAction()
        normal = np.asarray(normal, dtype=np.float64)

        threshold = policy.threshold_for(self.carrier_type)
        if float(np.dot(carrier.wave_vector, normal)) > threshold:
            return self._absorb(carrier, "wave vector above threshold")

        if self._hits_electrode(step, policy, normal):
            logger.debug("%s: track %d hit electrode", self.process_name, carrier.track_id)
            return ElectrodeHit(energy_deposit=carrier.kinetic_energy)

        direction = carrier.direction
        mom_norm = float(np.dot(normal, direction))
        if mom_norm > 0.0:
            new_direction = specular_reflection(
                np.ascontiguousarray(direction, dtype=np.float64),
                np.ascontiguousarray(normal, dtype=np.float64),
            )
            logger.debug(
                "%s: track %d reflected, %s -> %s",
                self.process_name,
                carrier.track_id,
                direction,
                new_direction,
            )
            return Reflected(direction=new_direction)

        logger.warning(
            "%s: reflection failed, momentum and surface normal opposite "
            "(direction %s, normal %s)",
            self.process_name,
            direction,
            normal,
        )
        return NoAction()

    def _hits_electrode(
        self, step: StepContext, policy: SurfacePolicy, normal: np.ndarray
    ) -> bool:
        field = self.geometry.field_for(step.pre_volume)
        if field is None:
            logger.warning("%s: no field on %s", self.process_name, step.pre_volume.name)
            return False

        local = step.pre_volume.to_local(step.post_position)
        potential = field.potential_at(local)
        if potential is None:
            return False

        facing = abs(float(np.dot(normal, self.settings.collection_axis)))
        return (
            facing > self.settings.electrode_normal_threshold
            and abs(potential - policy.electrode_potential) <= policy.electrode_delta_v
        )
