"""Inter-valley scattering of drifting electrons.

The mean free path follows the empirical law fitted by the EDELWEISS
collaboration (LTD-14)::

    mfp = v * C * (E0**2 + |E_hv|**2) ** (p / 2)

where ``E_hv`` is the unit field direction expressed in the valley frame and
rescaled by the inverse mass-anisotropy ratios. ``E0`` was tuned on crystals
biased at a few V/m; it may still hold at 10-100 V/m but there is no data
there yet.
"""

from __future__ import annotations

import logging
import math

import numpy as np
from numba import njit

from .fields import FieldSampler
from .process import DiscreteProcess
from .types import (
    CarrierType,
    ForceCondition,
    InteractionOutcome,
    NoAction,
    StepContext,
    ValleyReassigned,
)
from .valley import N_VALLEYS, ValleyTable, ValleyTransform, transform_for

logger = logging.getLogger(__name__)

REFERENCE_FIELD_V_PER_M = 217.0
MFP_COEFFICIENT = 6.72e-6
MFP_EXPONENT = 3.24
# Valley-frame effective-mass ratios (transverse, transverse, longitudinal).
VALLEY_MASS_RATIOS = np.array([1.2172, 1.2172, 0.27559], dtype=np.float64)


@njit
def intervalley_mean_free_path(velocity, field_mag_hv, e0, coeff, exponent):
    return velocity * coeff * (e0 * e0 + field_mag_hv * field_mag_hv) ** (exponent / 2.0)


def herring_vogt_field_magnitude(field: np.ndarray, transform: ValleyTransform) -> float:
    """Magnitude of the unit field direction in anisotropic valley coordinates."""

    local = transform.normal_to_valley(field)
    norm = float(np.linalg.norm(local))
    if norm > 0.0:
        local = local / norm
    return float(np.linalg.norm(local / VALLEY_MASS_RATIOS))


def choose_valley(rng: np.random.Generator) -> int:
    """Uniform draw over 1..4; the previous valley may be drawn again."""
    return int(float(rng.random()) * N_VALLEYS + 1.0)


class InterValleyScatteringModel(DiscreteProcess):
    """Randomly moves an electron to a new valley after a field-dependent path.

    Parameters
    ----------
    valleys : ValleyTable
        Per-track valley association shared with the kernel adapter.
    field : FieldSampler or None
        Detector field. ``None`` (or a sampler returning ``None``) switches
        the process off by returning an infinite mean free path.
    rng : numpy.random.Generator, optional
        Source of the valley draws and free-path sampling.
    """

    process_name = "InterValleyScattering"

    def __init__(
        self,
        valleys: ValleyTable,
        field: FieldSampler | None = None,
        rng: np.random.Generator | None = None,
    ):
        super().__init__(rng)
        self.valleys = valleys
        self.field = field

    def applicable(self, carrier_type: CarrierType) -> bool:
        return carrier_type is CarrierType.ELECTRON

    def mean_free_path(self, step: StepContext) -> tuple[float, ForceCondition]:
        condition = ForceCondition.NOT_FORCED
        carrier = step.carrier

        valley = self.valleys.get_valley(carrier.track_id)
        if valley is None:
            logger.warning(
                "%s: no valley recorded for track %d",
                self.process_name,
                carrier.track_id,
            )
            return math.inf, condition
        transform = transform_for(valley)

        if self.field is None:
            return math.inf, condition
        field = self.field.field_at(carrier.position)
        if field is None:
            return math.inf, condition

        field_mag_hv = herring_vogt_field_magnitude(field, transform)
        mfp = intervalley_mean_free_path(
            float(step.post_velocity),
            field_mag_hv,
            REFERENCE_FIELD_V_PER_M,
            MFP_COEFFICIENT,
            MFP_EXPONENT,
        )
        return float(mfp), condition

    def do_interaction(self, step: StepContext) -> InteractionOutcome:
        carrier = step.carrier
        if not self.applicable(carrier.carrier_type):
            logger.error(
                "%s: track type %s not valid",
                self.process_name,
                carrier.carrier_type.value,
            )
            return NoAction()

        valley = choose_valley(self.rng)
        self.valleys.set_valley(carrier.track_id, valley)
        logger.debug(
            "%s: track %d moved to valley %d", self.process_name, carrier.track_id, valley
        )

        self.reset_interaction_lengths_left()
        return ValleyReassigned(valley=valley)
