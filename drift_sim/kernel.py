"""Glue between an external stepping kernel and the interaction processes.

The adapter owns the per-track state the processes share (the valley table
and the hit sink), builds the processes from configuration, and applies
their outcomes back to the carrier.
"""

from __future__ import annotations

import logging
from pathlib import Path

import numpy as np

from .config.loader import get_config_bundle
from .config.models import TransportSettings
from .debug_utils import verbose_to_level
from .utils.hits import HitCollection, fill_hit
from .simulation.boundary import BoundaryInteractionEngine
from .simulation.fields import FieldSampler
from .simulation.geometry import GeometryDatabase, Navigator
from .simulation.intervalley import InterValleyScatteringModel, choose_valley
from .simulation.process import DiscreteProcess
from .simulation.surfaces import SurfacePolicyStore
from .simulation.types import (
    Carrier,
    CarrierType,
    InteractionOutcome,
    Reflected,
    StepContext,
)
from .simulation.valley import ValleyTable

logger = logging.getLogger(__name__)


class CarrierTransportAdapter:
    def __init__(
        self,
        geometry: GeometryDatabase,
        navigator: Navigator,
        surfaces: SurfacePolicyStore,
        *,
        field: FieldSampler | None = None,
        settings: TransportSettings | None = None,
        rng: np.random.Generator | None = None,
        hits: HitCollection | None = None,
    ):
        self.settings = settings if settings is not None else TransportSettings()
        self.rng = rng if rng is not None else np.random.default_rng(self.settings.seed)
        self.valleys = ValleyTable()
        self.hits = hits if hits is not None else HitCollection()

        if self.settings.verbose > 0:
            logging.getLogger("drift_sim").setLevel(verbose_to_level(self.settings.verbose))

        self.intervalley = InterValleyScatteringModel(self.valleys, field, rng=self.rng)
        self.boundaries = {
            carrier_type: BoundaryInteractionEngine(
                carrier_type,
                surfaces,
                geometry,
                navigator,
                settings=self.settings,
                rng=self.rng,
            )
            for carrier_type in (CarrierType.ELECTRON, CarrierType.HOLE)
        }

    @classmethod
    def from_config(
        cls,
        geometry: GeometryDatabase,
        navigator: Navigator,
        *,
        field: FieldSampler | None = None,
        config_dir: Path | None = None,
        rng: np.random.Generator | None = None,
    ) -> "CarrierTransportAdapter":
        """Build an adapter from ``transport.yaml`` and ``surfaces.yaml``."""

        bundle = get_config_bundle(config_dir)
        settings = TransportSettings.from_mapping(bundle.transport.get("transport"))
        surfaces = SurfacePolicyStore.from_config(bundle.surfaces)
        return cls(
            geometry,
            navigator,
            surfaces,
            field=field,
            settings=settings,
            rng=rng,
        )

    def processes_for(self, carrier_type: CarrierType) -> list[DiscreteProcess]:
        candidates: list[DiscreteProcess] = [self.intervalley, *self.boundaries.values()]
        return [proc for proc in candidates if proc.applicable(carrier_type)]

    def start_track(self, carrier: Carrier) -> None:
        """Assign a random starting valley to new electrons and reset processes."""

        if carrier.carrier_type is CarrierType.ELECTRON and carrier.track_id not in self.valleys:
            self.valleys.set_valley(carrier.track_id, choose_valley(self.rng))
        for proc in self.processes_for(carrier.carrier_type):
            proc.start_tracking()

    def end_track(self, carrier: Carrier) -> None:
        self.valleys.remove(carrier.track_id)

    def pre_step(self, carrier: Carrier) -> None:
        engine = self.boundaries.get(carrier.carrier_type)
        if engine is not None:
            engine.load_data_for_track(carrier)

    def invoke(self, process: DiscreteProcess, step: StepContext) -> InteractionOutcome:
        """Run *process* on *step* and apply its outcome to the carrier."""

        outcome = process.do_interaction(step)
        self.apply_outcome(step, outcome)
        return outcome

    def apply_outcome(self, step: StepContext, outcome: InteractionOutcome) -> None:
        carrier = step.carrier
        if isinstance(outcome, Reflected):
            carrier.direction = np.array(outcome.direction, dtype=np.float64)
            return
        if outcome.terminates_track:
            carrier.alive = False
            self.hits.record(fill_hit(step, outcome))
            self.end_track(carrier)
            logger.debug("track %d stopped by %s", carrier.track_id, type(outcome).__name__)
