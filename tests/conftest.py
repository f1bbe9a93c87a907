import sys
from pathlib import Path

import numpy as np
import pytest

# Allow importing drift_sim from repository root
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from drift_sim.config.loader import clear_config_cache
from drift_sim.simulation.types import Carrier, CarrierType, StepContext, StepStatus


class FixedRandom:
    """Stand-in generator whose ``random()`` replays a fixed sequence."""

    def __init__(self, *values):
        self.values = list(values)
        self.calls = 0

    def random(self):
        value = self.values[min(self.calls, len(self.values) - 1)]
        self.calls += 1
        return value


class FixedNormalNavigator:
    def __init__(self, normal):
        self.normal = None if normal is None else np.asarray(normal, dtype=np.float64)
        self.calls = 0

    def global_exit_normal(self, position):
        self.calls += 1
        return self.normal


def make_carrier(
    carrier_type=CarrierType.ELECTRON,
    *,
    track_id=1,
    direction=(0.0, 0.0, 1.0),
    wave_vector=(0.0, 0.0, 1.0e6),
    kinetic_energy=2.5e-22,
    position=(0.0, 0.0, 0.01),
    lattice=None,
):
    return Carrier(
        track_id=track_id,
        carrier_type=carrier_type,
        position=position,
        direction=direction,
        kinetic_energy=kinetic_energy,
        wave_vector=wave_vector,
        lattice=lattice,
    )


def make_step(carrier, pre, post, *, length=1.0e-4, status=StepStatus.GEOM_BOUNDARY, velocity=1.0e5):
    return StepContext(
        carrier=carrier,
        step_length=length,
        status=status,
        pre_volume=pre,
        post_volume=post,
        post_position=carrier.position,
        post_velocity=velocity,
    )


@pytest.fixture(autouse=True)
def _fresh_config_cache():
    clear_config_cache()
    yield
    clear_config_cache()
