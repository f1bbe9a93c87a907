import logging
import math

import numpy as np
import pytest

from drift_sim.config.models import TransportSettings
from drift_sim.simulation.boundary import BoundaryInteractionEngine, specular_reflection
from drift_sim.simulation.fields import MeshPotentialField, UniformField
from drift_sim.simulation.geometry import GeometryDatabase, Volume
from drift_sim.simulation.surfaces import SurfacePolicy, SurfacePolicyStore
from drift_sim.simulation.types import (
    Absorbed,
    CarrierType,
    ElectrodeHit,
    ForceCondition,
    NoAction,
    Reflected,
    StepStatus,
)

from conftest import FixedNormalNavigator, FixedRandom, make_carrier, make_step

HALF = (0.01, 0.01, 0.01)
SQRT_HALF = 1.0 / math.sqrt(2.0)


class World:
    """Crystal placed in a world volume with one configured border surface."""

    def __init__(self, policy=None, normal=(0.0, 0.0, 1.0), field="mesh", carrier_type=CarrierType.ELECTRON, rng=None):
        self.lattice = object()
        self.crystal = Volume("crystal")
        self.world = Volume("world")
        self.geometry = GeometryDatabase()
        if field == "mesh":
            field = MeshPotentialField.parallel_plate(HALF, top_voltage=4.0, bottom_voltage=-4.0)
        self.geometry.register(self.crystal, lattice=self.lattice, field=field)
        self.surfaces = SurfacePolicyStore()
        if policy is not None:
            self.surfaces.register("crystal", "world", policy)
        self.navigator = FixedNormalNavigator(normal)
        self.engine = BoundaryInteractionEngine(
            carrier_type,
            self.surfaces,
            self.geometry,
            self.navigator,
            settings=TransportSettings(),
            rng=rng,
        )

    def carrier(self, carrier_type=CarrierType.ELECTRON, **kwargs):
        kwargs.setdefault("lattice", self.lattice)
        return make_carrier(carrier_type, **kwargs)

    def crossing(self, carrier, **kwargs):
        self.engine.load_data_for_track(carrier)
        return self.engine.do_interaction(make_step(carrier, self.crystal, self.world, **kwargs))


def _policy(**overrides):
    values = dict(
        absorption_probability=0.0,
        electrode_delta_v=0.1,
        min_k_electron=1.0e9,
        min_k_hole=1.0e9,
        electrode_potential=100.0,
    )
    values.update(overrides)
    return SurfacePolicy(**values)


def test_always_forced_with_infinite_path():
    world = World(_policy())
    step = make_step(world.carrier(), world.crystal, world.world)
    mfp, condition = world.engine.mean_free_path(step)
    assert math.isinf(mfp)
    assert condition is ForceCondition.FORCED
    length, condition = world.engine.post_step_interaction_length(step)
    assert math.isinf(length)
    assert condition is ForceCondition.FORCED


def test_engine_requires_charge_carrier_type():
    with pytest.raises(ValueError):
        BoundaryInteractionEngine(
            CarrierType.PHONON, SurfacePolicyStore(), GeometryDatabase(), FixedNormalNavigator(None)
        )


def test_applicable_only_to_configured_type():
    world = World(_policy(), carrier_type=CarrierType.HOLE)
    assert world.engine.applicable(CarrierType.HOLE)
    assert not world.engine.applicable(CarrierType.ELECTRON)


def test_full_absorption_probability_always_kills_with_kinetic_energy():
    world = World(_policy(absorption_probability=1.0), rng=np.random.default_rng(3))
    for i in range(200):
        carrier = world.carrier(track_id=i, kinetic_energy=1.0e-21 * (i + 1))
        outcome = world.crossing(carrier)
        assert isinstance(outcome, Absorbed)
        assert outcome.energy_deposit == carrier.kinetic_energy
        assert outcome.terminates_track
    assert world.navigator.calls == 0


def test_zero_absorption_probability_reaches_threshold_stage():
    world = World(_policy(absorption_probability=0.0), rng=FixedRandom(0.0))
    outcome = world.crossing(world.carrier())
    assert not isinstance(outcome, Absorbed)
    assert world.navigator.calls == 1


def test_absorption_roll_compares_inclusively():
    # draw of 0.5 maps to u = 0.5, equal to the probability
    world = World(_policy(absorption_probability=0.5), rng=FixedRandom(0.5))
    assert isinstance(world.crossing(world.carrier()), Absorbed)


def test_wave_vector_at_threshold_is_not_absorbed():
    world = World(_policy(min_k_electron=5.0e8))
    outcome = world.crossing(world.carrier(wave_vector=(0.0, 0.0, 5.0e8)))
    assert isinstance(outcome, Reflected)


def test_wave_vector_above_threshold_is_absorbed():
    world = World(_policy(min_k_electron=5.0e8))
    carrier = world.carrier(wave_vector=(0.0, 0.0, 5.0e8 + 1.0))
    outcome = world.crossing(carrier)
    assert outcome == Absorbed(energy_deposit=carrier.kinetic_energy)


def test_hole_engine_uses_hole_threshold():
    world = World(_policy(min_k_electron=1.0e12, min_k_hole=1.0e3), carrier_type=CarrierType.HOLE)
    outcome = world.crossing(world.carrier(CarrierType.HOLE))
    assert isinstance(outcome, Absorbed)


def test_electrode_collects_when_potential_within_window():
    world = World(_policy(electrode_potential=4.0, electrode_delta_v=0.1))
    carrier = world.carrier(position=(0.0, 0.0, 0.01))
    outcome = world.crossing(carrier)
    assert outcome == ElectrodeHit(energy_deposit=carrier.kinetic_energy)
    assert outcome.terminates_track


def test_electrode_window_uses_local_position_of_pre_volume():
    # local z = 0.005 sits halfway between mid-plane (0 V) and the top plate (4 V)
    world = World(_policy(electrode_potential=2.0, electrode_delta_v=0.1))
    world.crystal.translation = np.array([0.0, 0.0, 1.0])
    carrier = world.carrier(position=(0.0, 0.0, 1.005))
    assert isinstance(world.crossing(carrier), ElectrodeHit)


def test_electrode_requires_face_along_collection_axis():
    world = World(
        _policy(electrode_potential=0.0, electrode_delta_v=10.0),
        normal=(1.0, 0.0, 0.0),
    )
    carrier = world.carrier(position=(0.01, 0.0, 0.0), direction=(1.0, 0.0, 0.0))
    outcome = world.crossing(carrier)
    assert isinstance(outcome, Reflected)
    assert np.allclose(outcome.direction, [-1.0, 0.0, 0.0])


def test_potential_outside_window_falls_through_to_reflection():
    world = World(_policy(electrode_potential=-4.0, electrode_delta_v=0.1))
    outcome = world.crossing(world.carrier(position=(0.0, 0.0, 0.01)))
    assert isinstance(outcome, Reflected)


def test_field_without_potential_skips_electrode_test():
    world = World(
        _policy(electrode_potential=0.0, electrode_delta_v=1.0e6),
        field=UniformField([0.0, 0.0, 1.0]),
    )
    assert isinstance(world.crossing(world.carrier()), Reflected)


def test_missing_field_logs_and_still_reflects(caplog):
    world = World(_policy(), field=None)
    with caplog.at_level(logging.WARNING, logger="drift_sim"):
        outcome = world.crossing(world.carrier())
    assert isinstance(outcome, Reflected)
    assert "no field" in caplog.text


def test_outbound_direction_is_specularly_reflected():
    world = World(_policy())
    carrier = world.carrier(direction=(SQRT_HALF, 0.0, SQRT_HALF))
    outcome = world.crossing(carrier)
    assert isinstance(outcome, Reflected)
    assert np.allclose(outcome.direction, [SQRT_HALF, 0.0, -SQRT_HALF])
    assert np.allclose(carrier.direction, [SQRT_HALF, 0.0, SQRT_HALF])


def test_inbound_direction_is_left_unchanged(caplog):
    world = World(_policy())
    carrier = world.carrier(direction=(SQRT_HALF, 0.0, -SQRT_HALF))
    with caplog.at_level(logging.WARNING, logger="drift_sim"):
        outcome = world.crossing(carrier)
    assert outcome == NoAction()
    assert "reflection failed" in caplog.text


def test_specular_reflection_kernel():
    out = specular_reflection(
        np.array([SQRT_HALF, 0.0, SQRT_HALF]), np.array([0.0, 0.0, 1.0])
    )
    assert np.allclose(out, [SQRT_HALF, 0.0, -SQRT_HALF])


@pytest.mark.parametrize("length", [0.0, 0.4e-12, 0.5e-12])
def test_degenerate_steps_skip_cascade(length):
    world = World(_policy(absorption_probability=1.0))
    outcome = world.crossing(world.carrier(), length=length)
    assert outcome == NoAction()
    assert world.navigator.calls == 0


def test_step_not_limited_by_geometry_is_ignored():
    world = World(_policy(absorption_probability=1.0))
    outcome = world.crossing(world.carrier(), status=StepStatus.POST_STEP_PROC)
    assert outcome == NoAction()


def test_inbound_after_reflection_is_ignored():
    world = World(_policy(absorption_probability=1.0))
    carrier = world.carrier(lattice=object())
    assert world.crossing(carrier) == NoAction()


def test_identical_pre_and_post_volume_is_logged(caplog):
    world = World(_policy(absorption_probability=1.0))
    carrier = world.carrier()
    world.engine.load_data_for_track(carrier)
    with caplog.at_level(logging.ERROR, logger="drift_sim"):
        outcome = world.engine.do_interaction(make_step(carrier, world.crystal, world.crystal))
    assert outcome == NoAction()
    assert "identical" in caplog.text


def test_missing_surface_policy_passes_through():
    world = World(policy=None)
    assert world.crossing(world.carrier()) == NoAction()
    assert world.navigator.calls == 0


def test_unresolved_normal_passes_through(caplog):
    world = World(_policy(), normal=None)
    with caplog.at_level(logging.ERROR, logger="drift_sim"):
        outcome = world.crossing(world.carrier())
    assert outcome == NoAction()
    assert "cannot get normal" in caplog.text


def test_wrong_carrier_type_is_rejected_without_mutation(caplog):
    world = World(_policy(absorption_probability=1.0))
    hole = world.carrier(CarrierType.HOLE, direction=(SQRT_HALF, 0.0, SQRT_HALF))
    before = (
        hole.position.copy(),
        hole.direction.copy(),
        hole.wave_vector.copy(),
        hole.kinetic_energy,
        hole.alive,
        hole.lattice,
    )
    with caplog.at_level(logging.ERROR, logger="drift_sim"):
        loaded = world.engine.load_data_for_track(hole)
        outcome = world.engine.do_interaction(make_step(hole, world.crystal, world.world))
    assert loaded is False
    assert outcome == NoAction()
    assert "not valid" in caplog.text
    assert np.array_equal(hole.position, before[0])
    assert np.array_equal(hole.direction, before[1])
    assert np.array_equal(hole.wave_vector, before[2])
    assert hole.kinetic_energy == before[3]
    assert hole.alive is before[4]
    assert hole.lattice is before[5]
    assert world.navigator.calls == 0


def test_rejected_track_keeps_lattice_of_previous_track():
    world = World(_policy(absorption_probability=1.0))
    electron = world.carrier()
    assert world.engine.load_data_for_track(electron)
    assert world.engine.load_data_for_track(world.carrier(CarrierType.HOLE)) is False
    outcome = world.engine.do_interaction(make_step(electron, world.crystal, world.world))
    assert isinstance(outcome, Absorbed)
