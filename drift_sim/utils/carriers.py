"""Particle categories and statistical track weighting."""

from __future__ import annotations

import numpy as np

from ..config.models import TransportSettings
from ..simulation.types import Carrier, CarrierType


def _type_of(item: Carrier | CarrierType | str | None) -> CarrierType | None:
    if item is None:
        return None
    if isinstance(item, Carrier):
        return item.carrier_type
    try:
        return CarrierType(item)
    except ValueError:
        return None


def is_electron(item) -> bool:
    return _type_of(item) is CarrierType.ELECTRON


def is_hole(item) -> bool:
    return _type_of(item) is CarrierType.HOLE


def is_phonon(item) -> bool:
    return _type_of(item) is CarrierType.PHONON


def is_charge_carrier(item) -> bool:
    return is_electron(item) or is_hole(item)


def _choose_weight(prob: float, rng: np.random.Generator) -> float:
    # If prob=0, the random throw always fails and never divides by zero
    if prob == 1.0:
        return 1.0
    return 1.0 / prob if float(rng.random()) < prob else 0.0


def choose_charge_weight(prob: float, rng: np.random.Generator) -> float:
    """Weight for a new charge track produced with probability *prob*.

    Returns ``1/prob`` when kept and ``0`` when the track should not be
    created at all.
    """
    return _choose_weight(float(prob), rng)


def choose_phonon_weight(prob: float, rng: np.random.Generator) -> float:
    return _choose_weight(float(prob), rng)


def choose_weight(
    item,
    settings: TransportSettings,
    rng: np.random.Generator,
) -> float:
    """Weight for a new track of the given type; zero means do not create it."""

    if is_charge_carrier(item):
        return choose_charge_weight(settings.gen_charges, rng)
    if is_phonon(item):
        return choose_phonon_weight(settings.gen_phonons, rng)
    return 1.0
