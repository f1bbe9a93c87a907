"""Conduction-valley orientations and the per-track valley table.

Each of the four valleys is described by a fixed triple of Euler angles
``(phi, theta, psi)``. The normal->valley transform of an axis vector is the
intrinsic Z-X-Z rotation built from those angles; valley->normal is its
inverse.
"""

from __future__ import annotations

from dataclasses import dataclass
from math import pi

import numpy as np
from scipy.spatial.transform import Rotation

N_VALLEYS = 4

VALLEY_EULER_ANGLES: dict[int, tuple[float, float, float]] = {
    1: (-pi / 4, -pi / 4, pi / 4),
    2: (pi / 4, -pi / 4, -pi / 4),
    3: (-pi / 4, pi / 4, pi / 4),
    4: (pi / 4, pi / 4, -pi / 4),
}


@dataclass(frozen=True)
class ValleyTransform:
    valley: int
    to_valley: Rotation
    to_normal: Rotation

    def normal_to_valley(self, vec: np.ndarray) -> np.ndarray:
        return self.to_valley.apply(np.asarray(vec, dtype=np.float64))

    def valley_to_normal(self, vec: np.ndarray) -> np.ndarray:
        return self.to_normal.apply(np.asarray(vec, dtype=np.float64))


def check_valley(valley: int) -> int:
    """Return *valley* as ``int`` or raise ``ValueError`` outside 1..4."""
    index = int(valley)
    if index not in VALLEY_EULER_ANGLES:
        raise ValueError(f"valley index must be in 1..{N_VALLEYS}, got {valley!r}")
    return index


def transform_for(valley: int) -> ValleyTransform:
    """Build the normal<->valley rotation pair for *valley*."""

    index = check_valley(valley)
    to_valley = Rotation.from_euler("ZXZ", VALLEY_EULER_ANGLES[index])
    return ValleyTransform(valley=index, to_valley=to_valley, to_normal=to_valley.inv())


class ValleyTable:
    """Valley index per track id.

    Owned by the transport-kernel adapter and handed to the processes that
    read or rewrite valleys. Entries are only touched for the track being
    stepped.
    """

    def __init__(self) -> None:
        self._valleys: dict[int, int] = {}

    def get_valley(self, track_id: int) -> int | None:
        return self._valleys.get(int(track_id))

    def set_valley(self, track_id: int, valley: int) -> None:
        self._valleys[int(track_id)] = check_valley(valley)

    def remove(self, track_id: int) -> None:
        self._valleys.pop(int(track_id), None)

    def clear(self) -> None:
        self._valleys.clear()

    def __contains__(self, track_id: int) -> bool:
        return int(track_id) in self._valleys

    def __len__(self) -> int:
        return len(self._valleys)
