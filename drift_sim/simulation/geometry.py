"""Minimal geometry collaborators: placed volumes, lattice lookup and exit normals."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol

import numpy as np

from .fields import FieldSampler


@dataclass(eq=False)
class Volume:
    """A placed physical volume.

    Volumes compare by identity, as placed volumes do in the kernel. The
    placement maps local coordinates to the lab frame as
    ``lab = rotation @ local + translation``.
    """

    name: str
    translation: np.ndarray = field(default_factory=lambda: np.zeros(3))
    rotation: np.ndarray = field(default_factory=lambda: np.eye(3))

    def __post_init__(self) -> None:
        self.translation = np.asarray(self.translation, dtype=np.float64).reshape(3)
        self.rotation = np.asarray(self.rotation, dtype=np.float64).reshape(3, 3)

    def to_local(self, point: np.ndarray) -> np.ndarray:
        """Return lab-frame *point* in this volume's local frame."""
        return self.rotation.T @ (np.asarray(point, dtype=np.float64) - self.translation)

    def __repr__(self) -> str:
        return f"Volume({self.name!r})"


class GeometryDatabase:
    """Resolve a placed volume to its crystal lattice and its field model."""

    def __init__(self) -> None:
        self._lattices: dict[int, Any] = {}
        self._fields: dict[int, FieldSampler] = {}

    def register(
        self,
        volume: Volume,
        *,
        lattice: Any = None,
        field: FieldSampler | None = None,
    ) -> None:
        key = id(volume)
        if lattice is not None:
            self._lattices[key] = lattice
        if field is not None:
            self._fields[key] = field

    def lattice_for(self, volume: Volume | None) -> Any:
        if volume is None:
            return None
        return self._lattices.get(id(volume))

    def field_for(self, volume: Volume | None) -> FieldSampler | None:
        if volume is None:
            return None
        return self._fields.get(id(volume))


class Navigator(Protocol):
    def global_exit_normal(self, position: np.ndarray) -> np.ndarray | None:
        """Outward unit normal at *position*, or ``None`` if unresolved."""


class BoxNavigator:
    """Exit normals for an axis-aligned box centred at ``center``.

    A point is considered on a face when it lies within ``tolerance`` of it;
    points away from every face (or on an edge shared by two faces) have no
    well defined normal and yield ``None``.
    """

    def __init__(self, half_lengths, center=(0.0, 0.0, 0.0), tolerance: float = 1e-9):
        self.half_lengths = np.asarray(half_lengths, dtype=np.float64).reshape(3)
        self.center = np.asarray(center, dtype=np.float64).reshape(3)
        self.tolerance = float(tolerance)

    def global_exit_normal(self, position: np.ndarray) -> np.ndarray | None:
        rel = np.asarray(position, dtype=np.float64) - self.center
        gap = self.half_lengths - np.abs(rel)
        on_face = np.abs(gap) <= self.tolerance
        if np.count_nonzero(on_face) != 1:
            return None
        axis = int(np.flatnonzero(on_face)[0])
        normal = np.zeros(3, dtype=np.float64)
        normal[axis] = 1.0 if rel[axis] > 0.0 else -1.0
        return normal
