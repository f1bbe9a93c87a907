"""Typed containers for parsed configuration files."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import numpy as np

from .validation import (
    ensure_mapping,
    ensure_non_negative,
    ensure_probability,
    ensure_vector3,
)

# Geometry surface tolerance (1e-9 mm) expressed in metres.
DEFAULT_SURFACE_TOLERANCE_M = 1.0e-12
DEFAULT_ELECTRODE_NORMAL_THRESHOLD = 0.5


@dataclass(frozen=True)
class ConfigBundle:
    """In-memory representation of the project configuration."""

    config_dir: Path
    transport: dict[str, Any]
    surfaces: dict[str, Any]


@dataclass(frozen=True, eq=False)
class TransportSettings:
    """Process-level settings shared by the interaction models.

    Attributes
    ----------
    surface_tolerance : float
        Geometric surface tolerance in metres. Boundary steps no longer than
        half of it are treated as the null step following a reflection.
    electrode_normal_threshold : float
        Minimum ``|normal . collection_axis|`` for a surface to count as an
        electrode face.
    collection_axis : ndarray
        Unit vector of the principal collection axis (``+z`` by default).
    gen_charges, gen_phonons : float
        Probabilities used for statistical down-sampling of new tracks.
    verbose : int
        Process verbosity, mapped onto logging levels.
    seed : int or None
        Seed for the shared random generator; ``None`` draws fresh entropy.
    """

    surface_tolerance: float = DEFAULT_SURFACE_TOLERANCE_M
    electrode_normal_threshold: float = DEFAULT_ELECTRODE_NORMAL_THRESHOLD
    collection_axis: np.ndarray = field(
        default_factory=lambda: np.array([0.0, 0.0, 1.0], dtype=np.float64)
    )
    gen_charges: float = 1.0
    gen_phonons: float = 1.0
    verbose: int = 0
    seed: int | None = None

    @classmethod
    def from_mapping(cls, data: dict[str, Any] | None) -> "TransportSettings":
        """Build settings from the ``transport`` block of ``transport.yaml``."""

        block = ensure_mapping(data, name="transport")
        electrode = ensure_mapping(block.get("electrode"), name="transport.electrode")
        generation = ensure_mapping(block.get("generation"), name="transport.generation")

        axis = ensure_vector3(
            electrode.get("collection_axis", [0.0, 0.0, 1.0]),
            name="transport.electrode.collection_axis",
        )
        norm = float(np.linalg.norm(axis))
        if norm == 0.0:
            raise ValueError("transport.electrode.collection_axis must be non-zero")

        seed = block.get("seed")
        return cls(
            surface_tolerance=ensure_non_negative(
                block.get("surface_tolerance_m", DEFAULT_SURFACE_TOLERANCE_M),
                name="transport.surface_tolerance_m",
            ),
            electrode_normal_threshold=float(
                electrode.get("normal_threshold", DEFAULT_ELECTRODE_NORMAL_THRESHOLD)
            ),
            collection_axis=axis / norm,
            gen_charges=ensure_probability(
                generation.get("charges", 1.0), name="transport.generation.charges"
            ),
            gen_phonons=ensure_probability(
                generation.get("phonons", 1.0), name="transport.generation.phonons"
            ),
            verbose=int(block.get("verbose", 0)),
            seed=None if seed is None else int(seed),
        )
