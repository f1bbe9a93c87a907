"""Per-interface surface properties for drifting charge carriers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterator

from ..config.validation import (
    ensure_list,
    ensure_mapping,
    ensure_non_negative,
    ensure_probability,
)
from .types import CarrierType


@dataclass(frozen=True)
class SurfacePolicy:
    """Absorption and electrode settings of one border surface.

    Attributes
    ----------
    absorption_probability : float
        Chance in ``[0, 1]`` that a crossing carrier is absorbed outright.
    electrode_delta_v : float
        Half width (V) of the window around ``electrode_potential`` inside
        which a carrier counts as collected.
    min_k_electron, min_k_hole : float
        Wave-vector thresholds (1/m). A carrier with ``k . n`` strictly above
        the threshold for its type is absorbed.
    electrode_potential : float
        Nominal electrode potential (V).
    """

    absorption_probability: float = 0.0
    electrode_delta_v: float = 0.0
    min_k_electron: float = float("inf")
    min_k_hole: float = float("inf")
    electrode_potential: float = 0.0
    name: str = ""

    def __post_init__(self) -> None:
        ensure_probability(self.absorption_probability, name="absorption_probability")
        ensure_non_negative(self.electrode_delta_v, name="electrode_delta_v")

    def threshold_for(self, carrier_type: CarrierType) -> float:
        if carrier_type is CarrierType.ELECTRON:
            return self.min_k_electron
        if carrier_type is CarrierType.HOLE:
            return self.min_k_hole
        raise ValueError(f"no wave-vector threshold for {carrier_type.value} tracks")

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> "SurfacePolicy":
        block = ensure_mapping(data, name="surface")
        return cls(
            absorption_probability=float(block.get("absorption_probability", 0.0)),
            electrode_delta_v=float(block.get("electrode_delta_v", 0.0)),
            min_k_electron=float(block.get("min_k_electron", float("inf"))),
            min_k_hole=float(block.get("min_k_hole", float("inf"))),
            electrode_potential=float(block.get("electrode_potential", 0.0)),
            name=str(block.get("name", "")),
        )


class SurfacePolicyStore:
    """Surface policies keyed by the ordered ``(from, to)`` volume-name pair."""

    def __init__(self) -> None:
        self._policies: dict[tuple[str, str], SurfacePolicy] = {}

    def register(self, from_volume: str, to_volume: str, policy: SurfacePolicy) -> None:
        self._policies[(str(from_volume), str(to_volume))] = policy

    def policy_for(self, from_volume: str, to_volume: str) -> SurfacePolicy | None:
        """Policy for the interface, or ``None`` when none is configured."""
        return self._policies.get((str(from_volume), str(to_volume)))

    def items(self) -> Iterator[tuple[tuple[str, str], SurfacePolicy]]:
        return iter(sorted(self._policies.items()))

    def __len__(self) -> int:
        return len(self._policies)

    @classmethod
    def from_config(cls, data: dict[str, Any] | None) -> "SurfacePolicyStore":
        """Build a store from the parsed contents of ``surfaces.yaml``."""

        store = cls()
        block = ensure_mapping(data, name="surfaces.yaml")
        for i, entry in enumerate(ensure_list(block.get("surfaces"), name="surfaces")):
            entry = ensure_mapping(entry, name=f"surfaces[{i}]")
            try:
                from_volume = entry["from"]
                to_volume = entry["to"]
            except KeyError as exc:
                raise ValueError(
                    f"surfaces[{i}] is missing the {exc.args[0]!r} volume name"
                ) from exc
            store.register(from_volume, to_volume, SurfacePolicy.from_mapping(entry))
        return store
