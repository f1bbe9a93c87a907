"""Electric field and potential samplers.

A sampler answers two questions: the field vector (V/m) at a lab-frame
position and the scalar potential (V) at a volume-local position. Either may
return ``None`` when no field model covers the queried point. ``None`` is not
the same as a zero field and callers must branch on it explicitly.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

import numpy as np
from scipy.interpolate import RegularGridInterpolator

if TYPE_CHECKING:
    from .geometry import Volume


class FieldSampler:
    """Base sampler. Subclasses override one or both queries."""

    def field_at(self, position: np.ndarray) -> np.ndarray | None:
        return None

    def potential_at(self, local_position: np.ndarray) -> float | None:
        return None


class UniformField(FieldSampler):
    """Constant field everywhere. Exposes no potential."""

    def __init__(self, vector: Sequence[float]):
        self.vector = np.asarray(vector, dtype=np.float64).reshape(3)

    def field_at(self, position: np.ndarray) -> np.ndarray | None:
        return self.vector.copy()


class MeshPotentialField(FieldSampler):
    """Potential tabulated on a regular ``(x, y, z)`` grid.

    Parameters
    ----------
    axes : sequence of three 1D arrays
        Strictly increasing grid coordinates in metres.
    potential : ndarray
        Potential values in volts with shape ``(len(x), len(y), len(z))``.

    placement : Volume, optional
        Volume whose local frame the grid is built in. ``field_at`` maps lab
        positions into that frame and rotates the field back to the lab;
        without a placement the grid frame is the lab frame.

    The field is ``-grad(V)`` computed on the grid with :func:`numpy.gradient`
    and interpolated linearly like the potential. ``potential_at`` always takes
    grid-frame (volume-local) positions.
    """

    def __init__(
        self,
        axes: Sequence[np.ndarray],
        potential: np.ndarray,
        placement: "Volume | None" = None,
    ):
        grid = tuple(np.asarray(a, dtype=np.float64) for a in axes)
        values = np.asarray(potential, dtype=np.float64)
        if len(grid) != 3:
            raise ValueError("axes must provide x, y and z coordinates")
        if values.shape != tuple(a.size for a in grid):
            raise ValueError(
                f"potential shape {values.shape} does not match grid "
                f"{tuple(a.size for a in grid)}"
            )
        if any(a.size < 2 for a in grid):
            raise ValueError("each grid axis needs at least two points")

        self.axes = grid
        self.placement = placement
        self._potential = RegularGridInterpolator(
            grid, values, bounds_error=False, fill_value=np.nan
        )
        gradient = np.gradient(values, *grid)
        self._field = [
            RegularGridInterpolator(grid, -g, bounds_error=False, fill_value=np.nan)
            for g in gradient
        ]

    @classmethod
    def parallel_plate(
        cls,
        half_lengths: Sequence[float],
        top_voltage: float,
        bottom_voltage: float,
        n_points: int = 5,
        placement: "Volume | None" = None,
    ) -> "MeshPotentialField":
        """Linear potential between plates at ``z = +/- half_lengths[2]``."""

        hx, hy, hz = (float(h) for h in half_lengths)
        x = np.linspace(-hx, hx, n_points)
        y = np.linspace(-hy, hy, n_points)
        z = np.linspace(-hz, hz, n_points)
        frac = (z + hz) / (2.0 * hz)
        column = bottom_voltage + (top_voltage - bottom_voltage) * frac
        potential = np.broadcast_to(column, (n_points, n_points, n_points)).copy()
        return cls((x, y, z), potential, placement=placement)

    def field_at(self, position: np.ndarray) -> np.ndarray | None:
        local = np.asarray(position, dtype=np.float64)
        if self.placement is not None:
            local = self.placement.to_local(local)
        point = local.reshape(1, 3)
        vec = np.array([float(f(point)[0]) for f in self._field])
        if not np.all(np.isfinite(vec)):
            return None
        if self.placement is not None:
            vec = self.placement.rotation @ vec
        return vec

    def potential_at(self, local_position: np.ndarray) -> float | None:
        point = np.asarray(local_position, dtype=np.float64).reshape(1, 3)
        value = float(self._potential(point)[0])
        if not np.isfinite(value):
            return None
        return value
