"""Validation helpers for configuration payloads."""

from __future__ import annotations

from typing import Any

import numpy as np


def ensure_mapping(value: Any, *, name: str) -> dict[str, Any]:
    """Return *value* as ``dict`` or raise a descriptive ``TypeError``."""

    if value is None:
        return {}
    if not isinstance(value, dict):
        raise TypeError(f"{name} must be a mapping, got {type(value).__name__}")
    return value


def ensure_list(value: Any, *, name: str) -> list[Any]:
    """Return *value* as ``list`` or raise a descriptive ``TypeError``."""

    if value is None:
        return []
    if not isinstance(value, list):
        raise TypeError(f"{name} must be a list, got {type(value).__name__}")
    return value


def ensure_probability(value: Any, *, name: str) -> float:
    """Return *value* as a float in ``[0, 1]`` or raise ``ValueError``."""

    prob = float(value)
    if not 0.0 <= prob <= 1.0:
        raise ValueError(f"{name} must lie in [0, 1], got {prob}")
    return prob


def ensure_non_negative(value: Any, *, name: str) -> float:
    number = float(value)
    if number < 0.0:
        raise ValueError(f"{name} must be non-negative, got {number}")
    return number


def ensure_vector3(value: Any, *, name: str) -> np.ndarray:
    """Return *value* as a finite float64 3-vector or raise ``ValueError``."""

    vec = np.asarray(value, dtype=np.float64)
    if vec.shape != (3,):
        raise ValueError(f"{name} must be a 3-vector, got shape {vec.shape}")
    if not np.all(np.isfinite(vec)):
        raise ValueError(f"{name} must be finite, got {vec}")
    return vec
