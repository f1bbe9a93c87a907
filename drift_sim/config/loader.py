"""Load DRIFT-SIM configuration files from disk."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

import yaml

from .models import ConfigBundle, TransportSettings
from .validation import ensure_mapping

ENV_CONFIG_DIR = "DRIFT_SIM_CONFIG_DIR"


def get_config_dir() -> Path:
    """Return the active configuration directory.

    Order of precedence:
    1. ``DRIFT_SIM_CONFIG_DIR`` environment variable when set.
    2. Repository-local ``config/`` directory.
    """

    env_path = os.environ.get(ENV_CONFIG_DIR)
    if env_path:
        return Path(os.path.expanduser(env_path)).resolve()
    return Path(__file__).resolve().parents[2] / "config"


def _read_data_file(path: Path) -> dict[str, Any]:
    """Load a YAML/JSON mapping from *path*.

    Missing files return an empty mapping.
    """

    if not path.exists():
        return {}
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() == ".json":
        return ensure_mapping(json.loads(text), name=str(path))
    data = yaml.safe_load(text)
    if data is None:
        return {}
    if isinstance(data, dict):
        return data
    raise TypeError(f"{path} must contain a mapping at top level")


def _first_existing(config_dir: Path, stem: str) -> Path:
    for suffix in (".yaml", ".yml", ".json"):
        candidate = config_dir / f"{stem}{suffix}"
        if candidate.exists():
            return candidate
    return config_dir / f"{stem}.yaml"


def _load_from_dir(config_dir: Path) -> ConfigBundle:
    transport = ensure_mapping(
        _read_data_file(_first_existing(config_dir, "transport")),
        name="transport.yaml",
    )
    surfaces = ensure_mapping(
        _read_data_file(_first_existing(config_dir, "surfaces")),
        name="surfaces.yaml",
    )
    return ConfigBundle(
        config_dir=config_dir,
        transport=transport,
        surfaces=surfaces,
    )


_BUNDLE_CACHE: dict[Path, ConfigBundle] = {}


def clear_config_cache() -> None:
    """Clear cached configuration bundles."""

    _BUNDLE_CACHE.clear()


def get_config_bundle(config_dir: Path | None = None) -> ConfigBundle:
    """Return the active cached configuration bundle."""

    resolved_dir = (config_dir or get_config_dir()).resolve()
    bundle = _BUNDLE_CACHE.get(resolved_dir)
    if bundle is None:
        bundle = _load_from_dir(resolved_dir)
        _BUNDLE_CACHE[resolved_dir] = bundle
    return bundle


def get_transport_settings(config_dir: Path | None = None) -> TransportSettings:
    """Return typed transport settings from the active bundle."""

    bundle = get_config_bundle(config_dir)
    return TransportSettings.from_mapping(bundle.transport.get("transport"))
