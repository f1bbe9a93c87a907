"""Config loading helpers for DRIFT-SIM."""

from .loader import clear_config_cache, get_config_bundle, get_config_dir
from .models import ConfigBundle, TransportSettings

__all__ = [
    "ConfigBundle",
    "TransportSettings",
    "clear_config_cache",
    "get_config_bundle",
    "get_config_dir",
]
