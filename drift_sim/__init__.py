"""DRIFT-SIM: inter-valley scattering and boundary interactions for drifting charge carriers."""

__version__ = "0.1.0"
