"""Carrier helpers shared across DRIFT-SIM."""
