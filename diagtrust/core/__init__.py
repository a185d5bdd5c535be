"""
Core Module

Sensor model, sanitization, collection diagnostics, scoring and gating.
"""
