"""Deterministic computation core: fatigue models, zones, set division, engine."""
