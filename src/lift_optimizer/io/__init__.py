"""Serialization and file loading for optimizer inputs and outputs."""
