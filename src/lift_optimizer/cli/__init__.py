"""Command line interface for lift-optimizer."""
