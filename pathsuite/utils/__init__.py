"""Utility modules for pathsuite."""
