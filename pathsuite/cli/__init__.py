"""Command-line interface for pathsuite."""
