"""Precanned CLI - command line over the import engine."""

__version__ = "1.0.0"
