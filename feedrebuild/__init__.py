"""Rebuild the recent changes feed table from revision and log history."""

__version__ = "0.1.0"
