"""Roboto Rumble -- trait-derived units and a headless turn-based battle engine."""

__version__ = "0.1.0"
