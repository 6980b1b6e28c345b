"""Arbor: build category trees from flat CSV rows."""

__version__ = "0.1.0"
