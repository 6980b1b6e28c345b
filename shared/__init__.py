"""Shared utilities for Arbor."""
