"""Shared helpers (configuration, filesystem, logging)."""
