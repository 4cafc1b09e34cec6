"""Shared utilities: configuration and one-time resource loading."""
