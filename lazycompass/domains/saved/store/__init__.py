"""Saved spec files."""
