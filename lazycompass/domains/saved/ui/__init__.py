"""Saved spec UI."""
