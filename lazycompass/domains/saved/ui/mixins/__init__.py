"""Saved spec session mixins."""
