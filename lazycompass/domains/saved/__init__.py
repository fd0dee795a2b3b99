"""Saved domain."""
