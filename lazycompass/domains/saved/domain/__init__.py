"""Saved query and aggregation models."""
