"""Prompt session mixins."""
