"""Prompts domain."""
