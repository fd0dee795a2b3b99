"""Prompt UI."""
