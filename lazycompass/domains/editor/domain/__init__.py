"""Pending editor actions."""
