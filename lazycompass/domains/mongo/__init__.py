"""Mongo domain."""
