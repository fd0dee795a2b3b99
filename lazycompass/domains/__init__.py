"""Feature domains."""
