"""Loading session mixins."""
