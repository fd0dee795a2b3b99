"""Loading domain."""
