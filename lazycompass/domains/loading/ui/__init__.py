"""Loading UI."""
