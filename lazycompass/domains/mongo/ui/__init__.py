"""Document UI."""
