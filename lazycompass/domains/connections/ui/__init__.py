"""Connection UI."""
