"""Navigation UI."""
