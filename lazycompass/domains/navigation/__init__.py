"""Navigation domain."""
