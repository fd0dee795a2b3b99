"""Load request tracking."""
