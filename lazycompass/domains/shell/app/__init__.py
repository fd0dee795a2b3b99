"""Application shell."""
