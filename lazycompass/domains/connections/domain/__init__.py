"""Connection and config models."""
