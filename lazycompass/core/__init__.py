"""UI-agnostic key handling."""
