"""Config file locations, loading and persistence."""
