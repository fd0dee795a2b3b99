"""Modal overlays."""
