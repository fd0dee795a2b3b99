"""External editor integration."""
