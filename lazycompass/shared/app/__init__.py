"""Application services and runtime configuration."""
