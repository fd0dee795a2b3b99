"""Editor domain."""
