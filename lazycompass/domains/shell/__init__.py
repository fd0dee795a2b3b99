"""Shell domain."""
