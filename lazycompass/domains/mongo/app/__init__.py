"""MongoDB access."""
