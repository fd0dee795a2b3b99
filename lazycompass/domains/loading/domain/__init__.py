"""Load kinds, states and results."""
