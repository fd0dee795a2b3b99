"""Editor UI."""
