"""Frame rendering."""
