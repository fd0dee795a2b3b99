"""Document session mixins."""
