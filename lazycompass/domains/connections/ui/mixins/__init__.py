"""Connection session mixins."""
