"""Editor session mixins."""
