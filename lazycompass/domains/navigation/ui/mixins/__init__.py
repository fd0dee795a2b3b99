"""Navigation session mixins."""
