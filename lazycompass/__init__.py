"""lazycompass - a keyboard-driven terminal client for MongoDB."""

__version__ = "0.4.0"
