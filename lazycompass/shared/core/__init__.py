"""Errors, redaction and logging."""
