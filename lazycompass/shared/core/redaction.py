"""Credential redaction for anything shown on screen or written to logs."""

from __future__ import annotations

import re

_URI_USERINFO = re.compile(r"(mongodb(?:\+srv)?://)([^@/\s]+)@", re.IGNORECASE)
_SECRET_PARAM = re.compile(r"\b(password|pwd|secret|token)=([^&\s]+)", re.IGNORECASE)

REDACTED = "***"


def redact_connection_uri(uri: str) -> str:
    """Replace the userinfo part of a mongodb:// or mongodb+srv:// URI."""
    return _URI_USERINFO.sub(rf"\1{REDACTED}@", uri)


def redact_sensitive_text(text: str) -> str:
    """Redact every embedded connection URI and secret-looking parameter."""
    text = redact_connection_uri(text)
    return _SECRET_PARAM.sub(lambda m: f"{m.group(1)}={REDACTED}", text)


def uri_has_credentials(uri: str) -> bool:
    return _URI_USERINFO.search(uri) is not None
