"""Error types and user-facing error formatting."""

from __future__ import annotations

from collections.abc import Iterator

from pymongo.errors import ConnectionFailure, ExecutionTimeout

from lazycompass.shared.core.redaction import redact_sensitive_text

QUERY_TIMEOUT_HINT = "query timeout (maxTimeMS): increase [timeouts].query_ms or narrow filter/sort"
NETWORK_HINT = " (network error: retry read-only operations)"

_QUERY_TIMEOUT_MARKERS = (
    "maxtimemsexpired",
    "max time ms",
    "max execution time",
    "execution time limit",
    "exceeded time limit",
    "operation exceeded time limit",
)

_NETWORK_MARKERS = (
    "unable to connect",
    "failed to connect",
    "server selection",
    "network",
    "timed out",
    "timeout",
    "connection refused",
    "connection reset",
)


class LazyCompassError(Exception):
    """Base class for errors surfaced to the user as a status message."""


class SelectionMissingError(LazyCompassError):
    """Raised when an action needs a connection, database, collection or document."""


class PayloadError(LazyCompassError):
    """Raised when edited JSON or TOML cannot be parsed into the expected shape."""


class ValidationError(LazyCompassError):
    """Raised when a value parses but breaks a naming or scope rule."""


class WriteGuardError(LazyCompassError):
    """Raised when a write is attempted in read-only mode or with a blocked stage."""


class StorageError(LazyCompassError):
    """Raised when config or saved spec files cannot be read or written."""


class EditorError(LazyCompassError):
    """Raised when the external editor cannot be resolved or exits badly."""


def iter_error_chain(error: BaseException) -> Iterator[BaseException]:
    """Yield an error followed by its causes, outermost first."""
    seen: set[int] = set()
    current: BaseException | None = error
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield current
        if current.__cause__ is not None or current.__suppress_context__:
            current = current.__cause__
        else:
            current = current.__context__


def root_cause(error: BaseException) -> BaseException:
    chain = list(iter_error_chain(error))
    return chain[-1]


def is_query_timeout_message(message: str) -> bool:
    lowered = message.lower()
    return any(marker in lowered for marker in _QUERY_TIMEOUT_MARKERS)


def is_network_error_message(message: str) -> bool:
    lowered = message.lower()
    return any(marker in lowered for marker in _NETWORK_MARKERS)


def is_network_error(error: BaseException) -> bool:
    """Return True if any error in the chain looks like a network failure."""
    for item in iter_error_chain(error):
        if isinstance(item, ExecutionTimeout):
            continue
        if isinstance(item, (ConnectionFailure, ConnectionError, TimeoutError)):
            return True
        if is_network_error_message(str(item)):
            return True
    return False


def format_error_message(message: str, network: bool) -> str:
    message = redact_sensitive_text(message)
    if is_query_timeout_message(message):
        return f"{QUERY_TIMEOUT_HINT}; {message}"
    if network:
        return f"{message}{NETWORK_HINT}"
    return message


def format_error(error: BaseException) -> str:
    """Format an exception and its root cause as a single status line."""
    primary = redact_sensitive_text(str(error) or error.__class__.__name__)
    cause = root_cause(error)
    if cause is not error:
        cause_text = redact_sensitive_text(str(cause))
        if cause_text and cause_text.lower() not in primary.lower():
            primary = f"{primary} (cause: {cause_text})"
    timed_out = any(is_query_timeout_message(str(item)) for item in iter_error_chain(error))
    if timed_out or isinstance(cause, ExecutionTimeout):
        return f"{QUERY_TIMEOUT_HINT}; {primary}"
    return format_error_message(primary, is_network_error(error))
