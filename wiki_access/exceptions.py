"""
Custom exceptions for wiki access.

Only fatal communication failures are raised to callers: the call could not
be completed at all. Business-level failures reported by the wiki (denied
edits, missing sections, bad logins) are recorded on the client or entity
``error`` attribute instead.
"""


class WikiAccessError(Exception):
    """Base exception for all wiki access errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class WikiCommunicationError(WikiAccessError):
    """Raised when a request to the API could not be completed."""


class LagRetriesExhaustedError(WikiCommunicationError):
    """Raised when the server stayed lagged past the configured retry budget."""

    def __init__(self, action: str, retries: int):
        super().__init__(
            f"Server lagged ({retries} consecutive maxlag responses) on {action} request",
            {"action": action, "retries": retries},
        )
        self.action = action
        self.retries = retries


class MalformedResponseError(WikiCommunicationError):
    """Raised when the API answered with something other than a JSON envelope."""

    def __init__(self, action: str, method: str, reason: str):
        super().__init__(
            f"The API did not return a valid {action} {method} response: {reason}",
            {"action": action, "method": method, "reason": reason},
        )
        self.action = action
        self.method = method
        self.reason = reason


class UnsupportedTokenError(WikiCommunicationError):
    """Raised when a token kind other than csrf or login is requested."""

    def __init__(self, kind: str):
        super().__init__(f"The API does not support the token type: {kind}", {"kind": kind})
        self.kind = kind


class TransportError(WikiCommunicationError):
    """Raised when the HTTP transport fails to reach the endpoint.

    Note: Not named ConnectionError to avoid shadowing the builtin.
    """

    def __init__(self, url: str, cause: Exception | None = None):
        details = {"url": url}
        if cause:
            details["cause"] = str(cause)
        super().__init__(f"Connection failed to {url}", details)
        self.url = url
        self.cause = cause


class FileAccessError(WikiAccessError):
    """Raised when a local file read or write fails."""

    def __init__(self, operation: str, path: str | None = None, cause: Exception | None = None):
        details = {"operation": operation}
        if path:
            details["path"] = path
        if cause:
            details["cause"] = str(cause)
        message = f"File I/O error during {operation}"
        if path:
            message += f": {path}"
        super().__init__(message, details)
        self.operation = operation
        self.path = path
        self.cause = cause
