"""
MISP Client Exception Classes
"""

from typing import Any, List, Optional

import httpx


class MispError(Exception):
    """Base exception for MISP client operations"""
    pass


class MispConfigError(MispError):
    """Raised when the client configuration is incomplete"""
    pass


class MispTransportError(MispError):
    """Raised when the HTTP exchange fails before a response is available
    (DNS, connection refused, TLS failure, timeout)."""
    pass


class MispStatusError(MispError):
    """Raised when the server replies with anything other than 200.

    The fully read response is kept so callers can inspect the body
    for the server-side error message.
    """

    def __init__(self, response: httpx.Response):
        self.response = response
        self.status_code = response.status_code
        super().__init__(f"MISP server replied status={response.status_code}")

    @property
    def body(self) -> str:
        return self.response.text


class MispDecodeError(MispError):
    """Raised when a response body does not match the expected envelope."""

    def __init__(self, message: str, payload: Any = None):
        self.payload = payload
        if payload is not None:
            message = f"{message}: {payload!r}"
        super().__init__(message)


class MispEmptyResultError(MispError):
    """Raised when a query that needs at least one match returned none"""
    pass


class MispTooFewResultsError(MispError):
    """Raised when the Nth sample is requested but fewer are available"""

    def __init__(self, count: int, index: int):
        self.count = count
        self.index = index
        super().__init__(f"Too few results: {count} (requested index {index})")


class MispPlatformError(MispError):
    """Raised when the platform reports errors inside a 200 response"""

    def __init__(self, errors: List[str], payload: Optional[dict] = None):
        self.errors = errors
        self.payload = payload
        super().__init__(f"MISP returned an error: {'; '.join(errors)}")


class SinkOpenError(MispError):
    """Raised when a download destination cannot be opened for writing"""

    def __init__(self, filename: str, reason: Exception):
        self.filename = filename
        super().__init__(f"Error opening {filename}: {reason}")


class SinkWriteError(MispError):
    """Raised when copying a download into its destination fails mid-stream.

    The destination is left partially written.
    """

    def __init__(self, filename: str, reason: Exception):
        self.filename = filename
        super().__init__(f"Error writing to {filename}: {reason}")
