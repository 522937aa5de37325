"""Failure categories raised while fetching and parsing a page."""
from __future__ import annotations


class AnalysisError(RuntimeError):
    """Base class for failures that end an analysis early."""

    kind = "analysis"

    def __init__(self, message: str, status_code: int = 0) -> None:
        super().__init__(message)
        self.status_code = status_code


class TransportError(AnalysisError):
    """Raised when the target cannot be reached (DNS, connect, TLS, timeout)."""

    kind = "transport"

    def __init__(self, message: str) -> None:
        # Status 0 is never a valid HTTP status, so it marks "no response".
        super().__init__(message, status_code=0)


class HTTPStatusError(AnalysisError):
    """Raised when the server answers with a status outside [200, 400)."""

    kind = "http"


class ReadError(AnalysisError):
    """Raised when streaming the response body fails."""

    kind = "read"


class ParseError(AnalysisError):
    """Raised when the HTML parser gives up on the document."""

    kind = "parse"
