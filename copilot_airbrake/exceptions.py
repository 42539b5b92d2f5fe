# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Exceptions for the Airbrake notice pipeline.

None of these escape the public ``Brake.report*`` methods; they are
converted into a human log line by the facade.
"""


class AirbrakeError(Exception):
    """Base exception for notice pipeline errors."""
    pass


class NoticeEncodingError(AirbrakeError):
    """Raised when a notice cannot be serialized to JSON."""
    pass


class TransportError(AirbrakeError):
    """Raised when a notice could not be delivered to the notices API."""
    pass


class RequestFailedError(TransportError):
    """Raised when the HTTP request itself fails (DNS, connection, timeout)."""

    def __init__(self, message: str, cause: Exception | None = None):
        super().__init__(message)
        self.cause = cause


class UnexpectedStatusError(TransportError):
    """Raised when the API answers with anything other than 201 Created."""

    def __init__(self, status_code: int, status_line: str):
        super().__init__(f"unexpected status from api: `{status_line}`")
        self.status_code = status_code
        self.status_line = status_line


class ResponseDecodeError(TransportError):
    """Raised when a 201 response body is not a valid notice result."""
    pass


class URLResolutionError(AirbrakeError):
    """Raised by URL shorteners; always absorbed by the URL resolver."""
    pass
