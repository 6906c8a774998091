"""Exception classes raised by the IP Netblocks client.

Connection, TLS and timeout failures are not wrapped: they surface as the
``requests.RequestException`` raised by the underlying session.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import Response


class IPNetblocksError(Exception):
    """Base exception class."""

    def __init__(self, message: str, response: Response | None = None):
        super().__init__(message)
        self.response = response


class ArgError(IPNetblocksError, ValueError):
    """A lookup argument failed validation. No request was sent."""

    def __init__(self, name: str, message: str):
        super().__init__(f'invalid argument: "{name}" {message}')
        self.name = name
        self.message = message


class ResponseReadError(IPNetblocksError):
    """The connection failed while the response body was being read."""

    def __init__(self, reason: object, response: Response | None = None):
        super().__init__(f"cannot read response: {reason}", response)


class ResponseParseError(IPNetblocksError):
    """The response body is not a valid IP Netblocks JSON document."""

    def __init__(self, reason: object, response: Response | None = None):
        super().__init__(f"cannot parse response: {reason}", response)


class APIError(IPNetblocksError):
    """The service answered with an error payload."""

    def __init__(self, code: int, message: str, response: Response | None = None):
        super().__init__(f"API error: [{code}] {message}", response)
        self.code = code
        self.message = message


class HTTPStatusError(IPNetblocksError):
    """A raw lookup got a non-2xx status code."""

    def __init__(self, status_code: int, response: Response | None = None):
        super().__init__(f"API failed with status code: {status_code}", response)
        self.status_code = status_code
