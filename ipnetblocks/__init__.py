"""Client for the IP Netblocks API."""

from __future__ import annotations

import logging

from . import options
from .client import Client, parse
from .errors import (
    APIError,
    ArgError,
    HTTPStatusError,
    IPNetblocksError,
    ResponseParseError,
    ResponseReadError,
)
from .models import (
    AS,
    Contact,
    Inetnum,
    IPNetblocksResponse,
    Maintainer,
    Organization,
    Response,
    Result,
    format_time,
    parse_time,
)

__version__ = "0.1.0"

__all__ = [
    "AS",
    "APIError",
    "ArgError",
    "Client",
    "Contact",
    "HTTPStatusError",
    "Inetnum",
    "IPNetblocksError",
    "IPNetblocksResponse",
    "Maintainer",
    "Organization",
    "Response",
    "ResponseParseError",
    "ResponseReadError",
    "Result",
    "format_time",
    "options",
    "parse",
    "parse_time",
]

logging.getLogger(__name__).addHandler(logging.NullHandler())
