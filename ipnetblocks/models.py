"""Pydantic models for IP Netblocks API records, plus the raw HTTP response."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Annotated, Any, Mapping, Optional, Tuple

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    StrictFloat,
    StrictInt,
    StrictStr,
    field_serializer,
    field_validator,
    model_serializer,
    model_validator,
)

# Autonomous system types reported by the service. Empty when unknown.
AS_TYPES = (
    "Cable/DSL/ISP",
    "Content",
    "Educational/Research",
    "Enterprise",
    "Non-Profit",
    "Not Disclosed",
    "NSP",
    "Route Server",
)

_RFC3339_RE = re.compile(
    r"^\d{4}-\d{2}-\d{2}[Tt]\d{2}:\d{2}:\d{2}(?:\.\d+)?(?:[Zz]|[+-]\d{2}:\d{2})$"
)


def parse_time(value: str) -> datetime | None:
    """Parse an RFC 3339 timestamp. An empty string means no timestamp."""
    if value == "":
        return None
    if not _RFC3339_RE.match(value):
        raise ValueError(f"parsing time {value!r}: not an RFC 3339 timestamp")
    text = value.upper().replace("Z", "+00:00")
    # fromisoformat before 3.11 only takes 3 or 6 fraction digits
    head, sep, tail = text.partition(".")
    if sep:
        digits = re.match(r"\d+", tail).group(0)
        text = head + "." + digits[:6].ljust(6, "0") + tail[len(digits):]
    return datetime.fromisoformat(text)


def format_time(value: datetime | None) -> str:
    """Render a timestamp the way the service does, "" for no timestamp."""
    if value is None:
        return ""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    text = value.isoformat()
    if value.utcoffset() == timezone.utc.utcoffset(None):
        text = text[: -len("+00:00")] + "Z"
    return text


def _int_to_float(value: Any) -> Any:
    # JSON has one number type; whole numbers arrive as int
    if isinstance(value, int) and not isinstance(value, bool):
        return float(value)
    return value


Number = Annotated[StrictFloat, BeforeValidator(_int_to_float)]
Strings = Tuple[StrictStr, ...]


class _Record(BaseModel):
    """Base for API records: immutable, camelCase aliases, null means default."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {key: value for key, value in data.items() if value is not None}
        return data


class AS(_Record):
    """Autonomous system the netblock is announced by."""

    asn: StrictInt = 0
    name: StrictStr = ""
    type: StrictStr = ""  # one of AS_TYPES, or ""
    route: StrictStr = ""
    domain: StrictStr = ""  # website URL


class Contact(_Record):
    """An abuse, admin or tech contact.

    ``person`` and ``role`` are mutually exclusive: a person object names a
    human, a role object names a team or mailbox.
    """

    id: StrictStr = ""
    person: StrictStr = ""
    role: StrictStr = ""
    email: StrictStr = ""
    phone: StrictStr = ""
    country: StrictStr = ""  # ISO 3166 alpha-2
    city: StrictStr = ""
    address: Strings = ()

    @property
    def is_person(self) -> bool:
        return bool(self.person)

    @property
    def display_name(self) -> str:
        return self.person or self.role


class Organization(_Record):
    """Organisation that registered the range."""

    org: StrictStr = ""  # organisation ID
    name: StrictStr = ""
    phone: StrictStr = ""
    email: StrictStr = ""
    country: StrictStr = ""
    city: StrictStr = ""
    postal_code: StrictStr = Field("", alias="postalCode")
    address: Strings = ()


class Maintainer(_Record):
    mntner: StrictStr = ""
    email: StrictStr = ""


class Inetnum(_Record):
    """One netblock record from a regional registry.

    ``inetnum_first`` and ``inetnum_last`` are 128-bit addresses sent as JSON
    numbers and lose precision for IPv6. The ``*_string`` fields carry the
    exact decimal value.
    """

    inetnum: StrictStr = ""  # e.g. "8.8.8.0 - 8.8.8.255"
    inetnum_first: Number = Field(0.0, alias="inetnumFirst")
    inetnum_last: Number = Field(0.0, alias="inetnumLast")
    inetnum_first_string: StrictStr = Field("", alias="inetnumFirstString")
    inetnum_last_string: StrictStr = Field("", alias="inetnumLastString")
    parent: StrictStr = ""  # set when the block comes from BGP routing tables
    autonomous_system: AS = Field(default_factory=AS, alias="as")
    netname: StrictStr = ""
    nethandle: StrictStr = ""  # ARIN block ID
    description: Strings = ()
    modified: Optional[datetime] = None
    country: StrictStr = ""
    city: StrictStr = ""
    address: Strings = ()
    abuse_contact: Tuple[Contact, ...] = Field((), alias="abuseContact")
    admin_contact: Tuple[Contact, ...] = Field((), alias="adminContact")
    tech_contact: Tuple[Contact, ...] = Field((), alias="techContact")
    org: Organization = Field(default_factory=Organization)
    mnt_by: Tuple[Maintainer, ...] = Field((), alias="mntBy")
    mnt_domains: Tuple[Maintainer, ...] = Field((), alias="mntDomains")
    mnt_lower: Tuple[Maintainer, ...] = Field((), alias="mntLower")
    mnt_routes: Tuple[Maintainer, ...] = Field((), alias="mntRoutes")
    remarks: Strings = ()
    source: StrictStr = ""  # registry, e.g. "ARIN"

    @field_validator("modified", mode="before")
    @classmethod
    def _parse_modified(cls, value: Any) -> Any:
        if isinstance(value, datetime):
            return value
        if not isinstance(value, str):
            raise ValueError(f"expected an RFC 3339 string, got {type(value).__name__}")
        return parse_time(value)

    @field_serializer("modified")
    def _dump_modified(self, value: Optional[datetime]) -> str:
        return format_time(value)

    @property
    def first_address(self) -> int | None:
        """Exact integer value of the first address, if the service sent one."""
        return int(self.inetnum_first_string) if self.inetnum_first_string else None

    @property
    def last_address(self) -> int | None:
        return int(self.inetnum_last_string) if self.inetnum_last_string else None


class Result(_Record):
    """One page of netblocks.

    ``next`` is the last netblock of this page when more records exist. Pass
    it back with ``options.from_`` to get the following page. ORG lookups are
    never paginated.
    """

    count: StrictInt = 0
    limit: StrictInt = 0
    from_: Optional[StrictStr] = Field(None, alias="from")
    next: Optional[StrictStr] = None
    inetnums: Tuple[Inetnum, ...] = ()


class IPNetblocksResponse(_Record):
    """Parsed answer to a lookup."""

    search: StrictStr = ""  # normalized search term
    result: Result = Field(default_factory=Result)
    error: StrictStr = ""  # only set on partial failures

    @model_serializer(mode="wrap")
    def _omit_empty_error(self, handler) -> dict[str, Any]:
        data = handler(self)
        if not self.error:
            data.pop("error", None)
        return data


@dataclass(frozen=True, eq=False)
class Response:
    """HTTP response of a lookup with the body kept as raw bytes.

    Compared and hashed by identity, like ``requests.Response``.
    """

    status_code: int
    reason: str
    url: str
    headers: Mapping[str, str]
    body: bytes = b""

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")
