"""IP Netblocks API client.

Every lookup is one GET request. Parsed lookups (``get_by_*``) decode the
JSON body and raise :class:`~ipnetblocks.errors.APIError` when the service
reports an error, whatever the HTTP status. Raw lookups (``get_raw_by_*``)
never decode the body and only check the HTTP status.
"""

from __future__ import annotations

import ipaddress
import json
import logging
from typing import Union
from urllib.parse import parse_qsl, urlencode

import requests
from pydantic import ValidationError
from requests.structures import CaseInsensitiveDict

from .config import DEFAULT_BASE_URL, REQUEST_TIMEOUT, USER_AGENT, load_api_key, load_base_url
from .errors import APIError, ArgError, HTTPStatusError, ResponseParseError, ResponseReadError
from .models import IPNetblocksResponse, Response
from .options import Option, Query, apply_options, output_format

logger = logging.getLogger(__name__)

MAX_ASN = 4294967295

IPInput = Union[str, ipaddress.IPv4Address, ipaddress.IPv6Address]
CIDRInput = Union[str, ipaddress.IPv4Network, ipaddress.IPv6Network]


def _ip_param(ip: IPInput | None) -> str:
    if ip is None or str(ip).strip() == "":
        raise ArgError("ip", "can not be empty")
    if isinstance(ip, (ipaddress.IPv4Address, ipaddress.IPv6Address)):
        return str(ip)
    try:
        return str(ipaddress.ip_address(str(ip).strip()))
    except ValueError:
        raise ArgError(str(ip), "is invalid IP address") from None


def _cidr_params(network: CIDRInput | None) -> tuple[str, str]:
    """Return the (ip, mask) pair for a network. Host bits are dropped."""
    if network is None or str(network).strip() == "":
        raise ArgError("ip", "can not be empty")
    if not isinstance(network, (ipaddress.IPv4Network, ipaddress.IPv6Network)):
        try:
            network = ipaddress.ip_network(str(network).strip(), strict=False)
        except ValueError:
            raise ArgError(str(network), "is invalid CIDR") from None
    return str(network.network_address), str(network.prefixlen)


def _asn_param(asn: int) -> str:
    if isinstance(asn, bool) or not isinstance(asn, int) or not 0 <= asn <= MAX_ASN:
        raise ArgError(str(asn), "is invalid autonomous system number")
    return str(asn)


def _org_param(org: str | None) -> str:
    if not org:
        raise ArgError("org", "can not be empty")
    return org


def _masked(query: str) -> str:
    return urlencode(
        [
            (key, "***" if key == "apiKey" else value)
            for key, value in parse_qsl(query, keep_blank_values=True)
        ]
    )


def _reject_constant(name: str):
    raise ValueError(f"invalid JSON value {name}")


def parse(raw: bytes, response: Response | None = None) -> IPNetblocksResponse:
    """Decode a JSON response body.

    Raises ResponseParseError if the body does not decode, and APIError if it
    carries an error code or message instead of a result.
    """
    try:
        envelope = json.loads(raw, parse_constant=_reject_constant)
    except RecursionError:
        raise ResponseParseError("JSON nested too deeply", response) from None
    except ValueError as exc:
        raise ResponseParseError(exc, response) from exc

    if not isinstance(envelope, dict):
        raise ResponseParseError(
            f"unexpected {type(envelope).__name__} at top level", response
        )

    code = envelope.get("code")
    message = envelope.get("messages")
    if code is not None and (isinstance(code, bool) or not isinstance(code, int)):
        raise ResponseParseError(f"field 'code': unexpected value {code!r}", response)
    if message is not None and not isinstance(message, str):
        raise ResponseParseError(
            f"field 'messages': unexpected value {message!r}", response
        )
    if message or code:
        raise APIError(code or 0, message or "", response)

    try:
        return IPNetblocksResponse.model_validate(envelope)
    except ValidationError as exc:
        raise ResponseParseError(exc, response) from exc


class Client:
    """Client for the IP Netblocks API.

    The client keeps no per-call state, so one instance can serve any number
    of lookups. Pass ``session`` to reuse a configured ``requests.Session``
    (adapters, proxies, test doubles); otherwise the client owns one.
    """

    def __init__(
        self,
        api_key: str,
        session: requests.Session | None = None,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float | None = REQUEST_TIMEOUT,
    ):
        self.api_key = api_key
        self.base_url = base_url
        self.timeout = timeout
        self._owns_session = session is None
        if session is None:
            session = requests.Session()
            session.headers.update({"User-Agent": USER_AGENT})
        self.session = session

    @classmethod
    def from_config(cls, **kwargs) -> Client:
        """Build a client from the environment or the stored key file."""
        api_key = load_api_key()
        if not api_key:
            raise ArgError("apiKey", "can not be empty")
        kwargs.setdefault("base_url", load_base_url())
        return cls(api_key, **kwargs)

    def close(self) -> None:
        if self._owns_session:
            self.session.close()

    def __enter__(self) -> Client:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # -- request pipeline ---------------------------------------------------

    def _build_query(self, mandatory: Query, options: tuple[Option, ...]) -> str:
        query: Query = {"apiKey": self.api_key}
        query.update(mandatory)
        apply_options(query, options)
        # options may override mandatory parameters but never drop them
        for key, value in mandatory.items():
            query.setdefault(key, value)
        query.setdefault("apiKey", self.api_key)
        return urlencode(sorted(query.items()))

    def _do(self, query: str, timeout: float | None) -> Response:
        """Send one GET and read the whole body into memory."""
        logger.debug("GET %s?%s", self.base_url, _masked(query))
        http_response = self.session.get(
            self.base_url, params=query, timeout=timeout, stream=True
        )
        try:
            body = http_response.content
        except requests.RequestException as exc:
            raise ResponseReadError(exc, _wrap(http_response, b"")) from exc
        finally:
            http_response.close()

        # urllib3 1.x hands back a short body without complaint
        declared = http_response.headers.get("Content-Length", "")
        if (
            declared.isdigit()
            and "Content-Encoding" not in http_response.headers
            and len(body) < int(declared)
        ):
            raise ResponseReadError(
                f"got {len(body)} of {declared} bytes", _wrap(http_response, body)
            )

        logger.debug(
            "Response %s (%d bytes) from %s",
            http_response.status_code,
            len(body),
            self.base_url,
        )
        return _wrap(http_response, body)

    def _request(
        self,
        mandatory: Query,
        options: tuple[Option, ...],
        timeout: float | None,
    ) -> Response:
        query = self._build_query(mandatory, options)
        return self._do(query, self.timeout if timeout is None else timeout)

    def _lookup(
        self,
        mandatory: Query,
        options: tuple[Option, ...],
        timeout: float | None,
    ) -> tuple[IPNetblocksResponse, Response]:
        # the decoder only reads JSON, so the caller's format is overridden
        options = options + (output_format("JSON"),)
        response = self._request(mandatory, options, timeout)
        return parse(response.body, response), response

    def _lookup_raw(
        self,
        mandatory: Query,
        options: tuple[Option, ...],
        timeout: float | None,
    ) -> Response:
        response = self._request(mandatory, options, timeout)
        if not response.ok:
            raise HTTPStatusError(response.status_code, response)
        return response

    # -- parsed lookups -----------------------------------------------------

    def get_by_ip(
        self, ip: IPInput, *options: Option, timeout: float | None = None
    ) -> tuple[IPNetblocksResponse, Response]:
        """Netblocks containing an IPv4 or IPv6 address."""
        return self._lookup({"ip": _ip_param(ip)}, options, timeout)

    def get_by_cidr(
        self, network: CIDRInput, *options: Option, timeout: float | None = None
    ) -> tuple[IPNetblocksResponse, Response]:
        """Netblocks within a CIDR range such as ``"8.8.0.0/16"``."""
        ip, mask = _cidr_params(network)
        return self._lookup({"ip": ip, "mask": mask}, options, timeout)

    def get_by_asn(
        self, asn: int, *options: Option, timeout: float | None = None
    ) -> tuple[IPNetblocksResponse, Response]:
        """Netblocks announced by an autonomous system."""
        return self._lookup({"asn": _asn_param(asn)}, options, timeout)

    def get_by_org(
        self, org: str, *options: Option, timeout: float | None = None
    ) -> tuple[IPNetblocksResponse, Response]:
        """Netblocks with ``org`` in their netname, description, remarks, or
        organisation fields. Not paginated.
        """
        return self._lookup({"org": _org_param(org)}, options, timeout)

    # -- raw lookups --------------------------------------------------------

    def get_raw_by_ip(
        self, ip: IPInput, *options: Option, timeout: float | None = None
    ) -> Response:
        return self._lookup_raw({"ip": _ip_param(ip)}, options, timeout)

    def get_raw_by_cidr(
        self, network: CIDRInput, *options: Option, timeout: float | None = None
    ) -> Response:
        ip, mask = _cidr_params(network)
        return self._lookup_raw({"ip": ip, "mask": mask}, options, timeout)

    def get_raw_by_asn(
        self, asn: int, *options: Option, timeout: float | None = None
    ) -> Response:
        return self._lookup_raw({"asn": _asn_param(asn)}, options, timeout)

    def get_raw_by_org(
        self, org: str, *options: Option, timeout: float | None = None
    ) -> Response:
        return self._lookup_raw({"org": _org_param(org)}, options, timeout)


def _wrap(http_response: requests.Response, body: bytes) -> Response:
    return Response(
        status_code=http_response.status_code,
        reason=http_response.reason or "",
        url=http_response.url or "",
        headers=CaseInsensitiveDict(http_response.headers or {}),
        body=body,
    )
