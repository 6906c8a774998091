"""Shared fixtures: sample API bodies and a local IP Netblocks API stand-in."""

import threading
import time
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from urllib.parse import urlparse

import pytest

API_KEY = "at_LoremIpsumDolorSitAmetConsect"

SUCCESS_BODY = (
    b'{"search":"8.8.8.8","result":{"count":1,"limit":1,"from":"","next":"8.8.8.0-8.8.8.255",'
    b'"inetnums":[{"inetnum":"8.8.8.0 - 8.8.8.255","inetnumFirst":281470816487424,'
    b'"inetnumLast":281470816487679,"inetnumFirstString":"281470816487424",'
    b'"inetnumLastString":"281470816487679","as":{"asn":15169,"name":"GOOGLE",'
    b'"type":"Content","route":"8.8.8.0\\/24","domain":"https:\\/\\/about.google\\/intl\\/en\\/"},'
    b'"netname":"LVLT-GOGL-8-8-8","nethandle":"NET-8-8-8-0-1","description":[],'
    b'"modified":"2014-03-14T00:00:00Z","country":"US","city":"Mountain View",'
    b'"address":["1600 Amphitheatre Parkway"],"abuseContact":[],"adminContact":[],'
    b'"techContact":[],"org":{"org":"GOGL","name":"Google LLC",'
    b'"email":"arin-contact@google.com\\nnetwork-abuse@google.com","phone":"+1-650-253-0000",'
    b'"country":"US","city":"Mountain View","postalCode":"94043",'
    b'"address":["1600 Amphitheatre Parkway"]},"mntBy":[],"mntDomains":[],"mntLower":[],'
    b'"mntRoutes":[],"remarks":[],"source":"ARIN"}]}}'
)

XML_BODY = b'<?xml version="1.0" encoding="utf-8"?><>'

ERROR_BODY = b'{"code":499,"messages":"Test error message."}'


class _Handler(BaseHTTPRequestHandler):
    """Serves canned responses by path, like the real API would by query."""

    def do_GET(self):
        path = urlparse(self.path).path
        self.server.seen.append(self.path)
        status, body, declared_length = self.server.routes[path]

        if path == "/slow":
            time.sleep(1)

        self.send_response(status)
        self.send_header("Content-Type", "application/json")
        if declared_length is not None:
            self.send_header("Content-Length", str(declared_length))
        self.end_headers()
        self.wfile.write(body)

    def log_message(self, format, *args):
        pass


@pytest.fixture
def api_server():
    """Local HTTP server with the response shapes the client must handle.

    Yields the server root URL. Paths:
      /ok          200, full success body
      /error       499, API error payload
      /500         500, XML body
      /partial     200, truncated JSON, connection closed (no Content-Length)
      /partial2    200, Content-Length larger than the bytes sent
      /unparsable  200, XML body
      /slow        200, answers after one second
    """
    server = ThreadingHTTPServer(("127.0.0.1", 0), _Handler)
    server.seen = []
    server.routes = {
        "/ok": (200, SUCCESS_BODY, len(SUCCESS_BODY)),
        "/error": (499, ERROR_BODY, len(ERROR_BODY)),
        "/500": (500, XML_BODY, len(XML_BODY)),
        "/partial": (200, SUCCESS_BODY[:-10], None),
        "/partial2": (200, SUCCESS_BODY[:-10], len(SUCCESS_BODY)),
        "/unparsable": (200, XML_BODY, len(XML_BODY)),
        "/slow": (200, SUCCESS_BODY, len(SUCCESS_BODY)),
    }
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()

    host, port = server.server_address
    server.root_url = f"http://{host}:{port}"
    yield server

    server.shutdown()
    server.server_close()
