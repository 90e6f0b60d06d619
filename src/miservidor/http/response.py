"""
=============================================================================
HTTP RESPONSE MODEL, BUILDER AND SERIALIZER
=============================================================================

Builds the four responses this server can produce and turns them into the
bytes written to the socket.

=============================================================================
RESPONSE ANATOMY
=============================================================================

    HTTP/1.1 200 OK\r\n                       ← status line
    Date: Sun, 18 Oct 2026 10:00:00 GMT\r\n   ← headers, in insertion order
    Server: MiServidor/1.0\r\n
    Content-Length: 44\r\n
    Content-Type: text/html\r\n
    \r\n                                      ← blank separator
    <html><body><h1>¡Hola!</h1></body></html> ← body bytes, verbatim

=============================================================================
THE CLOSED STATUS SET
=============================================================================

    ┌──────────────────────────┬──────────────────────────────────────────┐
    │ 200 OK                   │ File found, type accepted                │
    │ 404 NOT FOUND            │ No such file under the served root       │
    │ 406 NOT ACCEPTABLE       │ File type not in the client's Accept     │
    │ 501 NOT IMPLEMENTED      │ Method other than GET, HEAD or POST      │
    └──────────────────────────┴──────────────────────────────────────────┘

Error statuses always carry a body: the matching status page from the
served root (404.html, 406.html, 501.html).

=============================================================================
CONTENT-LENGTH INVARIANT
=============================================================================

Content-Length is never taken from the caller. The builder computes it
from the body it is given, so it is always len(body), or 0 for a response
without a body (HEAD).

=============================================================================
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Dict, Optional


SERVER_NAME = "MiServidor/1.0"
HTTP_VERSION = "HTTP/1.1"
STATUS_PAGE_CONTENT_TYPE = "text/html"

Clock = Callable[[], datetime]


class Status(Enum):
    """
    Status lines this server emits.

    The value is the status code and reason phrase exactly as written on
    the wire.
    """

    OK = "200 OK"
    NOT_FOUND = "404 NOT FOUND"
    NOT_ACCEPTABLE = "406 NOT ACCEPTABLE"
    NOT_IMPLEMENTED = "501 NOT IMPLEMENTED"

    @property
    def code(self) -> int:
        """Numeric status code, e.g. 404."""
        return int(self.value.split(" ", 1)[0])


@dataclass(frozen=True)
class Response:
    """
    A response ready to be serialized. Built once, serialized once.

        Resolver builds         serialize()             Connection sends
        Response       ─────►   to bytes       ─────►   socket.sendall()

    Attributes:
        status:  One of the four Status members.
        headers: Header name → value, serialized in this order.
        body:    Raw body bytes, or None when there is no body.
    """

    status: Status
    headers: Dict[str, str] = field(default_factory=dict)
    body: Optional[bytes] = None

    @property
    def status_line(self) -> str:
        """"HTTP/1.1 404 NOT FOUND" and friends."""
        return f"{HTTP_VERSION} {self.status.value}"

    @property
    def content_length(self) -> int:
        return len(self.body) if self.body else 0

    def to_bytes(self) -> bytes:
        """Serialize this response. See serialize()."""
        return serialize(self)


class ResponseBuilder:
    """
    Fluent builder for Response objects.

        response = (ResponseBuilder()
            .status(Status.OK)
            .content_type("text/css")
            .body(css_bytes)
            .build())

    build() always emits the standard headers in a fixed order:

        Date → Server → Content-Length → Content-Type (if set)

    The clock is injectable so tests can pin the Date header.
    """

    def __init__(self, server_name: str = SERVER_NAME, clock: Optional[Clock] = None):
        """
        Args:
            server_name: Value of the Server header.
            clock:       Returns the current time; defaults to UTC now.
        """
        self._server_name = server_name
        self._clock = clock or _utc_now
        self._status = Status.OK
        self._content_type: Optional[str] = None
        self._body: Optional[bytes] = None

    def status(self, status: Status) -> "ResponseBuilder":
        self._status = status
        return self

    def content_type(self, content_type: Optional[str]) -> "ResponseBuilder":
        self._content_type = content_type
        return self

    def body(self, body: Optional[bytes]) -> "ResponseBuilder":
        """
        Set the body. None means "no body at all", which serializes as
        Content-Length: 0 and nothing after the blank line.
        """
        self._body = body
        return self

    def build(self) -> Response:
        """Build the immutable Response with its standard headers."""
        headers = {
            "Date": format_http_date(self._clock()),
            "Server": self._server_name,
            "Content-Length": str(len(self._body) if self._body else 0),
        }
        if self._content_type:
            headers["Content-Type"] = self._content_type

        return Response(status=self._status, headers=headers, body=self._body)


# =============================================================================
# ONE CONSTRUCTOR PER STATUS OUTCOME
# =============================================================================
#
# The resolver only ever needs these four. Status pages are always served
# as text/html.
#
# =============================================================================

def ok(
    body: Optional[bytes],
    content_type: str,
    server_name: str = SERVER_NAME,
    clock: Optional[Clock] = None,
) -> Response:
    """
    200 OK carrying a file (or nothing, for HEAD).

    Content-Type is set even when the body is absent so a HEAD response
    still reports what a GET would return.
    """
    return (ResponseBuilder(server_name, clock)
        .status(Status.OK)
        .content_type(content_type)
        .body(body)
        .build())


def not_found(body: bytes, server_name: str = SERVER_NAME, clock: Optional[Clock] = None) -> Response:
    """404 NOT FOUND with the 404 status page."""
    return _status_page(Status.NOT_FOUND, body, server_name, clock)


def not_acceptable(body: bytes, server_name: str = SERVER_NAME, clock: Optional[Clock] = None) -> Response:
    """406 NOT ACCEPTABLE with the 406 status page."""
    return _status_page(Status.NOT_ACCEPTABLE, body, server_name, clock)


def not_implemented(body: bytes, server_name: str = SERVER_NAME, clock: Optional[Clock] = None) -> Response:
    """501 NOT IMPLEMENTED with the 501 status page."""
    return _status_page(Status.NOT_IMPLEMENTED, body, server_name, clock)


def _status_page(
    status: Status,
    body: bytes,
    server_name: str,
    clock: Optional[Clock],
) -> Response:
    return (ResponseBuilder(server_name, clock)
        .status(status)
        .content_type(STATUS_PAGE_CONTENT_TYPE)
        .body(body)
        .build())


# =============================================================================
# SERIALIZATION
# =============================================================================

def serialize(response: Response) -> bytes:
    """
    Turn a Response into wire bytes.

    =====================================================================
    FRAMING
    =====================================================================

        HTTP/1.1 200 OK\\r\\n          ← status line
        Key: Value\\r\\n               ← one per header, mapping order
        \\r\\n                         ← exactly one blank line
        <body bytes>                   ← appended as-is, no re-encoding

    No chunking, no trailing CRLF after the body.

    =====================================================================
    """
    lines = [response.status_line]
    for name, value in response.headers.items():
        lines.append(f"{name}: {value}")

    # Trailing "" + the extra CRLF produce the blank separator line
    lines.append("")
    head = "\r\n".join(lines).encode("utf-8") + b"\r\n"

    if response.body:
        return head + response.body
    return head


def format_http_date(dt: datetime) -> str:
    """
    Format a datetime as an HTTP-date (RFC 7231).

    Example: Sun, 18 Oct 2026 10:00:00 GMT

    Naive datetimes are assumed to be UTC already.
    """
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc)

    days = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
    months = ["Jan", "Feb", "Mar", "Apr", "May", "Jun",
              "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]

    return (
        f"{days[dt.weekday()]}, "
        f"{dt.day:02d} {months[dt.month - 1]} {dt.year} "
        f"{dt.hour:02d}:{dt.minute:02d}:{dt.second:02d} GMT"
    )


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)
