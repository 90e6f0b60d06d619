"""
=============================================================================
HTTP REQUEST PARSER
=============================================================================

Turns the raw text a client sends into an immutable Request object.

=============================================================================
REQUEST ANATOMY
=============================================================================

    POST /proceso.html?lang=es HTTP/1.1\r\n       ← request line
    Host: localhost:9090\r\n                       ← headers
    Accept: text/html\r\n
    \r\n                                           ← blank separator
    mensaje=Hola+Mundo                             ← body (one line)

    Request line:
        POST  /proceso.html  ?lang=es  HTTP/1.1
        ─┬──  ──────┬──────  ───┬───  ───┬────
         │          │           │        └ ignored
       method    resource     params

=============================================================================
PARSING RULES
=============================================================================

1. Lines are separated by CRLF.

2. The method token maps onto a closed enum. Anything we do not serve
   becomes Method.OTHER, so the resolver can answer 501 instead of the
   parser rejecting the request.

3. Header lines are split on ':'. A value can itself contain ':'
   (think "Host: localhost:9090"), so every segment after the first is
   joined back together. Exactly ONE leading space is trimmed from the
   value; anything else is kept as sent.

4. Lines without ':' before the blank line are not headers and are
   skipped rather than rejected (lenient parsing).

5. Only a single-line body is supported. If a client sends several lines
   after the separator, the last one wins. This is a protocol limitation
   of this server, not something the parser tries to repair.

6. A request line without a method or a target is unrecoverable: we raise
   RequestParseError and the server drops the connection.

=============================================================================
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Union
from urllib.parse import parse_qsl


LINE_SEPARATOR = "\r\n"
HTTP_VERSION = "HTTP/1.1"


class RequestParseError(Exception):
    """
    Raised when the raw request cannot be turned into a Request.

    This is fatal for the connection: there is no sensible response to a
    request we could not read, so the server closes the socket.
    """


class Method(Enum):
    """
    Request methods this server distinguishes.

    The set is closed: every member must have an entry in the
    resolver's dispatch table, so adding one here forces a decision there.
    """

    GET = "GET"
    HEAD = "HEAD"
    POST = "POST"
    OTHER = "OTHER"

    @classmethod
    def from_token(cls, token: str) -> "Method":
        """
        Map a method token from the wire onto the enum.

        Matching is case-sensitive ("get" is not GET), and the literal token
        "OTHER" is just another unsupported method.
        """
        if token in ("GET", "HEAD", "POST"):
            return cls(token)
        return cls.OTHER


@dataclass(frozen=True)
class Request:
    """
    A parsed request. One per connection, never mutated after parsing.

    Attributes:
        method:      Method enum used for dispatch.
        method_name: The method token exactly as sent ("PUT", "get", ...).
        resource:    Target path without the query string, e.g. "/index.html".
        target:      The request target as sent, query string included.
        params:      Query string parameters, name → value.
        headers:     Header name (case as received) → value.
        body:        The line after the blank separator, or None.
    """

    method: Method
    resource: str
    method_name: str = ""
    target: str = ""
    params: Dict[str, str] = field(default_factory=dict)
    headers: Dict[str, str] = field(default_factory=dict)
    body: Optional[str] = None

    def __post_init__(self):
        # frozen dataclass: defaults derived from other fields go through object.__setattr__
        if not self.method_name:
            object.__setattr__(self, "method_name", self.method.value)
        if not self.target:
            object.__setattr__(self, "target", self.resource)

    def get_header(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """
        Exact-name header lookup.

        Header names are stored as received, so "accept" and "Accept" are
        different keys here.
        """
        return self.headers.get(name, default)

    @property
    def accept(self) -> Optional[str]:
        """The Accept header, or None if the client did not send one."""
        return self.get_header("Accept")

    @property
    def request_line(self) -> str:
        """The request line rebuilt from the method token and raw target."""
        return format_request_line(self.method_name, self.target)


class RequestParser:
    """
    Parses raw request data into Request objects.

    The parser is stateless; one instance can be shared by every worker
    thread.

        Raw bytes ──decode──► lines ──┬── line 0      → method, target
                                      ├── 1..blank    → headers
                                      └── after blank → body
    """

    def parse(self, data: Union[bytes, str]) -> Request:
        """
        Parse a complete request.

        Args:
            data: Raw request as received. Bytes are decoded as UTF-8 with
                  replacement characters; no other validation is done.

        Returns:
            The parsed Request.

        Raises:
            RequestParseError: If the request line lacks a method or target.
        """
        if isinstance(data, bytes):
            text = data.decode("utf-8", errors="replace")
        else:
            text = data

        lines = text.split(LINE_SEPARATOR)
        method_name, target = self._parse_request_line(lines[0])

        resource, sep, query = target.partition("?")
        params = parse_query_string(query) if sep else {}

        headers: Dict[str, str] = {}
        body: Optional[str] = None
        in_body = False

        for line in lines[1:]:
            if in_body:
                body = line
                continue
            if line == "":
                in_body = True
                continue
            header = self._parse_header(line)
            if header is not None:
                name, value = header
                headers[name] = value

        return Request(
            method=Method.from_token(method_name),
            method_name=method_name,
            resource=resource,
            target=target,
            params=params,
            headers=headers,
            body=body or None,
        )

    @staticmethod
    def _parse_request_line(line: str) -> tuple[str, str]:
        """
        Split "METHOD SP TARGET [SP VERSION]" into method and target.

        The version token is ignored.
        """
        parts = line.split(" ")
        if len(parts) < 2 or not parts[0] or not parts[1]:
            raise RequestParseError(f"Invalid request line: {line!r}")

        return parts[0], parts[1]

    @staticmethod
    def _parse_header(line: str) -> Optional[tuple[str, str]]:
        """
        Parse "Name: value" keeping any ':' inside the value.

            "Host: localhost:9090" → ("Host", "localhost:9090")
            "X-Time:12:30"         → ("X-Time", "12:30")
            "garbage"              → None
        """
        segments = line.split(":")
        if len(segments) < 2:
            return None

        name = segments[0]
        value = segments[1]
        if value.startswith(" "):
            value = value[1:]

        # Values like "localhost:9090" were split apart above; put them back
        for segment in segments[2:]:
            value += ":" + segment

        return name, value


# =============================================================================
# HELPERS
# =============================================================================

def parse_query_string(query: str) -> Dict[str, str]:
    """
    Decode "a=1&b=dos+palabras" into {"a": "1", "b": "dos palabras"}.

    Keys are unique: when a name repeats, the last value wins. A name with
    no '=' maps to the empty string.
    """
    return dict(parse_qsl(query, keep_blank_values=True))


def format_request_line(method: Union[Method, str], target: str) -> str:
    """
    Build a request line for the given method and target.

        >>> format_request_line(Method.GET, "/index.html")
        'GET /index.html HTTP/1.1'

    Parsing the result yields the same method and target again.
    """
    name = method.value if isinstance(method, Method) else method
    return f"{name} {target} {HTTP_VERSION}"


def parse_request(data: Union[bytes, str]) -> Request:
    """
    Convenience function to parse a request with a throwaway parser.
    """
    return RequestParser().parse(data)
