"""
=============================================================================
PROTOCOL ENGINE
=============================================================================

Everything between "bytes arrived" and "bytes to send", with no sockets
and no file system:

    request.py   raw text      → Request
    mime.py      file name     → MimeType, Accept negotiation
    template.py  HTML + form   → rendered HTML
    response.py  status + body → Response → wire bytes

=============================================================================
"""

from .request import (
    Method,
    Request,
    RequestParser,
    RequestParseError,
    format_request_line,
    parse_request,
)
from .response import (
    Response,
    ResponseBuilder,
    Status,
    ok,
    not_found,
    not_acceptable,
    not_implemented,
    serialize,
)
from .mime import MimeType, classify, parse_accept_list, is_accepted
from .template import render, parse_form_urlencoded

__all__ = [
    # Requests
    "Method",
    "Request",
    "RequestParser",
    "RequestParseError",
    "format_request_line",
    "parse_request",

    # Responses
    "Response",
    "ResponseBuilder",
    "Status",
    "ok",
    "not_found",
    "not_acceptable",
    "not_implemented",
    "serialize",

    # Negotiation
    "MimeType",
    "classify",
    "parse_accept_list",
    "is_accepted",

    # Templates
    "render",
    "parse_form_urlencoded",
]
