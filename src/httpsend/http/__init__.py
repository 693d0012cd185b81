"""
=============================================================================
HTTP PACKAGE
=============================================================================

The HTTP-facing collaborators of the transfer core:

    request.py       TransferRequest + request-head parser
    response.py      ResponseSink, Headers, HTTP-date helpers
    status_codes.py  HTTPStatus enum with reason phrases
    mime_types.py    path → (content-type, charset) lookup

=============================================================================
"""

from .request import TransferRequest, HTTPParseError, parse_request_head
from .response import (
    Headers,
    ResponseSink,
    format_http_date,
    parse_http_date,
)
from .status_codes import HTTPStatus, reason_phrase
from .mime_types import get_mime_type, lookup

__all__ = [
    # Request
    "TransferRequest",
    "HTTPParseError",
    "parse_request_head",

    # Response
    "Headers",
    "ResponseSink",
    "format_http_date",
    "parse_http_date",

    # Status codes
    "HTTPStatus",
    "reason_phrase",

    # MIME types
    "get_mime_type",
    "lookup",
]
