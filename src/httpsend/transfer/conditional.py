"""
=============================================================================
CONDITIONAL REQUEST EVALUATOR
=============================================================================

Decides whether the client's cached copy is still fresh, so the file
does not have to be sent again.

=============================================================================
THE ROUND TRIP
=============================================================================

    First request                     Later request
    ─────────────                     ─────────────
    GET /app.js                       GET /app.js
                                      If-None-Match: "1f4-17c0a3b"
    200 OK                            If-Modified-Since: Wed, 15 Jun ...
    ETag: "1f4-17c0a3b"
    Last-Modified: Wed, 15 Jun ...    304 Not Modified
    <body>                            (no body, no Content-* headers)

=============================================================================
PRECEDENCE
=============================================================================

If-None-Match wins when present: the ETag is the more precise
validator (RFC 7232 §6). If-Modified-Since is only consulted when the
request carries no If-None-Match at all.

A 304 is only sent when ALL of these hold:

    1. the request is conditional
    2. the response would be cacheable (2xx or 304)
    3. the validators say the client's copy is fresh

=============================================================================
"""

from typing import Mapping, Optional

from ..http.response import ResponseSink, parse_http_date
from ..http.status_codes import HTTPStatus


def is_conditional(headers: Mapping[str, str]) -> bool:
    """True if the request carries a cache validator."""
    return bool(headers.get("if-none-match") or headers.get("if-modified-since"))


def is_cacheable(status: int) -> bool:
    """2xx and 304 responses may be answered from cache (RFC 7232 §4.1)."""
    return 200 <= status < 300 or status == HTTPStatus.NOT_MODIFIED


def _opaque_tag(tag: str) -> str:
    tag = tag.strip()
    if tag.startswith("W/"):
        tag = tag[2:]
    return tag


def etag_matches(if_none_match: str, etag: Optional[str]) -> bool:
    """
    Weak comparison of an If-None-Match list against the current ETag.

        >>> etag_matches('"a", "b"', '"b"')
        True
        >>> etag_matches('W/"b"', '"b"')
        True
        >>> etag_matches('*', '"anything"')
        True
    """
    if if_none_match.strip() == "*":
        return True
    if not etag:
        return False
    current = _opaque_tag(etag)
    return any(_opaque_tag(tag) == current for tag in if_none_match.split(","))


def not_modified_since(if_modified_since: str, last_modified: Optional[str]) -> bool:
    """
    True if Last-Modified is not newer than If-Modified-Since.

    Both sides are HTTP-dates, so the comparison is at whole seconds.
    An unparsable date on either side means "modified".
    """
    since = parse_http_date(if_modified_since)
    modified = parse_http_date(last_modified)
    if since is None or modified is None:
        return False
    return int(modified.timestamp()) <= int(since.timestamp())


def is_fresh(request_headers: Mapping[str, str], response: ResponseSink) -> bool:
    """
    Compare request validators with the tentative response headers.

    Args:
        request_headers: Request header map with lowercase keys.
        response: Sink holding the ETag / Last-Modified about to be sent.
    """
    if_none_match = request_headers.get("if-none-match")
    if if_none_match:
        return etag_matches(if_none_match, response.get_header("ETag"))

    if_modified_since = request_headers.get("if-modified-since")
    if if_modified_since:
        return not_modified_since(if_modified_since, response.get_header("Last-Modified"))

    return False


def remove_content_headers(response: ResponseSink) -> None:
    """Strip every header whose name starts with "content" (any case)."""
    for name in response.headers.names():
        if name.lower().startswith("content"):
            response.remove_header(name)


def not_modified(response: ResponseSink) -> None:
    """Turn the tentative response into a bodiless 304."""
    remove_content_headers(response)
    response.status = HTTPStatus.NOT_MODIFIED
