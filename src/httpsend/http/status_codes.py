"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The status codes a file transfer can end with, plus their reason phrases.

=============================================================================
WHICH CODES A TRANSFER USES
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │  200 OK                  whole file streamed                        │
    │  206 Partial Content     one byte range streamed                    │
    │  304 Not Modified        client cache is fresh, no body             │
    │  400 Bad Request         malformed URI or NUL byte in path          │
    │  403 Forbidden           path escapes the root                      │
    │  404 Not Found           missing file or hidden dot-file            │
    │  416 Range Not Satisf.   Range header outside the file              │
    │  500 Internal Error      unexpected filesystem / stream failure     │
    └─────────────────────────────────────────────────────────────────────┘

The reason phrase doubles as the default error body when no custom
error handler is installed on the resolver.

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    HTTP status codes and reason phrases.

    IntEnum, so values compare equal to plain integers:

        >>> HTTPStatus.PARTIAL_CONTENT == 206
        True
        >>> HTTPStatus.PARTIAL_CONTENT.phrase
        'Partial Content'
    """

    # 2xx SUCCESS
    OK = 200
    PARTIAL_CONTENT = 206                   # Range request fulfilled

    # 3xx REDIRECTION
    MOVED_PERMANENTLY = 301                 # Directory requested without "/"
    NOT_MODIFIED = 304                      # Cached version is still valid

    # 4xx CLIENT ERRORS
    BAD_REQUEST = 400
    FORBIDDEN = 403
    NOT_FOUND = 404
    METHOD_NOT_ALLOWED = 405
    RANGE_NOT_SATISFIABLE = 416

    # 5xx SERVER ERRORS
    INTERNAL_SERVER_ERROR = 500

    @property
    def phrase(self) -> str:
        """Reason phrase used on the status line and as default error body."""
        return _STATUS_PHRASES.get(self, "Unknown")

    @property
    def is_success(self) -> bool:
        return 200 <= self < 300

    @property
    def is_error(self) -> bool:
        return self >= 400


_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.PARTIAL_CONTENT: "Partial Content",
    HTTPStatus.MOVED_PERMANENTLY: "Moved Permanently",
    HTTPStatus.NOT_MODIFIED: "Not Modified",
    HTTPStatus.BAD_REQUEST: "Bad Request",
    HTTPStatus.FORBIDDEN: "Forbidden",
    HTTPStatus.NOT_FOUND: "Not Found",
    HTTPStatus.METHOD_NOT_ALLOWED: "Method Not Allowed",
    HTTPStatus.RANGE_NOT_SATISFIABLE: "Range Not Satisfiable",
    HTTPStatus.INTERNAL_SERVER_ERROR: "Internal Server Error",
}


def reason_phrase(status: int) -> str:
    """
    Reason phrase for any integer status.

    Sinks may carry a status the enum does not list (a caller-set 203,
    say); those fall back to "Unknown".
    """
    try:
        return HTTPStatus(status).phrase
    except ValueError:
        return "Unknown"
