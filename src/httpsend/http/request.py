"""
=============================================================================
TRANSFER REQUEST
=============================================================================

The read-only view of an incoming request that the transfer core needs:
method, raw path, headers, and a way to learn that the peer went away.

=============================================================================
WHY THE PATH STAYS RAW
=============================================================================

Most request parsers percent-decode the path up front. The transfer
core must not receive a pre-decoded path: decoding is part of its
security checks (an undecodable escape is a 400, a decoded NUL byte is
a 400, a decoded ".." is a traversal attempt). So the parser below
strips the query string and leaves the path exactly as it arrived.

    GET /docs/a%20b.txt?x=1 HTTP/1.1
        ───────┬───────
          raw path → TransferRequest.path == "/docs/a%20b.txt"

=============================================================================
"""

import asyncio
import re
from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple


class HTTPParseError(Exception):
    """
    Raised when a raw request head cannot be parsed.

    Carries the status code a listener should answer with.
    """

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


@dataclass
class TransferRequest:
    """
    One request for a file.

    Attributes:
        method:       HTTP method, uppercase ("GET", "HEAD", ...)
        path:         Raw (still percent-encoded) request path
        headers:      Header map with LOWERCASE keys
        disconnected: Set by the request source when the peer closes
                      the connection; the stream transfer watches it
                      to release the file handle promptly.
    """

    method: str = "GET"
    path: str = "/"
    headers: Dict[str, str] = field(default_factory=dict)
    client_address: Tuple[str, int] = ("", 0)
    disconnected: asyncio.Event = field(default_factory=asyncio.Event)

    def __post_init__(self):
        self.method = self.method.upper()
        # Normalize once so lookups can stay simple dict gets
        self.headers = {name.lower(): value for name, value in self.headers.items()}

    def get_header(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Case-insensitive header lookup."""
        return self.headers.get(name.lower(), default)

    @property
    def is_head(self) -> bool:
        return self.method == "HEAD"


# =============================================================================
# REQUEST HEAD PARSER
# =============================================================================

VALID_METHODS = {"GET", "HEAD", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"}

REQUEST_LINE_PATTERN = re.compile(r"^([A-Z]+) ([^ ]+) (HTTP/\d\.\d)$")
HEADER_PATTERN = re.compile(r"^([^:]+):\s*(.*)$")


def parse_request_head(
    data: bytes,
    client_address: Tuple[str, int] = ("", 0),
) -> TransferRequest:
    """
    Parse an HTTP/1.x request head into a TransferRequest.

    Only the request line and header block are read; anything after the
    blank line is ignored (file transfers have no request body).

    Raises:
        HTTPParseError: Malformed request line or unknown method.
    """
    head, _, _ = data.partition(b"\r\n\r\n")
    lines = head.decode("latin-1").split("\r\n")

    match = REQUEST_LINE_PATTERN.match(lines[0])
    if not match:
        raise HTTPParseError(f"Invalid request line: {lines[0]!r}")

    method, target, _version = match.groups()
    if method not in VALID_METHODS:
        raise HTTPParseError(f"Invalid method: {method}", status_code=405)

    headers: Dict[str, str] = {}
    for line in lines[1:]:
        header = HEADER_PATTERN.match(line)
        if not header:
            continue  # Lenient: skip malformed header lines
        name, value = header.groups()
        name = name.strip().lower()
        value = value.strip()
        # Repeated headers fold into one comma-separated value (RFC 7230)
        headers[name] = f"{headers[name]}, {value}" if name in headers else value

    # Keep the path encoded; only split off the query string.
    # urlsplit would read "//host/x" as a netloc, so split by hand.
    path = target.partition("?")[0] or "/"

    return TransferRequest(
        method=method,
        path=path,
        headers=headers,
        client_address=client_address,
    )
