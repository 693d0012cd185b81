"""
=============================================================================
HEADER SYNTHESIZER
=============================================================================

Fills in the response headers for a file without overwriting anything
the caller already set.

    ┌──────────────────┬─────────────────────────────────┬───────────────┐
    │ Header           │ Value                           │ Caller wins?  │
    ├──────────────────┼─────────────────────────────────┼───────────────┤
    │ Accept-Ranges    │ bytes                           │ no (always)   │
    │ ETag             │ "<size hex>-<mtime ns hex>"     │ yes           │
    │ Date             │ now                             │ yes           │
    │ Cache-Control    │ public, max-age=<seconds>       │ yes           │
    │ Last-Modified    │ file mtime                      │ yes           │
    │ Content-Type     │ MIME lookup (+ charset)         │ yes           │
    │ Content-Length   │ size, or range length           │ no            │
    │ Content-Range    │ bytes <s>-<e>/<size>            │ no            │
    └──────────────────┴─────────────────────────────────┴───────────────┘

Content-Length and Content-Range describe the bytes actually sent, so
a stale caller value would corrupt the framing; those two always
reflect the transfer.

=============================================================================
ETAG SCHEME
=============================================================================

A strong validator built from the stat snapshot:

    size 500, mtime_ns 4096
    → "1f4-1000"

Same (size, mtime) gives the same tag in every process; changing
either changes the tag. Nanosecond mtime catches rewrites within the
same second that a seconds-based tag would miss.

=============================================================================
"""

import time
from typing import Callable, Optional, Tuple

from ..config import TransferConfig
from ..http.mime_types import format_content_type
from ..http.response import ResponseSink, format_http_date
from .outcome import ResolvedTarget
from .ranges import RangeSelection


MimeLookup = Callable[[str], Tuple[str, Optional[str]]]


def make_etag(target: ResolvedTarget) -> str:
    """Strong ETag for a stat snapshot."""
    return f'"{target.size:x}-{target.mtime_ns:x}"'


def set_default(response: ResponseSink, name: str, value: str) -> None:
    if not response.has_header(name):
        response.set_header(name, value)


def set_file_headers(
    response: ResponseSink,
    target: ResolvedTarget,
    config: TransferConfig,
) -> None:
    """Set the validator and caching headers for a file."""
    response.set_header("Accept-Ranges", "bytes")
    set_default(response, "ETag", make_etag(target))
    set_default(response, "Date", format_http_date(time.time()))
    set_default(response, "Cache-Control", f"public, max-age={config.max_age_seconds}")
    set_default(response, "Last-Modified", format_http_date(target.mtime))


def set_content_type(response: ResponseSink, path: str, lookup: MimeLookup) -> None:
    """Set Content-Type from the path's extension unless already set."""
    if response.has_header("Content-Type"):
        return
    mime_type, charset = lookup(path)
    response.set_header("Content-Type", format_content_type(mime_type, charset))


def set_length_headers(
    response: ResponseSink,
    target: ResolvedTarget,
    selection: RangeSelection,
) -> int:
    """
    Set Content-Length (and Content-Range for a partial response).

    Returns:
        The number of body bytes the response will carry.
    """
    if selection.is_partial:
        length = selection.length
        response.set_header("Content-Range", selection.content_range(target.size))
    else:
        length = target.size
    response.set_header("Content-Length", str(length))
    return length
