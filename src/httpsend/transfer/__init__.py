"""
=============================================================================
TRANSFER PACKAGE
=============================================================================

The transfer core, one concern per module:

    paths.py        path decoding, traversal and hidden-file checks
    errors.py       error taxonomy and stat() error mapping
    conditional.py  If-None-Match / If-Modified-Since evaluation
    ranges.py       Range header evaluation
    headers.py      ETag, Last-Modified, Cache-Control, Content-* headers
    stream.py       async file → response copy with disconnect handling
    outcome.py      the four possible outcomes
    resolver.py     TransferResolver, tying it all together

=============================================================================
"""

from .errors import (
    TransferError,
    BadRequest,
    Forbidden,
    NotFound,
    RangeNotSatisfiable,
    InternalError,
    TransferAborted,
)
from .outcome import (
    ResolvedTarget,
    Directory,
    Error,
    NotModified,
    Content,
    TransferOutcome,
)
from .paths import decode_uri_component, resolve_path
from .ranges import RangeKind, RangeSelection, parse_range
from .resolver import TransferResolver, default_error_handler

__all__ = [
    # Errors
    "TransferError",
    "BadRequest",
    "Forbidden",
    "NotFound",
    "RangeNotSatisfiable",
    "InternalError",
    "TransferAborted",

    # Outcomes
    "ResolvedTarget",
    "Directory",
    "Error",
    "NotModified",
    "Content",
    "TransferOutcome",

    # Building blocks
    "decode_uri_component",
    "resolve_path",
    "RangeKind",
    "RangeSelection",
    "parse_range",

    # Resolver
    "TransferResolver",
    "default_error_handler",
]
