"""
=============================================================================
HTTPSEND - Static File Transfers with Ranges and Conditional GET
=============================================================================

This package answers "send me this file" requests for an asyncio HTTP
stack: it resolves the requested path safely under a root directory,
decides whether the client's cached copy is still fresh, and streams
the file (or one byte range of it) to the response.

=============================================================================
PROJECT OVERVIEW
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                       TRANSFER ARCHITECTURE                         │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   TransferRequest ──┐                                               │
    │                     ▼                                               │
    │              TransferResolver ──── observer (optional)              │
    │                     │                                               │
    │       ┌─────────────┼──────────────┬───────────────┐                │
    │       ▼             ▼              ▼               ▼                │
    │   Directory       Error       NotModified       Content             │
    │   (caller's)   (404/416/..)     (304)       (200/206 stream)        │
    │                                                                      │
    │   Every outcome is written into a ResponseSink; StreamResponse      │
    │   is the sink for asyncio.StreamWriter.                             │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    httpsend/
    ├── __init__.py          # This file - package exports
    ├── config.py            # TransferConfig dataclass
    ├── transfer/            # The transfer core
    │   ├── paths.py         # Decoding, traversal, hidden files, index
    │   ├── errors.py        # TransferError hierarchy, stat error mapping
    │   ├── conditional.py   # If-None-Match / If-Modified-Since
    │   ├── ranges.py        # Range header evaluation
    │   ├── headers.py       # ETag, Last-Modified, Cache-Control, ...
    │   ├── stream.py        # aiofiles copy with disconnect handling
    │   ├── outcome.py       # Directory / Error / NotModified / Content
    │   └── resolver.py      # TransferResolver
    ├── http/                # HTTP collaborators
    │   ├── request.py       # TransferRequest, request-head parser
    │   ├── response.py      # ResponseSink, Headers, HTTP dates
    │   ├── status_codes.py  # HTTP status enums
    │   └── mime_types.py    # MIME type detection
    ├── core/
    │   └── connection.py    # asyncio StreamReader/Writer adapter
    └── observers/           # Instrumentation hooks
        ├── base.py          # TransferObserver, ObserverGroup
        └── logging.py       # Access logging

=============================================================================
QUICK START
=============================================================================

    import asyncio
    from httpsend import (
        TransferConfig, TransferResolver, Directory, LoggingObserver,
        StreamResponse, read_request, watch_disconnect, INFINITE,
    )

    resolver = TransferResolver(
        TransferConfig(root="/var/www", max_age=INFINITE),
        observer=LoggingObserver(),
    )

    async def handle(reader, writer):
        request = await read_request(reader, writer.get_extra_info("peername"))
        watcher = asyncio.create_task(watch_disconnect(reader, request))
        response = StreamResponse(writer, head_only=request.is_head)
        try:
            outcome = await resolver.send(request, response)
            if isinstance(outcome, Directory):
                response.status = 301
                response.set_header("Location", request.path + "/")
                await response.end()
        finally:
            watcher.cancel()
            writer.close()

    async def main():
        server = await asyncio.start_server(handle, "127.0.0.1", 8080)
        async with server:
            await server.serve_forever()

    asyncio.run(main())

=============================================================================
"""

__version__ = "1.0.0"

from .config import TransferConfig, INFINITE
from .transfer import (
    TransferResolver,
    default_error_handler,
    TransferError,
    BadRequest,
    Forbidden,
    NotFound,
    RangeNotSatisfiable,
    InternalError,
    ResolvedTarget,
    Directory,
    Error,
    NotModified,
    Content,
    TransferOutcome,
)
from .http import TransferRequest, ResponseSink, HTTPStatus
from .core import StreamResponse, read_request, watch_disconnect
from .observers import TransferObserver, ObserverGroup, LoggingObserver

__all__ = [
    "__version__",

    # Configuration
    "TransferConfig",
    "INFINITE",

    # Resolver
    "TransferResolver",
    "default_error_handler",

    # Errors
    "TransferError",
    "BadRequest",
    "Forbidden",
    "NotFound",
    "RangeNotSatisfiable",
    "InternalError",

    # Outcomes
    "ResolvedTarget",
    "Directory",
    "Error",
    "NotModified",
    "Content",
    "TransferOutcome",

    # HTTP collaborators
    "TransferRequest",
    "ResponseSink",
    "HTTPStatus",
    "StreamResponse",
    "read_request",
    "watch_disconnect",

    # Observers
    "TransferObserver",
    "ObserverGroup",
    "LoggingObserver",
]
