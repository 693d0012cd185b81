"""
=============================================================================
ASYNCIO CONNECTION ADAPTER
=============================================================================

Binds the transfer core to an asyncio stream pair, the way a listener
built on ``asyncio.start_server`` would use it.

=============================================================================
WHAT GOES ON THE WIRE
=============================================================================

StreamResponse writes nothing until the first write() or end(). Then
the head is serialized in one piece:

    HTTP/1.1 206 Partial Content\\r\\n      ← Status line
    Accept-Ranges: bytes\\r\\n
    Content-Range: bytes 0-0/10\\r\\n
    Content-Length: 1\\r\\n
    Date: Wed, 15 Jun 2024 10:00:00 GMT\\r\\n  ← Added when absent
    Server: httpsend/1.0\\r\\n             ← Added when absent
    \\r\\n                                  ← End of head
    0                                     ← Body, streamed in chunks

Every body chunk is followed by drain(), so a slow client applies
backpressure to the file reads instead of filling memory.

=============================================================================
NOTICING A CLIENT THAT WENT AWAY
=============================================================================

A peer that closes its socket mid-transfer shows up on the READ side as
EOF. watch_disconnect() waits for that EOF and sets the request's
``disconnected`` event; the stream transfer races against the event and
closes the file as soon as it fires.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   reader ── EOF / reset ──► request.disconnected.set()              │
    │                                      │                               │
    │   copy_range() ◄── cancelled ────────┘   file closed via async with │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Tuple

from ..http.request import HTTPParseError, TransferRequest, parse_request_head
from ..http.response import ResponseSink, format_http_date
from ..http.status_codes import reason_phrase


logger = logging.getLogger(__name__)

SERVER_NAME = "httpsend/1.0"

MAX_HEAD_SIZE = 8192
"""Largest request head read_request() accepts, in bytes."""


class StreamResponse(ResponseSink):
    """
    ResponseSink over an ``asyncio.StreamWriter``.

    Usage:
        async def handle(reader, writer):
            request = await read_request(reader, writer.get_extra_info("peername"))
            watcher = asyncio.create_task(watch_disconnect(reader, request))
            response = StreamResponse(writer, head_only=request.is_head)
            try:
                await resolver.send(request, response)
            finally:
                watcher.cancel()
                writer.close()
    """

    def __init__(
        self,
        writer: asyncio.StreamWriter,
        head_only: bool = False,
        server_name: str = SERVER_NAME,
    ):
        super().__init__(head_only=head_only)
        self.writer = writer
        self.server_name = server_name
        self.aborted = False

    def serialize_head(self) -> bytes:
        """Status line and header block, terminated by the blank line."""
        if "Date" not in self.headers:
            self.headers["Date"] = format_http_date(datetime.now(timezone.utc))
        if "Server" not in self.headers:
            self.headers["Server"] = self.server_name

        lines = [f"HTTP/1.1 {int(self.status)} {reason_phrase(self.status)}"]
        lines.extend(f"{name}: {value}" for name, value in self.headers.items())
        return ("\r\n".join(lines) + "\r\n\r\n").encode("latin-1")

    async def _send_head(self) -> None:
        self.writer.write(self.serialize_head())
        await self.writer.drain()

    async def _send_body(self, data: bytes) -> None:
        self.writer.write(data)
        await self.writer.drain()

    async def _finish(self) -> None:
        await self.writer.drain()

    def abort(self) -> None:
        """Drop the connection without a clean close (RST, not FIN)."""
        if self.aborted:
            return
        self.aborted = True
        logger.debug("Aborting connection mid-response")
        self.writer.transport.abort()


# =============================================================================
# READ SIDE
# =============================================================================

async def read_request(
    reader: asyncio.StreamReader,
    client_address: Tuple[str, int] = ("", 0),
    max_size: int = MAX_HEAD_SIZE,
) -> TransferRequest:
    """
    Read one request head from the stream and parse it.

    TCP is a byte stream: the head may arrive in several pieces, so we
    read up to the blank line that ends it rather than a fixed size.

    Raises:
        HTTPParseError: Head malformed, too large, or the peer closed
                        before sending a complete head.
    """
    try:
        data = await reader.readuntil(b"\r\n\r\n")
    except asyncio.LimitOverrunError:
        raise HTTPParseError("Request head too large")
    except asyncio.IncompleteReadError:
        raise HTTPParseError("Connection closed before request head was complete")

    if len(data) > max_size:
        raise HTTPParseError(f"Request head exceeds {max_size} bytes")

    return parse_request_head(data, client_address)


async def watch_disconnect(reader: asyncio.StreamReader, request: TransferRequest) -> None:
    """
    Set ``request.disconnected`` once the peer closes its side.

    Anything the client sends after the head is discarded; file
    transfers have no request body to read.
    """
    try:
        while await reader.read(4096):
            pass
    except ConnectionError as e:
        logger.debug(f"Connection reset while watching for disconnect: {e}")
    request.disconnected.set()
