"""
=============================================================================
STREAM TRANSFER
=============================================================================

Copies bytes [start, end] of a file into a response sink without
blocking the event loop, and lets go of the file the moment the peer
hangs up.

=============================================================================
TWO TASKS, FIRST ONE WINS
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   copy task                       hangup task                       │
    │   ─────────                       ───────────                       │
    │   open file (aiofiles)            await disconnected.wait()         │
    │   seek(start)                                                       │
    │   loop: read chunk → write                                          │
    │                                                                      │
    │   copy finishes first   → return bytes sent, cancel hangup          │
    │   hangup fires first    → cancel copy, file closes, TransferAborted │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

aiofiles runs each read on a worker thread, so a slow disk stalls only
this transfer. Cancelling the copy task unwinds its "async with" block,
which closes the file descriptor; without that, every dropped
connection would leak one fd.

A write that fails with ConnectionError (reset, broken pipe) is the
same event seen from the other side and is also reported as
TransferAborted.

=============================================================================
"""

import asyncio
import logging

import aiofiles

from ..http.response import ResponseSink
from .errors import InternalError, TransferAborted


logger = logging.getLogger(__name__)


async def _copy(
    path: str,
    response: ResponseSink,
    start: int,
    end: int,
    chunk_size: int,
) -> int:
    remaining = end - start + 1
    sent = 0

    async with aiofiles.open(path, "rb") as f:
        if start:
            await f.seek(start)

        while remaining > 0:
            chunk = await f.read(min(chunk_size, remaining))
            if not chunk:
                # Content-Length already promised more than this
                raise InternalError(
                    f"{path} ended after {sent} of {end - start + 1} bytes"
                )
            try:
                await response.write(chunk)
            except ConnectionError as e:
                raise TransferAborted(str(e)) from e
            remaining -= len(chunk)
            sent += len(chunk)

    return sent


async def copy_range(
    path: str,
    response: ResponseSink,
    start: int,
    end: int,
    chunk_size: int,
    disconnected: asyncio.Event,
) -> int:
    """
    Copy an inclusive byte range of a file into the response.

    Args:
        path: File to read.
        response: Sink receiving the bytes.
        start: First byte offset.
        end: Last byte offset (inclusive); start - 1 copies nothing.
        chunk_size: Bytes per read.
        disconnected: Set when the peer closes the connection.

    Returns:
        Number of bytes written.

    Raises:
        TransferAborted: The peer went away; the file is already closed.
        OSError: Opening or reading the file failed.
        InternalError: The file was shorter than the range.
    """
    if disconnected.is_set():
        raise TransferAborted("peer closed before streaming started")

    copy = asyncio.ensure_future(_copy(path, response, start, end, chunk_size))
    hangup = asyncio.ensure_future(disconnected.wait())

    try:
        done, _ = await asyncio.wait({copy, hangup}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        hangup.cancel()
        if not copy.done():
            copy.cancel()

    if copy in done:
        return copy.result()

    # Wait for the cancelled copy to unwind so the file is closed on return
    await asyncio.gather(copy, return_exceptions=True)
    logger.debug(f"Peer disconnected while streaming {path}; file released")
    raise TransferAborted("peer closed during transfer")
