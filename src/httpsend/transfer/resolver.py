"""
=============================================================================
TRANSFER RESOLVER
=============================================================================

Answers one file request: resolve the path, decide what to send, and
stream it.

=============================================================================
FLOW
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   resolve_path() ──── error ──────────────────────────► Error       │
    │        │                                                             │
    │   stat() ─────────── ENOENT/ENOTDIR/... ───────────────► Error 404  │
    │        │             other OSError ────────────────────► Error 500  │
    │        │             directory ────────────────────────► Directory  │
    │        │                                                             │
    │   set ETag / Date / Cache-Control / Last-Modified / Content-Type    │
    │        │                                                             │
    │   conditional + cacheable + fresh? ────────────────────► NotModified│
    │        │                                                             │
    │   parse_range() ──── unsatisfiable ────────────────────► Error 416  │
    │        │             single ─── status 206 + Content-Range           │
    │        │                                                             │
    │   Content-Length ──────────────────────────────────────► Content    │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

resolve() stops there and returns the decision. send() then acts on it:

    Directory     → notify observer, leave the response to the caller
    Error         → error handler (custom, or default_error_handler)
    NotModified   → end() with no body
    Content       → HEAD: end(); otherwise stream the bytes

=============================================================================
ERRORS AFTER THE FIRST BYTE
=============================================================================

Once the status line is on the wire it cannot be changed. A read
failure after that point is logged and reported to the observer, then
the connection is aborted: the client sees a truncated response instead
of a silently wrong one.
A failure before anything was sent still becomes a normal 500.

=============================================================================
USAGE
=============================================================================

    resolver = TransferResolver(TransferConfig(root="/var/www", max_age=INFINITE))

    outcome = await resolver.send(request, response)
    if isinstance(outcome, Directory):
        response.status = 301
        response.set_header("Location", request.path + "/")
        await response.end()

=============================================================================
"""

import logging
from typing import Awaitable, Callable, Optional

import aiofiles.os

from ..config import TransferConfig
from ..http import mime_types
from ..http.request import TransferRequest
from ..http.response import ResponseSink
from ..http.status_codes import HTTPStatus, reason_phrase
from ..observers.base import TransferObserver
from . import conditional
from .errors import (
    InternalError,
    RangeNotSatisfiable,
    TransferAborted,
    TransferError,
    stat_error,
)
from .headers import MimeLookup, set_content_type, set_file_headers, set_length_headers
from .outcome import Content, Directory, Error, NotModified, ResolvedTarget, TransferOutcome
from .paths import Decoder, decode_uri_component, resolve_path
from .ranges import RangeKind, parse_range
from .stream import copy_range


logger = logging.getLogger(__name__)

ErrorHandler = Callable[[TransferError, TransferRequest, ResponseSink], Awaitable[None]]

FILE_VALIDATOR_HEADERS = ("ETag", "Last-Modified", "Cache-Control")


async def default_error_handler(
    error: TransferError,
    request: TransferRequest,
    response: ResponseSink,
) -> None:
    """
    Answer an error with its status and reason phrase.

    File headers set earlier in the transfer (Content-Type of the file,
    Content-Length of the file) would now lie about the body, so every
    Content-* header except Content-Range is dropped first. Content-Range
    stays: a 416 must say "bytes */<size>".

    The file's validators and caching policy describe the file, not
    this error body, so ETag, Last-Modified and Cache-Control go too.
    """
    content_range = response.get_header("Content-Range")
    conditional.remove_content_headers(response)
    for name in FILE_VALIDATOR_HEADERS:
        response.remove_header(name)
    if content_range is not None and error.status == HTTPStatus.RANGE_NOT_SATISFIABLE:
        response.set_header("Content-Range", content_range)

    body = reason_phrase(error.status).encode("utf-8")
    response.status = error.status
    response.set_header("Content-Type", "text/plain; charset=utf-8")
    response.set_header("Content-Length", str(len(body)))
    await response.end(b"" if request.is_head else body)


class TransferResolver:
    """
    Resolves and streams static files.

    =========================================================================
    COLLABORATORS
    =========================================================================

    config          Validated and copied at construction; later changes
                    to the caller's object have no effect.
    mime_lookup     path → (content-type, charset); defaults to the
                    built-in extension table.
    decoder         Strict percent-decoder; must raise ValueError.
    error_handler   Replaces default_error_handler when given.
    observer        Receives directory/error/stream/end events.

    One resolver serves any number of concurrent transfers: it holds no
    per-request state.

    =========================================================================
    """

    def __init__(
        self,
        config: Optional[TransferConfig] = None,
        *,
        mime_lookup: MimeLookup = mime_types.lookup,
        decoder: Decoder = decode_uri_component,
        error_handler: Optional[ErrorHandler] = None,
        observer: Optional[TransferObserver] = None,
    ):
        self.config = (config or TransferConfig()).resolved()
        self.mime_lookup = mime_lookup
        self.decoder = decoder
        self.error_handler = error_handler or default_error_handler
        self.observer = observer or TransferObserver()

    # =========================================================================
    # DECISION
    # =========================================================================

    async def resolve(self, request: TransferRequest, response: ResponseSink) -> TransferOutcome:
        """
        Decide how to answer a request.

        Sets response headers and status as decisions are made, but never
        writes to or ends the response.
        """
        try:
            path = resolve_path(request.path, self.config, self.decoder)
        except TransferError as e:
            return Error(e)

        logger.debug(f'stat "{path}"')
        try:
            target = ResolvedTarget.from_stat(path, await aiofiles.os.stat(path))
        except OSError as e:
            return Error(stat_error(e))

        if target.is_directory:
            return Directory(target)

        set_file_headers(response, target, self.config)
        set_content_type(response, target.path, self.mime_lookup)

        # ─────────────────────────────────────────────────────────────────
        # CONDITIONAL GET
        # ─────────────────────────────────────────────────────────────────
        if (conditional.is_conditional(request.headers)
                and conditional.is_cacheable(response.status)
                and conditional.is_fresh(request.headers, response)):
            logger.debug(f"not modified: {path}")
            conditional.not_modified(response)
            return NotModified()

        # ─────────────────────────────────────────────────────────────────
        # RANGE
        # ─────────────────────────────────────────────────────────────────
        selection = parse_range(target.size, request.get_header("range"))

        if selection.kind is RangeKind.UNSATISFIABLE:
            response.set_header("Content-Range", selection.content_range(target.size))
            return Error(RangeNotSatisfiable())

        if selection.kind is RangeKind.MALFORMED:
            logger.debug(f"ignoring malformed Range {request.get_header('range')!r}")
        elif selection.is_partial:
            response.status = HTTPStatus.PARTIAL_CONTENT

        set_length_headers(response, target, selection)
        return Content(target, selection, response.status)

    # =========================================================================
    # ACTION
    # =========================================================================

    async def send(self, request: TransferRequest, response: ResponseSink) -> TransferOutcome:
        """
        Resolve the request and carry the decision out on the response.

        Returns:
            The terminal outcome. Usually what resolve() decided; an
            Error(500) if the file could not be read before any byte was
            sent.
        """
        outcome = await self.resolve(request, response)

        if isinstance(outcome, Directory):
            self.observer.on_directory(request, outcome.target)
        elif isinstance(outcome, Error):
            await self._fail(request, response, outcome.error)
        elif isinstance(outcome, NotModified):
            await response.end()
            self.observer.on_not_modified(request)
        elif request.is_head:
            await response.end()
            self.observer.on_head(request, outcome.target, outcome.selection)
        else:
            outcome = await self._stream(request, response, outcome)

        return outcome

    async def _fail(
        self,
        request: TransferRequest,
        response: ResponseSink,
        error: TransferError,
    ) -> None:
        self.observer.on_error(request, error)
        await self.error_handler(error, request, response)

    async def _stream(
        self,
        request: TransferRequest,
        response: ResponseSink,
        outcome: Content,
    ) -> TransferOutcome:
        target, selection = outcome.target, outcome.selection
        start, end = selection.bounds(target.size)

        self.observer.on_stream(request, target, selection)
        try:
            sent = await copy_range(
                target.path, response, start, end,
                self.config.chunk_size, request.disconnected,
            )
            await response.end()
        except (TransferAborted, ConnectionError):
            # ConnectionError: end() itself can hit a closed socket
            logger.debug(f"Transfer of {target.path} aborted by peer")
            self.observer.on_abort(request, target, response.bytes_sent)
            return outcome
        except (OSError, TransferError) as e:
            error = e if isinstance(e, TransferError) else InternalError(
                e.strerror or str(e), cause=e
            )
            if response.headers_sent:
                # No hope in responding: the status is already on the wire
                logger.error(f"Error streaming {target.path} after headers were sent: {e}")
                response.abort()
                self.observer.on_error(request, error)
                return outcome
            await self._fail(request, response, error)
            return Error(error)

        self.observer.on_end(request, target, sent)
        return outcome
