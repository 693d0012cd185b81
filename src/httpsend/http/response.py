"""
=============================================================================
HTTP RESPONSE SINK
=============================================================================

The response side of a transfer: a status code, a header map, and a byte
channel the file is copied into.

=============================================================================
THE SINK CONTRACT
=============================================================================

The transfer core never touches a socket. It talks to a ResponseSink:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                        RESPONSE SINK                                │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   status            settable until headers are committed            │
    │   headers           case-insensitive, case-preserving map           │
    │   headers_sent      True once the status line hit the wire          │
    │                                                                      │
    │   write(data)       stream body bytes (commits headers first)       │
    │   end(body)         finish the response (commits headers first)     │
    │   abort()           tear the connection down without finishing      │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

"Committed" matters for error handling: before the first byte is sent
a failure can still become a 500; after it, the status is already on
the wire and the only honest option is to abort the connection.

=============================================================================
HTTP DATES
=============================================================================

Date, Last-Modified and If-Modified-Since all use the IMF-fixdate form:

    Wed, 15 Jun 2024 10:00:00 GMT

Always GMT, always second granularity.

=============================================================================
"""

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Dict, Iterator, Optional, Tuple, Union

from .status_codes import HTTPStatus


class Headers:
    """
    Case-insensitive header map that remembers the original name casing.

        >>> h = Headers({"Content-Type": "text/plain"})
        >>> h["content-type"]
        'text/plain'
        >>> list(h.items())
        [('Content-Type', 'text/plain')]

    Lookups go through lowercase keys (HTTP header names are
    case-insensitive per RFC 7230); serialization uses the name as it
    was first set.
    """

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._items: Dict[str, Tuple[str, str]] = {}
        for name, value in (initial or {}).items():
            self[name] = value

    def __getitem__(self, name: str) -> str:
        return self._items[name.lower()][1]

    def __setitem__(self, name: str, value: Union[str, int]) -> None:
        key = name.lower()
        # Keep the first casing so re-setting "content-length" after
        # "Content-Length" doesn't change the wire name.
        original = self._items[key][0] if key in self._items else name
        self._items[key] = (original, str(value))

    def __delitem__(self, name: str) -> None:
        del self._items[name.lower()]

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._items

    def __iter__(self) -> Iterator[str]:
        return (original for original, _ in self._items.values())

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return f"Headers({dict(self.items())!r})"

    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        item = self._items.get(name.lower())
        return item[1] if item else default

    def pop(self, name: str, default: Optional[str] = None) -> Optional[str]:
        item = self._items.pop(name.lower(), None)
        return item[1] if item else default

    def items(self) -> Iterator[Tuple[str, str]]:
        return iter(list(self._items.values()))

    def names(self) -> list[str]:
        return [original for original, _ in self._items.values()]


class ResponseSink(ABC):
    """
    Abstract response the transfer core writes into.

    Subclasses supply the transport (``_send_head``, ``_send_body``,
    ``_finish``, ``abort``); header bookkeeping and commit tracking live
    here so every transport behaves the same way.

    =========================================================================
    COMMIT RULES
    =========================================================================

        set_header / status   allowed until commit
        write(data)           commits, then sends data
        end(body)             commits (if needed), sends body, finishes
        end after end         ignored

    =========================================================================
    """

    def __init__(self, head_only: bool = False):
        """
        Args:
            head_only: Suppress body bytes on the wire (HEAD responses).
                       Headers, including Content-Length, are still sent.
        """
        self.status: int = HTTPStatus.OK
        self.headers = Headers()
        self.head_only = head_only
        self._headers_sent = False
        self._finished = False
        self.bytes_sent = 0

    # =========================================================================
    # HEADER ACCESS
    # =========================================================================

    @property
    def headers_sent(self) -> bool:
        """True once the status line and headers are committed."""
        return self._headers_sent

    @property
    def finished(self) -> bool:
        return self._finished

    def get_header(self, name: str) -> Optional[str]:
        return self.headers.get(name)

    def has_header(self, name: str) -> bool:
        return name in self.headers

    def set_header(self, name: str, value: Union[str, int]) -> "ResponseSink":
        if self._headers_sent:
            raise RuntimeError(f"Cannot set header {name!r}: headers already sent")
        self.headers[name] = value
        return self

    def remove_header(self, name: str) -> None:
        if self._headers_sent:
            raise RuntimeError(f"Cannot remove header {name!r}: headers already sent")
        self.headers.pop(name)

    # =========================================================================
    # BODY
    # =========================================================================

    async def write(self, data: bytes) -> None:
        """Stream body bytes, committing the headers on first use."""
        if self._finished:
            raise RuntimeError("write() after end()")
        await self._commit()
        if data and not self.head_only:
            await self._send_body(data)
            self.bytes_sent += len(data)

    async def end(self, body: Union[str, bytes] = b"") -> None:
        """Finish the response with an optional literal body."""
        if self._finished:
            return
        if isinstance(body, str):
            body = body.encode("utf-8")
        await self._commit()
        if body and not self.head_only:
            await self._send_body(body)
            self.bytes_sent += len(body)
        self._finished = True
        await self._finish()

    async def _commit(self) -> None:
        if not self._headers_sent:
            self._headers_sent = True
            await self._send_head()

    # =========================================================================
    # TRANSPORT HOOKS
    # =========================================================================

    @abstractmethod
    async def _send_head(self) -> None:
        """Put the status line and headers on the wire."""

    @abstractmethod
    async def _send_body(self, data: bytes) -> None:
        """Put body bytes on the wire."""

    async def _finish(self) -> None:
        """Called once after the last body byte."""

    @abstractmethod
    def abort(self) -> None:
        """Tear the connection down without completing the response."""


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================

_DAYS = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
_MONTHS = ["Jan", "Feb", "Mar", "Apr", "May", "Jun",
           "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]


def format_http_date(value: Union[datetime, float]) -> str:
    """
    Format a datetime or POSIX timestamp as an HTTP-date (RFC 7231).

    Format: Day, DD Mon YYYY HH:MM:SS GMT

        >>> format_http_date(0)
        'Thu, 01 Jan 1970 00:00:00 GMT'
    """
    if isinstance(value, datetime):
        dt = value.astimezone(timezone.utc) if value.tzinfo else value
    else:
        dt = datetime.fromtimestamp(value, tz=timezone.utc)

    return (
        f"{_DAYS[dt.weekday()]}, "
        f"{dt.day:02d} {_MONTHS[dt.month - 1]} {dt.year} "
        f"{dt.hour:02d}:{dt.minute:02d}:{dt.second:02d} GMT"
    )


def parse_http_date(value: Optional[str]) -> Optional[datetime]:
    """
    Parse an HTTP-date into an aware UTC datetime.

    Returns None for missing or unparsable values rather than raising;
    callers treat an unreadable date as "no information".
    """
    if not value:
        return None
    try:
        dt = parsedate_to_datetime(value)
    except (TypeError, ValueError, IndexError):
        return None
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)
