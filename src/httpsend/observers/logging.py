"""
=============================================================================
LOGGING OBSERVER
=============================================================================

Turns transfer events into access-log lines.

=============================================================================
LOG FORMATS
=============================================================================

    TEXT (default), Apache-like:

        127.0.0.1 - - [18/Oct/2026:10:00:00 +0000] "GET /movie.mp4" 206 1048576 12.31ms

    JSON, for log aggregators:

        {"method": "GET", "path": "/movie.mp4", "status": 206,
         "bytes_sent": 1048576, "range": "0-1048575", ...}

Streaming starts and ends at different times, so the observer keeps a
start timestamp per request and reports the duration when the
transfer ends, fails or is aborted by the peer. Answers without a body
(HEAD, 304, a directory handed back to the caller) are logged with a
zero duration; a directory line shows "-" for the status because the
caller decides it.

=============================================================================
"""

import json
import logging
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, Optional

from .base import TransferObserver

if TYPE_CHECKING:
    from ..http.request import TransferRequest
    from ..transfer.errors import TransferError
    from ..transfer.outcome import ResolvedTarget
    from ..transfer.ranges import RangeSelection


# Namespaced so it can be routed separately:
#   logging.getLogger("httpsend.access").addHandler(file_handler)
logger = logging.getLogger("httpsend.access")


@dataclass
class TransferLog:
    """One access-log entry."""

    method: str
    path: str
    client_ip: str
    status: Optional[int]
    bytes_sent: int
    duration_ms: float
    timestamp: str
    byte_range: Optional[str] = None
    error: Optional[str] = None
    note: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "method": self.method,
            "path": self.path,
            "client_ip": self.client_ip,
            "status": self.status,
            "bytes_sent": self.bytes_sent,
            "duration_ms": round(self.duration_ms, 2),
            "timestamp": self.timestamp,
            "range": self.byte_range,
            "error": self.error,
            "note": self.note,
        }

    def to_text(self) -> str:
        line = (
            f'{self.client_ip or "-"} - - [{self.timestamp}] '
            f'"{self.method} {self.path}" {self.status or "-"} '
            f'{self.bytes_sent} {self.duration_ms:.2f}ms'
        )
        if self.error:
            line += f" ({self.error})"
        if self.note:
            line += f" [{self.note}]"
        return line


class LoggingObserver(TransferObserver):
    """
    Access logging for transfers.

    Usage:
        resolver = TransferResolver(config, observer=LoggingObserver(log_format="json"))
    """

    def __init__(self, log_format: str = "text", log_level: int = logging.INFO):
        """
        Args:
            log_format: "text" (Apache-like) or "json".
            log_level: Level for successful transfers. Errors use WARNING
                       for 4xx and ERROR for 5xx.
        """
        if log_format not in ("text", "json"):
            raise ValueError(f"log_format must be 'text' or 'json', got {log_format!r}")
        self.log_format = log_format
        self.log_level = log_level
        self._started: Dict[int, tuple[float, Optional["RangeSelection"]]] = {}

    def on_directory(self, request: "TransferRequest", target: "ResolvedTarget") -> None:
        logger.debug(f"Directory requested: {request.path} → {target.path}")
        self._emit(self.log_level, self._entry(request, None, 0, note="directory"))

    def on_head(self, request, target, selection) -> None:
        status, byte_range = _status_for(selection)
        self._emit(self.log_level, self._entry(request, status, 0, byte_range=byte_range))

    def on_not_modified(self, request: "TransferRequest") -> None:
        self._emit(self.log_level, self._entry(request, 304, 0))

    def on_stream(self, request, target, selection) -> None:
        self._started[id(request)] = (time.perf_counter(), selection)

    def on_end(self, request, target, bytes_sent) -> None:
        started, selection = self._started.pop(id(request), (None, None))
        status, byte_range = _status_for(selection)
        entry = self._entry(request, status, bytes_sent, started, byte_range)
        self._emit(self.log_level, entry)

    def on_abort(self, request, target, bytes_sent) -> None:
        started, selection = self._started.pop(id(request), (None, None))
        status, byte_range = _status_for(selection)
        entry = self._entry(request, status, bytes_sent, started, byte_range, note="aborted by peer")
        self._emit(self.log_level, entry)

    def on_error(self, request: "TransferRequest", error: "TransferError") -> None:
        started, _ = self._started.pop(id(request), (None, None))
        level = logging.ERROR if error.status >= 500 else logging.WARNING
        entry = self._entry(request, int(error.status), 0, started, error=error.message)
        self._emit(level, entry)

    def _entry(
        self,
        request: "TransferRequest",
        status: Optional[int],
        bytes_sent: int,
        started: Optional[float] = None,
        byte_range: Optional[str] = None,
        error: Optional[str] = None,
        note: Optional[str] = None,
    ) -> TransferLog:
        duration = (time.perf_counter() - started) * 1000 if started is not None else 0.0
        return TransferLog(
            method=request.method,
            path=request.path,
            client_ip=request.client_address[0],
            status=status,
            bytes_sent=bytes_sent,
            duration_ms=duration,
            timestamp=time.strftime("%d/%b/%Y:%H:%M:%S %z"),
            byte_range=byte_range,
            error=error,
            note=note,
        )

    def _emit(self, level: int, entry: TransferLog) -> None:
        if self.log_format == "json":
            logger.log(level, json.dumps(entry.to_dict()))
        else:
            logger.log(level, entry.to_text())


def _status_for(selection: Optional["RangeSelection"]) -> tuple[int, Optional[str]]:
    """(status, "start-end") of a successful answer for a range selection."""
    if selection is not None and selection.is_partial:
        return 206, f"{selection.start}-{selection.end}"
    return 200, None
