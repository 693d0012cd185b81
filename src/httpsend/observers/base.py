"""
=============================================================================
TRANSFER OBSERVER
=============================================================================

Optional hook for instrumentation. The resolver reports what happened
to an observer but never depends on it: outcomes are returned values,
so tests and callers can ignore observers entirely.

    on_directory      a directory was requested
    on_error          the transfer ended with an error status
    on_stream         streaming of file bytes is starting
    on_end            streaming completed
    on_abort          the peer went away mid-stream
    on_head           a HEAD request was answered with headers only
    on_not_modified   a 304 was sent

Every transfer that reaches on_stream ends with exactly one of on_end,
on_abort or on_error, so per-request state kept between them is always
released.

=============================================================================
"""

from typing import TYPE_CHECKING, Iterable, Optional

if TYPE_CHECKING:
    # The resolver imports this module; keep the reverse edge type-only
    from ..http.request import TransferRequest
    from ..transfer.errors import TransferError
    from ..transfer.outcome import ResolvedTarget
    from ..transfer.ranges import RangeSelection


class TransferObserver:
    """
    No-op base class; override the events you care about.

        class Metrics(TransferObserver):
            def on_end(self, request, target, bytes_sent):
                BYTES_SERVED.inc(bytes_sent)
    """

    def on_directory(self, request: "TransferRequest", target: "ResolvedTarget") -> None:
        pass

    def on_error(self, request: "TransferRequest", error: "TransferError") -> None:
        pass

    def on_stream(
        self,
        request: "TransferRequest",
        target: "ResolvedTarget",
        selection: "RangeSelection",
    ) -> None:
        pass

    def on_end(self, request: "TransferRequest", target: "ResolvedTarget", bytes_sent: int) -> None:
        pass

    def on_abort(self, request: "TransferRequest", target: "ResolvedTarget", bytes_sent: int) -> None:
        pass

    def on_head(
        self,
        request: "TransferRequest",
        target: "ResolvedTarget",
        selection: "RangeSelection",
    ) -> None:
        pass

    def on_not_modified(self, request: "TransferRequest") -> None:
        pass


class ObserverGroup(TransferObserver):
    """Fans each event out to several observers, in order."""

    def __init__(self, observers: Optional[Iterable[TransferObserver]] = None):
        self.observers = list(observers or [])

    def add(self, observer: TransferObserver) -> "ObserverGroup":
        self.observers.append(observer)
        return self

    def on_directory(self, request, target):
        for observer in self.observers:
            observer.on_directory(request, target)

    def on_error(self, request, error):
        for observer in self.observers:
            observer.on_error(request, error)

    def on_stream(self, request, target, selection):
        for observer in self.observers:
            observer.on_stream(request, target, selection)

    def on_end(self, request, target, bytes_sent):
        for observer in self.observers:
            observer.on_end(request, target, bytes_sent)

    def on_abort(self, request, target, bytes_sent):
        for observer in self.observers:
            observer.on_abort(request, target, bytes_sent)

    def on_head(self, request, target, selection):
        for observer in self.observers:
            observer.on_head(request, target, selection)

    def on_not_modified(self, request):
        for observer in self.observers:
            observer.on_not_modified(request)
