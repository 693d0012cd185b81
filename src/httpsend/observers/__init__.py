"""
Transfer observers: optional instrumentation hooks for the resolver.
"""

from .base import TransferObserver, ObserverGroup
from .logging import LoggingObserver, TransferLog

__all__ = [
    "TransferObserver",
    "ObserverGroup",
    "LoggingObserver",
    "TransferLog",
]
