"""
asyncio adapter: StreamResponse and the disconnect watcher.
"""

from .connection import (
    SERVER_NAME,
    StreamResponse,
    read_request,
    watch_disconnect,
)

__all__ = [
    "SERVER_NAME",
    "StreamResponse",
    "read_request",
    "watch_disconnect",
]
