"""
pytest configuration and fixtures.
"""

import asyncio
import os
from typing import Optional

import pytest

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from httpsend import TransferConfig, TransferResolver
from httpsend.http import ResponseSink, TransferRequest


def run(coro):
    """Drive a coroutine to completion on a fresh event loop."""
    return asyncio.run(coro)


class RecordingResponse(ResponseSink):
    """
    In-memory response sink.

    Records what a real transport would have put on the wire: the
    status and headers at commit time, and every body chunk.
    """

    def __init__(self, head_only: bool = False, fail_after: Optional[int] = None):
        super().__init__(head_only=head_only)
        self.body = bytearray()
        self.chunks: list[bytes] = []
        self.committed_status: Optional[int] = None
        self.committed_headers: dict = {}
        self.aborted = False
        # Raise ConnectionResetError once this many body chunks went out
        self.fail_after = fail_after

    async def _send_head(self) -> None:
        self.committed_status = int(self.status)
        self.committed_headers = dict(self.headers.items())

    async def _send_body(self, data: bytes) -> None:
        if self.fail_after is not None and len(self.chunks) >= self.fail_after:
            raise ConnectionResetError("peer reset")
        self.chunks.append(bytes(data))
        self.body.extend(data)

    def abort(self) -> None:
        self.aborted = True


@pytest.fixture
def docroot(tmp_path: Path) -> Path:
    """
    A small document root:

        ten.txt           "0123456789"
        docs/index.html   "<h1>docs</h1>"
        empty.bin         zero bytes
        .env              "SECRET=1"
    """
    (tmp_path / "ten.txt").write_bytes(b"0123456789")
    (tmp_path / "docs").mkdir()
    (tmp_path / "docs" / "index.html").write_bytes(b"<h1>docs</h1>")
    (tmp_path / "empty.bin").write_bytes(b"")
    (tmp_path / ".env").write_bytes(b"SECRET=1")
    return tmp_path


@pytest.fixture
def config(docroot: Path) -> TransferConfig:
    """Default test configuration rooted at the temporary docroot."""
    return TransferConfig(root=str(docroot))


@pytest.fixture
def resolver(config: TransferConfig) -> TransferResolver:
    return TransferResolver(config)


@pytest.fixture
def make_request():
    """Factory for TransferRequest objects."""
    def _make(path: str = "/", method: str = "GET", **headers: str) -> TransferRequest:
        return TransferRequest(
            method=method,
            path=path,
            headers={name.replace("_", "-"): value for name, value in headers.items()},
            client_address=("127.0.0.1", 54321),
        )
    return _make


@pytest.fixture
def clean_env(monkeypatch):
    """Remove every HTTPSEND_* variable for the duration of a test."""
    for name in list(os.environ):
        if name.startswith("HTTPSEND_"):
            monkeypatch.delenv(name)
    return monkeypatch
