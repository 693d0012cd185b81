"""
Transfer outcomes.

A transfer reaches exactly one of these decisions:

    Directory     the path is a directory; the caller decides what to do
    Error         a TransferError, answered with its status
    NotModified   the client's cached copy is fresh (304)
    Content       bytes are (to be) streamed, whole file or one range
"""

import os
import stat
from dataclasses import dataclass
from typing import Union

from ..http.status_codes import HTTPStatus
from .errors import TransferError
from .ranges import RangeSelection


@dataclass(frozen=True)
class ResolvedTarget:
    """
    A resolved filesystem path plus the stat snapshot taken for it.

    The snapshot is taken once per transfer; ETag, Last-Modified and
    Content-Length are all computed from it so they agree with each
    other even if the file changes mid-request.
    """

    path: str
    size: int
    mtime_ns: int
    is_directory: bool

    @property
    def mtime(self) -> float:
        """Modification time as POSIX seconds."""
        return self.mtime_ns / 1_000_000_000

    @classmethod
    def from_stat(cls, path: str, result: os.stat_result) -> "ResolvedTarget":
        return cls(
            path=path,
            size=result.st_size,
            mtime_ns=result.st_mtime_ns,
            is_directory=stat.S_ISDIR(result.st_mode),
        )


@dataclass(frozen=True)
class Directory:
    target: ResolvedTarget


@dataclass(frozen=True)
class Error:
    error: TransferError

    @property
    def status(self) -> HTTPStatus:
        return self.error.status

    @property
    def message(self) -> str:
        return self.error.message


@dataclass(frozen=True)
class NotModified:
    pass


@dataclass(frozen=True)
class Content:
    target: ResolvedTarget
    selection: RangeSelection
    status: int = HTTPStatus.OK


TransferOutcome = Union[Directory, Error, NotModified, Content]
