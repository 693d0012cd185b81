"""
=============================================================================
TRANSFER ERRORS
=============================================================================

Every failure the transfer core can report, each carrying the HTTP
status it maps to.

    TransferError
    ├── BadRequest            400  malformed URI, NUL byte
    ├── Forbidden             403  path escapes the root
    ├── NotFound              404  missing file, hidden dot-file
    ├── RangeNotSatisfiable   416  Range outside the file
    └── InternalError         500  unexpected filesystem/stream failure

    TransferAborted                peer hung up; never shown to anyone

Errors raised before the response is committed become one Error
outcome. Errors after commit abort the connection instead.

=============================================================================
"""

import errno
from typing import Optional

from ..http.status_codes import HTTPStatus


class TransferError(Exception):
    """Base class for errors that end a transfer with an HTTP status."""

    status: HTTPStatus = HTTPStatus.INTERNAL_SERVER_ERROR

    def __init__(self, message: str, status: Optional[int] = None,
                 cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        if status is not None:
            self.status = HTTPStatus(status)
        self.cause = cause

    def __repr__(self) -> str:
        return f"{type(self).__name__}({int(self.status)}, {self.message!r})"


class BadRequest(TransferError):
    status = HTTPStatus.BAD_REQUEST

    def __init__(self, message: str = "invalid request uri", **kwargs):
        super().__init__(message, **kwargs)


class Forbidden(TransferError):
    status = HTTPStatus.FORBIDDEN

    def __init__(self, message: str = "forbidden", **kwargs):
        super().__init__(message, **kwargs)


class NotFound(TransferError):
    status = HTTPStatus.NOT_FOUND

    def __init__(self, message: str = "not found", **kwargs):
        super().__init__(message, **kwargs)


class RangeNotSatisfiable(TransferError):
    status = HTTPStatus.RANGE_NOT_SATISFIABLE

    def __init__(self, message: str = "requested range not satisfiable", **kwargs):
        super().__init__(message, **kwargs)


class InternalError(TransferError):
    status = HTTPStatus.INTERNAL_SERVER_ERROR


class TransferAborted(Exception):
    """The remote peer closed the connection mid-transfer."""


# =============================================================================
# STAT ERROR MAPPING
# =============================================================================
#
# stat() failures that just mean "there is nothing at this path":
#
#   ENOENT        no such file or directory
#   ENAMETOOLONG  path component longer than the filesystem allows
#   ENOTDIR       a middle component is a file ("/a.txt/b")
#
# Everything else (EACCES, EIO, ELOOP, ...) is a server-side problem.
#
# =============================================================================

NOT_FOUND_ERRNOS = frozenset({errno.ENOENT, errno.ENAMETOOLONG, errno.ENOTDIR})


def stat_error(exc: OSError) -> TransferError:
    """Map a failed stat() to the error the client should see."""
    if exc.errno in NOT_FOUND_ERRNOS:
        return NotFound(cause=exc)
    return InternalError(exc.strerror or str(exc), cause=exc)
