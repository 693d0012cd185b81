"""
=============================================================================
PATH RESOLUTION & SECURITY
=============================================================================

Turns the raw request path into a filesystem path that is safe to stat,
or refuses it.

=============================================================================
PIPELINE
=============================================================================

Each step either passes the path on or stops the request:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   "/docs/%2e%2e/secret"                                             │
    │          │                                                           │
    │   1. percent-decode ─────── bad escape / bad UTF-8 ──► 400          │
    │          │                                                           │
    │   2. NUL byte check ─────── "\0" anywhere ──────────► 400          │
    │          │                                                           │
    │   3. join root + normalize  ("/srv" + "/docs/../x" → "/srv/x")      │
    │          │                                                           │
    │   4. traversal check ────── no root + ".." ─────────► 403          │
    │          │                  outside root ───────────► 403          │
    │          │                                                           │
    │   5. hidden-file check ──── ".env" not allowed ─────► 404          │
    │          │                                                           │
    │   6. index substitution     "/docs/" → "/docs/index.html"           │
    │          │                                                           │
    │          ▼                                                           │
    │   safe absolute path → stat()                                       │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
WHY TWO TRAVERSAL RULES?
=============================================================================

With a root, ".." is harmless as long as the NORMALIZED result is still
under the root: "/a/../b" is just "/b". The check compares against
root + separator, so a sibling like "/srv/www-private" never passes for
root "/srv/www".

Without a root there is no boundary to normalize against, so any ".."
segment is refused outright.

Dot-files answer 404 rather than 403: a 403 would confirm that
"/.env" exists.

=============================================================================
"""

import logging
import os
import re
from typing import Callable
from urllib.parse import unquote_to_bytes

from ..config import TransferConfig
from .errors import BadRequest, Forbidden, NotFound


logger = logging.getLogger(__name__)

Decoder = Callable[[str], str]

# "%" not followed by two hex digits
_BAD_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")

_SEPARATORS = ("/", os.sep)


def decode_uri_component(raw: str) -> str:
    """
    Strictly percent-decode a URI path.

    Unlike urllib.parse.unquote, malformed input is an error instead of
    being passed through:

        >>> decode_uri_component("/a%20b")
        '/a b'
        >>> decode_uri_component("/a%zz")
        Traceback (most recent call last):
        ...
        ValueError: invalid percent-escape in '/a%zz'

    Raises:
        ValueError: On a stray "%" or bytes that are not valid UTF-8.
    """
    if _BAD_ESCAPE.search(raw):
        raise ValueError(f"invalid percent-escape in {raw!r}")
    try:
        return unquote_to_bytes(raw).decode("utf-8")
    except UnicodeDecodeError as e:
        raise ValueError(f"percent-escapes in {raw!r} are not valid UTF-8") from e


def has_trailing_slash(path: str) -> bool:
    return path.endswith(_SEPARATORS)


def has_parent_segment(path: str) -> bool:
    """True if any path segment is exactly ".."."""
    return ".." in re.split(r"[\\/]", path)


def has_leading_dot(path: str) -> bool:
    """True if the final segment (ignoring a trailing separator) starts with "."."""
    name = os.path.basename(path.rstrip("/" + os.sep))
    return name.startswith(".")


def is_within_root(path: str, root: str) -> bool:
    prefix = root if root.endswith(os.sep) else root + os.sep
    return path == root or path.startswith(prefix)


def resolve_path(
    raw: str,
    config: TransferConfig,
    decode: Decoder = decode_uri_component,
) -> str:
    """
    Resolve a raw request path against the configuration.

    Args:
        raw: Request path as received (percent-encoded).
        config: A resolved TransferConfig (root already absolute).
        decode: Percent-decoder; must raise ValueError on bad input.

    Returns:
        The path to stat. Absolute when a root is configured.

    Raises:
        BadRequest: Undecodable path or NUL byte.
        Forbidden: Traversal outside the root, or ".." without a root.
        NotFound: Hidden file while hidden files are disallowed.
    """
    # ─────────────────────────────────────────────────────────────────
    # 1-2. DECODE, REJECT NUL
    # ─────────────────────────────────────────────────────────────────
    try:
        path = decode(raw)
    except ValueError as e:
        raise BadRequest(cause=e)

    if "\0" in path:
        raise BadRequest()

    trailing_slash = has_trailing_slash(path)
    root = config.root

    # ─────────────────────────────────────────────────────────────────
    # 3-4. JOIN, NORMALIZE, CHECK TRAVERSAL
    # ─────────────────────────────────────────────────────────────────
    if root:
        # Concatenate rather than os.path.join: join() would throw the
        # root away for an absolute request path like "/etc/passwd".
        path = os.path.normpath(root + os.sep + path)
        if not is_within_root(path, root):
            logger.warning(f"Path traversal attempt: {raw!r} resolves outside {root}")
            raise Forbidden()
        # normpath drops the trailing separator; index lookup needs it
        if trailing_slash and not has_trailing_slash(path):
            path += os.sep
    elif has_parent_segment(path):
        logger.warning(f"Path traversal attempt without root: {raw!r}")
        raise Forbidden()

    # ─────────────────────────────────────────────────────────────────
    # 5. HIDDEN FILES
    # ─────────────────────────────────────────────────────────────────
    # Only the requested part counts; a root like "/home/u/.site" is fine
    requested = path[len(root):] if root else path
    if not config.hidden and has_leading_dot(requested):
        logger.debug(f"Refusing hidden path {path!r}")
        raise NotFound()

    # ─────────────────────────────────────────────────────────────────
    # 6. INDEX FILE
    # ─────────────────────────────────────────────────────────────────
    if config.index and trailing_slash:
        path += config.index

    return path
