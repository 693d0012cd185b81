"""
=============================================================================
MIME TYPE LOOKUP
=============================================================================

Maps a file path to the (content-type, charset) pair the transfer core
puts in the Content-Type header.

The lookup is a pure function of the path's extension; it never opens
the file. Text types report a charset so the header becomes, e.g.:

    Content-Type: text/html; charset=UTF-8

Binary types report no charset:

    Content-Type: image/png

=============================================================================
"""

from pathlib import Path
from typing import Optional, Tuple, Union


# =============================================================================
# MIME TYPE DATABASE
# =============================================================================
#
# Extension (lowercase, with dot) → MIME type.
#
# =============================================================================

MIME_TYPES = {
    # Text
    ".html": "text/html",
    ".htm": "text/html",
    ".css": "text/css",
    ".js": "text/javascript",
    ".mjs": "text/javascript",
    ".json": "application/json",
    ".xml": "application/xml",
    ".txt": "text/plain",
    ".md": "text/markdown",
    ".csv": "text/csv",
    ".yaml": "text/yaml",
    ".yml": "text/yaml",

    # Images
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".svg": "image/svg+xml",
    ".ico": "image/x-icon",
    ".webp": "image/webp",
    ".avif": "image/avif",

    # Fonts
    ".woff": "font/woff",
    ".woff2": "font/woff2",
    ".ttf": "font/ttf",
    ".otf": "font/otf",

    # Audio / video (the main consumers of Range requests)
    ".mp3": "audio/mpeg",
    ".wav": "audio/wav",
    ".ogg": "audio/ogg",
    ".m4a": "audio/mp4",
    ".flac": "audio/flac",
    ".mp4": "video/mp4",
    ".webm": "video/webm",
    ".mov": "video/quicktime",
    ".mkv": "video/x-matroska",

    # Documents / archives
    ".pdf": "application/pdf",
    ".zip": "application/zip",
    ".tar": "application/x-tar",
    ".gz": "application/gzip",
    ".7z": "application/x-7z-compressed",
    ".wasm": "application/wasm",
    ".map": "application/json",
}

DEFAULT_MIME_TYPE = "application/octet-stream"

DEFAULT_CHARSET = "UTF-8"

# application/* types that are still text and get a charset
_TEXT_APPLICATION_TYPES = {
    "application/json",
    "application/xml",
    "application/javascript",
    "image/svg+xml",
}


def get_mime_type(path: Union[str, Path], default: Optional[str] = None) -> str:
    """
    Get the MIME type for a file based on its extension.

    Examples:
        >>> get_mime_type("/srv/www/app.css")
        'text/css'
        >>> get_mime_type("blob.xyz")
        'application/octet-stream'
    """
    extension = Path(path).suffix.lower()  # .PNG → .png
    return MIME_TYPES.get(extension, default or DEFAULT_MIME_TYPE)


def charset_for(mime_type: str) -> Optional[str]:
    """Charset to advertise for a MIME type, or None for binary types."""
    if mime_type.startswith("text/") or mime_type in _TEXT_APPLICATION_TYPES:
        return DEFAULT_CHARSET
    return None


def lookup(path: Union[str, Path]) -> Tuple[str, Optional[str]]:
    """
    Resolve a path to its (content-type, charset) pair.

    This is the collaborator the resolver calls by default; any callable
    with the same signature can be injected instead.

        >>> lookup("index.html")
        ('text/html', 'UTF-8')
        >>> lookup("movie.mp4")
        ('video/mp4', None)
    """
    mime_type = get_mime_type(path)
    return mime_type, charset_for(mime_type)


def format_content_type(mime_type: str, charset: Optional[str]) -> str:
    """Join a MIME type and optional charset into a Content-Type value."""
    if charset:
        return f"{mime_type}; charset={charset}"
    return mime_type
