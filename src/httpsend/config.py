"""
=============================================================================
TRANSFER CONFIGURATION
=============================================================================

Settings for one TransferResolver: where files live and how they are
served.

=============================================================================
LIFECYCLE
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   TransferConfig(...)        mutable, set whatever you like          │
    │          │                                                           │
    │          ▼                                                           │
    │   TransferResolver(config)   validate() + private copy               │
    │          │                                                           │
    │          ▼                                                           │
    │   resolver.send(...)         reads the copy, never writes it         │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

The resolver keeps its own validated copy, so changing the caller's
object after construction never leaks into transfers already running
(or into later ones). Build a new resolver to change settings.

=============================================================================
ENVIRONMENT VARIABLES
=============================================================================

    HTTPSEND_ROOT         Root directory (default: unset)
    HTTPSEND_HIDDEN       Serve dot-files: true/false (default: false)
    HTTPSEND_INDEX        Index filename, empty to disable (default: index.html)
    HTTPSEND_MAX_AGE      Cache max-age in ms, or "infinite" (default: 0)
    HTTPSEND_CHUNK_SIZE   Read size in bytes (default: 65536)

=============================================================================
"""

import math
import os
from dataclasses import dataclass, replace
from typing import Optional, Union


INFINITE = math.inf
"""max_age sentinel: cache for as long as HTTP allows (one year)."""

ONE_YEAR_MS = 60 * 60 * 24 * 365 * 1000

DEFAULT_INDEX = "index.html"

DEFAULT_CHUNK_SIZE = 64 * 1024


@dataclass
class TransferConfig:
    """
    Configuration for a TransferResolver.

    =========================================================================
    SETTINGS
    =========================================================================

    root        Directory every served path must stay under. When unset,
                request paths are used as-is and ANY ".." segment is
                refused, since there is no boundary to normalize against.

    hidden      Serve files whose name starts with ".". Off by default;
                refused dot-files answer 404, not 403, so their existence
                is not disclosed.

    index       File served for paths ending in "/". None or "" disables
                index lookup; the directory itself is then reported.

    max_age     Cache-Control max-age, in MILLISECONDS. INFINITE maps to
                one year.

    chunk_size  Bytes read from disk per write to the response.

    =========================================================================
    """

    root: Optional[str] = None
    hidden: bool = False
    index: Optional[Union[str, bool]] = DEFAULT_INDEX
    max_age: float = 0
    chunk_size: int = DEFAULT_CHUNK_SIZE

    @property
    def max_age_seconds(self) -> int:
        """max_age as whole seconds for the Cache-Control header."""
        return int(self.max_age // 1000)

    @classmethod
    def from_env(cls) -> "TransferConfig":
        """
        Create configuration from HTTPSEND_* environment variables.

        Usage:
            HTTPSEND_ROOT=/var/www HTTPSEND_MAX_AGE=infinite python app.py
        """
        index = os.getenv("HTTPSEND_INDEX", DEFAULT_INDEX)
        return cls(
            root=os.getenv("HTTPSEND_ROOT") or None,
            hidden=os.getenv("HTTPSEND_HIDDEN", "false").lower() in ("1", "true", "yes"),
            index=index or None,
            max_age=parse_max_age(os.getenv("HTTPSEND_MAX_AGE", "0")),
            chunk_size=int(os.getenv("HTTPSEND_CHUNK_SIZE", str(DEFAULT_CHUNK_SIZE))),
        )

    def validate(self) -> None:
        """
        Validate configuration values.

        Called by the resolver at construction, so a bad root or a
        negative max-age fails at startup rather than on first request.

        Raises:
            ValueError: On any invalid setting.
        """
        if self.root is not None:
            if not self.root:
                raise ValueError("root must be a non-empty path or None")
            if not os.path.isdir(self.root):
                raise ValueError(f"root directory does not exist: {self.root}")

        if self.index:
            if not isinstance(self.index, str):
                raise ValueError(f"index must be a filename or disabled, got {self.index!r}")
            if "/" in self.index or os.sep in self.index:
                raise ValueError(f"index must be a bare filename: {self.index!r}")

        if math.isnan(self.max_age) or self.max_age < 0:
            raise ValueError(f"max_age must be >= 0, got {self.max_age}")

        if self.chunk_size < 1:
            raise ValueError(f"chunk_size must be >= 1, got {self.chunk_size}")

    def resolved(self) -> "TransferConfig":
        """
        Return a validated, normalized copy.

        - root becomes an absolute, normalized path
        - a disabled index becomes None
        - INFINITE max_age becomes one year
        """
        self.validate()
        return replace(
            self,
            root=os.path.normpath(os.path.abspath(self.root)) if self.root else None,
            index=self.index or None,
            max_age=ONE_YEAR_MS if self.max_age == INFINITE else self.max_age,
        )


def parse_max_age(value: Union[str, int, float]) -> float:
    """
    Parse a max-age setting in milliseconds.

        >>> parse_max_age("infinite")
        inf
        >>> parse_max_age("5000")
        5000.0
    """
    if isinstance(value, str) and value.strip().lower() in ("infinite", "infinity", "inf"):
        return INFINITE
    return float(value)
