"""
=============================================================================
RANGE EVALUATOR
=============================================================================

Parses a Range header against the file size and decides what to send.

=============================================================================
RANGE HEADER FORMS (RFC 7233)
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │  10-byte file: 0 1 2 3 4 5 6 7 8 9                                  │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │  bytes=0-0       first byte            → 0-0                        │
    │  bytes=2-5       bytes 2..5            → 2-5                        │
    │  bytes=7-        from 7 to the end     → 7-9                        │
    │  bytes=-3        last 3 bytes          → 7-9                        │
    │  bytes=5-99      end clamped to size   → 5-9                        │
    │  bytes=20-30     starts past the end   → UNSATISFIABLE (416)        │
    │  bytes=abc       not a byte range      → MALFORMED (send it all)    │
    │  items=0-5       unknown unit          → MALFORMED (send it all)    │
    │  bytes=999...-   too many digits       → MALFORMED (send it all)    │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

A malformed header never fails the request: RFC 7233 says a server MAY
ignore Range, so ignoring one it cannot read is always safe.

=============================================================================
MULTIPLE RANGES
=============================================================================

"bytes=0-1,5-6" would need a multipart/byteranges body. Only the FIRST
usable range is served; later ones are dropped. Unusable specs before
it are skipped, so "bytes=50-60,0-1" on a 10-byte file serves 0-1.

=============================================================================
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class RangeKind(Enum):
    """What a Range header resolved to."""

    NONE = "none"                   # no header: whole file
    SINGLE = "single"               # one satisfiable range
    UNSATISFIABLE = "unsatisfiable" # well-formed, but nothing fits
    MALFORMED = "malformed"         # unreadable: treated like NONE


@dataclass(frozen=True)
class RangeSelection:
    """
    Result of evaluating a Range header.

    start/end are inclusive, 0-indexed byte offsets and are only set for
    SINGLE.
    """

    kind: RangeKind
    start: Optional[int] = None
    end: Optional[int] = None

    @classmethod
    def none(cls) -> "RangeSelection":
        return cls(RangeKind.NONE)

    @classmethod
    def malformed(cls) -> "RangeSelection":
        return cls(RangeKind.MALFORMED)

    @classmethod
    def unsatisfiable(cls) -> "RangeSelection":
        return cls(RangeKind.UNSATISFIABLE)

    @classmethod
    def single(cls, start: int, end: int) -> "RangeSelection":
        return cls(RangeKind.SINGLE, start, end)

    @property
    def is_partial(self) -> bool:
        return self.kind is RangeKind.SINGLE

    @property
    def length(self) -> Optional[int]:
        if self.kind is not RangeKind.SINGLE:
            return None
        return self.end - self.start + 1

    def content_range(self, size: int) -> str:
        """Content-Range header value for this selection."""
        if self.kind is RangeKind.SINGLE:
            return f"bytes {self.start}-{self.end}/{size}"
        return f"bytes */{size}"

    def bounds(self, size: int) -> tuple[int, int]:
        """Inclusive (start, end) to copy; the whole file unless SINGLE."""
        if self.kind is RangeKind.SINGLE:
            return self.start, self.end
        return 0, size - 1


# "500-999", "500-", "-500" (whitespace around tokens tolerated)
_BYTE_RANGE_PATTERN = re.compile(r"^\s*(\d*)\s*-\s*(\d*)\s*$")


def parse_range(size: int, header: Optional[str]) -> RangeSelection:
    """
    Evaluate a Range header against a content length.

    Args:
        size: Total size of the entity in bytes.
        header: Raw Range header value, or None if absent.

    Returns:
        A RangeSelection; see RangeKind.

    Examples:
        >>> parse_range(10, "bytes=0-0")
        RangeSelection(kind=<RangeKind.SINGLE: 'single'>, start=0, end=0)
        >>> parse_range(10, "bytes=20-30").kind
        <RangeKind.UNSATISFIABLE: 'unsatisfiable'>
        >>> parse_range(10, "bytes=abc").kind
        <RangeKind.MALFORMED: 'malformed'>
    """
    if not header:
        return RangeSelection.none()

    unit, sep, specs = header.partition("=")
    if not sep or unit.strip().lower() != "bytes":
        return RangeSelection.malformed()

    first: Optional[RangeSelection] = None
    seen = False
    for spec in specs.split(","):
        if not spec.strip():
            continue  # "bytes=0-1," has an empty trailing element
        match = _BYTE_RANGE_PATTERN.match(spec)
        if not match:
            return RangeSelection.malformed()

        start_text, end_text = match.groups()
        if not start_text and not end_text:
            return RangeSelection.malformed()  # bare "-"

        seen = True
        if first is None:
            try:
                first = _resolve_spec(size, start_text, end_text)
            except ValueError:
                # past the interpreter's int-string digit limit
                return RangeSelection.malformed()

    if not seen:
        return RangeSelection.malformed()  # "bytes=" with no specs
    return first or RangeSelection.unsatisfiable()


def _resolve_spec(size: int, start_text: str, end_text: str) -> Optional[RangeSelection]:
    """Resolve one well-formed spec, or None if it does not fit the entity."""
    if not start_text:
        # Suffix range: the last N bytes
        suffix = int(end_text)
        if suffix == 0 or size == 0:
            return None
        start = max(size - suffix, 0)
        end = size - 1
    else:
        start = int(start_text)
        end = int(end_text) if end_text else size - 1
        if end_text and end < start:
            return None
        end = min(end, size - 1)

    if start >= size or start > end:
        return None
    return RangeSelection.single(start, end)
