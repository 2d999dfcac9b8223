"""Parsers for git output.

This package provides:
- status: parse_status, map_status_code
- diff: parse_diff, parse_hunk_header
"""

from hunkstage.parser.status import (
    CONFLICT_CODES,
    map_status_code,
    parse_status,
)
from hunkstage.parser.diff import (
    IMAGE_EXTENSIONS,
    NO_NEWLINE_MARKER,
    parse_diff,
    parse_hunk_header,
)


__all__ = [
    # Status
    "CONFLICT_CODES",
    "map_status_code",
    "parse_status",
    # Diff
    "IMAGE_EXTENSIONS",
    "NO_NEWLINE_MARKER",
    "parse_diff",
    "parse_hunk_header",
]
