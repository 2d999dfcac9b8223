"""Diff parser for hunkstage.

Contains functions for parsing the unified diff of a single file:
- parse_diff: Parse ``git diff`` output into a Diff
- parse_hunk_header: Parse an @@ line into a HunkHeader
- _parse_hunk: Parse the body of a single hunk
"""

import re
from dataclasses import replace
from pathlib import PurePosixPath
from typing import Optional

from hunkstage.exceptions import MalformedRecordError
from hunkstage.models import Diff, DiffKind, DiffLine, DiffLineKind, Hunk, HunkHeader


NO_NEWLINE_MARKER = "\\ No newline at end of file"

IMAGE_EXTENSIONS = frozenset({
    ".png", ".jpg", ".jpeg", ".gif", ".ico", ".webp", ".bmp", ".avif", ".tif", ".tiff",
})

# Format: @@ -old_start,old_len +new_start,new_len @@ optional section heading
_HUNK_HEADER_RE = re.compile(r"^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@")

_LINE_KINDS = {
    " ": DiffLineKind.CONTEXT,
    "+": DiffLineKind.ADD,
    "-": DiffLineKind.DELETE,
}


def parse_hunk_header(line: str) -> HunkHeader:
    """Parse an @@ hunk header line.

    Args:
        line: The header line, e.g. ``@@ -10,6 +10,8 @@ def main():``.

    Returns:
        HunkHeader with the parsed ranges. A missing length means 1.

    Raises:
        MalformedRecordError: If the line is not a hunk header.
    """
    match = _HUNK_HEADER_RE.match(line)
    if not match:
        raise MalformedRecordError(f"Malformed hunk header: '{line}'")

    return HunkHeader(
        old_start=int(match.group(1)),
        old_length=int(match.group(2)) if match.group(2) is not None else 1,
        new_start=int(match.group(3)),
        new_length=int(match.group(4)) if match.group(4) is not None else 1,
    )


def _binary_kind(path: str) -> DiffKind:
    if PurePosixPath(path).suffix.lower() in IMAGE_EXTENSIONS:
        return DiffKind.IMAGE
    return DiffKind.BINARY


def _mark_no_trailing_newline(parsed: list[DiffLine]) -> None:
    if parsed:
        parsed[-1] = replace(parsed[-1], no_trailing_newline=True)


def _parse_hunk(lines: list[str], start: int) -> tuple[Hunk, int]:
    """Parse one hunk starting at its @@ line.

    Body lines are consumed according to the counts in the header.

    Args:
        lines: All lines of the diff.
        start: Index of the @@ line.

    Returns:
        Tuple of (Hunk, index of the first line after the hunk).
    """
    header = parse_hunk_header(lines[start])
    old_remaining = header.old_length
    new_remaining = header.new_length
    # Empty ranges point at the line before the change
    old_number = header.old_start if header.old_length else header.old_start + 1
    new_number = header.new_start if header.new_length else header.new_start + 1

    parsed: list[DiffLine] = []
    i = start + 1
    while i < len(lines) and (old_remaining > 0 or new_remaining > 0):
        raw = lines[i]
        if raw.startswith("\\"):
            _mark_no_trailing_newline(parsed)
            i += 1
            continue

        # Some tools strip the single space of an empty context line
        prefix = raw[:1] or " "
        kind = _LINE_KINDS.get(prefix)
        if kind is None:
            break

        if kind is DiffLineKind.CONTEXT:
            line = DiffLine(kind, raw[1:], old_line_number=old_number, new_line_number=new_number)
            old_number += 1
            new_number += 1
            old_remaining -= 1
            new_remaining -= 1
        elif kind is DiffLineKind.DELETE:
            line = DiffLine(kind, raw[1:], old_line_number=old_number)
            old_number += 1
            old_remaining -= 1
        else:
            line = DiffLine(kind, raw[1:], new_line_number=new_number)
            new_number += 1
            new_remaining -= 1

        parsed.append(line)
        i += 1

    if old_remaining != 0 or new_remaining != 0:
        raise MalformedRecordError(
            f"Hunk '{lines[start]}' does not match its body "
            f"({header.old_length - old_remaining} old, "
            f"{header.new_length - new_remaining} new lines found)"
        )

    # Marker for the final line of the hunk
    if i < len(lines) and lines[i].startswith("\\"):
        _mark_no_trailing_newline(parsed)
        i += 1

    return Hunk(header=header, lines=tuple(parsed)), i


def parse_diff(raw_text: str, path: str = "", max_size: Optional[int] = None) -> Diff:
    """Parse the unified diff of a single file.

    Args:
        raw_text: Raw output of ``git diff`` for one file.
        path: Repository-relative path, used to recognize images.
        max_size: Diffs longer than this many characters are reported as
            LARGE_TEXT without hunks.

    Returns:
        Diff with its kind and parsed hunks.

    Raises:
        MalformedRecordError: If a hunk header or body is malformed.
    """
    if max_size is not None and len(raw_text) > max_size:
        return Diff(kind=DiffKind.LARGE_TEXT)

    lines = raw_text.split("\n")
    # split() leaves an empty string after the final newline
    if lines and lines[-1] == "":
        lines.pop()

    hunks: list[Hunk] = []
    i = 0
    while i < len(lines):
        line = lines[i]
        if line.startswith("@@"):
            hunk, i = _parse_hunk(lines, i)
            hunks.append(hunk)
            continue
        if not hunks and (line.startswith("Binary files ") or line.startswith("GIT binary patch")):
            return Diff(kind=_binary_kind(path))
        i += 1

    return Diff(kind=DiffKind.TEXT, hunks=tuple(hunks))
