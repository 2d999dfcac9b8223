"""Patch formatter for hunkstage.

Contains:
- format_patch: Build a patch for the selected lines of a file's diff
- format_file_header: Build the ---/+++ lines for a file change
- quote_path: Quote a patch path the way git does
"""

from typing import Optional

from hunkstage.exceptions import UnsupportedDiffKindError
from hunkstage.models import Diff, DiffKind, DiffLineKind, FileChange, FileStatus, Hunk
from hunkstage.parser.diff import NO_NEWLINE_MARKER


DEV_NULL = "/dev/null"

_QUOTE_ESCAPES = {
    '"': '\\"',
    "\\": "\\\\",
    "\t": "\\t",
    "\n": "\\n",
    "\r": "\\r",
    "\a": "\\a",
    "\b": "\\b",
    "\f": "\\f",
    "\v": "\\v",
}


def quote_path(prefix: str, path: str) -> str:
    """Return ``prefix + path``, C-quoted when git would quote it.

    Args:
        prefix: ``a/`` or ``b/``.
        path: Repository-relative path.

    Returns:
        The path as it must appear in a ---/+++ line.
    """
    full = prefix + path
    if not any(ch in _QUOTE_ESCAPES or ord(ch) < 0x20 or ord(ch) == 0x7F for ch in full):
        return full

    quoted = []
    for ch in full:
        if ch in _QUOTE_ESCAPES:
            quoted.append(_QUOTE_ESCAPES[ch])
        elif ord(ch) < 0x20 or ord(ch) == 0x7F:
            quoted.append(f"\\{ord(ch):03o}")
        else:
            quoted.append(ch)
    return '"' + "".join(quoted) + '"'


def _removes_whole_file(diff: Diff) -> bool:
    """Check whether every deleted line is selected and nothing else remains."""
    for line in diff.lines():
        if line.kind is DiffLineKind.CONTEXT:
            return False
        if line.kind is DiffLineKind.DELETE and not line.selected:
            return False
    return True


def format_file_header(file: FileChange, diff: Diff) -> str:
    """Build the ---/+++ lines for a file change.

    New and copied files come from /dev/null, renames use the old path on
    the ``a/`` side. A deleted file goes to /dev/null only when the patch
    removes all of its content; a partial removal is a plain modification.

    Args:
        file: The file change being patched.
        diff: The diff (with selection state) being patched.

    Returns:
        The two header lines, each terminated by a newline.
    """
    from_path: Optional[str] = file.path
    to_path: Optional[str] = file.path

    if file.status in (FileStatus.NEW, FileStatus.COPIED):
        from_path = None
    elif file.status is FileStatus.RENAMED:
        from_path = file.old_path
    elif file.status is FileStatus.DELETED and _removes_whole_file(diff):
        to_path = None

    from_text = quote_path("a/", from_path) if from_path is not None else DEV_NULL
    to_text = quote_path("b/", to_path) if to_path is not None else DEV_NULL
    return f"--- {from_text}\n+++ {to_text}\n"


def _format_hunk(hunk: Hunk, offset: int) -> Optional[tuple[str, int]]:
    """Format one hunk for the current selection.

    Args:
        hunk: The hunk with selection state on its lines.
        offset: Net number of lines added by previously emitted hunks.

    Returns:
        Tuple of (hunk text, net lines added by this hunk), or None when the
        hunk has no selected change.
    """
    body: list[str] = []
    old_count = 0
    new_count = 0
    has_selected_change = False

    for line in hunk.lines:
        if line.kind is DiffLineKind.CONTEXT:
            body.append(" " + line.text)
            old_count += 1
            new_count += 1
        elif line.selected:
            body.append(line.kind.value + line.text)
            if line.kind is DiffLineKind.ADD:
                new_count += 1
            else:
                old_count += 1
            has_selected_change = True
        elif line.kind is DiffLineKind.DELETE:
            # Unselected deletion stays in the index, so it becomes context
            body.append(" " + line.text)
            old_count += 1
            new_count += 1
        else:
            # Unselected addition never reaches the index
            continue

        if line.no_trailing_newline:
            body.append(NO_NEWLINE_MARKER)

    if not has_selected_change:
        return None

    header = hunk.header
    # First old line covered by the hunk; empty ranges point one line earlier
    first_old_line = header.old_start if header.old_length else header.old_start + 1
    old_start = first_old_line if old_count else first_old_line - 1
    new_first_line = first_old_line + offset
    new_start = new_first_line if new_count else new_first_line - 1

    lines = [f"@@ -{old_start},{old_count} +{new_start},{new_count} @@"] + body
    return "\n".join(lines) + "\n", new_count - old_count


def format_patch(file: FileChange, diff: Diff) -> str:
    """Build a patch for the selected lines of a file's diff.

    The result is meant for ``git apply --cached --unidiff-zero
    --whitespace=nowarn``. Context is kept only in hunks with a selected
    change, unselected deletions are turned into context and unselected
    additions are left out. New-side line numbers are recomputed from the
    lines actually staged by earlier hunks.

    Args:
        file: The file change being staged.
        diff: The file's diff with selection state on its lines.

    Returns:
        The patch text, or an empty string when no change is selected.

    Raises:
        UnsupportedDiffKindError: If the diff is not a text diff.
    """
    if diff.kind is not DiffKind.TEXT:
        raise UnsupportedDiffKindError(f"Unexpected diff result returned: '{diff.kind.value}'")

    hunks: list[str] = []
    offset = 0
    for hunk in diff.hunks:
        formatted = _format_hunk(hunk, offset)
        if formatted is None:
            continue
        text, delta = formatted
        hunks.append(text)
        offset += delta

    if not hunks:
        return ""

    return format_file_header(file, diff) + "".join(hunks)
