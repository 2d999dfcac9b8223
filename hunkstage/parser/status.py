"""Status parser for hunkstage.

Contains functions for parsing ``git status --porcelain=v1 -b -z`` output:
- parse_status: Parse NUL-delimited porcelain output into a WorkingDirectoryStatus
- map_status_code: Map a two-character porcelain code to a FileStatus
- _parse_branch_header: Parse the ``## branch...upstream`` record
"""

import re
from typing import Optional

from hunkstage.exceptions import MalformedRecordError
from hunkstage.models import BranchInfo, FileChange, FileStatus, WorkingDirectoryStatus


# Unmerged combinations reported while a merge is in progress
CONFLICT_CODES = frozenset({"DD", "AU", "UD", "UA", "DU", "AA", "UU"})

_CODE_TO_STATUS = {
    "A": FileStatus.NEW,
    "M": FileStatus.MODIFIED,
    "T": FileStatus.MODIFIED,  # type change (e.g. file -> symlink)
    "D": FileStatus.DELETED,
    "R": FileStatus.RENAMED,
    "C": FileStatus.COPIED,
}

# Format: ## main...origin/main [ahead 1, behind 2]
_BRANCH_RE = re.compile(
    r"^(?P<name>.+?)"
    r"(?:\.\.\.(?P<upstream>\S+))?"
    r"(?: \[(?P<tracking>[^\]]*)\])?$"
)
_AHEAD_RE = re.compile(r"ahead (\d+)")
_BEHIND_RE = re.compile(r"behind (\d+)")


def map_status_code(code: str) -> FileStatus:
    """Map a two-character porcelain status code to a FileStatus.

    Untracked files are reported as NEW. The index column wins over the
    worktree column. Anything not recognized is reported as CONFLICTED so
    that no record is ever dropped.

    Args:
        code: The XY code of a porcelain record.

    Returns:
        The FileStatus for the code.
    """
    if code in CONFLICT_CODES:
        return FileStatus.CONFLICTED
    if code == "??":
        return FileStatus.NEW

    index_code, worktree_code = code[0], code[1]
    effective = index_code if index_code != " " else worktree_code
    return _CODE_TO_STATUS.get(effective, FileStatus.CONFLICTED)


def _is_copy_or_rename(code: str) -> bool:
    return "R" in code or "C" in code


def _parse_branch_header(header: str) -> BranchInfo:
    """Parse the text after ``## `` in a porcelain branch record.

    Args:
        header: Branch header text, e.g. ``main...origin/main [ahead 1]``.

    Returns:
        BranchInfo describing the current branch.
    """
    # Unborn branch in a fresh repository
    for prefix in ("No commits yet on ", "Initial commit on "):
        if header.startswith(prefix):
            return BranchInfo(name=header[len(prefix):])

    if header.startswith("HEAD (no branch)"):
        return BranchInfo(name=None)

    match = _BRANCH_RE.match(header)
    if not match:
        raise MalformedRecordError(f"Malformed branch header: '{header}'")

    tracking = match.group("tracking") or ""
    ahead = _AHEAD_RE.search(tracking)
    behind = _BEHIND_RE.search(tracking)

    return BranchInfo(
        name=match.group("name"),
        upstream=match.group("upstream"),
        ahead=int(ahead.group(1)) if ahead else 0,
        behind=int(behind.group(1)) if behind else 0,
    )


def parse_status(raw_text: str, limit: Optional[int] = None) -> WorkingDirectoryStatus:
    """Parse ``git status --porcelain=v1 -z`` output.

    Each record is ``XY path`` terminated by NUL. Rename and copy records
    are followed by one more NUL-terminated field holding the source path.
    An optional leading ``## ...`` record describes the branch.

    Args:
        raw_text: Raw NUL-delimited status output.
        limit: Maximum number of file records to keep. When more records
            exist, the first ``limit`` are kept and the result is marked
            incomplete.

    Returns:
        WorkingDirectoryStatus with files in report order.

    Raises:
        MalformedRecordError: If a record does not match the expected shape.
    """
    if limit is not None and limit < 0:
        raise ValueError(f"limit must be non-negative, got {limit}")

    fields = raw_text.split("\0")
    files: list[FileChange] = []
    branch: Optional[BranchInfo] = None
    incomplete = False

    i = 0
    while i < len(fields):
        record = fields[i]
        i += 1

        # Trailing terminator and stray newlines between records
        if not record.strip("\n"):
            continue
        record = record.lstrip("\n")

        if record.startswith("## "):
            branch = _parse_branch_header(record[3:].rstrip("\n"))
            continue

        if limit is not None and len(files) >= limit:
            incomplete = True
            break

        if len(record) < 4 or record[2] != " ":
            raise MalformedRecordError(f"Malformed status record: '{record}'")

        code = record[:2]
        path = record[3:]
        old_path = None

        if _is_copy_or_rename(code):
            if i >= len(fields) or not fields[i]:
                raise MalformedRecordError(
                    f"Status record '{record}' is missing its source path"
                )
            old_path = fields[i]
            i += 1

        status = map_status_code(code)
        if status not in (FileStatus.RENAMED, FileStatus.COPIED):
            # e.g. an unmerged record that also carries a source path
            old_path = None

        files.append(FileChange(path=path, status=status, old_path=old_path))

    return WorkingDirectoryStatus(files=tuple(files), incomplete=incomplete, branch=branch)
