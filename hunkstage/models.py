"""Data models for hunkstage.

Contains:
- FileStatus: Kind of change reported for a file
- DiffKind: Kind of diff produced for a file
- DiffLineKind: Kind of a single line inside a hunk
- DiffSelection: Per-line selection state for partial staging
- FileChange: A single changed file in the working directory
- HunkHeader: The @@ line of a hunk
- DiffLine: A single context, added or deleted line
- Hunk: A contiguous block of a diff
- Diff: The diff of a single file
- BranchInfo: Branch header reported by git status
- WorkingDirectoryStatus: Ordered working directory listing
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Iterator, Optional


class FileStatus(Enum):
    """Kind of change reported for a file."""

    NEW = "new"
    MODIFIED = "modified"
    DELETED = "deleted"
    RENAMED = "renamed"
    COPIED = "copied"
    CONFLICTED = "conflicted"


class DiffKind(Enum):
    """Kind of diff produced for a file. Only TEXT can be turned into a patch."""

    TEXT = "text"
    BINARY = "binary"
    IMAGE = "image"
    LARGE_TEXT = "large_text"
    DELETED = "deleted"


class DiffLineKind(Enum):
    """Kind of a line inside a hunk."""

    CONTEXT = " "
    ADD = "+"
    DELETE = "-"


@dataclass(frozen=True)
class DiffSelection:
    """Selection state of the lines of a diff.

    Lines are addressed by their position in the flattened line sequence of
    the diff (all hunks in order, hunk headers excluded). A line is selected
    when its index is in ``divergent`` exactly when ``default_selected`` is
    False.
    """

    default_selected: bool = True
    divergent: frozenset[int] = frozenset()

    @classmethod
    def all(cls) -> "DiffSelection":
        return cls(default_selected=True)

    @classmethod
    def none(cls) -> "DiffSelection":
        return cls(default_selected=False)

    def is_selected(self, index: int) -> bool:
        return self.default_selected != (index in self.divergent)

    def with_line_selection(self, index: int, selected: bool) -> "DiffSelection":
        return self.with_range_selection(index, 1, selected)

    def with_range_selection(self, start: int, count: int, selected: bool) -> "DiffSelection":
        """Return a copy with ``count`` lines starting at ``start`` set to ``selected``."""
        indices = set(range(start, start + count))
        if selected == self.default_selected:
            divergent = self.divergent - indices
        else:
            divergent = self.divergent | indices
        return DiffSelection(self.default_selected, frozenset(divergent))


@dataclass(frozen=True)
class FileChange:
    """A single changed file in the working directory."""

    path: str
    status: FileStatus
    old_path: Optional[str] = None  # Only for renames and copies
    selection: DiffSelection = field(default_factory=DiffSelection.all)

    def __post_init__(self) -> None:
        has_source = self.status in (FileStatus.RENAMED, FileStatus.COPIED)
        if has_source and not self.old_path:
            raise ValueError(f"{self.status.value} file '{self.path}' requires an old path")
        if not has_source and self.old_path is not None:
            raise ValueError(f"{self.status.value} file '{self.path}' cannot have an old path")

    def with_selection(self, selection: DiffSelection) -> "FileChange":
        return replace(self, selection=selection)


@dataclass(frozen=True)
class HunkHeader:
    """The @@ -old_start,old_length +new_start,new_length @@ line of a hunk."""

    old_start: int
    old_length: int
    new_start: int
    new_length: int

    def __str__(self) -> str:
        return f"@@ -{self.old_start},{self.old_length} +{self.new_start},{self.new_length} @@"


@dataclass(frozen=True)
class DiffLine:
    """A single line inside a hunk, without its +/-/space prefix."""

    kind: DiffLineKind
    text: str
    selected: bool = True
    no_trailing_newline: bool = False
    old_line_number: Optional[int] = None
    new_line_number: Optional[int] = None

    @property
    def is_change(self) -> bool:
        return self.kind is not DiffLineKind.CONTEXT


@dataclass(frozen=True)
class Hunk:
    """A contiguous block of a diff."""

    header: HunkHeader
    lines: tuple[DiffLine, ...] = ()

    def counts(self) -> tuple[int, int]:
        """Count (old, new) lines: context+deleted and context+added."""
        old_count = sum(1 for ln in self.lines if ln.kind is not DiffLineKind.ADD)
        new_count = sum(1 for ln in self.lines if ln.kind is not DiffLineKind.DELETE)
        return old_count, new_count


@dataclass(frozen=True)
class Diff:
    """The diff of a single file."""

    kind: DiffKind
    hunks: tuple[Hunk, ...] = ()

    def lines(self) -> Iterator[DiffLine]:
        for hunk in self.hunks:
            yield from hunk.lines

    def with_selection(self, selection: DiffSelection) -> "Diff":
        """Return a copy whose change lines carry the given selection state."""
        hunks = []
        index = 0
        for hunk in self.hunks:
            lines = []
            for line in hunk.lines:
                if line.is_change:
                    line = replace(line, selected=selection.is_selected(index))
                lines.append(line)
                index += 1
            hunks.append(replace(hunk, lines=tuple(lines)))
        return replace(self, hunks=tuple(hunks))


@dataclass(frozen=True)
class BranchInfo:
    """Branch header reported by ``git status -b``."""

    name: Optional[str]  # None when HEAD is detached
    upstream: Optional[str] = None
    ahead: int = 0
    behind: int = 0


@dataclass(frozen=True)
class WorkingDirectoryStatus:
    """Ordered listing of working directory changes."""

    files: tuple[FileChange, ...] = ()
    incomplete: bool = False
    branch: Optional[BranchInfo] = None
