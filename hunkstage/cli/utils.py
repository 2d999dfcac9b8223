"""Shared utility functions for CLI commands."""

import asyncio
from typing import Awaitable, TypeVar

import typer

from hunkstage.models import DiffSelection, FileChange, WorkingDirectoryStatus


T = TypeVar("T")


def run(coro: Awaitable[T]) -> T:
    """Run a coroutine to completion from a synchronous command."""
    return asyncio.run(coro)


def parse_line_ranges(ranges: str) -> list[int]:
    """Parse a comma-separated list of line indices and ranges.

    Args:
        ranges: e.g. ``"0,3-5,9"``.

    Returns:
        Sorted list of unique indices.

    Raises:
        typer.BadParameter: If the ranges are malformed.
    """
    indices: set[int] = set()
    for part in ranges.split(","):
        part = part.strip()
        if not part:
            continue
        try:
            if "-" in part:
                start_text, end_text = part.split("-", 1)
                start, end = int(start_text), int(end_text)
                if start > end:
                    raise ValueError
                indices.update(range(start, end + 1))
            else:
                indices.add(int(part))
        except ValueError:
            raise typer.BadParameter(f"Invalid line range: '{part}'")
    if any(index < 0 for index in indices):
        raise typer.BadParameter("Line indices must be non-negative")
    return sorted(indices)


def selection_for_lines(lines: list[int]) -> DiffSelection:
    """Build a selection containing only the given line indices."""
    selection = DiffSelection.none()
    for index in lines:
        selection = selection.with_line_selection(index, True)
    return selection


def find_file(status: WorkingDirectoryStatus, path: str) -> FileChange:
    """Find the change record for a path in a status listing.

    Raises:
        typer.BadParameter: If the path has no changes.
    """
    for file in status.files:
        if file.path == path:
            return file
    raise typer.BadParameter(f"No changes found for '{path}'")


def describe_file(file: FileChange) -> str:
    """Format a change record as a single status line."""
    if file.old_path:
        return f"{file.status.value:<10} {file.old_path} -> {file.path}"
    return f"{file.status.value:<10} {file.path}"
