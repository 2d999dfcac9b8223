"""CLI commands for status inspection, staging and cloning."""

from pathlib import Path
from typing import Optional

import typer

from hunkstage.exceptions import GitError
from hunkstage.git import (
    CloneOptions,
    CloneProgress,
    apply_patch_to_index,
    clone,
    get_status,
    get_working_directory_diff,
    reset_index_entry,
)
from hunkstage.models import DiffKind, DiffSelection, FileChange, FileStatus
from hunkstage.cli.utils import (
    describe_file,
    find_file,
    parse_line_ranges,
    run,
    selection_for_lines,
)


def status_command(
    path: Path = typer.Argument(
        Path("."),
        help="Path to the repository",
    ),
    limit: Optional[int] = typer.Option(
        None,
        "--limit",
        "-n",
        help="Maximum number of files to list",
    ),
    collapse_untracked: bool = typer.Option(
        False,
        "--collapse-untracked",
        help="Report untracked directories as a single entry",
    ),
) -> None:
    """Show the working directory status."""
    try:
        status = run(get_status(path, limit_to_gitignore=collapse_untracked, limit=limit))
    except GitError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    if status.branch and status.branch.name:
        typer.echo(f"On branch {status.branch.name}")

    if not status.files:
        typer.echo("Working directory clean.")
        return

    for file in status.files:
        typer.echo(describe_file(file))

    if status.incomplete:
        typer.echo()
        typer.echo(f"Listing truncated after {len(status.files)} file(s).")


def diff_command(
    file_path: str = typer.Argument(..., help="Repository-relative path of the file"),
    repo: Path = typer.Option(Path("."), "--repo", "-C", help="Path to the repository"),
) -> None:
    """Show a file's diff with the line indices used by 'stage --lines'."""
    try:
        file = find_file(run(get_status(repo)), file_path)
        diff = run(get_working_directory_diff(repo, file))
    except GitError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    if diff.kind is not DiffKind.TEXT:
        typer.echo(f"({diff.kind.value} diff, cannot be staged by line)")
        return

    index = 0
    for hunk in diff.hunks:
        typer.echo(str(hunk.header))
        for line in hunk.lines:
            typer.echo(f"{index:>5} {line.kind.value}{line.text}")
            index += 1


def stage_command(
    file_path: str = typer.Argument(..., help="Repository-relative path of the file"),
    repo: Path = typer.Option(Path("."), "--repo", "-C", help="Path to the repository"),
    lines: Optional[str] = typer.Option(
        None,
        "--lines",
        "-l",
        help="Line indices to stage, e.g. 0,3-5 (see 'hunkstage diff'); default is all",
    ),
) -> None:
    """Stage a file, or only some of its lines.

    The staged content of the file is replaced: --lines names every line
    that should end up staged, not lines to add to an earlier stage.
    """
    selection = selection_for_lines(parse_line_ranges(lines)) if lines is not None else None

    try:
        file, applied = run(_stage(repo, file_path, selection))
    except GitError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    if not applied:
        typer.echo(f"Error: No changes selected in {file.path}; nothing staged.", err=True)
        raise typer.Exit(1)

    typer.echo(f"Staged {file.path}")


async def _stage(
    repo: Path,
    file_path: str,
    selection: Optional[DiffSelection],
) -> tuple[FileChange, bool]:
    file = find_file(await get_status(repo), file_path)
    await reset_index_entry(repo, file)

    if file.status is not FileStatus.RENAMED:
        # The first listing compared against the old index; a file whose
        # removal was half staged shows up as modified there
        file = find_file(await get_status(repo), file_path)

    if selection is not None:
        file = file.with_selection(selection)
    return file, await apply_patch_to_index(repo, file)


def clone_command(
    url: str = typer.Argument(..., help="URL of the repository to clone"),
    dest: Path = typer.Argument(..., help="Destination directory"),
    branch: Optional[str] = typer.Option(None, "--branch", "-b", help="Branch to check out"),
) -> None:
    """Clone a repository, showing progress."""

    def show_progress(progress: CloneProgress) -> None:
        description = f" {progress.description}" if progress.description else ""
        typer.echo(f"\r[{progress.value:>3}%]{description}", nl=False, err=True)

    try:
        run(clone(url, dest, CloneOptions(branch=branch), progress_callback=show_progress))
    except GitError as e:
        typer.echo("", err=True)
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    typer.echo("", err=True)
    typer.echo(f"Cloned {url} into {dest}")
