"""Partial staging through ``git apply``.

Contains:
- apply_patch_to_index: Stage the selected lines of a file change
- reset_index_entry: Put a file's index entry back to HEAD
- restore_rename_in_index: Recreate a rename in a freshly reset index
"""

from dataclasses import replace
from pathlib import Path
from typing import Optional, Union

from hunkstage.exceptions import GitError, UnsupportedDiffKindError
from hunkstage.git.diff import get_working_directory_diff
from hunkstage.git.runner import ExecutionOptions, execute
from hunkstage.models import DiffKind, FileChange, FileStatus
from hunkstage.patch import format_patch
from hunkstage.logging import get_logger


logger = get_logger(__name__)

APPLY_ARGS = ["apply", "--cached", "--unidiff-zero", "--whitespace=nowarn", "-"]


async def restore_rename_in_index(
    path: Union[str, Path],
    file: FileChange,
    options: Optional[ExecutionOptions] = None,
) -> None:
    """Recreate a rename in the index, the equivalent of ``git mv``.

    The removal of the old path is staged, then the old path's blob from
    HEAD is registered under the new path so that a patch can be applied
    to it.

    Args:
        path: Path to the repository.
        file: A renamed file change.
        options: Optional execution options.

    Raises:
        GitError: If the old path is not present in HEAD.
    """
    logger.info("Restoring rename in index", old_path=file.old_path, path=file.path)

    # git add rather than update-index --force-remove: the old path may have
    # been recreated in the working directory after the rename was staged
    await execute(["add", "--update", "--", file.old_path], path, "apply_patch_to_index", options)

    # <mode> SP <type> SP <object> TAB <file>
    result = await execute(["ls-tree", "HEAD", "--", file.old_path], path, "apply_patch_to_index", options)
    entry = result.stdout.strip()
    if not entry:
        raise GitError(f"Unable to find '{file.old_path}' in HEAD to restore rename")

    info = entry.split("\t", 1)[0]
    mode, _, oid = info.split(" ", 2)

    await execute(
        ["update-index", "--add", "--cacheinfo", mode, oid, file.path],
        path,
        "apply_patch_to_index",
        options,
    )


async def apply_patch_to_index(
    path: Union[str, Path],
    file: FileChange,
    options: Optional[ExecutionOptions] = None,
) -> bool:
    """Stage the selected lines of a file change.

    The file's diff is fetched, narrowed to ``file.selection`` and piped to
    ``git apply --cached``. Renames are recreated in the index first.

    The diff is taken against HEAD (against the index for renames), so the
    file's index entry must not hold staged changes already; see
    ``reset_index_entry``.

    Args:
        path: Path to the repository.
        file: The file change, carrying the lines to stage.
        options: Optional execution options.

    Returns:
        True if a patch was applied, False if no change was selected.

    Raises:
        UnsupportedDiffKindError: If the file's diff is not a text diff.
        GitCommandError: If a git command fails.
    """
    # stdin belongs to the final apply only
    base = replace(options or ExecutionOptions(), stdin=None)

    if file.status is FileStatus.RENAMED and file.old_path:
        await restore_rename_in_index(path, file, base)

    diff = await get_working_directory_diff(path, file, base)
    if diff.kind is not DiffKind.TEXT:
        raise UnsupportedDiffKindError(f"Unexpected diff result returned: '{diff.kind.value}'")

    patch = format_patch(file, diff.with_selection(file.selection))
    if not patch:
        logger.info("No selected changes to stage", path=file.path)
        return False

    await execute(APPLY_ARGS, path, "apply_patch_to_index", base.merged(ExecutionOptions(stdin=patch)))
    return True


async def reset_index_entry(
    path: Union[str, Path],
    file: FileChange,
    options: Optional[ExecutionOptions] = None,
) -> None:
    """Discard whatever is staged for a file, the equivalent of ``git reset -- <path>``.

    Renames reset both the new and the old path. Afterwards the index holds
    HEAD's version of the file (or nothing for a new file), which is what
    ``apply_patch_to_index`` patches against.

    Args:
        path: Path to the repository.
        file: The file change to unstage.
        options: Optional execution options.
    """
    paths = [file.path]
    if file.old_path:
        paths.append(file.old_path)

    logger.info("Resetting index entry", paths=paths)
    await execute(["reset", "-q", "--", *paths], path, "reset_index_entry", options)
