"""Git diff command.

Contains:
- get_working_directory_diff: Get the diff of a changed file
- build_diff_args: Build the ``git diff`` arguments for a file change
"""

from pathlib import Path
from typing import Optional, Union

from hunkstage.config import load_config
from hunkstage.git.runner import ExecutionOptions, execute
from hunkstage.models import Diff, DiffKind, FileChange, FileStatus
from hunkstage.parser.diff import parse_diff


_DIFF_FLAGS = ["--no-ext-diff", "--no-color"]


def build_diff_args(file: FileChange) -> list[str]:
    """Build the ``git diff`` arguments for a file change.

    New files are compared against /dev/null since they are not in the
    index. Renamed files are compared against the index, which holds the
    old content under the new name. Everything else is compared to HEAD.

    Args:
        file: The file change to diff.

    Returns:
        List of git arguments.
    """
    if file.status is FileStatus.NEW:
        return ["diff", *_DIFF_FLAGS, "--no-index", "--", "/dev/null", file.path]
    if file.status is FileStatus.RENAMED:
        return ["diff", *_DIFF_FLAGS, "--", file.path]
    return ["diff", "HEAD", *_DIFF_FLAGS, "--", file.path]


async def get_working_directory_diff(
    path: Union[str, Path],
    file: FileChange,
    options: Optional[ExecutionOptions] = None,
) -> Diff:
    """Get the diff between the working directory and the repository for a file.

    Args:
        path: Path to the repository.
        file: The file change to diff.
        options: Optional execution options.

    Returns:
        The parsed Diff. A deleted file without any content yields DELETED.
    """
    diff_options = options
    if file.status is FileStatus.NEW:
        # --no-index exits with 1 when the files differ
        no_index = ExecutionOptions(expected_exit_codes=frozenset({0, 1}))
        diff_options = (options or ExecutionOptions()).merged(no_index)

    result = await execute(build_diff_args(file), path, "get_working_directory_diff", diff_options)
    diff = parse_diff(result.stdout, path=file.path, max_size=load_config().max_diff_size)

    if file.status is FileStatus.DELETED and diff.kind is DiffKind.TEXT and not diff.hunks:
        return Diff(kind=DiffKind.DELETED)

    return diff
