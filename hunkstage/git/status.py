"""Git status command.

Contains:
- get_status: Get the working directory status of a repository
- build_status_args: Build the ``git status`` arguments
"""

from pathlib import Path
from typing import Optional, Union

from hunkstage.config import load_config
from hunkstage.exceptions import RepositoryNotFoundError
from hunkstage.git.runner import execute
from hunkstage.models import WorkingDirectoryStatus
from hunkstage.parser.status import parse_status
from hunkstage.logging import get_logger


logger = get_logger(__name__)


def build_status_args(limit_to_gitignore: bool = False) -> list[str]:
    """Build the arguments for a machine-readable ``git status``.

    Args:
        limit_to_gitignore: When True, untracked directories are reported
            as a single entry instead of listing every file inside them.

    Returns:
        List of git arguments.
    """
    untracked = "normal" if limit_to_gitignore else "all"
    return [
        "--no-optional-locks",
        "status",
        f"--untracked-files={untracked}",
        "--branch",
        "--porcelain=v1",
        "-z",
    ]


async def get_status(
    path: Union[str, Path],
    limit_to_gitignore: bool = False,
    limit: Optional[int] = None,
) -> WorkingDirectoryStatus:
    """Get the working directory status of a repository.

    Args:
        path: Path to the repository.
        limit_to_gitignore: Collapse untracked directories into one entry.
        limit: Maximum number of files to report (defaults to the
            configured ``status_limit``).

    Returns:
        WorkingDirectoryStatus in git's report order.

    Raises:
        RepositoryNotFoundError: If the path does not exist or is not a repository.
    """
    repo = Path(path)
    if not repo.exists():
        raise RepositoryNotFoundError()

    if limit is None:
        limit = load_config().status_limit

    result = await execute(build_status_args(limit_to_gitignore), repo, "get_status")
    status = parse_status(result.stdout, limit=limit)

    if status.incomplete:
        logger.info("Status listing truncated", path=str(repo), limit=limit)

    return status
