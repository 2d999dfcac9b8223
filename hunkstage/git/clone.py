"""Git clone command.

Contains:
- CloneOptions: Options specific to cloning
- CloneProgress: Progress notification passed to clone callers
- clone: Clone a repository into a path
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, Union

from hunkstage.git.progress import CloneProgressParser, ProgressEvent
from hunkstage.git.runner import ExecutionOptions, execute, execution_options_with_progress
from hunkstage.logging import get_logger


logger = get_logger(__name__)


@dataclass(frozen=True)
class CloneOptions:
    """Additional arguments to provide when cloning a repository."""

    branch: Optional[str] = None  # Branch to check out after the clone


@dataclass(frozen=True)
class CloneProgress:
    """Progress of a clone operation."""

    kind: str
    title: str
    value: int
    description: Optional[str] = None


async def clone(
    url: str,
    path: Union[str, Path],
    clone_options: Optional[CloneOptions] = None,
    options: Optional[ExecutionOptions] = None,
    progress_callback: Optional[Callable[[CloneProgress], None]] = None,
) -> None:
    """Clone a repository from a given url into the specified path.

    Args:
        url: The remote repository URL to clone from.
        path: Destination for the clone. It is created if it does not
            exist; an existing directory must be empty.
        clone_options: Options specific to the clone operation.
        options: Optional execution options. The command runs in
            ``options.working_directory`` if set, else the current directory.
        progress_callback: Invoked with the progress of the clone. When
            provided, ``--progress`` is passed to git. It receives 0 first and
            100 once the clone has completed.

    Raises:
        GitCommandError: If the clone fails.
    """
    clone_options = clone_options or CloneOptions()
    args = ["clone", "--recursive"]
    opts = options or ExecutionOptions()
    title = f"Cloning into {path}"

    if progress_callback:
        args.append("--progress")

        def on_progress(event: ProgressEvent) -> None:
            description = event.details.text if event.kind == "progress" and event.details else event.text
            progress_callback(CloneProgress(kind="clone", title=title, value=event.percent, description=description))

        opts = execution_options_with_progress(opts, CloneProgressParser(), on_progress)

        # Initial progress
        progress_callback(CloneProgress(kind="clone", title=title, value=0))

    if clone_options.branch:
        args.extend(["-b", clone_options.branch])

    args.extend(["--", url, str(path)])

    logger.info("Cloning repository", url=url, path=str(path), branch=clone_options.branch)
    await execute(args, Path.cwd(), "clone", opts)

    if progress_callback:
        progress_callback(CloneProgress(kind="clone", title=title, value=100))
