"""Git command runner.

Contains:
- ExecutionOptions: Options for a single git invocation
- GitResult: Exit code and captured output of a git invocation
- execute: Run a git command asynchronously
- execution_options_with_progress: Attach a progress parser to options
"""

import asyncio
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, Union

from hunkstage.config import load_config
from hunkstage.exceptions import GitCommandError, GitError, RepositoryNotFoundError
from hunkstage.git.progress import GitProgressParser, ProgressEvent, ProgressSink
from hunkstage.logging import get_logger


logger = get_logger(__name__)

PathLike = Union[str, Path]

_LINE_SPLIT_RE = re.compile(rb"[\r\n]")


@dataclass(frozen=True)
class ExecutionOptions:
    """Options for a single git invocation.

    Every field is optional. ``merged`` combines two option sets field by
    field, the override winning wherever it sets a value.
    """

    working_directory: Optional[Path] = None  # Overrides the positional directory
    stdin: Optional[str] = None
    progress: Optional[ProgressSink] = None
    env: Optional[dict[str, str]] = None  # Added on top of os.environ
    expected_exit_codes: Optional[frozenset[int]] = None  # None means {0}

    def merged(self, override: Optional["ExecutionOptions"]) -> "ExecutionOptions":
        if override is None:
            return self

        env = self.env
        if override.env is not None:
            env = {**(self.env or {}), **override.env}

        return ExecutionOptions(
            working_directory=(
                override.working_directory
                if override.working_directory is not None
                else self.working_directory
            ),
            stdin=override.stdin if override.stdin is not None else self.stdin,
            progress=override.progress if override.progress is not None else self.progress,
            env=env,
            expected_exit_codes=(
                override.expected_exit_codes
                if override.expected_exit_codes is not None
                else self.expected_exit_codes
            ),
        )


@dataclass(frozen=True)
class GitResult:
    """Exit code and captured output of a git invocation."""

    exit_code: int
    stdout: str
    stderr: str


def execution_options_with_progress(
    options: Optional[ExecutionOptions],
    parser: GitProgressParser,
    callback: Callable[[ProgressEvent], None],
) -> ExecutionOptions:
    """Return options that feed the command's stderr through a progress parser.

    Args:
        options: Base options (may be None).
        parser: Parser for the command's progress output.
        callback: Invoked with each parsed event, in emission order.

    Returns:
        Options with the progress sink set.
    """
    base = options or ExecutionOptions()
    return base.merged(ExecutionOptions(progress=ProgressSink(parser, callback)))


async def _drain_with_progress(stream: asyncio.StreamReader, sink: ProgressSink) -> bytes:
    """Read a stream to the end, feeding every complete line to the sink."""
    chunks: list[bytes] = []
    pending = b""
    while True:
        chunk = await stream.read(4096)
        if not chunk:
            break
        chunks.append(chunk)
        pending += chunk
        *lines, pending = _LINE_SPLIT_RE.split(pending)
        for line in lines:
            if line:
                sink.feed(line.decode("utf-8", errors="replace"))
    if pending:
        sink.feed(pending.decode("utf-8", errors="replace"))
    return b"".join(chunks)


async def _communicate(
    proc: asyncio.subprocess.Process,
    stdin: Optional[bytes],
    progress: Optional[ProgressSink],
) -> tuple[bytes, bytes]:
    if progress is None:
        return await proc.communicate(input=stdin)

    async def write_stdin() -> None:
        if proc.stdin is None:
            return
        if stdin:
            proc.stdin.write(stdin)
            await proc.stdin.drain()
        proc.stdin.close()

    tasks = [
        asyncio.ensure_future(write_stdin()),
        asyncio.ensure_future(proc.stdout.read()),
        asyncio.ensure_future(_drain_with_progress(proc.stderr, progress)),
    ]
    try:
        _, stdout, stderr = await asyncio.gather(*tasks)
    except BaseException:
        # gather() leaves the siblings of a failed task running
        for task in tasks:
            task.cancel()
        raise
    await proc.wait()
    return stdout, stderr


async def execute(
    args: list[str],
    working_directory: PathLike,
    label: str,
    options: Optional[ExecutionOptions] = None,
) -> GitResult:
    """Run a git command and return its result.

    Args:
        args: Arguments to pass to git.
        working_directory: Directory to run git in.
        label: Name of the calling operation, used in logs.
        options: Optional execution options.

    Returns:
        GitResult with the exit code and decoded output.

    Raises:
        RepositoryNotFoundError: If the directory does not exist or is not
            inside a repository.
        GitCommandError: If git exits with an unexpected code.
        GitError: If git is not installed.
    """
    options = options or ExecutionOptions()
    cwd = Path(options.working_directory or working_directory)
    if not cwd.is_dir():
        raise RepositoryNotFoundError()

    env = None
    if options.env:
        env = {**os.environ, **options.env}

    git_binary = load_config().git_binary
    stdin = options.stdin.encode("utf-8") if options.stdin is not None else None
    expected = options.expected_exit_codes or frozenset({0})

    logger.debug("Running git command", label=label, args=args, cwd=str(cwd))
    try:
        proc = await asyncio.create_subprocess_exec(
            git_binary,
            *args,
            stdin=asyncio.subprocess.PIPE if stdin is not None else asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            cwd=str(cwd),
            env=env,
        )
    except FileNotFoundError:
        raise GitError("Git is not installed or not in PATH.")

    try:
        stdout_bytes, stderr_bytes = await _communicate(proc, stdin, options.progress)
    except BaseException as e:
        # The child never outlives the call, whatever interrupted it
        if proc.returncode is None:
            logger.warning("Stopping git command", label=label, pid=proc.pid, reason=type(e).__name__)
            proc.kill()
            await proc.wait()
        raise

    result = GitResult(
        exit_code=proc.returncode,
        stdout=stdout_bytes.decode("utf-8", errors="replace"),
        stderr=stderr_bytes.decode("utf-8", errors="replace"),
    )
    logger.debug("Git command finished", label=label, exit_code=result.exit_code)

    if result.exit_code not in expected:
        logger.warning(
            "Git command failed",
            label=label,
            args=args,
            exit_code=result.exit_code,
            stderr=result.stderr.strip(),
        )
        if "not a git repository" in result.stderr.lower():
            raise RepositoryNotFoundError()
        raise GitCommandError(args, result.exit_code, result.stderr)

    return result
