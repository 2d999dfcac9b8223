"""Exception classes for hunkstage.

Contains all exception classes for git operations:
- GitError: Base exception for git-related errors
- RepositoryNotFoundError: Raised when a path is not a usable repository
- MalformedRecordError: Raised when git output does not match its format
- UnsupportedDiffKindError: Raised when a non-text diff is patched
- GitCommandError: Raised when git exits with an unexpected code
"""

from typing import Optional


REPOSITORY_NOT_FOUND_MESSAGE = "Unable to find path to repository on disk."


class GitError(Exception):
    """Custom exception for git-related errors."""

    pass


class RepositoryNotFoundError(GitError):
    """Raised when the target path does not resolve to a repository."""

    def __init__(self, message: str = REPOSITORY_NOT_FOUND_MESSAGE):
        super().__init__(message)


class MalformedRecordError(GitError):
    """Raised when status or diff text does not match the expected shape."""

    pass


class UnsupportedDiffKindError(GitError):
    """Raised when a patch is requested for a diff that is not plain text."""

    pass


class GitCommandError(GitError):
    """Raised when a git process exits with an unexpected code."""

    def __init__(
        self,
        args: list[str],
        exit_code: Optional[int],
        stderr: str,
    ):
        self.args_list = list(args)
        self.exit_code = exit_code
        self.stderr = stderr
        message = f"Git command failed: git {' '.join(args)}"
        if stderr.strip():
            message += f"\n{stderr.strip()}"
        super().__init__(message)
