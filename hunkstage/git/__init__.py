"""Git command layer for hunkstage.

This package provides asynchronous git commands with:
- runner: execute, ExecutionOptions, GitResult, execution_options_with_progress
- progress: GitProgressParser and the clone/checkout/fetch/push parsers
- status: get_status
- diff: get_working_directory_diff
- apply: apply_patch_to_index, reset_index_entry, restore_rename_in_index
- clone: clone, CloneOptions, CloneProgress
"""

# Runner utilities
from hunkstage.git.runner import (
    ExecutionOptions,
    GitResult,
    execute,
    execution_options_with_progress,
)

# Progress parsers
from hunkstage.git.progress import (
    CheckoutProgressParser,
    CloneProgressParser,
    FetchProgressParser,
    GitProgressParser,
    ProgressDetails,
    ProgressEvent,
    ProgressSink,
    ProgressStep,
    PushProgressParser,
)

# Commands
from hunkstage.git.status import get_status
from hunkstage.git.diff import get_working_directory_diff
from hunkstage.git.apply import apply_patch_to_index, reset_index_entry, restore_rename_in_index
from hunkstage.git.clone import CloneOptions, CloneProgress, clone


__all__ = [
    # Runner
    "ExecutionOptions",
    "GitResult",
    "execute",
    "execution_options_with_progress",
    # Progress
    "CheckoutProgressParser",
    "CloneProgressParser",
    "FetchProgressParser",
    "GitProgressParser",
    "ProgressDetails",
    "ProgressEvent",
    "ProgressSink",
    "ProgressStep",
    "PushProgressParser",
    # Commands
    "get_status",
    "get_working_directory_diff",
    "apply_patch_to_index",
    "reset_index_entry",
    "restore_rename_in_index",
    "CloneOptions",
    "CloneProgress",
    "clone",
]
