"""Progress parsing for long-running git commands.

Git reports progress on stderr as lines such as
``Receiving objects:  45% (450/1000)``. A parser knows the steps a command
goes through and the share of the total work each step represents, and
turns every line into a ProgressEvent with an overall percentage.

Contains:
- ProgressStep, ProgressDetails, ProgressEvent: Progress records
- GitProgressParser: Weighted step parser
- CloneProgressParser, CheckoutProgressParser, FetchProgressParser,
  PushProgressParser: Parsers for specific commands
- ProgressSink: Parser plus callback, consumed by the runner
- parse_progress_line: Parse a single ``Title: NN% (done/total)`` line
"""

import re
from dataclasses import dataclass
from typing import Callable, Optional


# Format: Receiving objects:  45% (450/1000), 1.2 MiB | 3.4 MiB/s
_PROGRESS_RE = re.compile(r"^(?P<title>.+?):\s*(?P<percent>\d{1,3})%\s*\((?P<done>\d+)/(?P<total>\d+)\)")
# Format: Counting objects: 123, done.
_COUNT_RE = re.compile(r"^(?P<title>.+?):\s*(?P<done>\d+)")


@dataclass(frozen=True)
class ProgressStep:
    """A step of a git command and its share of the total work."""

    title: str
    weight: float


@dataclass(frozen=True)
class ProgressDetails:
    """Parsed contents of a single progress line."""

    title: str
    text: str
    percent: Optional[int] = None
    done: Optional[int] = None
    total: Optional[int] = None


@dataclass(frozen=True)
class ProgressEvent:
    """A progress notification.

    ``kind`` is ``progress`` for lines that belong to a known step and
    ``context`` for any other line git printed.
    """

    kind: str
    percent: int
    text: str
    details: Optional[ProgressDetails] = None


def parse_progress_line(line: str) -> Optional[ProgressDetails]:
    """Parse a single git progress line.

    Args:
        line: A line of git's stderr output.

    Returns:
        ProgressDetails, or None if the line is not a progress line.
    """
    match = _PROGRESS_RE.match(line)
    if match:
        return ProgressDetails(
            title=match.group("title"),
            text=line,
            percent=int(match.group("percent")),
            done=int(match.group("done")),
            total=int(match.group("total")),
        )

    match = _COUNT_RE.match(line)
    if match:
        return ProgressDetails(
            title=match.group("title"),
            text=line,
            done=int(match.group("done")),
        )

    return None


class GitProgressParser:
    """Turn git progress lines into overall percentages.

    Steps are matched in order: once a step is reached, earlier steps are
    considered complete. The reported percentage never decreases.
    """

    def __init__(self, steps: list[ProgressStep]):
        total_weight = sum(step.weight for step in steps)
        if not steps or total_weight <= 0:
            raise ValueError("A progress parser needs at least one weighted step")
        # Normalize so the weights always add up to 1
        self.steps = [ProgressStep(s.title, s.weight / total_weight) for s in steps]
        self._step_index = 0
        self._last_percent = 0

    def parse(self, line: str) -> ProgressEvent:
        """Parse one line of git output.

        Args:
            line: A line of git's stderr output.

        Returns:
            ProgressEvent for the line.
        """
        details = parse_progress_line(line)
        if details is None:
            return ProgressEvent(kind="context", percent=self._last_percent, text=line)

        base = 0.0
        for index, step in enumerate(self.steps):
            if index >= self._step_index and step.title == details.title:
                self._step_index = index
                value = details.percent / 100 if details.percent is not None else 0.0
                percent = int(round((base + step.weight * value) * 100))
                self._last_percent = max(self._last_percent, min(percent, 100))
                return ProgressEvent(
                    kind="progress",
                    percent=self._last_percent,
                    text=details.text,
                    details=details,
                )
            base += step.weight

        return ProgressEvent(kind="context", percent=self._last_percent, text=line)


class CloneProgressParser(GitProgressParser):
    """Progress parser for ``git clone --progress``."""

    def __init__(self):
        super().__init__([
            ProgressStep("remote: Compressing objects", 0.1),
            ProgressStep("Receiving objects", 0.6),
            ProgressStep("Resolving deltas", 0.1),
            ProgressStep("Checking out files", 0.2),
        ])


class CheckoutProgressParser(GitProgressParser):
    """Progress parser for ``git checkout --progress``."""

    def __init__(self):
        super().__init__([
            ProgressStep("Checking out files", 1),
        ])


class FetchProgressParser(GitProgressParser):
    """Progress parser for ``git fetch --progress``."""

    def __init__(self):
        super().__init__([
            ProgressStep("remote: Compressing objects", 0.1),
            ProgressStep("Receiving objects", 0.7),
            ProgressStep("Resolving deltas", 0.2),
        ])


class PushProgressParser(GitProgressParser):
    """Progress parser for ``git push --progress``."""

    def __init__(self):
        super().__init__([
            ProgressStep("Compressing objects", 0.2),
            ProgressStep("Writing objects", 0.7),
            ProgressStep("remote: Resolving deltas", 0.1),
        ])


@dataclass(frozen=True)
class ProgressSink:
    """Receives parsed progress events for a running command.

    The parser is stateful, so a sink serves exactly one command.
    """

    parser: GitProgressParser
    callback: Callable[[ProgressEvent], None]

    def feed(self, line: str) -> None:
        self.callback(self.parser.parse(line))
