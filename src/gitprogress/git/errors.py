"""Outcome classification for finished git invocations.

Remote failures are recognized from the diagnostic text, not the exit code:
git can print a rejected ref update and still exit 0, so a marker always
wins over the status.
"""

import re
from dataclasses import dataclass
from typing import Callable

from ..core.events import InvocationOutcome


class GitError(Exception):
    """Raised when a git invocation did not succeed.

    Attributes:
        outcome: The classified InvocationOutcome.
        git_args: The git arguments that were run.
    """

    def __init__(self, outcome: InvocationOutcome, args: list[str]):
        self.outcome = outcome
        self.git_args = list(args)
        command = " ".join(["git", *self.git_args]) if self.git_args else "git"
        super().__init__(f"{command}: {outcome.summary()}")

    @property
    def description(self) -> str:
        return self.outcome.description

    @property
    def exit_code(self) -> int:
        return self.outcome.exit_code


@dataclass(frozen=True)
class RemoteErrorMarker:
    """A diagnostic text pattern identifying a remote-side failure."""
    pattern: re.Pattern[str]
    describe: Callable[[re.Match[str]], str]


def _fixed(description: str) -> Callable[[re.Match[str]], str]:
    return lambda _m: description


# Ordered; first match wins. Specific markers go before generic ones.
REMOTE_ERROR_MARKERS: list[RemoteErrorMarker] = [
    RemoteErrorMarker(
        re.compile(r"GH006: Protected branch update failed"),
        _fixed("protected branch update failed"),
    ),
    RemoteErrorMarker(
        re.compile(r"!\s+\[remote rejected\]\s+\S+\s+->\s+\S+\s+\((?P<reason>[^)]+)\)"),
        lambda m: f"remote rejected ({m.group('reason')})",
    ),
    RemoteErrorMarker(
        re.compile(r"!\s+\[rejected\]\s+\S+\s+->\s+\S+\s+\((?P<reason>[^)]+)\)"),
        lambda m: f"rejected ({m.group('reason')})",
    ),
    RemoteErrorMarker(
        re.compile(r"fatal: Authentication failed for '(?P<url>[^']+)'"),
        _fixed("authentication failed"),
    ),
    RemoteErrorMarker(
        re.compile(r"fatal: could not read (?:Username|Password) for '(?P<url>[^']+)'"),
        _fixed("authentication required"),
    ),
    RemoteErrorMarker(
        re.compile(r"Permission denied \(publickey\)"),
        _fixed("permission denied (publickey)"),
    ),
    RemoteErrorMarker(
        re.compile(r"The requested URL returned error: 403"),
        _fixed("permission denied (HTTP 403)"),
    ),
    RemoteErrorMarker(
        re.compile(r"(?:ERROR: Repository not found|fatal: repository '[^']+' not found)"),
        _fixed("repository not found"),
    ),
    RemoteErrorMarker(
        re.compile(r"Could not resolve host(?:name)?:?\s+(?P<host>[\w.-]+)"),
        lambda m: f"could not resolve host {m.group('host')}",
    ),
    RemoteErrorMarker(
        re.compile(r"fatal: Could not read from remote repository"),
        _fixed("could not read from remote repository"),
    ),
]


def register_marker(pattern: str, description: str | Callable[[re.Match[str]], str]) -> RemoteErrorMarker:
    """Append a marker to the process-wide table (checked after the built-in ones).

    Every later classification in this process sees the new marker. Pass
    `markers=` to `classify_outcome` instead to scope a table to one call.
    """
    marker = make_marker(pattern, description)
    REMOTE_ERROR_MARKERS.append(marker)
    return marker


def make_marker(pattern: str, description: str | Callable[[re.Match[str]], str]) -> RemoteErrorMarker:
    describe = _fixed(description) if isinstance(description, str) else description
    return RemoteErrorMarker(re.compile(pattern), describe)


def find_remote_error(text: str, markers: list[RemoteErrorMarker] | None = None) -> str | None:
    """Return the description of the first remote-error marker in text, if any."""
    for marker in REMOTE_ERROR_MARKERS if markers is None else markers:
        m = marker.pattern.search(text)
        if m:
            return marker.describe(m)
    return None


def classify_outcome(
    exit_code: int,
    stderr: str,
    success_codes: tuple[int, ...] = (0,),
    markers: list[RemoteErrorMarker] | None = None,
) -> InvocationOutcome:
    """Classify a finished invocation from its exit code and full stderr.

    1. success code and no marker -> success
    2. any remote-error marker     -> remote error, whatever the exit code
    3. anything else               -> unclassified error with the raw text

    `markers` replaces the process-wide REMOTE_ERROR_MARKERS for this call.
    """
    description = find_remote_error(stderr, markers)
    if description is None and exit_code in success_codes:
        return InvocationOutcome.success(exit_code=exit_code, raw_text=stderr)
    if description is not None:
        return InvocationOutcome.remote_error(description, exit_code=exit_code, raw_text=stderr)
    return InvocationOutcome.unclassified_error(exit_code=exit_code, raw_text=stderr)
