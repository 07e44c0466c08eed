"""Progress event and outcome protocol for CLI and web streaming."""

from dataclasses import dataclass
from typing import Callable, Generator

from .constants import (
    STATUS_CANCELLED,
    STATUS_REMOTE_ERROR,
    STATUS_SUCCESS,
    STATUS_UNCLASSIFIED_ERROR,
)


@dataclass
class ProgressEvent:
    """A progress update yielded by long-running git operations.

    Used by both CLI (Rich progress bars) and web (SSE streaming).
    """
    kind: str  # "start" | "progress" | "end"
    title: str
    percent: float  # 0.0 to 1.0, overall
    description: str = ""
    remote: str = ""
    branch: str = ""
    value: int | None = None  # e.g. objects written so far
    total: int | None = None


@dataclass(frozen=True)
class InvocationOutcome:
    """Terminal result of one git invocation."""
    status: str
    exit_code: int = 0
    description: str = ""
    raw_text: str = ""

    @classmethod
    def success(cls, exit_code: int = 0, raw_text: str = "") -> "InvocationOutcome":
        return cls(STATUS_SUCCESS, exit_code=exit_code, raw_text=raw_text)

    @classmethod
    def remote_error(cls, description: str, exit_code: int, raw_text: str) -> "InvocationOutcome":
        return cls(STATUS_REMOTE_ERROR, exit_code=exit_code,
                   description=description, raw_text=raw_text)

    @classmethod
    def unclassified_error(cls, exit_code: int, raw_text: str) -> "InvocationOutcome":
        return cls(STATUS_UNCLASSIFIED_ERROR, exit_code=exit_code, raw_text=raw_text)

    @classmethod
    def cancelled(cls, exit_code: int, raw_text: str) -> "InvocationOutcome":
        return cls(STATUS_CANCELLED, exit_code=exit_code,
                   description="cancelled", raw_text=raw_text)

    @property
    def succeeded(self) -> bool:
        return self.status == STATUS_SUCCESS

    def summary(self) -> str:
        """One-line human readable form, for CLI and logs."""
        if self.status == STATUS_SUCCESS:
            return "ok"
        if self.status == STATUS_REMOTE_ERROR:
            return f"remote error: {self.description}"
        if self.status == STATUS_CANCELLED:
            return "cancelled"
        return f"git exited with code {self.exit_code}"

    def raise_for_status(self, args: list[str] | None = None) -> None:
        """Raise GitError unless the invocation succeeded."""
        if not self.succeeded:
            from ..git.errors import GitError
            raise GitError(self, args or [])


# Type alias for generator functions that yield progress and return an outcome
ProgressGenerator = Generator[ProgressEvent, None, InvocationOutcome]


def drive(
    gen: ProgressGenerator,
    callback: Callable[[ProgressEvent], None] | None = None,
) -> InvocationOutcome:
    """Consume a progress generator, forwarding each event to callback in order."""
    try:
        while True:
            event = next(gen)
            if callback is not None:
                callback(event)
    except StopIteration as e:
        return e.value
