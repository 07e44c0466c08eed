"""Git process runner: spawns git and streams its stderr line by line.

stdout is drained in a background thread so a chatty command can never
fill the pipe and stall while we are blocked reading stderr. Pipes are
decoded with newline="" so the carriage returns git uses to redraw
progress in place survive into the captured text; stderr lines are split
on both.
"""

import io
import os
import subprocess
import threading
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator

import structlog

from ..core.config import get_git_env, get_git_executable
from ..core.constants import GIT_BASE_ENV

log = structlog.get_logger(__name__)

# Exit code recorded when a cancelled invocation never spawned git
NOT_STARTED = -1


@dataclass
class GitResult:
    """Result of one finished git process."""
    command: list[str] = field(default_factory=list)
    exit_code: int = 0
    stdout: str = ""
    stderr: str = ""
    duration_s: float = 0.0
    cancelled: bool = False


def _text_stream(pipe) -> io.TextIOWrapper:
    """Decode a binary pipe without translating \r or \r\n line endings."""
    return io.TextIOWrapper(pipe, encoding="utf-8", errors="replace", newline="")


def split_lines(stream) -> Iterator[tuple[str, str]]:
    """Yield (raw_chunk, line) pairs from a text stream.

    Every complete line found in a chunk is yielded; the raw chunk is passed
    along once, with the first line of the chunk, so callers can rebuild the
    unmodified text. Empty lines are dropped.
    """
    for raw in stream:
        parts = [p for p in raw.replace("\r\n", "\n").replace("\r", "\n").split("\n") if p.strip()]
        if not parts:
            yield raw, ""
            continue
        yield raw, parts[0]
        for part in parts[1:]:
            yield "", part


class GitInvocation:
    """A single git process.

    Iterate lines() to consume stderr as it arrives; once the iterator is
    exhausted the process has exited and `result` is set.
    """

    def __init__(self, args: list[str], repo_path: Path, config: dict, name: str = "git"):
        self.args = list(args)
        self.repo_path = Path(repo_path)
        self.config = config
        self.name = name
        self.result: GitResult | None = None
        self._proc: subprocess.Popen | None = None
        self._cancel_event = threading.Event()

    @property
    def cancelled(self) -> bool:
        return self._cancel_event.is_set()

    def command(self) -> list[str]:
        return [get_git_executable(self.config), *self.args]

    def cancel(self) -> None:
        """Terminate the running process; no further lines are yielded."""
        self._cancel_event.set()
        proc = self._proc
        if proc is not None:
            try:
                proc.terminate()
            except OSError:
                pass

    def lines(self) -> Iterator[str]:
        cmd = self.command()
        env = {**os.environ, **GIT_BASE_ENV, **get_git_env(self.config)}

        t0 = time.time()
        if self._cancel_event.is_set():
            # Cancelled before spawning: git never runs
            self.result = GitResult(
                command=[str(c) for c in cmd], exit_code=NOT_STARTED, cancelled=True,
            )
            log.info("git skipped", name=self.name, cancelled=True)
            return

        log.info("git started", name=self.name, args=self.args, cwd=str(self.repo_path))
        proc = subprocess.Popen(
            cmd, cwd=str(self.repo_path), env=env,
            stdout=subprocess.PIPE, stderr=subprocess.PIPE,
        )
        self._proc = proc
        if self._cancel_event.is_set():
            # cancel() may have run before _proc was visible to it
            proc.terminate()

        stdout = _text_stream(proc.stdout)
        stderr = _text_stream(proc.stderr)
        stdout_chunks: list[str] = []

        def _reader():
            for chunk in iter(stdout.readline, ""):
                stdout_chunks.append(chunk)

        reader_thread = threading.Thread(target=_reader, daemon=True)
        reader_thread.start()

        stderr_chunks: list[str] = []
        drained = False
        try:
            for raw, line in split_lines(stderr):
                stderr_chunks.append(raw)
                # Keep draining after a cancel so the raw text is complete
                if line and not self._cancel_event.is_set():
                    yield line
            drained = True
        finally:
            if not drained and proc.poll() is None:
                # Consumer stopped early (close(), task cancel, interrupt)
                log.info("git abandoned", name=self.name)
                proc.terminate()
            proc.wait()
            reader_thread.join(timeout=5)
            self._proc = None

        self.result = GitResult(
            command=[str(c) for c in cmd],
            exit_code=proc.returncode,
            stdout="".join(stdout_chunks),
            stderr="".join(stderr_chunks),
            duration_s=round(time.time() - t0, 2),
            cancelled=self._cancel_event.is_set(),
        )
        log.info(
            "git finished", name=self.name, exit_code=self.result.exit_code,
            duration_s=self.result.duration_s, cancelled=self.result.cancelled,
        )

    def run(self) -> GitResult:
        """Run to completion without looking at progress."""
        for _ in self.lines():
            pass
        assert self.result is not None
        return self.result
