"""Git commands: push with live progress, and file history."""

import os
from contextlib import closing
from pathlib import Path
from typing import Callable

import structlog

from ..core.config import PushOptions, get_push_phases, load_repo_config
from ..core.events import InvocationOutcome, ProgressEvent, ProgressGenerator, drive
from .errors import GitError, classify_outcome
from .progress import ProgressAggregator, build_phases, unknown_titles
from .runner import GitInvocation

log = structlog.get_logger(__name__)


def push_args(options: PushOptions) -> list[str]:
    """Build the argument list for `git push`."""
    args = ["push", options.remote_name, options.refspec]
    if options.set_upstream:
        args.append("--set-upstream")
    if options.enable_progress:
        args.append("--progress")
    return args


def push(
    repo_path: Path,
    options: PushOptions | None = None,
    config: dict | None = None,
    *,
    invocation: GitInvocation | None = None,
) -> ProgressGenerator:
    """Push a branch to a remote, yielding progress events.

    Args:
        repo_path: Local clone to push from
        options: Remote, branches and flags; defaults to PushOptions()
        config: Merged config; loaded from the repository when omitted
        invocation: Pre-built GitInvocation, so callers can keep a handle
            for cancel()

    Yields:
        ProgressEvent, starting with a "start" event at 0.0 when progress is
        enabled. Nothing is yielded when it is disabled.

    Returns:
        InvocationOutcome, produced once git has exited and stderr is drained
    """
    repo_path = Path(repo_path)
    if config is None:
        config = load_repo_config(repo_path)
    if options is None:
        options = PushOptions.from_config(config)

    args = push_args(options)
    if invocation is None:
        invocation = GitInvocation(args, repo_path, config, name="push")

    aggregator = None
    if options.enable_progress:
        entries = get_push_phases(config)
        unknown = unknown_titles(entries)
        if unknown:
            log.warning("push phases not printed by git", titles=unknown)
        aggregator = ProgressAggregator(
            build_phases(entries),
            title=f"Pushing to {options.remote_name}",
            remote=options.remote_name,
            branch=options.local_branch,
        )
        yield aggregator.start()

    # Closing this generator early closes lines(), which stops git
    with closing(invocation.lines()) as lines:
        for line in lines:
            if aggregator is None:
                continue
            event = aggregator.feed(line)
            if event is not None:
                yield event

    result = invocation.result
    assert result is not None
    if result.cancelled:
        outcome = InvocationOutcome.cancelled(result.exit_code, result.stderr)
    else:
        outcome = classify_outcome(result.exit_code, result.stderr)

    if aggregator is not None and not result.cancelled:
        yield aggregator.finish(outcome.succeeded)

    log.info("push finished", remote=options.remote_name, status=outcome.status,
             description=outcome.description)
    return outcome


def run_push(
    repo_path: Path,
    options: PushOptions | None = None,
    progress_callback: Callable[[ProgressEvent], None] | None = None,
    config: dict | None = None,
) -> InvocationOutcome:
    """Push and invoke progress_callback with each event, in order."""
    return drive(push(repo_path, options, config), progress_callback)


def log_commit_shas(
    repo_path: Path,
    path: Path,
    branch: str | None = None,
    config: dict | None = None,
) -> list[str]:
    """Abbreviated commit SHAs touching a file, newest first.

    Follows renames. The first element is the most recent commit on branch
    (the checked-out branch when omitted).

    Raises:
        GitError: if git fails
    """
    repo_path = Path(repo_path)
    if config is None:
        config = load_repo_config(repo_path)

    rel = Path(path)
    if rel.is_absolute():
        rel = Path(os.path.relpath(rel, repo_path))

    args = ["log", "--follow", "--pretty=format:%h"]
    if branch:
        args.append(branch)
    args.extend(["--", rel.as_posix()])

    result = GitInvocation(args, repo_path, config, name="log").run()
    outcome = classify_outcome(result.exit_code, result.stderr)
    if not outcome.succeeded:
        raise GitError(outcome, args)

    return [line.strip().strip('"') for line in result.stdout.splitlines() if line.strip()]
