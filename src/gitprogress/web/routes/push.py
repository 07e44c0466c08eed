"""Push routes with SSE progress streaming."""

import asyncio
import json
from dataclasses import asdict
from pathlib import Path

from fastapi import APIRouter, Request
from sse_starlette.sse import EventSourceResponse

from ...core.config import PushOptions, get_git_executable, load_repo_config
from ...git.commands import push as git_push
from ...git.commands import push_args
from ...git.runner import GitInvocation

router = APIRouter(prefix="/push", tags=["push"])

_DONE = object()


def _step(gen):
    """Advance a progress generator; returns (_DONE, outcome) once exhausted."""
    try:
        return None, next(gen)
    except StopIteration as e:
        return _DONE, e.value


async def push_events(request: Request, repo: Path, options: PushOptions, config: dict):
    """Run `git push` and yield SSE messages: progress events, then the outcome.

    Closing this generator before the outcome (client disconnect, server
    shutdown) terminates git.
    """
    try:
        get_git_executable(config)
    except (ValueError, FileNotFoundError) as e:
        yield {"event": "error", "data": json.dumps({"error": str(e)})}
        return

    invocation = GitInvocation(push_args(options), repo, config, name="push")
    gen = git_push(repo, options, config, invocation=invocation)
    stepping = False
    try:
        while True:
            if await request.is_disconnected():
                invocation.cancel()
            stepping = True
            marker, item = await asyncio.to_thread(_step, gen)
            stepping = False
            if marker is _DONE:
                yield {"event": "outcome", "data": json.dumps(asdict(item))}
                return
            yield {"event": item.kind, "data": json.dumps(asdict(item))}
    finally:
        invocation.cancel()
        # A generator running in the worker thread cannot be closed; the
        # cancel above makes it finish on its own
        if not stepping:
            gen.close()


@router.get("/{repo_path:path}/progress")
async def push_progress(
    request: Request,
    repo_path: str,
    remote: str | None = None,
    branch: str = "HEAD",
    to: str | None = None,
    set_upstream: bool | None = None,
):
    """SSE endpoint: runs `git push` and streams its progress, then the outcome."""
    repo = Path(repo_path)
    config = load_repo_config(repo)
    options = PushOptions.from_config(
        config,
        remote_name=remote,
        local_branch=branch,
        upstream_branch=to,
        set_upstream=set_upstream,
        enable_progress=True,
    )
    return EventSourceResponse(push_events(request, repo, options, config))
