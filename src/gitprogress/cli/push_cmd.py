"""gitprogress push — Push a branch with a live progress bar."""

from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, BarColumn, TextColumn, TimeElapsedColumn

from ..core.config import PushOptions, check_git, load_repo_config
from ..core.events import InvocationOutcome
from ..git.commands import push as git_push

console = Console()


def push(
    remote: str = typer.Argument(
        None,
        help="Remote to push to (defaults to push.remote in config)",
    ),
    branch: str = typer.Argument(
        "HEAD",
        help="Local branch to push",
    ),
    to: str = typer.Option(
        None,
        "--to",
        help="Remote branch name, if different from the local one",
    ),
    set_upstream: bool = typer.Option(
        None,
        "--set-upstream/--no-set-upstream",
        help="Record the remote branch as upstream",
    ),
    progress: bool = typer.Option(
        None,
        "--progress/--no-progress",
        help="Request and display git progress",
    ),
    repo: Path = typer.Option(
        Path("."),
        "--repo", "-C",
        help="Repository directory",
    ),
) -> None:
    """Push a branch to a remote, reporting progress and classifying failures."""
    config = load_repo_config(repo)

    ok, msg = check_git(config)
    if not ok:
        console.print(f"[red]git not available:[/red] {escape(msg)}")
        raise typer.Exit(1)

    options = PushOptions.from_config(
        config,
        remote_name=remote,
        local_branch=branch,
        upstream_branch=to,
        set_upstream=set_upstream,
        enable_progress=progress,
    )

    console.print(f"[bold]Pushing {options.refspec} to {options.remote_name}[/bold]")

    gen = git_push(repo, options, config)
    outcome: InvocationOutcome | None = None

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TextColumn("[progress.percentage]{task.percentage:>3.0f}%"),
        TimeElapsedColumn(),
        console=console,
        disable=not options.enable_progress,
    ) as bar:
        task = bar.add_task(f"Pushing to {options.remote_name}", total=1.0)
        try:
            while True:
                event = next(gen)
                bar.update(task, completed=event.percent, description=event.title)
        except StopIteration as e:
            outcome = e.value

    _report(outcome)


def _report(outcome: InvocationOutcome) -> None:
    if outcome.succeeded:
        console.print("[green]Push completed[/green]")
        return

    console.print(f"[red]Push failed:[/red] {escape(outcome.summary())}")
    if outcome.raw_text:
        console.print(f"[dim]{escape(outcome.raw_text.strip()[-2000:])}[/dim]")
    raise typer.Exit(1)
