"""gitprogress log — Show the commit history of a file."""

from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..core.config import load_repo_config
from ..git.commands import log_commit_shas
from ..git.errors import GitError

console = Console()


def log(
    path: Path = typer.Argument(
        ...,
        help="File whose history to list",
    ),
    branch: str = typer.Option(
        None,
        "--branch", "-b",
        help="Branch to query (defaults to the checked-out branch)",
    ),
    repo: Path = typer.Option(
        Path("."),
        "--repo", "-C",
        help="Repository directory",
    ),
    plain: bool = typer.Option(
        False,
        "--plain",
        help="Print one SHA per line instead of a table",
    ),
) -> None:
    """List the commits that touched a file, newest first (follows renames)."""
    config = load_repo_config(repo)
    try:
        shas = log_commit_shas(repo, path, branch=branch, config=config)
    except (GitError, ValueError, FileNotFoundError) as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(1)

    if plain:
        for sha in shas:
            console.print(sha, highlight=False)
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("#", style="dim", justify="right")
    table.add_column("Commit", style="cyan")
    for i, sha in enumerate(shas):
        label = f"{sha} (HEAD)" if i == 0 else sha
        table.add_row(str(i), label)

    console.print(table)
    console.print(f"{len(shas)} commits")
