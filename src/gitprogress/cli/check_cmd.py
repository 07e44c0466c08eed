"""gitprogress check — Verify git and show the effective configuration."""

from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape

from ..core.config import check_git, get_push_phases, load_repo_config
from ..git.progress import build_phases, unknown_titles

console = Console()


def check(
    repo: Path = typer.Option(
        Path("."),
        "--repo", "-C",
        help="Repository directory",
    ),
) -> None:
    """Check that git is available and the progress phase table is valid."""
    config = load_repo_config(repo)

    ok, msg = check_git(config)
    icon = "[green]OK[/green]" if ok else "[red]FAIL[/red]"
    console.print(f"git: {icon} {escape(msg)}")

    try:
        entries = get_push_phases(config)
        phases = build_phases(entries)
    except ValueError as e:
        console.print(f"[red]Invalid progress phases:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    console.print("\n[bold]Push phases:[/bold]")
    for phase in phases:
        console.print(f"  {phase.title}: {phase.start:.2f} - {phase.end:.2f}")

    unknown = unknown_titles(entries)
    if unknown:
        console.print(f"[yellow]Not printed by git:[/yellow] {', '.join(unknown)}")

    if not ok:
        raise typer.Exit(1)
