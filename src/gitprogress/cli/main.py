"""gitprogress CLI — Typer application with subcommands."""

import typer

from ..core.logging import setup_logging
from .check_cmd import check
from .log_cmd import log
from .push_cmd import push
from .web_cmd import web

app = typer.Typer(
    name="gitprogress",
    help="Run git with structured progress and error reporting.",
    no_args_is_help=True,
)


@app.callback()
def main(
    log_level: str = typer.Option(
        None,
        "--log-level",
        help="Log level (defaults to GITPROGRESS_LOG_LEVEL or WARNING)",
    ),
) -> None:
    setup_logging(log_level)


app.command()(push)
app.command()(log)
app.command()(check)
app.command()(web)


if __name__ == "__main__":
    app()
