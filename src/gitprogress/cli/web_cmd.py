"""gitprogress web — Start the progress streaming server."""

import typer
from rich.console import Console

from ..core.config import load_defaults

console = Console()


def web(
    port: int = typer.Option(
        None,
        "--port",
        help="HTTP port (defaults to web.port in config)",
    ),
    host: str = typer.Option(
        None,
        "--host",
        help="Host to bind to (defaults to web.host in config)",
    ),
) -> None:
    """Start the gitprogress web server (FastAPI + SSE)."""
    import uvicorn

    web_cfg = load_defaults().get("web", {})
    host = host or web_cfg.get("host", "127.0.0.1")
    port = port or int(web_cfg.get("port", 8000))

    console.print("[bold]Starting gitprogress server[/bold]")
    console.print(f"URL: http://{host}:{port}")
    console.print()

    uvicorn.run(
        "gitprogress.web.app:app",
        host=host,
        port=port,
        reload=False,
    )
