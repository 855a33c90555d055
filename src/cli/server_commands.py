"""Development server command."""

import typer
import uvicorn

from src.library_api.runtime.context import get_config


def serve(
    host: str | None = typer.Option(None, "--host", help="Bind address (defaults to app.host)"),
    port: int | None = typer.Option(None, "--port", help="Port (defaults to app.port)"),
    reload: bool = typer.Option(False, "--reload", help="Restart on code changes"),
) -> None:
    """Run the API with uvicorn."""
    config = get_config()
    uvicorn.run(
        "src.library_api.api.http.app:app",
        host=host or config.app.host,
        port=port or config.app.port,
        reload=reload,
        access_log=False,
    )
