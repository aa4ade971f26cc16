"""CLI command for running the benchmark service.

Usage:
    workmem serve
    workmem serve --port 8082 --host 0.0.0.0
    workmem serve --log-level debug
"""

from __future__ import annotations

import typer

from workmem.cli.settings import settings_or_exit

app = typer.Typer(help="Run the benchmark HTTP service")


@app.callback(invoke_without_command=True)
def serve(
    host: str | None = typer.Option(
        None,
        "--host",
        "-h",
        help="Host to bind to (default: from LISTEN_ADDR)",
    ),
    port: int | None = typer.Option(
        None,
        "--port",
        "-p",
        help="Port to listen on (default: from LISTEN_ADDR)",
    ),
    log_level: str = typer.Option(
        "info",
        "--log-level",
        "-l",
        help="Log level: debug, info, warning, error",
    ),
    access_log: bool = typer.Option(
        False,
        "--access-log/--no-access-log",
        help="Enable/disable access logging",
    ),
) -> None:
    """Run the benchmark service.

    Starts uvicorn with the FastAPI application factory. Configuration is
    validated first so a bad environment fails before binding the port.
    """
    import uvicorn

    settings = settings_or_exit()
    bind_host = host or settings.host
    bind_port = port or settings.port

    typer.echo("Starting workmem-bench server...")
    typer.echo(f"  Listen: {bind_host}:{bind_port}")
    typer.echo(f"  Low work_mem: {settings.degraded_work_mem}")
    typer.echo(f"  Log level: {log_level}")
    typer.echo()

    uvicorn.run(
        app="workmem.api.app:create_app",
        factory=True,
        host=bind_host,
        port=bind_port,
        log_level=log_level.lower(),
        access_log=access_log,
    )
