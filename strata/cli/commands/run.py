from typing import Annotated

import typer
from uvicorn.importer import ImportFromStringError, import_from_string

from strata import server


def register(app: typer.Typer) -> None:
    @app.command("run")
    def run_app(
        ctx: typer.Context,
        target: str = typer.Argument(
            ...,
            help="Application to serve, as module:attribute",
        ),
        host: Annotated[
            str | None,
            typer.Option(
                "--host",
                "-h",
                help="Host to bind to. Default: server.host setting (127.0.0.1)",
                show_default=False,
            ),
        ] = None,
        port: Annotated[
            int | None,
            typer.Option(
                "--port",
                "-P",
                help="Port to bind to. Default: server.port setting (3000)",
                show_default=False,
            ),
        ] = None,
    ):
        """Serve a strata application with Uvicorn."""
        try:
            application = import_from_string(target)
        except ImportFromStringError as e:
            raise typer.BadParameter(str(e), param_hint="TARGET")
        server.run(application, host, port)
