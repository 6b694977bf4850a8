import inspect
import sys

import typer

from strata.cli import commands
from strata.cli.rich import get_console
from strata.conf import get_settings
from strata.logging import setup_logging

app = typer.Typer(
    help="strata middleware framework CLI",
    add_completion=True,
    rich_markup_mode="rich",
)

err_console = get_console(stderr=True)

for name, module in inspect.getmembers(commands):
    if not inspect.ismodule(module):
        continue

    if hasattr(module, "register"):  # pragma: no branch
        module.register(app)


@app.callback()
def main(
    ctx: typer.Context,
):
    settings = get_settings()
    setup_logging(settings, cli_mode=True)
    ctx.obj = settings


def run():
    try:
        app()
    except Exception as e:
        err_console.print(f"[bold red]Error:[/bold red] {e}")
        sys.exit(-1)
