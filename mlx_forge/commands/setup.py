import asyncio

import typer
from rich import print as rprint

from mlx_forge.core.session import attach_log_printer, open_session
from mlx_forge.errors import ForgeError
from mlx_forge.utils import console

ARG_REQUIRED = "[bold red][required][/bold red]"


def setup(
    directory: str = typer.Argument(..., help=f"Directory in which '.venv' will be created. {ARG_REQUIRED}"),
    python: str = typer.Option(
        None, "--python", "-p", help="Base Python interpreter used to create the virtual environment."
    ),
    save: bool = typer.Option(True, "--save/--no-save", help="Store the new interpreter as python_path."),
):
    """
    Create a virtual environment and install mlx and mlx-lm into it.
    """
    api = open_session(python)
    attach_log_printer(api, console)
    try:
        result = asyncio.run(api.setup_environment(directory))
    except ForgeError as e:
        rprint(f"\n[red]Environment setup failed: {e.__class__.__name__}[/red]")
        raise typer.Exit(1)
    typer.echo("")
    if save:
        api.config.set("python_path", result.interpreter.path)
        rprint(f"[green]python_path saved:[/green] {result.interpreter.path}")
    status = api.environment
    console.print(status.message, style="green" if status.is_valid else "red", markup=False, highlight=False)
    if not status.is_valid:
        raise typer.Exit(2)
