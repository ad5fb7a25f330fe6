import asyncio

import typer
from rich import print as rprint

from mlx_forge.core.session import open_session
from mlx_forge.utils import console


def check(
    python: str = typer.Option(
        None, "--python", "-p", help="Python interpreter to check ('auto' uses /usr/bin/env python3)."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show the full diagnostic output."),
):
    """
    Check that the Python interpreter has mlx and mlx-lm installed.
    """
    api = open_session(python)
    rprint(f"[bold cyan]Python environment check:[/bold cyan] {api.state.interpreter}")
    result = asyncio.run(api.check_environment())
    if result.is_valid:
        console.print(result.message, style="green", markup=False, highlight=False)
        return
    console.print(result.message, style="red", markup=False, highlight=False)
    if verbose:
        rprint(f"[yellow][VERBOSE] Status: {result.status.value}[/yellow]")
    raise typer.Exit(2)
