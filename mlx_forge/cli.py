import typer

from mlx_forge import __version__
from mlx_forge.utils import setup_logging

EXAMPLES = """
[bold cyan]Examples:[/bold cyan]
  mlxforge check
  mlxforge check --python ~/envs/mlx/.venv/bin/python3
  mlxforge setup ~/envs/mlx
  mlxforge convert mistralai/Mistral-7B-v0.1 --quant 4bit
  mlxforge convert mistralai/Mistral-7B-v0.1 --upload --upload-repo me/Mistral-7B-v0.1-mlx
  mlxforge install-command
  mlxforge config set python_path /usr/local/bin/python3
"""

# CLI app
app = typer.Typer(
    help=f"""
{EXAMPLES}
[bold]MLX Forge[/bold] - convert and upload Hugging Face models with mlx-lm

Checks that a Python interpreter has [green]mlx[/green] and [green]mlx-lm[/green] installed,
sets up a virtual environment for it when needed, and runs
[green]python -m mlx_lm convert[/green] with a live log.
""",
    rich_markup_mode="rich",
    add_completion=False,
    no_args_is_help=True,
)


def version_callback(value: bool):
    if value:
        typer.echo(f"mlxforge version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None, "--version", callback=version_callback, is_eager=True, help="Show the tool version and exit."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
):
    setup_logging(verbose)


# Subcommand registration
from mlx_forge.commands import check, config, convert, install, setup  # noqa: E402

app.command()(check.check)
app.command()(setup.setup)
app.command()(convert.convert)
app.command("install-command")(install.install_command)
app.add_typer(config.app, name="config")

if __name__ == "__main__":
    app()
