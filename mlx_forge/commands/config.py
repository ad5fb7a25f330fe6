import typer

from mlx_forge.core.config import manage_config

app = typer.Typer(help="Manage global configuration.")


@app.command()
def show():
    """Show all configuration values."""
    result = manage_config("show", None, None)
    for k, v in result.items():
        typer.echo(f"{k}: {v}")


@app.command()
def get(key: str = typer.Argument(..., help="Config key to get.")):
    """Get a configuration value by key."""
    result = manage_config("get", key, None)
    typer.echo(str(result))


@app.command()
def set(
    key: str = typer.Argument(..., help="Config key to set."), value: str = typer.Argument(..., help="Value to set.")
):
    """Set a configuration value."""
    result = manage_config("set", key, value)
    typer.echo(str(result))
