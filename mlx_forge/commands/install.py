import typer

from mlx_forge.config import INSTALL_COMMAND


def install_command():
    """
    Print the pip command that installs mlx and mlx-lm (for copying into a terminal).
    """
    typer.echo(INSTALL_COMMAND)
