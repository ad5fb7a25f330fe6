import asyncio

import typer
from rich import print as rprint

from mlx_forge.converter import ConversionRequest, QuantizationLevel
from mlx_forge.core.session import attach_log_printer, open_session
from mlx_forge.errors import ForgeError, PreconditionViolation
from mlx_forge.utils import console

DOC_INTRO = "Convert a Hugging Face model to MLX with mlx-lm, optionally quantizing and uploading it."

EXAMPLES = """
[bold cyan]Examples:[/bold cyan]
  mlxforge convert mistralai/Mistral-7B-v0.1
  mlxforge convert mistralai/Mistral-7B-v0.1 --quant 4bit
  mlxforge convert mistralai/Mistral-7B-v0.1 --quant 8bit --upload --upload-repo me/Mistral-7B-v0.1-mlx
"""


async def _check_and_convert(api, request: ConversionRequest):
    status = await api.check_environment()
    if not status.is_valid:
        return status, None
    return status, await api.run_conversion(request)


def convert(
    hf_path: str = typer.Argument(..., help="Hugging Face repo ID or local path of the source model."),
    quant: str = typer.Option(None, "--quant", "-q", help="Quantization level: none, 4bit or 8bit."),
    upload: bool = typer.Option(False, "--upload", help="Upload the converted model to the Hugging Face Hub."),
    upload_repo: str = typer.Option("", "--upload-repo", help="Destination repo ID (required with --upload)."),
    mlx_path: str = typer.Option(None, "--mlx-path", help="Directory for the converted model."),
    python: str = typer.Option(None, "--python", "-p", help="Python interpreter that has mlx-lm installed."),
):
    """
    Convert a Hugging Face model to MLX with mlx-lm, optionally quantizing and uploading it.
    """
    api = open_session(python)
    try:
        request = ConversionRequest(
            hf_path=hf_path,
            upload_repo=upload_repo or "",
            quantization=QuantizationLevel.parse(quant or api.config.quantization()),
            upload=upload,
            mlx_path=mlx_path,
        )
        request.validate()
    except PreconditionViolation as e:
        rprint(f"[red]{e}[/red]")
        raise typer.Exit(1)

    attach_log_printer(api, console)
    try:
        status, outcome = asyncio.run(_check_and_convert(api, request))
    except ForgeError as e:
        rprint(f"\n[red]{e}[/red]")
        raise typer.Exit(1)
    if outcome is None:
        console.print(status.message, style="red", markup=False, highlight=False)
        raise typer.Exit(2)
    typer.echo("")
    if not outcome.success:
        raise typer.Exit(1)


convert.__doc__ = f"{DOC_INTRO}\n\n{EXAMPLES}"
