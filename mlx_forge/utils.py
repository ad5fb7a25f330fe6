"""
Shared helpers for the command-line front-end and the core
"""

import logging
import shlex
from typing import Sequence

from rich.console import Console

console = Console()

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"


def format_command(command: Sequence[str]) -> str:
    """Render an argument vector the way a shell user would type it"""
    return " ".join(shlex.quote(str(part)) for part in command)


def setup_logging(verbose: bool = False):
    """Configure root logging for CLI runs"""
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING, format=LOG_FORMAT)
