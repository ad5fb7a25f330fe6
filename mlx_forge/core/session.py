from typing import Optional

from rich.console import Console

from mlx_forge.api import MLXForgeAPI
from mlx_forge.config import ConfigManager
from mlx_forge.interpreter import parse_interpreter
from mlx_forge.state import LogEntry, SessionState


def open_session(python_path: Optional[str] = None, config: Optional[ConfigManager] = None) -> MLXForgeAPI:
    """
    Build an API session from the global configuration, with an optional interpreter override.
    """
    config = config or ConfigManager()
    interpreter = parse_interpreter(python_path) if python_path else config.interpreter()
    return MLXForgeAPI(state=SessionState(interpreter=interpreter), config=config)


def attach_log_printer(api: MLXForgeAPI, console: Console):
    """
    Echo the operation log to the console as it grows. Error chunks are printed in red.
    """

    def listener(event, payload):
        if event == "log_reset":
            console.print(payload, end="", markup=False, highlight=False)
        elif event == "log_append" and isinstance(payload, LogEntry):
            console.print(payload.text, end="", style="red" if payload.error else None, markup=False, highlight=False)

    api.state.subscribe(listener)
    return listener
