"""
Interpreter selection and command-line resolution
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Sequence, Tuple, Union

ENV_LOOKUP_PROGRAM = "/usr/bin/env"
DEFAULT_COMMAND = "python3"
VENV_DIRNAME = ".venv"

# Configuration values that mean "let the OS find python3 on PATH"
AUTO_VALUES = ("", "auto", ENV_LOOKUP_PROGRAM)


@dataclass(frozen=True)
class SystemDefault:
    """Resolve the interpreter through an environment lookup"""

    command: str = DEFAULT_COMMAND

    def __str__(self) -> str:
        return f"{ENV_LOOKUP_PROGRAM} {self.command}"


@dataclass(frozen=True)
class Explicit:
    """An interpreter given by absolute filesystem path"""

    path: str

    def __str__(self) -> str:
        return self.path

    def exists(self) -> bool:
        return os.path.isfile(self.path)

    def is_executable(self) -> bool:
        return os.access(self.path, os.X_OK)


Interpreter = Union[SystemDefault, Explicit]


def parse_interpreter(value) -> Interpreter:
    """
    Turn a user-supplied setting into an interpreter variant.

    Args:
        value: None, one of AUTO_VALUES, an interpreter instance, or a path

    Returns:
        SystemDefault or Explicit
    """
    if isinstance(value, (SystemDefault, Explicit)):
        return value
    if value is None:
        return SystemDefault()
    text = str(value).strip()
    if text.lower() in AUTO_VALUES:
        return SystemDefault()
    return Explicit(os.path.expanduser(text))


def resolve(interpreter: Interpreter, base_arguments: Sequence[str]) -> Tuple[str, List[str]]:
    """
    Decide which executable to launch and with which argument vector.

    The default command token is prepended for environment lookup and stripped
    for explicit paths, so resolving already-resolved arguments is harmless.
    """
    if isinstance(interpreter, SystemDefault):
        arguments = list(base_arguments)
        if arguments[:1] == [interpreter.command]:
            arguments = arguments[1:]
        return ENV_LOOKUP_PROGRAM, [interpreter.command] + arguments
    arguments = list(base_arguments)
    if arguments[:1] == [DEFAULT_COMMAND]:
        arguments = arguments[1:]
    return interpreter.path, arguments


def venv_interpreter(target_directory) -> Explicit:
    """Path of the python3 inside <target_directory>/.venv"""
    return Explicit(str(Path(target_directory) / VENV_DIRNAME / "bin" / DEFAULT_COMMAND))
