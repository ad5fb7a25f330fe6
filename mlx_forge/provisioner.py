"""
Virtual environment provisioning: create <dir>/.venv and install mlx + mlx-lm into it
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional

from .config import PIP_PACKAGES
from .errors import PackageInstallationFailed, PreconditionViolation, VenvCreationFailed
from .interpreter import VENV_DIRNAME, Explicit, Interpreter, venv_interpreter
from .runner import ExecutionResult

logger = logging.getLogger(__name__)


@dataclass
class ProvisionResult:
    interpreter: Explicit
    venv_path: str
    steps: List[ExecutionResult] = field(default_factory=list)


class EnvironmentProvisioner:
    """
    Two strictly sequential steps, each using the buffered runner:

    1. ``<base> -m venv <dir>/.venv``
    2. ``<dir>/.venv/bin/python3 -m pip install mlx mlx-lm``

    A failed step raises and the next one is never issued.
    """

    def __init__(self, runner, packages=PIP_PACKAGES):
        self.runner = runner
        self.packages = tuple(packages)

    async def provision(
        self, base_interpreter: Interpreter, target_directory, log: Optional[Callable[[str], None]] = None
    ) -> ProvisionResult:
        log = log or (lambda text: None)
        target = Path(target_directory).expanduser()
        if not target.is_dir():
            raise PreconditionViolation(f"Directory does not exist: {target}")

        venv_path = target / VENV_DIRNAME
        python = venv_interpreter(target)
        steps = []

        log(f"Creating virtual environment using: {base_interpreter}\n")
        created = await self._step(base_interpreter, ["-m", "venv", str(venv_path)], target, log)
        steps.append(created)
        if not created.success:
            logger.error(f"Virtual environment creation failed (status {created.returncode})")
            raise VenvCreationFailed(created.output)
        log("\nVirtual environment created.\n")

        log(f"\nInstalling required packages using: {python}\n")
        installed = await self._step(python, ["-m", "pip", "install", *self.packages], target, log)
        steps.append(installed)
        if not installed.success:
            logger.error(f"Package installation failed (status {installed.returncode})")
            raise PackageInstallationFailed(installed.output)
        log("\nPackages installed successfully.\n")

        logger.info(f"Provisioned {venv_path}")
        return ProvisionResult(interpreter=python, venv_path=str(venv_path), steps=steps)

    async def _step(self, interpreter: Interpreter, arguments, cwd: Path, log) -> ExecutionResult:
        result = await self.runner.run(interpreter, arguments, cwd=str(cwd))
        log(result.output + "\n")
        return result
