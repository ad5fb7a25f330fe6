"""
Environment validation: does the interpreter have mlx and mlx_lm installed?
"""

import logging
import textwrap
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from .config import INSTALL_COMMAND, REQUIRED_MODULES
from .errors import ForgeError
from .interpreter import Interpreter
from .runner import ExecutionResult

logger = logging.getLogger(__name__)

SUCCESS_SENTINEL = "mlx and mlx_lm found"
VERSION_PREFIX = "Python Version:"
CHECKING_MESSAGE = "Checking Python environment..."

REMEDIATION = (
    "To fix:\n"
    "1. Open Terminal.\n"
    "2. Activate the Python environment if needed (e.g., conda activate <env>).\n"
    f"3. Run: {INSTALL_COMMAND}\n"
    "4. Run the environment check again, or let mlxforge set up a virtual environment."
)


class EnvironmentStatus(str, Enum):
    UNCHECKED = "unchecked"
    VALID = "valid"
    INVALID = "invalid"


@dataclass(frozen=True)
class EnvironmentCheck:
    status: EnvironmentStatus = EnvironmentStatus.UNCHECKED
    message: str = CHECKING_MESSAGE
    python_version: Optional[str] = None
    launch_error: Optional[str] = None

    @property
    def is_valid(self) -> bool:
        return self.status is EnvironmentStatus.VALID


def build_diagnostic_script(modules=REQUIRED_MODULES, sentinel: str = SUCCESS_SENTINEL) -> str:
    """Inline script passed with ``-c``; prints the sentinel only if every import works"""
    imports = "\n".join(f"    import {module}" for module in modules)
    script = f"""\
import sys
print(f"{VERSION_PREFIX} {{sys.version.splitlines()[0]}}")
try:
{imports}
    print("{sentinel}")
except ImportError as e:
    print(f"Import Error: {{e}}")
    sys.exit(1)
sys.exit(0)
"""
    return textwrap.dedent(script)


DIAGNOSTIC_SCRIPT = build_diagnostic_script()


def find_version_line(output: str) -> Optional[str]:
    for line in output.splitlines():
        if VERSION_PREFIX in line:
            return line.strip()
    return None


def invalid_message(reasons: List[str], details: str) -> str:
    message = "❌ Python environment requires setup:\n"
    for reason in reasons:
        message += f"   - {reason}\n"
    message += f"\nDetails:\n{details.rstrip()}\n\n{REMEDIATION}"
    return message


def interpret_result(result: ExecutionResult) -> EnvironmentCheck:
    """Valid only when the process exited 0 and printed the sentinel"""
    version = find_version_line(result.output)
    has_sentinel = SUCCESS_SENTINEL in result.output
    if result.success and has_sentinel:
        return EnvironmentCheck(
            EnvironmentStatus.VALID, f"✅ Python environment OK ({version or 'version unknown'})", version
        )
    reasons = []
    if not has_sentinel:
        reasons.append("'mlx' or 'mlx_lm' package not found.")
    if not result.success:
        reasons.append(f"Diagnostic script exited with status {result.returncode}.")
    return EnvironmentCheck(EnvironmentStatus.INVALID, invalid_message(reasons, result.output), version)


class EnvironmentValidator:
    """
    Runs the diagnostic script and keeps the latest verdict.

    ``on_status`` receives every status change, starting with the
    ``unchecked`` reset published when a check begins.
    """

    def __init__(self, runner, on_status=None):
        self.runner = runner
        self.on_status = on_status
        self._status = EnvironmentCheck()

    @property
    def status(self) -> EnvironmentCheck:
        return self._status

    def _publish(self, check: EnvironmentCheck):
        self._status = check
        if self.on_status is not None:
            self.on_status(check)

    async def check(self, interpreter: Interpreter) -> EnvironmentCheck:
        self._publish(EnvironmentCheck())
        logger.info(f"Checking Python environment: {interpreter}")
        try:
            result = await self.runner.run(interpreter, ["-c", DIAGNOSTIC_SCRIPT])
        except ForgeError as e:
            logger.warning(f"Environment check could not run: {e}")
            check = EnvironmentCheck(
                EnvironmentStatus.INVALID,
                invalid_message(["Python interpreter could not be started."], str(e)),
                launch_error=str(e),
            )
        else:
            check = interpret_result(result)
        logger.info(f"Environment status: {check.status.value}")
        self._publish(check)
        return check
