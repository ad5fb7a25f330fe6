"""
MLX Forge - session API owning the active operation, its flags and its transcript
"""

import logging
from dataclasses import dataclass
from typing import Optional

from .config import ConfigManager
from .converter import ConversionRequest
from .errors import ForgeError, PreconditionViolation
from .interpreter import Interpreter, parse_interpreter
from .provisioner import EnvironmentProvisioner, ProvisionResult
from .runner import OutputChunk, ProcessRunner
from .state import SessionState
from .validator import EnvironmentCheck, EnvironmentValidator

logger = logging.getLogger(__name__)


@dataclass
class ConversionOutcome:
    success: bool
    returncode: int
    output: str
    error: Optional[str] = None


class MLXForgeAPI:
    """
    Single owner of the in-flight operation.

    Conversion and provisioning are mutually exclusive. The claim on the
    operation slot is taken synchronously, before any await or dispatch; the
    ``is_running`` and ``is_setting_up`` session flags only publish it and are
    cleared on every exit path.
    """

    def __init__(self, runner=None, state: Optional[SessionState] = None, config: Optional[ConfigManager] = None):
        self.config = config
        self.runner = runner or ProcessRunner()
        if state is None:
            interpreter = config.interpreter() if config is not None else None
            state = SessionState(interpreter=interpreter)
        self.state = state
        self.validator = EnvironmentValidator(self.runner, on_status=self.state.set_environment)
        self.provisioner = EnvironmentProvisioner(self.runner)
        self._active: Optional[str] = None

    @property
    def busy(self) -> bool:
        return self._active is not None or self.state.busy

    @property
    def environment(self) -> EnvironmentCheck:
        return self.validator.status

    def _claim(self, operation: str):
        if self.busy:
            logger.warning(f"Rejected {operation}: {self._active or 'another operation'} is in progress")
            raise PreconditionViolation("Another operation is already in progress.")
        self._active = operation

    def _release(self):
        self._active = None

    async def check_environment(self, interpreter=None) -> EnvironmentCheck:
        if interpreter is not None:
            self.state.set_interpreter(parse_interpreter(interpreter))
        check = await self.validator.check(self.state.interpreter)
        if check.launch_error:
            self.state.append_log(f"\n\nError: {check.launch_error}\n", error=True)
        return check

    async def setup_environment(self, directory, base_interpreter=None) -> ProvisionResult:
        self._claim("environment setup")
        try:
            base: Interpreter = (
                parse_interpreter(base_interpreter) if base_interpreter is not None else self.state.interpreter
            )
            self.state.set_setting_up(True)
            try:
                self.state.reset_log(f"Starting Python environment setup in: {directory}\n")
                try:
                    result = await self.provisioner.provision(base, directory, log=self.state.append_log)
                except ForgeError as e:
                    self.state.append_log(f"\n\nError: {e}\n", error=True)
                    self.state.append_log(
                        "\nEnvironment setup failed. Please check the logs and ensure your base Python path is correct.\n"
                    )
                    raise
                self.state.append_log(f"\nSetup complete! Python path updated to: {result.interpreter}\n")
                self.state.set_interpreter(result.interpreter)
            finally:
                self.state.set_setting_up(False)
        finally:
            self._release()
        await self.check_environment(result.interpreter)
        return result

    def _reject(self, message: str):
        logger.warning(message)
        self.state.reset_log(message)
        raise PreconditionViolation(message)

    async def run_conversion(self, request: ConversionRequest) -> ConversionOutcome:
        # A busy rejection leaves the active operation's transcript alone
        self._claim("conversion")
        try:
            if not self.validator.status.is_valid:
                self._reject(
                    f"Cannot run conversion, Python environment is not valid.\n{self.validator.status.message}"
                )
            try:
                request.validate()
            except PreconditionViolation as e:
                self._reject(str(e))
            return await self._convert(request)
        finally:
            self._release()

    async def _convert(self, request: ConversionRequest) -> ConversionOutcome:
        def on_output(chunk: OutputChunk):
            self.state.append_log(chunk.text, error=chunk.is_error)

        self.state.set_running(True)
        try:
            self.state.reset_log(f"Starting {request.description}...\n")
            try:
                result = await self.runner.run(self.state.interpreter, request.arguments(), on_output=on_output)
            except ForgeError as e:
                logger.error(f"Conversion could not start: {e}")
                self.state.append_log(f"\n\nError: {e}", error=True)
                raise
            if result.success:
                self.state.append_log(f"\n\n{request.description.capitalize()} Successful!")
                return ConversionOutcome(True, result.returncode, result.output)
            error = f"{request.description.capitalize()} failed with exit code {result.returncode}."
            self.state.append_log(f"\n\n{error}", error=True)
            return ConversionOutcome(False, result.returncode, result.output, error)
        finally:
            self.state.set_running(False)
