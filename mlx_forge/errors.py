"""
Exceptions raised by the MLX Forge orchestration core
"""


class ForgeError(Exception):
    """Base exception for every failure the core reports"""

    pass


class ExecutableNotFound(ForgeError):
    """The configured interpreter does not exist (or is not executable)"""

    def __init__(self, path: str, reason: str = "not found"):
        self.path = path
        self.reason = reason
        super().__init__(f"Python executable {reason} at path: {path}")


class ExecutionFailed(ForgeError):
    """The operating system refused to start the process"""

    def __init__(self, executable: str, error: BaseException):
        self.executable = executable
        self.error = error
        super().__init__(f"Command execution failed: {error}")


class ProvisioningError(ForgeError):
    """A virtual environment setup step exited with a non-zero status"""

    step = "provisioning"

    def __init__(self, output: str):
        self.output = output
        super().__init__(f"Failed to {self.step}: {output}")


class VenvCreationFailed(ProvisioningError):
    step = "create virtual environment"


class PackageInstallationFailed(ProvisioningError):
    step = "install required packages"


class PreconditionViolation(ForgeError):
    """A request was rejected locally before any process was spawned"""

    pass
