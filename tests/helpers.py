from mlx_forge.interpreter import resolve
from mlx_forge.runner import ExecutionResult, compose_output
from mlx_forge.validator import SUCCESS_SENTINEL


def make_result(returncode=0, stdout="", stderr="", command=None):
    command = command or ["python3"]
    return ExecutionResult(
        success=returncode == 0,
        output=compose_output(command, stdout, stderr, returncode),
        returncode=returncode,
        command=list(command),
    )


def valid_check_result():
    return make_result(0, f"Python Version: 3.11.9 (main)\n{SUCCESS_SENTINEL}\n")


class FakeRunner:
    """
    Scripted stand-in for ProcessRunner.

    Each queued response is an ExecutionResult or an exception; calls are
    recorded as (interpreter, arguments, cwd, streamed).
    """

    def __init__(self, *responses, chunks=None):
        self.responses = list(responses)
        self.chunks = list(chunks or [])
        self.calls = []

    def queue(self, *responses):
        self.responses.extend(responses)

    @property
    def call_count(self):
        return len(self.calls)

    def commands(self):
        return [resolve(interpreter, arguments) for interpreter, arguments, _, _ in self.calls]

    async def run(self, interpreter, arguments, cwd=None, on_output=None):
        self.calls.append((interpreter, list(arguments), cwd, on_output is not None))
        response = self.responses.pop(0) if self.responses else make_result(0)
        if isinstance(response, BaseException):
            raise response
        if on_output is not None:
            for chunk in self.chunks:
                on_output(chunk)
        return response


