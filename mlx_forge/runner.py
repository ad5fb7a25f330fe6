"""
Asynchronous execution of a single external command
"""

import asyncio
import codecs
import logging
import os
from dataclasses import dataclass, field
from enum import Enum
from typing import AsyncIterator, Callable, Dict, List, Optional, Sequence, Tuple

from .errors import ExecutableNotFound, ExecutionFailed
from .interpreter import Explicit, Interpreter, resolve
from .utils import format_command

logger = logging.getLogger(__name__)

STDERR_HEADER = "Error Output:\n"
STATUS_LINE = "Process terminated with status: {returncode}"


class OutputStream(str, Enum):
    STDOUT = "stdout"
    STDERR = "stderr"


@dataclass(frozen=True)
class OutputChunk:
    stream: OutputStream
    text: str

    @property
    def is_error(self) -> bool:
        return self.stream is OutputStream.STDERR


@dataclass
class ExecutionResult:
    success: bool
    output: str
    returncode: int
    command: List[str] = field(default_factory=list)


OutputCallback = Callable[[OutputChunk], None]


def compose_output(command: Sequence[str], stdout: str, stderr: str, returncode: int) -> str:
    """Combined transcript: header, stdout, labelled stderr block, status line"""
    output = f"Running: {format_command(command)}\n\n"
    if stdout:
        output += stdout
    if stderr:
        if not output.endswith("\n"):
            output += "\n"
        output += STDERR_HEADER + stderr
    output += "\n" + STATUS_LINE.format(returncode=returncode)
    return output


class ProcessRunner:
    """
    Launch one child process per call and capture its output.

    Buffered calls wait for the process to exit and read both pipes; streaming
    calls (``on_output`` given) deliver chunks as soon as the OS hands them over.
    The runner keeps no state between calls.
    """

    def __init__(self, chunk_size: int = 4096, env: Optional[Dict[str, str]] = None):
        self.chunk_size = chunk_size
        self.env = env

    def prepare(self, interpreter: Interpreter, arguments: Sequence[str]) -> Tuple[str, List[str]]:
        """Resolve the command and check an explicit interpreter before spawning"""
        executable, final_arguments = resolve(interpreter, arguments)
        if isinstance(interpreter, Explicit):
            if not interpreter.exists():
                raise ExecutableNotFound(interpreter.path)
            if not interpreter.is_executable():
                raise ExecutableNotFound(interpreter.path, "not executable")
        return executable, final_arguments

    async def run(
        self,
        interpreter: Interpreter,
        arguments: Sequence[str],
        cwd: Optional[str] = None,
        on_output: Optional[OutputCallback] = None,
    ) -> ExecutionResult:
        executable, final_arguments = self.prepare(interpreter, arguments)
        command = [executable] + final_arguments
        logger.info(f"Running: {format_command(command)}")

        env = dict(self.env if self.env is not None else os.environ)
        if on_output is not None:
            env["PYTHONUNBUFFERED"] = "1"

        try:
            process = await asyncio.create_subprocess_exec(
                executable,
                *final_arguments,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=cwd,
                env=env,
            )
        except OSError as e:
            logger.error(f"Failed to start {executable}: {e}")
            raise ExecutionFailed(executable, e) from e

        try:
            if on_output is None:
                stdout, stderr = await self._collect(process)
            else:
                stdout, stderr = await self._stream(process, on_output)
        except BaseException:
            # Callback errors and cancellation must not leave the child running
            await self._terminate(process)
            raise

        returncode = process.returncode
        logger.info(f"{executable} exited with status {returncode}")
        return ExecutionResult(
            success=returncode == 0,
            output=compose_output(command, stdout, stderr, returncode),
            returncode=returncode,
            command=command,
        )

    async def _collect(self, process) -> Tuple[str, str]:
        stdout_data, stderr_data = await process.communicate()
        return stdout_data.decode("utf-8", errors="replace"), stderr_data.decode("utf-8", errors="replace")

    async def _stream(self, process, on_output: OutputCallback) -> Tuple[str, str]:
        stdout_parts: List[str] = []
        stderr_parts: List[str] = []
        chunks = self.iter_output(process)
        try:
            async for chunk in chunks:
                (stderr_parts if chunk.is_error else stdout_parts).append(chunk.text)
                on_output(chunk)
        finally:
            await chunks.aclose()
        await process.wait()
        return "".join(stdout_parts), "".join(stderr_parts)

    async def _terminate(self, process):
        if process.returncode is None:
            logger.warning(f"Killing process {process.pid}")
            try:
                process.kill()
            except ProcessLookupError:  # already exited
                pass
        await process.wait()

    async def iter_output(self, process) -> AsyncIterator[OutputChunk]:
        """
        Yield output chunks of a running process in arrival order.

        One reader task per pipe feeds a shared queue; the sequence ends once
        both pipes reach EOF.
        """
        queue: asyncio.Queue = asyncio.Queue()
        readers = [
            asyncio.ensure_future(self._pump(process.stdout, OutputStream.STDOUT, queue)),
            asyncio.ensure_future(self._pump(process.stderr, OutputStream.STDERR, queue)),
        ]
        open_streams = len(readers)
        try:
            while open_streams:
                chunk = await queue.get()
                if chunk is None:
                    open_streams -= 1
                    continue
                yield chunk
        finally:
            for reader in readers:
                if not reader.done():
                    reader.cancel()
            await asyncio.gather(*readers, return_exceptions=True)

    async def _pump(self, reader: asyncio.StreamReader, stream: OutputStream, queue: asyncio.Queue):
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        try:
            while True:
                data = await reader.read(self.chunk_size)
                if not data:
                    tail = decoder.decode(b"", final=True)
                    if tail:
                        await queue.put(OutputChunk(stream, tail))
                    break
                text = decoder.decode(data)
                if text:
                    logger.debug(f"[{stream.value}] {len(text)} chars")
                    await queue.put(OutputChunk(stream, text))
        finally:
            await queue.put(None)
