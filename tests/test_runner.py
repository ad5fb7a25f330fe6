import asyncio
import os
import shutil
import sys
from unittest.mock import AsyncMock, patch

import pytest

from mlx_forge.errors import ExecutableNotFound, ExecutionFailed
from mlx_forge.interpreter import Explicit, SystemDefault
from mlx_forge.runner import OutputStream, ProcessRunner, compose_output

PYTHON = Explicit(sys.executable)


def test_compose_output_layout():
    output = compose_output(["python3", "-V"], "out\n", "err\n", 1)
    assert output == "Running: python3 -V\n\nout\nError Output:\nerr\n\nProcess terminated with status: 1"


def test_compose_output_without_stderr():
    output = compose_output(["python3"], "", "", 0)
    assert "Error Output" not in output
    assert output.endswith("Process terminated with status: 0")


class TestProcessRunner:
    pytestmark = pytest.mark.asyncio

    async def test_buffered_success(self):
        result = await ProcessRunner().run(PYTHON, ["-c", "print('hello from child')"])
        assert result.success is True
        assert result.returncode == 0
        assert result.command[0] == sys.executable
        assert result.output.startswith("Running: ")
        assert "hello from child" in result.output
        assert result.output.endswith("Process terminated with status: 0")

    async def test_buffered_failure_is_a_result(self):
        script = "import sys; print('partial'); sys.stderr.write('boom'); sys.exit(3)"
        result = await ProcessRunner().run(PYTHON, ["-c", script])
        assert result.success is False
        assert result.returncode == 3
        assert "Error Output:\nboom" in result.output
        assert result.output.index("partial") < result.output.index("Error Output:")
        assert result.output.endswith("Process terminated with status: 3")

    async def test_streaming_delivers_tagged_chunks(self):
        script = (
            "import sys\n"
            "for i in range(3):\n"
            "    print(f'line {i}', flush=True)\n"
            "sys.stderr.write('warning\\n')\n"
        )
        chunks = []
        result = await ProcessRunner().run(PYTHON, ["-c", script], on_output=chunks.append)
        assert result.success
        stdout = "".join(c.text for c in chunks if c.stream is OutputStream.STDOUT)
        stderr = "".join(c.text for c in chunks if c.is_error)
        assert stdout == "line 0\nline 1\nline 2\n"
        assert stderr == "warning\n"
        assert "Error Output:\nwarning" in result.output

    async def test_streaming_preserves_order_within_stream(self):
        script = "for i in range(200):\n    print(i)"
        chunks = []
        await ProcessRunner(chunk_size=16).run(PYTHON, ["-c", script], on_output=chunks.append)
        text = "".join(c.text for c in chunks)
        assert text.split() == [str(i) for i in range(200)]

    async def test_working_directory(self, tmp_path):
        result = await ProcessRunner().run(PYTHON, ["-c", "import os; print(os.getcwd())"], cwd=str(tmp_path))
        assert os.path.realpath(str(tmp_path)) in result.output or str(tmp_path) in result.output

    async def test_missing_executable(self, tmp_path):
        with patch("mlx_forge.runner.asyncio.create_subprocess_exec", new_callable=AsyncMock) as spawn:
            with pytest.raises(ExecutableNotFound, match="not found"):
                await ProcessRunner().run(Explicit(str(tmp_path / "python3")), ["-V"])
            spawn.assert_not_called()

    async def test_non_executable_file(self, tmp_path):
        fake = tmp_path / "python3"
        fake.write_text("not a program")
        fake.chmod(0o644)
        if os.access(str(fake), os.X_OK):
            pytest.skip("running with permissions that ignore the execute bit")
        with pytest.raises(ExecutableNotFound, match="not executable"):
            await ProcessRunner().run(Explicit(str(fake)), ["-V"])

    async def test_spawn_error_becomes_execution_failed(self):
        with patch(
            "mlx_forge.runner.asyncio.create_subprocess_exec",
            new_callable=AsyncMock,
            side_effect=PermissionError("Permission denied"),
        ):
            with pytest.raises(ExecutionFailed, match="Permission denied") as excinfo:
                await ProcessRunner().run(PYTHON, ["-V"])
        assert isinstance(excinfo.value.error, PermissionError)

    @pytest.mark.skipif(
        not os.path.exists("/usr/bin/env") or shutil.which("python3") is None, reason="needs /usr/bin/env python3"
    )
    async def test_system_default_uses_env_lookup(self):
        result = await ProcessRunner().run(SystemDefault(), ["-c", "print('via env')"])
        assert result.command[:2] == ["/usr/bin/env", "python3"]
        assert "via env" in result.output

    def _spawn_recorder(self, spawned):
        spawn = asyncio.create_subprocess_exec

        async def record(*args, **kwargs):
            process = await spawn(*args, **kwargs)
            spawned.append(process)
            return process

        return record

    async def test_callback_error_kills_child(self):
        spawned = []

        def explode(chunk):
            raise RuntimeError("listener failed")

        script = "import time; print('ready', flush=True); time.sleep(30)"
        record = self._spawn_recorder(spawned)
        with patch("mlx_forge.runner.asyncio.create_subprocess_exec", side_effect=record):
            with pytest.raises(RuntimeError, match="listener failed"):
                await ProcessRunner().run(PYTHON, ["-c", script], on_output=explode)
        assert len(spawned) == 1
        assert spawned[0].returncode is not None

    async def test_cancelled_buffered_run_kills_child(self):
        spawned = []
        record = self._spawn_recorder(spawned)
        with patch("mlx_forge.runner.asyncio.create_subprocess_exec", side_effect=record):
            task = asyncio.ensure_future(ProcessRunner().run(PYTHON, ["-c", "import time; time.sleep(30)"]))
            for _ in range(500):
                if spawned:
                    break
                await asyncio.sleep(0.01)
            await asyncio.sleep(0.05)
            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task
        assert len(spawned) == 1
        assert spawned[0].returncode is not None
