import pytest

from helpers import FakeRunner
from mlx_forge.config import ConfigManager
from mlx_forge.runner import OutputChunk, OutputStream


@pytest.fixture
def fake_runner():
    return FakeRunner()


@pytest.fixture
def stream_chunks():
    return [
        OutputChunk(OutputStream.STDOUT, "[INFO] Loading\n"),
        OutputChunk(OutputStream.STDERR, "Fetching 5 files: 100%\n"),
        OutputChunk(OutputStream.STDOUT, "[INFO] Saving\n"),
    ]


@pytest.fixture
def config(tmp_path):
    return ConfigManager(config_path=tmp_path / "mlx_forge_config.yaml")
