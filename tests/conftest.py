"""Shared fixtures for the Relic test suite."""
import pytest

from shared.config import RelicConfig
from shared.logger import RelicLogger

from relic.core.engine import RelicEngine

from tests.streams import primitives_stream


@pytest.fixture
def quiet_logger():
    return RelicLogger("test", log_level="DEBUG", console_output=False)


@pytest.fixture
def engine(quiet_logger):
    return RelicEngine(config=RelicConfig(), logger=quiet_logger)


@pytest.fixture
def stream_file(tmp_path):
    """Write bytes to a ``.ser`` file and return its path."""
    def write(data: bytes, name: str = "stream.ser"):
        path = tmp_path / name
        path.write_bytes(data)
        return path
    return write


@pytest.fixture
def primitives_file(stream_file):
    return stream_file(primitives_stream())
