"""
Pytest fixtures for hostfs tests.
"""

import os
import shutil
import tempfile
import pytest

from hostfs.core import create_filesystem
from hostfs.errors import ProcessError
from hostfs.primitives import create_primitives
from hostfs.process import ProcessResult
from hostfs.settlement import Settlement
from hostfs.utils import create_fsspec_fs


class RecordingProcessRunner:
    """Process runner that records calls instead of spawning anything."""

    def __init__(self, returncode=0, outputs=None):
        self.returncode = returncode
        self.outputs = outputs or {}
        self.calls = []

    def spawn(
        self,
        executable,
        args=(),
        detached=False,
        capture_output=False,
        check=True,
        timeout=None,
        error_class=None,
    ):
        command = [executable, *args]
        self.calls.append(
            {
                "executable": executable,
                "args": list(args),
                "detached": detached,
                "capture_output": capture_output,
            }
        )
        if check and self.returncode != 0:
            return Settlement.rejected(
                (error_class or ProcessError)(command, self.returncode)
            )
        stdout = self.outputs.get(executable, "") if capture_output else None
        return Settlement.resolved(ProcessResult(command, self.returncode, stdout))


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    temp_dir = tempfile.mkdtemp()
    yield temp_dir
    shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture
def temp_dir2():
    """Create a second temporary directory for tests."""
    temp_dir = tempfile.mkdtemp()
    yield temp_dir
    shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture
def fs():
    """Create a filesystem for tests."""
    return create_fsspec_fs("file")


@pytest.fixture
def primitives(fs):
    """Create primitives over the local filesystem."""
    return create_primitives(fs)


@pytest.fixture
def process_runner():
    """A process runner that never spawns anything."""
    return RecordingProcessRunner()


@pytest.fixture
def host_fs(primitives, process_runner):
    """Create a FileSystem wired to the recording process runner."""
    return create_filesystem(primitives, process_runner=process_runner, platform="linux")


@pytest.fixture
def make_file():
    """Return a helper that creates a file (and its parents) with content."""

    def make(path, content=b""):
        os.makedirs(os.path.dirname(path), exist_ok=True)
        mode = "wb" if isinstance(content, bytes) else "w"
        with open(path, mode) as f:
            f.write(content)
        return path

    return make


@pytest.fixture
def make_runner():
    """Return the recording process runner class for custom outputs."""
    return RecordingProcessRunner
