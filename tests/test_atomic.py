"""
Tests for atomic file operations.
"""

import os
import pytest

from hostfs.atomic import AtomicFileWriter, write_atomic


def test_atomic_binary(primitives, temp_dir):
    """Test atomic binary file operations."""
    test_path = os.path.join(temp_dir, "test.bin")
    test_data = b"Hello, binary world!"

    with AtomicFileWriter(primitives, test_path) as f:
        f.write(test_data)
        # nothing is visible until the writer closes
        assert not os.path.exists(test_path)

    with open(test_path, "rb") as f:
        content = f.read()

    assert content == test_data


def test_atomic_replaces_existing(primitives, temp_dir, make_file):
    """Test that an existing file is replaced."""
    test_path = make_file(os.path.join(temp_dir, "test.txt"), b"old")

    write_atomic(primitives, test_path, b"new", suffix=".part", prefix="~")

    with open(test_path, "rb") as f:
        assert f.read() == b"new"
    assert os.listdir(temp_dir) == ["test.txt"]


def test_atomic_exception(primitives, temp_dir, make_file):
    """Test atomic file operations with an exception."""
    test_path = make_file(os.path.join(temp_dir, "test_exception.txt"), b"original")

    with pytest.raises(RuntimeError):
        with AtomicFileWriter(primitives, test_path) as f:
            f.write(b"This should not be written")
            raise RuntimeError("Test exception")

    with open(test_path, "rb") as f:
        assert f.read() == b"original"

    # Check that the temporary file was cleaned up
    temp_files = [f for f in os.listdir(temp_dir) if f.startswith(".")]
    assert len(temp_files) == 0
