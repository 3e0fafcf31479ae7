"""
Atomic single-file writes.

This module provides a writer that buffers into a temporary sibling file and
only replaces the target once the write completes.
"""

import logging
import os

logger = logging.getLogger(__name__)


class AtomicFileWriter:
    """
    Binary writer that replaces its target on successful close.

    Data goes to ``<dir>/<prefix><name><suffix>``; ``close`` renames the
    temporary file over the target. Leaving the ``with`` block with an
    exception discards the temporary file and keeps the target untouched.

    Parameters
    ----------
    primitives : HostPrimitives
        The primitives used to open, rename and remove files
    path : str
        The file being written
    suffix : str, default ".tmp"
        Suffix of the temporary file
    prefix : str, default "."
        Prefix of the temporary file
    """

    def __init__(self, primitives, path, suffix=".tmp", prefix="."):
        self.primitives = primitives
        self.path = path

        dirname, basename = os.path.split(path)
        self.temp_path = os.path.join(dirname, f"{prefix}{basename}{suffix}")

        self.file = primitives.open_write(self.temp_path)
        self.closed = False

    def write(self, data):
        """Write data to the temporary file."""
        return self.file.write(data)

    def close(self):
        """Close the temporary file and move it over the target."""
        if self.closed:
            return
        self.closed = True
        self.file.close()

        try:
            self.primitives.rename(self.temp_path, self.path)
        except OSError:
            self._discard()
            raise

    def abort(self):
        """Close and delete the temporary file without touching the target."""
        if self.closed:
            return
        self.closed = True
        self.file.close()
        self._discard()

    def _discard(self):
        try:
            self.primitives.remove_file(self.temp_path)
        except FileNotFoundError:
            logger.debug("Temporary file %s already removed", self.temp_path)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is not None:
            self.abort()
        else:
            self.close()


def write_atomic(primitives, path, data, suffix=".tmp", prefix="."):
    """Replace ``path`` with ``data`` through a temporary file."""
    with AtomicFileWriter(primitives, path, suffix=suffix, prefix=prefix) as f:
        f.write(data)
