"""
Exception types raised by hostfs.

OS level failures (missing paths, permission problems) are not wrapped: the
native ``OSError`` subclasses propagate with their ``errno`` intact so callers
can branch on it. The types below cover failures that have no native
equivalent.
"""

import subprocess


class HostFsError(Exception):
    """Base class for hostfs errors."""


class StreamError(HostFsError):
    """A read/write/archive stream failed mid-operation."""

    def __init__(self, message, path=None):
        super().__init__(message)
        self.path = path


class ShellError(HostFsError):
    """A shell-style remove reported an error status."""


class PathLookupError(HostFsError, LookupError):
    """Case-insensitive path resolution found no match."""

    def __init__(self, path):
        super().__init__(f"No entry matching '{path}' (case-insensitive)")
        self.path = path


class FileOperationError(HostFsError):
    """A guarded file operation failed with a caller-supplied message."""


class ProcessError(HostFsError, subprocess.SubprocessError):
    """An external process could not be spawned or exited with non-zero status."""

    def __init__(self, args, returncode=None, message=None):
        self.cmd = list(args)
        self.returncode = returncode
        if message is None:
            message = f"Command {self.cmd!r} exited with status {returncode}"
        super().__init__(message)


class ExtractorError(ProcessError):
    """The archive extractor failed."""


class PlatformError(HostFsError):
    """The operation is not available on this host."""


class UnsupportedPlatformError(PlatformError):
    """The host OS family has no entry in a platform table."""


class ToolchainNotFoundError(HostFsError):
    """A required toolchain could not be located."""
