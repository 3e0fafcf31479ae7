"""
hostfs: Blocking-looking host filesystem operations over fsspec
===============================================================

A host filesystem layer whose streaming, threaded and process-backed
operations (zipping, extraction, hashing, copying) return settlements that
callers wait on, so that file handling reads as plain sequential code.
"""

import logging

from .archive import ExtractOptions
from .config import FileSystemConfig
from .core import FileSystem, create_filesystem
from .errors import (
    ExtractorError,
    FileOperationError,
    HostFsError,
    PathLookupError,
    ProcessError,
    ShellError,
    StreamError,
)
from .primitives import HostPrimitives, create_primitives
from .process import ProcessResult, ProcessRunner
from .settlement import Settlement, settle_from_callback

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "FileSystem",
    "create_filesystem",
    "FileSystemConfig",
    "ExtractOptions",
    "HostPrimitives",
    "create_primitives",
    "ProcessRunner",
    "ProcessResult",
    "Settlement",
    "settle_from_callback",
    "HostFsError",
    "StreamError",
    "ShellError",
    "PathLookupError",
    "FileOperationError",
    "ProcessError",
    "ExtractorError",
]
