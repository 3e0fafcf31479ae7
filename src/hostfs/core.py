"""
Core functionality for hostfs package.

This module provides the ``FileSystem`` facade that exposes every host file
operation as either a plain call or a call returning a ``Settlement`` the
caller waits on.
"""

import errno
import json
import logging
import os
import sys

from .archive import ArchiveReader, ArchiveWriter, ExtractOptions
from .atomic import write_atomic
from .config import FileSystemConfig
from .copier import copy_file
from .errors import FileOperationError, ShellError
from .hashing import hash_file
from .primitives import HostPrimitives, create_primitives
from .process import ProcessRunner
from .settlement import Settlement
from .utils import (
    DEFAULT_INDENTATION_CHARACTER,
    detect_indentation,
    get_unique_file_name,
    is_relative_path,
)
from .walker import enumerate_files

logger = logging.getLogger(__name__)


class FileSystem:
    """
    Blocking-looking access to the host filesystem.

    Operations that stream, spawn processes or otherwise take time return a
    ``Settlement``; call ``wait()`` on it where the result is needed. Several
    such operations may be in flight at once.
    """

    def __init__(self, primitives, config=None, process_runner=None, platform=None):
        """
        Initialize a FileSystem.

        Parameters
        ----------
        primitives : HostPrimitives
            The native operations everything is built from
        config : FileSystemConfig, optional
            Operation settings; defaults are used if omitted
        process_runner : ProcessRunner, optional
            Runs external tools (extraction, ownership changes)
        platform : str, optional
            ``sys.platform`` value used for platform-specific behaviour
        """
        self.primitives = primitives
        self.config = config or FileSystemConfig()
        self.process_runner = process_runner or ProcessRunner()
        self.platform = platform or sys.platform

    # archives

    def zip_files(self, zip_file, files, zip_path_callback):
        """
        Write ``files`` into a new zip archive, one entry at a time.

        Parameters
        ----------
        zip_file : str
            Archive to create
        files : sequence of str
            Source files in the order they should be written
        zip_path_callback : callable
            Maps each source path to its name inside the archive; backslashes
            are normalised to forward slashes

        Returns
        -------
        Settlement
            Resolved with None after the archive is finalised and closed
        """
        writer = ArchiveWriter(
            self.primitives,
            zip_file,
            files,
            zip_path_callback,
            compression_level=self.config.zip_compression_level,
            chunk_size=self.config.chunk_size,
        )
        return writer.start()

    def unzip(self, zip_file, destination_dir, options=None, file_filters=None):
        """
        Extract an archive with the platform extractor.

        Parameters
        ----------
        zip_file : str
            Archive to extract
        destination_dir : str
            Created if missing
        options : ExtractOptions, optional
            Overwrite and case-sensitivity policy
        file_filters : sequence of str, optional
            Patterns selecting which entries to extract

        Returns
        -------
        Settlement
            Resolved with None once the extractor exits successfully
        """
        reader = ArchiveReader(
            self.primitives,
            self.process_runner,
            executable=self.config.unzip_executable,
            platform=self.platform,
        )
        return reader.unzip(zip_file, destination_dir, options or ExtractOptions(), file_filters)

    # queries

    def exists(self, path):
        return self.primitives.exists(path)

    def get_file_size(self, path):
        return self.get_fs_stats(path)["size"]

    def get_fs_stats(self, path):
        return self.primitives.stat(path)

    def get_ls_stats(self, path):
        return Settlement.spawn(self.primitives.lstat, path)

    def read_directory(self, path):
        return self.primitives.listdir(path)

    def is_empty_dir(self, directory_path):
        return len(self.read_directory(directory_path)) == 0

    def is_relative_path(self, path):
        return is_relative_path(path)

    def get_unique_file_name(self, base_name):
        return get_unique_file_name(base_name, exists=self.exists)

    # directories

    def create_directory(self, path):
        self.primitives.makedirs(path)

    def ensure_directory_exists(self, directory_path):
        if not self.exists(directory_path):
            self.create_directory(directory_path)

    def enumerate_files_in_directory_sync(
        self,
        directory_path,
        filter_callback=None,
        enumerate_directories=False,
        include_empty_directories=False,
    ):
        """See ``hostfs.walker.enumerate_files``."""
        return enumerate_files(
            self.primitives,
            directory_path,
            filter_callback=filter_callback,
            enumerate_directories=enumerate_directories,
            include_empty_directories=include_empty_directories,
        )

    def delete_empty_parents(self, directory):
        """
        Delete ``directory`` and its ancestors while they are empty.

        Starts at ``directory`` if it is a directory, otherwise at its parent,
        and stops at the first ancestor that is missing or has entries.
        """

        def run():
            parent = (
                directory
                if self.primitives.isdir(directory)
                else os.path.dirname(directory)
            )
            while self.primitives.isdir(parent) and self.is_empty_dir(parent):
                self.primitives.rmdir(parent)
                logger.debug("Deleted empty directory %s", parent)
                next_parent = os.path.dirname(parent)
                if next_parent == parent:
                    break
                parent = next_parent

        return Settlement.spawn(run, name=f"hostfs-cleanup:{directory}")

    # deletion

    def delete_file(self, path):
        """Delete a file; a missing file is not an error."""
        try:
            self.primitives.remove_file(path)
        except FileNotFoundError:
            pass

    def delete_directory(self, directory):
        """Recursively delete a directory; a missing directory is not an error."""
        self.rm(directory, recursive=True, force=True)

    def rm(self, *paths, recursive=False, force=False):
        """
        Remove files, and directories when ``recursive`` is set.

        Raises
        ------
        ShellError
            If a path is missing (unless ``force``), is a directory without
            ``recursive``, or cannot be removed
        """
        for path in paths:
            if not self.primitives.lexists(path):
                if force:
                    continue
                raise ShellError(f"rm: no such file or directory: {path}")
            try:
                if self.primitives.lstat(path)["type"] == "directory":
                    if not recursive:
                        raise ShellError(f"rm: path is a directory: {path}")
                    self.primitives.remove_tree(path)
                else:
                    self.primitives.remove_file(path)
            except OSError as e:
                raise ShellError(f"rm: could not remove {path}: {e}") from e

    # reading

    def read_file(self, filename):
        return Settlement.spawn(self.primitives.read_bytes, filename)

    def read_text(self, filename, encoding=None):
        encoding = encoding or "utf-8"
        return self.read_file(filename).map(lambda data: data.decode(encoding))

    def read_json(self, filename, encoding=None):
        """Settlement of the parsed document, or None for an empty file."""

        def parse(data):
            if data:
                return json.loads(data.lstrip("\ufeff"))
            return None

        return self.read_text(filename, encoding).map(parse)

    def read_stdin(self):
        return Settlement.spawn(sys.stdin.read, name="hostfs-stdin")

    def create_read_stream(self, path):
        return self.primitives.open_read(path)

    def create_write_stream(self, path, append=False):
        return self.primitives.open_write(path, append=append)

    # writing

    def write_file(self, filename, data, encoding=None):
        """Write ``data`` (str or bytes), creating parent directories."""
        payload = _to_bytes(data, encoding)

        def run():
            self.create_directory(os.path.dirname(os.path.abspath(filename)))
            if self.config.atomic_writes:
                write_atomic(
                    self.primitives,
                    filename,
                    payload,
                    suffix=self.config.atomic_suffix,
                    prefix=self.config.atomic_prefix,
                )
            else:
                self.primitives.write_bytes(filename, payload)

        return Settlement.spawn(run, name=f"hostfs-write:{filename}")

    def append_file(self, filename, data, encoding=None):
        return Settlement.spawn(self.primitives.append_bytes, filename, _to_bytes(data, encoding))

    def write_json(self, filename, data, space=None, encoding=None):
        """Write ``data`` as JSON, keeping the file's existing indentation."""
        if not space:
            space = self.get_indentation_character(filename)
        return self.write_file(filename, json.dumps(data, indent=space), encoding)

    def get_indentation_character(self, file_path):
        if not self.exists(file_path):
            return DEFAULT_INDENTATION_CHARACTER
        return detect_indentation(self.read_text(file_path).wait())

    def copy_file(self, source_file_name, destination_file_name):
        """See ``hostfs.copier.copy_file``."""
        return copy_file(
            self.primitives,
            source_file_name,
            destination_file_name,
            chunk_size=self.config.chunk_size,
            queue_size=self.config.copy_queue_size,
        )

    # metadata and links

    def chmod(self, path, mode):
        return Settlement.spawn(self.primitives.chmod, path, mode)

    def rename(self, old_path, new_path):
        self.primitives.rename(old_path, new_path)

    def rename_if_exists(self, old_path, new_path):
        """Rename and return True, or return False if ``old_path`` is missing."""
        try:
            self.rename(old_path, new_path)
            return True
        except FileNotFoundError:
            return False

    def symlink(self, source_path, destination_path):
        self.primitives.symlink(source_path, destination_path)

    def set_current_user_as_owner(self, path, owner):
        """Run ``chown -R`` on ``path``. Does nothing on Windows."""
        if self.platform.startswith("win"):
            return Settlement.resolved(None)
        return self.process_runner.spawn(
            "chown", ["-R", owner, path], detached=True, check=False
        ).map(lambda result: None)

    # hashing

    def get_file_shasum(self, file_name, algorithm=None, encoding=None):
        """
        Settlement of the encoded digest of a file's content.

        Defaults come from the config (``sha1`` / ``hex``).
        """
        return hash_file(
            self.primitives,
            file_name,
            algorithm=algorithm or self.config.hash_algorithm,
            encoding=encoding or self.config.hash_encoding,
            chunk_size=self.config.chunk_size,
        ).map(lambda result: result.value)

    # helpers

    def try_execute_file_operation(self, path, operation, enoent_error_message=None):
        """
        Wait on ``operation()`` and report failures.

        Failures are logged. With ``enoent_error_message`` set they are also
        raised as ``FileOperationError``, using that message when the failure
        was a missing file and the original message otherwise.
        """

        def run():
            try:
                operation().wait()
            except Exception as e:
                logger.debug("try_execute_file_operation failed for %s with error %s.", path, e)
                if enoent_error_message:
                    is_missing = getattr(e, "errno", None) == errno.ENOENT
                    message = enoent_error_message if is_missing else str(e)
                    raise FileOperationError(message) from e

        return Settlement.spawn(run)


def _to_bytes(data, encoding=None):
    if isinstance(data, str):
        return data.encode(encoding or "utf-8")
    return bytes(data)


def create_filesystem(fs=None, config=None, process_runner=None, platform=None, **overrides):
    """
    Create a FileSystem over an fsspec filesystem.

    Parameters
    ----------
    fs : fsspec.AbstractFileSystem, HostPrimitives, or str, optional
        The filesystem to use, ready-made primitives, or a string with the
        filesystem type. If None, a local filesystem is created.
    config : FileSystemConfig, optional
        Base settings
    process_runner : ProcessRunner, optional
        Runs external tools
    platform : str, optional
        Overrides ``sys.platform`` for platform-specific behaviour
    **overrides : dict
        ``FileSystemConfig`` fields to replace

    Returns
    -------
    FileSystem
        The file system object

    Examples
    --------
    >>> fs = create_filesystem(chunk_size=1024 * 1024)
    >>> digest = fs.get_file_shasum("setup.cfg").wait()
    """
    primitives = fs if isinstance(fs, HostPrimitives) else create_primitives(fs)
    config = config or FileSystemConfig()
    if overrides:
        config = config.with_overrides(**overrides)

    return FileSystem(
        primitives,
        config=config,
        process_runner=process_runner,
        platform=platform,
    )
