"""
Native file primitives.

This module wraps an fsspec filesystem with the small set of synchronous
operations the rest of hostfs is built from. Errors are not translated: an
fsspec local filesystem raises the native ``OSError`` subclasses, so callers
can still branch on ``errno``.
"""

import errno
import os
import posixpath

from .utils import create_fsspec_fs


class HostPrimitives:
    """
    Synchronous stat/read/write/rename/symlink operations on one filesystem.

    Parameters
    ----------
    fs : fsspec.AbstractFileSystem
        The filesystem to operate on
    """

    def __init__(self, fs):
        self.fs = fs

    def __repr__(self):
        return f"{self.__class__.__name__}(fs={self.fs!r})"

    # queries

    def exists(self, path):
        """Check if a path exists."""
        return self.fs.exists(path)

    def lexists(self, path):
        """Check if a path exists without following a final symlink."""
        lexists = getattr(self.fs, "lexists", None)
        if lexists is not None:
            return lexists(path)
        return self.fs.exists(path)

    def isdir(self, path):
        """Check if a path is a directory."""
        return self.fs.isdir(path)

    def stat(self, path):
        """
        Return the info mapping for a path.

        The mapping carries at least ``name``, ``size`` and ``type``
        (``"file"`` or ``"directory"``); the local filesystem adds ``mtime``,
        ``mode``, ``uid`` and ``gid``.
        """
        return self.fs.info(path)

    def lstat(self, path):
        """
        Return the info mapping for a path without following a final symlink.

        For links the ``type`` is ``"link"`` and ``destination`` names the
        link target.
        """
        if not self.fs.islink(path):
            return self.fs.info(path)
        try:
            info = self.fs.info(path)
        except FileNotFoundError:
            # dangling link, fs.info follows it to the missing target
            st = os.lstat(path)
            info = {
                "name": path,
                "size": st.st_size,
                "mode": st.st_mode,
                "uid": st.st_uid,
                "gid": st.st_gid,
                "mtime": st.st_mtime,
                "islink": True,
                "destination": os.readlink(path),
            }
        return dict(info, type="link")

    def listdir(self, path):
        """List the entry names of a directory in listing order."""
        if not self.fs.isdir(path):
            if not self.fs.exists(path):
                raise FileNotFoundError(
                    errno.ENOENT, os.strerror(errno.ENOENT), path
                )
            raise NotADirectoryError(errno.ENOTDIR, os.strerror(errno.ENOTDIR), path)
        entries = self.fs.ls(path, detail=False)
        return [posixpath.basename(entry.rstrip("/")) for entry in entries]

    # mutations

    def makedirs(self, path):
        """Create a directory and any missing parents."""
        self.fs.makedirs(path, exist_ok=True)

    def read_bytes(self, path):
        """Return the full contents of a file."""
        return self.fs.cat_file(path)

    def write_bytes(self, path, data):
        """Replace the contents of a file."""
        with self.fs.open(path, "wb") as f:
            f.write(data)

    def append_bytes(self, path, data):
        """Append to a file, creating it if missing."""
        with self.fs.open(path, "ab") as f:
            f.write(data)

    def rename(self, old_path, new_path):
        """Rename a file or directory."""
        if not self.lexists(old_path):
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), old_path)
        self.fs.mv(old_path, new_path)

    def symlink(self, source, destination):
        """Create ``destination`` as a symbolic link pointing at ``source``."""
        self.fs.symlink(source, destination)

    def chmod(self, path, mode):
        """Change the permission bits of a path."""
        self.fs.chmod(path, mode)

    def remove_file(self, path):
        """Delete a single file."""
        self.fs.rm_file(path)

    def rmdir(self, path):
        """Delete an empty directory."""
        self.fs.rmdir(path)

    def remove_tree(self, path):
        """Delete a path and everything below it."""
        self.fs.rm(path, recursive=True)

    # streams

    def open_read(self, path):
        """Open a binary read stream."""
        return self.fs.open(path, "rb")

    def open_write(self, path, append=False):
        """Open a binary write stream."""
        return self.fs.open(path, "ab" if append else "wb")


def create_primitives(fs=None, **fs_kwargs):
    """
    Create primitives over an fsspec filesystem.

    Parameters
    ----------
    fs : fsspec.AbstractFileSystem or str, optional
        The filesystem to use or a string representing the filesystem type.
        If None, a local filesystem is created.
    **fs_kwargs : dict
        Additional keyword arguments to pass to the filesystem constructor if
        fs is a string

    Returns
    -------
    HostPrimitives
        The primitives object
    """
    if fs is None:
        fs = create_fsspec_fs("file")
    elif isinstance(fs, str):
        fs = create_fsspec_fs(fs, **fs_kwargs)

    return HostPrimitives(fs)
