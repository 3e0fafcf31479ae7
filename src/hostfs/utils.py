"""
Utility functions for hostfs.

This module provides helper functions for creating filesystems and the small
deterministic path/content helpers used by ``FileSystem``.
"""

import os
import re
from typing import Callable, Optional

DEFAULT_INDENTATION_CHARACTER = "\t"

_JSON_OBJECT_RE = re.compile(r'{\r*\n*(\W*)"', re.MULTILINE)


def create_fsspec_fs(fs_type="file", **fs_kwargs):
    """
    Create an fsspec filesystem.

    Parameters
    ----------
    fs_type : str, default "file"
        The fsspec filesystem type to create
    **fs_kwargs : dict
        Additional keyword arguments to pass to the filesystem constructor

    Returns
    -------
    fsspec.AbstractFileSystem
        The created filesystem
    """
    import fsspec

    return fsspec.filesystem(fs_type, **fs_kwargs)


def get_unique_file_name(
    base_name: str, exists: Callable[[str], bool] = os.path.exists
) -> str:
    """
    Return ``base_name`` or the first unused numbered variant of it.

    Numbering starts at 2 and goes before the extension, so with ``a.txt``
    and ``a2.txt`` taken the result is ``a3.txt``.

    Parameters
    ----------
    base_name : str
        The preferred file name
    exists : callable, default os.path.exists
        Predicate telling whether a candidate is taken

    Returns
    -------
    str
        An unused file name in the same directory as ``base_name``
    """
    if not exists(base_name):
        return base_name

    directory, filename = os.path.split(base_name)
    prefix, extension = os.path.splitext(filename)

    i = 2
    while True:
        numbered_name = os.path.join(directory, f"{prefix}{i}{extension}")
        if not exists(numbered_name):
            return numbered_name
        i += 1


def detect_indentation(content: Optional[str]) -> str:
    """
    Return the indent unit used by a JSON document.

    The whitespace between the first ``{`` and the first quoted key is used
    when it starts with a space; anything else falls back to a tab.
    """
    if not content:
        return DEFAULT_INDENTATION_CHARACTER

    match = _JSON_OBJECT_RE.search(content.strip())
    if not match or not match.group(1):
        return DEFAULT_INDENTATION_CHARACTER

    indentation = match.group(1)
    return indentation if indentation[0] == " " else DEFAULT_INDENTATION_CHARACTER


def is_relative_path(path: str) -> bool:
    """Whether ``path`` differs from its absolute form once normalised."""
    return os.path.normpath(path) != os.path.abspath(path)
