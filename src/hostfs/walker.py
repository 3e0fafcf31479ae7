"""
Recursive directory enumeration.
"""

import logging
import os
from typing import Any, Callable, List, Mapping, Optional

logger = logging.getLogger(__name__)

EntryPredicate = Callable[[str, Mapping[str, Any]], bool]


def enumerate_files(
    primitives,
    directory_path: str,
    filter_callback: Optional[EntryPredicate] = None,
    enumerate_directories: bool = False,
    include_empty_directories: bool = False,
) -> List[str]:
    """
    List the files below a directory, depth first in listing order.

    Parameters
    ----------
    primitives : HostPrimitives
        The primitives used to list and stat entries
    directory_path : str
        Root of the walk. A missing root yields an empty list.
    filter_callback : callable, optional
        ``(path, info) -> bool``. An entry it rejects is skipped together
        with everything below it.
    enumerate_directories : bool, default False
        Append each directory before descending into it
    include_empty_directories : bool, default False
        Append directories that have no entries

    Returns
    -------
    list of str
        Paths joined onto the absolute form of ``directory_path``. A
        directory appears at most once even when both directory flags apply.
    """
    found_files: List[str] = []

    if not primitives.exists(directory_path):
        logger.warning("Could not find folder: %s", directory_path)
        return found_files

    _walk(
        primitives,
        os.path.abspath(directory_path),
        filter_callback,
        enumerate_directories,
        include_empty_directories,
        found_files,
    )
    return found_files


def _walk(
    primitives,
    directory_path,
    filter_callback,
    enumerate_directories,
    include_empty_directories,
    found_files,
):
    for name in primitives.listdir(directory_path):
        path = os.path.join(directory_path, name)
        info = primitives.stat(path)
        if filter_callback is not None and not filter_callback(path, info):
            continue

        if info["type"] != "directory":
            found_files.append(path)
            continue

        if enumerate_directories:
            found_files.append(path)
        elif include_empty_directories and not primitives.listdir(path):
            found_files.append(path)

        _walk(
            primitives,
            path,
            filter_callback,
            enumerate_directories,
            include_empty_directories,
            found_files,
        )
