"""
Zip archive creation and extraction.

Archives are written in-process with ``zipfile``, one entry at a time.
Extraction is delegated to an external ``unzip`` (Info-ZIP compatible)
executable run through a ``ProcessRunner``.
"""

import fnmatch
import logging
import os
import re
import sys
import zipfile
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from .copier import as_stream_error
from .errors import ExtractorError, PathLookupError, UnsupportedPlatformError
from .settlement import Settlement

logger = logging.getLogger(__name__)

RESOURCES_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "resources")

# darwin and linux ship Info-ZIP unzip
EXTRACTORS = {
    "windows": os.path.join(RESOURCES_DIR, "platform-tools", "unzip", "win32", "unzip"),
    "darwin": "unzip",
    "linux": "unzip",
}


def host_os_family(platform=None):
    """Map ``sys.platform`` to ``windows``, ``darwin`` or ``linux``."""
    platform = platform or sys.platform
    if platform.startswith("win") or platform == "cygwin":
        return "windows"
    if platform == "darwin":
        return "darwin"
    if platform.startswith("linux"):
        return "linux"
    return platform


def get_extractor(platform=None):
    """Return the extractor executable for a host OS family."""
    family = host_os_family(platform)
    try:
        return EXTRACTORS[family]
    except KeyError:
        raise UnsupportedPlatformError(
            f"No archive extractor configured for platform '{family}'"
        ) from None


def normalize_archive_name(name):
    """Archive entry names always use forward slashes."""
    return name.replace("\\", "/")


class ArchiveWriter:
    """
    Streams files into a zip archive strictly one entry at a time.

    The completion of entry N starts entry N+1; after the last entry the
    central directory is written and the output stream closed, and only
    then does the settlement resolve.

    Parameters
    ----------
    primitives : HostPrimitives
        The primitives used to open the archive and its sources
    zip_file : str
        Archive to create
    files : sequence of str
        Source files, written in this order
    zip_path_callback : callable
        Maps a source path to its name inside the archive
    compression_level : int
        Deflate level
    chunk_size : int
        Bytes copied per read
    """

    def __init__(
        self,
        primitives,
        zip_file: str,
        files: Sequence[str],
        zip_path_callback: Callable[[str], str],
        compression_level: int = 9,
        chunk_size: int = 64 * 1024,
    ):
        self.primitives = primitives
        self.zip_file = zip_file
        self.files = list(files)
        self.zip_path_callback = zip_path_callback
        self.compression_level = compression_level
        self.chunk_size = chunk_size
        self.settlement = Settlement()
        self._out_file = None
        self._zip = None
        self._file_idx = -1

    def start(self):
        """Begin writing and return the settlement."""
        self._step(self._open)
        return self.settlement

    def _step(self, fn, *args):
        Settlement.spawn(fn, *args, name=f"hostfs-zip:{self.zip_file}").add_done_callback(
            self._on_step_done
        )

    def _on_step_done(self, step):
        error = step.exception()
        if error is not None:
            self._fail(error)
        elif not self.settlement.done():
            self._advance()

    def _open(self):
        self._out_file = self.primitives.open_write(self.zip_file)
        self._zip = zipfile.ZipFile(
            self._out_file,
            "w",
            compression=zipfile.ZIP_DEFLATED,
            compresslevel=self.compression_level,
        )

    def _advance(self):
        self._file_idx += 1
        if self._file_idx < len(self.files):
            self._step(self._add_entry, self.files[self._file_idx])
        else:
            Settlement.spawn(self._finalize).add_done_callback(self._on_finalized)

    def _add_entry(self, file):
        relative_path = normalize_archive_name(self.zip_path_callback(file))
        logger.debug("zipping as '%s' file '%s'", relative_path, file)

        # keeps the source's permission bits and mtime on the entry
        info = zipfile.ZipInfo.from_file(file, relative_path, strict_timestamps=False)
        info.compress_type = self._zip.compression
        info._compresslevel = self._zip.compresslevel
        with self.primitives.open_read(file) as source, self._zip.open(
            info, "w", force_zip64=info.file_size > zipfile.ZIP64_LIMIT
        ) as entry:
            while True:
                chunk = source.read(self.chunk_size)
                if not chunk:
                    break
                entry.write(chunk)

    def _finalize(self):
        self._zip.close()
        logger.debug("zip: %d bytes written", self._out_file.tell())
        self._out_file.close()

    def _on_finalized(self, step):
        error = step.exception()
        if error is not None:
            self._fail(error)
        else:
            self.settlement.resolve(None)

    def _fail(self, error):
        for closeable in (self._zip, self._out_file):
            if closeable is None:
                continue
            try:
                closeable.close()
            except Exception as close_error:
                logger.debug("Error closing %s after failure: %s", self.zip_file, close_error)
        self.settlement.reject(as_stream_error(error, self.zip_file))


@dataclass(frozen=True)
class ExtractOptions:
    """
    How an archive is extracted.

    Parameters
    ----------
    overwrite_existing_files : bool, default True
        Replace files that already exist in the destination
    case_sensitive : bool, default True
        Match the archive path and filter patterns case-sensitively
    """

    overwrite_existing_files: bool = True
    case_sensitive: bool = True


def find_file_case_insensitive(primitives, file):
    """
    Resolve ``file`` against its directory ignoring case.

    The basename is matched as a glob pattern against the directory's
    entries; the first match in listing order wins.

    Raises
    ------
    PathLookupError
        If no entry matches
    """
    directory = os.path.dirname(file) or os.curdir
    pattern = re.compile(fnmatch.translate(os.path.basename(file)), re.IGNORECASE)
    for entry in primitives.listdir(directory):
        if pattern.match(entry):
            return os.path.join(directory, entry)
    raise PathLookupError(file)


def build_unzip_args(
    zip_file: str,
    destination_dir: str,
    options: ExtractOptions = ExtractOptions(),
    file_filters: Optional[Sequence[str]] = None,
) -> List[str]:
    """
    Build the extractor argument list.

    The order is fixed: batch flag, overwrite flag, optional
    case-insensitivity flag, archive, filters, destination.
    """
    args = ["-b", "-o" if options.overwrite_existing_files else "-n"]
    if not options.case_sensitive:
        args.append("-C")
    args.append(zip_file)
    args.extend(file_filters or [])
    args.extend(["-d", destination_dir])
    return args


class ArchiveReader:
    """
    Extracts archives by running the platform extractor.

    Parameters
    ----------
    primitives : HostPrimitives
        The primitives used to create the destination and resolve paths
    process_runner : ProcessRunner
        Runs the extractor
    executable : str, optional
        Extractor to use instead of the platform default
    platform : str, optional
        ``sys.platform`` value used to pick the default extractor
    """

    def __init__(self, primitives, process_runner, executable=None, platform=None):
        self.primitives = primitives
        self.process_runner = process_runner
        self.executable = executable
        self.platform = platform

    def unzip(self, zip_file, destination_dir, options=None, file_filters=None):
        """
        Extract ``zip_file`` into ``destination_dir``.

        Returns
        -------
        Settlement
            Resolved with None once the extractor exits successfully; rejected
            with ``ExtractorError`` on spawn failure or non-zero exit, or with
            ``PathLookupError`` when a case-insensitive lookup finds nothing
        """
        options = options or ExtractOptions()
        return Settlement.spawn(
            self._unzip,
            zip_file,
            destination_dir,
            options,
            file_filters,
            name=f"hostfs-unzip:{zip_file}",
        )

    def _unzip(self, zip_file, destination_dir, options, file_filters):
        self.primitives.makedirs(destination_dir)

        proc = self.executable or get_extractor(self.platform)

        if not options.case_sensitive and not self.primitives.exists(zip_file):
            zip_file = find_file_case_insensitive(self.primitives, zip_file)

        args = build_unzip_args(zip_file, destination_dir, options, file_filters)
        self.process_runner.spawn(
            proc, args, detached=True, error_class=ExtractorError
        ).wait()
