"""
Configuration for hostfs file systems.
"""

from dataclasses import dataclass, fields, replace
from typing import Optional


@dataclass(frozen=True)
class FileSystemConfig:
    """
    Settings shared by the operations of one ``FileSystem``.

    Parameters
    ----------
    chunk_size : int, default 65536
        Bytes read per chunk when streaming (hashing, copying, zipping)
    zip_compression_level : int, default 9
        Deflate level used by ``zip_files``
    hash_algorithm : str, default "sha1"
        Digest used by ``get_file_shasum`` when none is given
    hash_encoding : str, default "hex"
        Digest encoding used by ``get_file_shasum`` when none is given
    atomic_writes : bool, default False
        Whether ``write_file`` writes through a temporary file and a rename
    atomic_suffix : str, default ".tmp"
        Suffix for temporary files in atomic writes
    atomic_prefix : str, default "."
        Prefix for temporary files in atomic writes
    unzip_executable : str, optional
        Extractor to run instead of the per-platform default
    copy_queue_size : int, default 8
        Chunks buffered between the reader and writer of ``copy_file``
    """

    chunk_size: int = 64 * 1024
    zip_compression_level: int = 9
    hash_algorithm: str = "sha1"
    hash_encoding: str = "hex"
    atomic_writes: bool = False
    atomic_suffix: str = ".tmp"
    atomic_prefix: str = "."
    unzip_executable: Optional[str] = None
    copy_queue_size: int = 8

    def __post_init__(self):
        if self.chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        if not 0 <= self.zip_compression_level <= 9:
            raise ValueError("zip_compression_level must be between 0 and 9")
        if self.copy_queue_size <= 0:
            raise ValueError("copy_queue_size must be positive")

    def with_overrides(self, **overrides):
        """Return a copy with the given fields replaced."""
        known = {f.name for f in fields(self)}
        unknown = set(overrides) - known
        if unknown:
            raise TypeError(f"Unknown config option(s): {', '.join(sorted(unknown))}")
        return replace(self, **overrides)
