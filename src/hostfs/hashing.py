"""
Streaming content digests.

Files are fed through ``hashlib`` one chunk at a time on a worker thread, so
memory stays bounded by the chunk size regardless of file size.
"""

import base64
import hashlib
import logging
from dataclasses import dataclass

from .settlement import Settlement

logger = logging.getLogger(__name__)

DEFAULT_ALGORITHM = "sha1"
DEFAULT_ENCODING = "hex"
DEFAULT_CHUNK_SIZE = 64 * 1024

_ENCODERS = {
    "hex": lambda digest: digest.hex(),
    "base64": lambda digest: base64.b64encode(digest).decode("ascii"),
    "latin1": lambda digest: digest.decode("latin-1"),
    "binary": lambda digest: digest.decode("latin-1"),
}


@dataclass(frozen=True)
class DigestResult:
    """Encoded digest of a file's content."""

    algorithm: str
    encoding: str
    value: str


def hash_file(
    primitives,
    file_name,
    algorithm=DEFAULT_ALGORITHM,
    encoding=DEFAULT_ENCODING,
    chunk_size=DEFAULT_CHUNK_SIZE,
):
    """
    Start hashing a file.

    Parameters
    ----------
    primitives : HostPrimitives
        The primitives used to open the file
    file_name : str
        The file to hash
    algorithm : str, default "sha1"
        Any algorithm ``hashlib.new`` accepts
    encoding : str, default "hex"
        One of ``hex``, ``base64``, ``latin1`` or ``binary``
    chunk_size : int
        Bytes read per chunk

    Returns
    -------
    Settlement
        Resolved with a ``DigestResult``, or rejected with the read error

    Raises
    ------
    ValueError
        If the algorithm or encoding is not supported
    """
    encoder = _ENCODERS.get(encoding)
    if encoder is None:
        raise ValueError(f"Unsupported digest encoding: {encoding}")
    # validates the algorithm before any I/O starts
    hashlib.new(algorithm)

    def run():
        shasum_data = hashlib.new(algorithm)
        with primitives.open_read(file_name) as stream:
            while True:
                chunk = stream.read(chunk_size)
                if not chunk:
                    break
                shasum_data.update(chunk)

        shasum = encoder(shasum_data.digest())
        logger.debug("Shasum of file %s is %s", file_name, shasum)
        return DigestResult(algorithm=algorithm, encoding=encoding, value=shasum)

    return Settlement.spawn(run, name=f"hostfs-hash:{file_name}")
