"""
Stream-to-stream file copies.

A copy runs as two stages on their own threads, a reader and a writer,
joined by a bounded chunk queue. Three terminal events can occur: the writer
finishing, the reader failing, or the writer failing. They may race; the
first one settles the copy and the rest are no-ops against the settled
handle.
"""

import logging
import os
import queue
import threading

from .errors import StreamError
from .settlement import Settlement

logger = logging.getLogger(__name__)

_POLL_INTERVAL = 0.05
_EOF = object()


def as_stream_error(error, path=None):
    """Return OS errors unchanged and wrap anything else in ``StreamError``."""
    if isinstance(error, (OSError, StreamError)):
        return error
    wrapped = StreamError(f"Stream failed for {path}: {error}", path=path)
    wrapped.__cause__ = error
    return wrapped


class StreamCopy:
    """
    One in-flight copy of ``source`` onto ``destination``.

    Parameters
    ----------
    primitives : HostPrimitives
        The primitives used to open both streams
    source : str
        File to read
    destination : str
        File to create or truncate
    chunk_size : int
        Bytes per chunk handed from the reader to the writer
    queue_size : int
        Chunks buffered between the two stages
    """

    def __init__(self, primitives, source, destination, chunk_size, queue_size):
        self.primitives = primitives
        self.source = source
        self.destination = destination
        self.chunk_size = chunk_size
        self.settlement = Settlement()
        self._chunks = queue.Queue(maxsize=queue_size)

    def start(self):
        """Start both stages and return the settlement."""
        for target, role in ((self._read, "read"), (self._write, "write")):
            thread = threading.Thread(
                target=target, name=f"hostfs-copy-{role}:{self.source}", daemon=True
            )
            thread.start()
        return self.settlement

    # terminal events

    def on_finish(self):
        """The destination has been fully written and closed."""
        if self.settlement.resolve(None):
            logger.debug("Copied %s to %s", self.source, self.destination)

    def on_error(self, error, path=None):
        """Either stream failed."""
        if not self.settlement.reject(as_stream_error(error, path)):
            logger.debug("Ignoring late copy error after settlement: %s", error)

    # stages

    def _offer(self, item):
        while not self.settlement.done():
            try:
                self._chunks.put(item, timeout=_POLL_INTERVAL)
                return True
            except queue.Full:
                continue
        return False

    def _take(self):
        while True:
            if self.settlement.done():
                return None
            try:
                return self._chunks.get(timeout=_POLL_INTERVAL)
            except queue.Empty:
                continue

    def _read(self):
        try:
            with self.primitives.open_read(self.source) as stream:
                while True:
                    chunk = stream.read(self.chunk_size)
                    if not chunk:
                        break
                    if not self._offer(chunk):
                        return
        except Exception as e:
            self.on_error(e, self.source)
            return
        self._offer(_EOF)

    def _write(self):
        try:
            with self.primitives.open_write(self.destination) as stream:
                while True:
                    chunk = self._take()
                    if chunk is None:
                        return
                    if chunk is _EOF:
                        break
                    stream.write(chunk)
        except Exception as e:
            self.on_error(e, self.destination)
            return
        self.on_finish()


def copy_file(primitives, source, destination, chunk_size, queue_size):
    """
    Copy ``source`` onto ``destination``.

    Copying a file onto its own absolute path does no I/O and returns an
    already resolved settlement. Otherwise the destination's parent is
    created and the copy runs in the background.

    Returns
    -------
    Settlement
        Resolved with None once the destination is closed, or rejected with
        the first stream error
    """
    if os.path.abspath(source) == os.path.abspath(destination):
        return Settlement.resolved(None)

    primitives.makedirs(os.path.dirname(os.path.abspath(destination)))
    return StreamCopy(primitives, source, destination, chunk_size, queue_size).start()
