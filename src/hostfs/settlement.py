"""
Single-assignment result cells.

This module provides the handle every asynchronous hostfs operation returns.
A settlement is resolved or rejected exactly once; the caller blocks on
``wait()`` at the point it needs the outcome while other operations keep
running on their own threads.
"""

import threading
from typing import Any, Callable, List, Optional

_PENDING = "pending"
_RESOLVED = "resolved"
_REJECTED = "rejected"


class Settlement:
    """
    Eventual outcome of one asynchronous operation.

    The first call to ``resolve`` or ``reject`` wins. Later calls are ignored
    and report ``False`` so that racing terminal events (for example a stream
    that finishes while its peer reports an error) cannot overwrite the
    stored outcome.
    """

    def __init__(self):
        self._condition = threading.Condition()
        self._state = _PENDING
        self._value = None
        self._error = None
        self._callbacks: List[Callable[["Settlement"], Any]] = []

    def __repr__(self):
        return f"<{self.__class__.__name__} {self._state}>"

    @classmethod
    def resolved(cls, value=None):
        """Return a settlement that is already resolved with ``value``."""
        settlement = cls()
        settlement.resolve(value)
        return settlement

    @classmethod
    def rejected(cls, error):
        """Return a settlement that is already rejected with ``error``."""
        settlement = cls()
        settlement.reject(error)
        return settlement

    @classmethod
    def spawn(cls, fn, *args, name=None, **kwargs):
        """
        Run ``fn`` on a new daemon thread and settle with its outcome.

        Parameters
        ----------
        fn : callable
            The blocking work to run
        *args, **kwargs
            Arguments passed to ``fn``
        name : str, optional
            Thread name, useful when debugging hung waits

        Returns
        -------
        Settlement
            Resolved with the return value of ``fn`` or rejected with the
            exception it raised
        """
        settlement = cls()

        def runner():
            try:
                result = fn(*args, **kwargs)
            except BaseException as e:
                settlement.reject(e)
            else:
                settlement.resolve(result)

        thread = threading.Thread(target=runner, name=name, daemon=True)
        thread.start()
        return settlement

    def resolve(self, value=None) -> bool:
        """Settle with ``value``. Returns False if already settled."""
        return self._settle(_RESOLVED, value, None)

    def reject(self, error: BaseException) -> bool:
        """Settle with ``error``. Returns False if already settled."""
        if not isinstance(error, BaseException):
            raise TypeError("reject() requires an exception instance")
        return self._settle(_REJECTED, None, error)

    def _settle(self, state, value, error):
        with self._condition:
            if self._state != _PENDING:
                return False
            self._state = state
            self._value = value
            self._error = error
            callbacks, self._callbacks = self._callbacks, []
            self._condition.notify_all()

        for callback in callbacks:
            callback(self)
        return True

    def done(self) -> bool:
        """Whether the settlement has been resolved or rejected."""
        with self._condition:
            return self._state != _PENDING

    def wait(self, timeout: Optional[float] = None):
        """
        Block the calling thread until settled.

        Returns the resolved value or raises the rejection error. If
        ``timeout`` elapses first, ``TimeoutError`` is raised and the
        settlement stays pending.
        """
        with self._condition:
            if not self._condition.wait_for(
                lambda: self._state != _PENDING, timeout=timeout
            ):
                raise TimeoutError("settlement still pending")
            if self._state == _REJECTED:
                raise self._error
            return self._value

    def exception(self) -> Optional[BaseException]:
        """Block until settled and return the rejection error, if any."""
        try:
            self.wait()
        except BaseException as e:
            return e
        return None

    def add_done_callback(self, fn):
        """Call ``fn(self)`` once settled (immediately if already settled)."""
        with self._condition:
            if self._state == _PENDING:
                self._callbacks.append(fn)
                return
        fn(self)

    def map(self, fn):
        """Return a settlement resolved with ``fn(value)`` once this one resolves."""
        derived = Settlement()

        def forward(source):
            if source._state == _REJECTED:
                derived.reject(source._error)
                return
            try:
                derived.resolve(fn(source._value))
            except Exception as e:
                derived.reject(e)

        self.add_done_callback(forward)
        return derived


def settle_from_callback():
    """
    Create a settlement and a node-style ``(error, result)`` callback for it.

    Returns
    -------
    tuple
        ``(settlement, callback)``; calling ``callback(None, value)`` resolves,
        ``callback(error)`` rejects.
    """
    settlement = Settlement()

    def callback(error=None, result=None):
        if error is not None:
            settlement.reject(error)
        else:
            settlement.resolve(result)

    return settlement, callback
