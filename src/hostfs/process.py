"""
External process execution.

Extraction and ownership changes are delegated to external tools. They go
through ``ProcessRunner`` so that argument construction can be tested with a
substitute runner instead of a real executable.
"""

import logging
import subprocess
from dataclasses import dataclass
from typing import List, Optional, Sequence

from .errors import ProcessError
from .settlement import Settlement

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProcessResult:
    """Exit status and captured output of a finished process."""

    args: List[str]
    returncode: int
    stdout: Optional[str] = None
    stderr: Optional[str] = None


class ProcessRunner:
    """
    Spawns executables and settles when they exit.

    Parameters
    ----------
    error_class : type, default ProcessError
        Exception raised for spawn failures and, when ``check`` is set,
        non-zero exits
    """

    def __init__(self, error_class=ProcessError):
        self.error_class = error_class

    def spawn(
        self,
        executable: str,
        args: Sequence[str] = (),
        detached: bool = False,
        capture_output: bool = False,
        check: bool = True,
        timeout: Optional[float] = None,
        error_class=None,
    ):
        """
        Run ``executable`` with ``args`` in the background.

        Parameters
        ----------
        executable : str
            Program name or path
        args : sequence of str
            Arguments, passed positionally in the given order
        detached : bool, default False
            Start the process in its own session
        capture_output : bool, default False
            Capture stdout/stderr as text; otherwise all standard streams are
            suppressed
        check : bool, default True
            Reject on a non-zero exit status
        timeout : float, optional
            Kill the process and reject after this many seconds
        error_class : type, optional
            Overrides the runner's error class for this call

        Returns
        -------
        Settlement
            Resolved with a ``ProcessResult``
        """
        command = [executable, *args]
        error_class = error_class or self.error_class
        logger.debug("Spawning %s", command)

        def run():
            stdio = subprocess.PIPE if capture_output else subprocess.DEVNULL
            try:
                completed = subprocess.run(
                    command,
                    stdin=subprocess.DEVNULL,
                    stdout=stdio,
                    stderr=stdio,
                    text=capture_output,
                    start_new_session=detached,
                    timeout=timeout,
                    check=False,
                )
            except (OSError, subprocess.SubprocessError) as e:
                raise error_class(command, message=f"Failed to run {command!r}: {e}") from e

            logger.debug("%s exited with status %d", executable, completed.returncode)
            if check and completed.returncode != 0:
                raise error_class(command, completed.returncode)
            return ProcessResult(
                args=command,
                returncode=completed.returncode,
                stdout=completed.stdout,
                stderr=completed.stderr,
            )

        return Settlement.spawn(run, name=f"hostfs-process:{executable}")
