"""
Xcode toolchain discovery.
"""

import logging
import os
import re
import threading
from dataclasses import dataclass
from typing import Optional

from .archive import host_os_family
from .errors import PlatformError, ToolchainNotFoundError
from .process import ProcessRunner
from .settlement import Settlement

logger = logging.getLogger(__name__)

_XCODE_VERSION_RE = re.compile(r"Xcode (.*)")


@dataclass(frozen=True)
class VersionData:
    major: Optional[str]
    minor: Optional[str]
    patch: Optional[str]


def parse_xcode_version(output):
    """Parse ``xcodebuild -version`` output into a ``VersionData``."""
    match = _XCODE_VERSION_RE.search(output or "")
    parts = match.group(1).strip().split(".") if match else []
    parts += [None] * (3 - len(parts))
    return VersionData(major=parts[0], minor=parts[1], patch=parts[2])


class XcodeSelectService:
    """
    Locates the active Xcode and reports its version.

    The version is computed on first request and reused until
    ``invalidate()`` is called.
    """

    def __init__(self, process_runner=None, platform=None):
        self.process_runner = process_runner or ProcessRunner()
        self.platform = platform
        self._version_cache = None
        self._version_lock = threading.Lock()

    def _ensure_darwin(self):
        if host_os_family(self.platform) != "darwin":
            raise PlatformError("xcode-select is only available on Mac OS X.")

    def get_developer_directory_path(self):
        """Settlement of the path printed by ``xcode-select -print-path``."""

        def run():
            self._ensure_darwin()
            result = self.process_runner.spawn(
                "xcode-select", ["-print-path"], capture_output=True, check=False
            ).wait()
            path = (result.stdout or "").strip()
            if not path:
                raise ToolchainNotFoundError(
                    "Cannot find path to Xcode.app - make sure you've installed Xcode correctly."
                )
            return path

        return Settlement.spawn(run)

    def get_contents_directory_path(self):
        """Settlement of the ``Contents`` directory above the developer directory."""
        return self.get_developer_directory_path().map(
            lambda path: os.path.normpath(os.path.join(path, ".."))
        )

    def get_xcode_version(self):
        """Settlement of the cached ``VersionData``."""

        def run():
            with self._version_lock:
                if self._version_cache is None:
                    result = self.process_runner.spawn(
                        "xcodebuild", ["-version"], capture_output=True, check=False
                    ).wait()
                    self._version_cache = parse_xcode_version(result.stdout)
                    logger.debug("Detected Xcode version %s", self._version_cache)
                return self._version_cache

        return Settlement.spawn(run)

    def invalidate(self):
        """Drop the cached version so the next request recomputes it."""
        with self._version_lock:
            self._version_cache = None
