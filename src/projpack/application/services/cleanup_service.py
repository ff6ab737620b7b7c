"""
Robust deletion of temporary staging directories.
"""

import os
import shutil
import stat
import time
from typing import Callable, Optional

from loguru import logger

from ..dtos import ProgressCallback, ignore_progress


def _clear_readonly(path: str) -> None:
    """Make every entry below ``path`` writable by its owner."""
    for root, dirs, files in os.walk(path):
        for name in dirs:
            dir_path = os.path.join(root, name)
            mode = os.lstat(dir_path).st_mode
            if stat.S_ISLNK(mode):
                continue
            wanted = mode | stat.S_IRWXU
            if wanted != mode:
                os.chmod(dir_path, stat.S_IMODE(wanted))
        for name in files:
            file_path = os.path.join(root, name)
            mode = os.lstat(file_path).st_mode
            if stat.S_ISLNK(mode):
                continue
            if not mode & stat.S_IWRITE:
                os.chmod(file_path, stat.S_IMODE(mode | stat.S_IWRITE))


class RobustDeleter:
    """
    Best-effort recursive delete with bounded, fixed-delay retries.

    Files in a staging area can be read-only (copied attributes) or briefly
    held open by other processes such as virus scanners or indexers. Each
    attempt therefore clears read-only bits first and then removes the tree;
    on ``OSError`` it waits ``retry_delay`` seconds and tries again, up to
    ``max_attempts`` times. When the last attempt fails the error is reported
    through the progress callback instead of being raised.

    Parameters
    ----------
    max_attempts : int
        Number of delete attempts, at least 1.
    retry_delay : float
        Seconds slept between attempts. No backoff is applied.
    sleep : callable, optional
        Replacement for ``time.sleep``; used by tests.
    """

    def __init__(
        self,
        max_attempts: int = 5,
        retry_delay: float = 0.1,
        sleep: Optional[Callable[[float], None]] = None,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self._max_attempts = max_attempts
        self._retry_delay = retry_delay
        self._sleep = sleep or time.sleep
        self._logger = logger.bind(service="RobustDeleter")

    @property
    def max_attempts(self) -> int:
        return self._max_attempts

    def delete_tree(
        self, path: str, on_progress: ProgressCallback = ignore_progress
    ) -> bool:
        """
        Delete ``path`` and everything below it.

        Returns
        -------
        bool
            True if the tree is gone (or never existed), False if every
            attempt failed. Never raises for filesystem errors.
        """
        last_error: Optional[OSError] = None

        for attempt in range(1, self._max_attempts + 1):
            if not os.path.lexists(path):
                return True

            try:
                if os.path.isdir(path) and not os.path.islink(path):
                    _clear_readonly(path)
                    shutil.rmtree(path)
                else:
                    os.remove(path)
                self._logger.debug(f"Deleted {path} on attempt {attempt}")
                return True
            except FileNotFoundError:
                # Removed underneath us; the next existence check settles it.
                continue
            except OSError as e:
                last_error = e
                self._logger.debug(
                    f"Delete attempt {attempt}/{self._max_attempts} for {path} failed: {e}"
                )
                if attempt < self._max_attempts:
                    self._sleep(self._retry_delay)

        if not os.path.lexists(path):
            return True

        message = f"Error cleaning up temporary files: {last_error}"
        self._logger.warning(f"Giving up on deleting {path}: {last_error}")
        on_progress(message)
        return False
