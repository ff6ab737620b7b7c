"""
Filtered Copy Service - mirrors a source tree into a staging directory.

Directories and files are enumerated up front, checked against the
exclusion policy one by one and replicated under the destination root.
A failure on a single entry is reported and counted, never raised.
"""

import os
import shutil
from typing import List, Optional, Tuple

from loguru import logger

from ...domain.entities.exclusion import ExclusionPolicy
from ...domain.entities.run import RunCounters
from ..dtos import ProgressCallback, ignore_progress
from ..exceptions import CopyEngineError


def _describe_os_error(e: OSError) -> str:
    if isinstance(e, PermissionError):
        return f"permission denied. {e}"
    return str(e)


def _is_utf8_name(rel: str) -> bool:
    # ZIP entry names are stored as UTF-8; undecodable bytes survive os.walk
    # only as lone surrogates.
    try:
        rel.encode("utf-8")
    except UnicodeEncodeError:
        return False
    return True


def _display_name(rel: str) -> str:
    return os.fsencode(rel).decode("utf-8", "backslashreplace")


class FilteredCopyService:
    """
    Copy engine applying an :class:`ExclusionPolicy` to every entry.

    Parameters
    ----------
    policy : ExclusionPolicy
        Decides which directories and files are skipped.

    Notes
    -----
    The traversal does not prune ignored directories. Their descendants are
    enumerated and rejected individually by component match, so every
    directory and file under the source is counted exactly once as either
    processed or ignored.
    """

    def __init__(self, policy: ExclusionPolicy) -> None:
        self._policy = policy
        self._logger = logger.bind(service="FilteredCopyService")

    @property
    def policy(self) -> ExclusionPolicy:
        return self._policy

    def enumerate_tree(
        self, source_root: str, on_progress: ProgressCallback = ignore_progress
    ) -> Tuple[List[str], List[str]]:
        """
        List every directory and file below ``source_root`` as relative paths.

        Raises
        ------
        CopyEngineError
            If ``source_root`` itself cannot be listed. Unreadable
            subdirectories are reported and skipped.
        """
        if not os.path.isdir(source_root):
            raise CopyEngineError(source_root, "not an existing directory")

        directories: List[str] = []
        files: List[str] = []
        root_error: List[OSError] = []

        def _on_walk_error(e: OSError) -> None:
            if os.path.normpath(e.filename or "") == os.path.normpath(source_root):
                root_error.append(e)
                return
            rel = _display_name(os.path.relpath(e.filename, source_root)) if e.filename else "?"
            self._logger.warning(f"Cannot list directory {rel}: {e}")
            on_progress(f"Error: cannot list directory '{rel}' - {_describe_os_error(e)}")

        for root, dirnames, filenames in os.walk(source_root, onerror=_on_walk_error):
            for name in dirnames:
                directories.append(os.path.relpath(os.path.join(root, name), source_root))
            for name in filenames:
                files.append(os.path.relpath(os.path.join(root, name), source_root))

        if root_error:
            raise CopyEngineError(source_root, str(root_error[0]))

        return directories, files

    def copy(
        self,
        source_root: str,
        destination_root: str,
        on_progress: ProgressCallback = ignore_progress,
        counters: Optional[RunCounters] = None,
    ) -> RunCounters:
        """
        Replicate the included part of ``source_root`` under ``destination_root``.

        Parameters
        ----------
        source_root : str
            Existing directory to copy from.
        destination_root : str
            Existing (normally empty) staging directory.
        on_progress : callable
            Receives one message per directory creation and file copy
            attempt, plus one per skipped entry.
        counters : RunCounters, optional
            Tally to update; it is reset first. A fresh one is created when
            omitted.

        Returns
        -------
        RunCounters
            The updated tally.
        """
        counters = counters if counters is not None else RunCounters()
        counters.reset()

        directories, files = self.enumerate_tree(source_root, on_progress)
        self._logger.info(
            f"Copying {source_root} -> {destination_root} "
            f"({len(directories)} directories, {len(files)} files)"
        )

        on_progress("Copying directories...")
        for rel in directories:
            self._copy_directory(rel, destination_root, on_progress, counters)

        on_progress("Copying files...")
        for rel in files:
            self._copy_file(rel, source_root, destination_root, on_progress, counters)

        self._logger.info(
            f"Copy finished: {counters.processed_files} files, "
            f"{counters.processed_directories} directories copied; "
            f"{counters.ignored_files} files, {counters.ignored_directories} directories ignored"
        )
        return counters

    def _copy_directory(
        self,
        rel: str,
        destination_root: str,
        on_progress: ProgressCallback,
        counters: RunCounters,
    ) -> None:
        shown = _display_name(rel)
        if self._policy.should_ignore_directory(rel):
            counters.ignored_directories += 1
            on_progress(f"Ignoring directory: {shown}")
            return

        if not _is_utf8_name(rel):
            counters.ignored_directories += 1
            self._logger.warning(f"Skipping directory with a non UTF-8 name: {shown}")
            on_progress(f"Error: cannot create directory '{shown}' - name is not valid UTF-8")
            return

        dest_dir = os.path.join(destination_root, rel)
        try:
            os.makedirs(dest_dir, exist_ok=True)
        except OSError as e:
            counters.ignored_directories += 1
            self._logger.warning(f"Failed to create directory {shown}: {e}")
            on_progress(f"Error: cannot create directory '{shown}' - {_describe_os_error(e)}")
            return

        counters.processed_directories += 1
        self._logger.debug(f"Created directory {dest_dir}")
        on_progress(f"Creating directory: {shown}")

    def _copy_file(
        self,
        rel: str,
        source_root: str,
        destination_root: str,
        on_progress: ProgressCallback,
        counters: RunCounters,
    ) -> None:
        shown = _display_name(rel)
        inside_ignored = self._policy.is_inside_ignored_directory(rel)
        if self._policy.should_ignore_file(rel, inside_ignored):
            counters.ignored_files += 1
            on_progress(f"Ignoring file: {shown}")
            return

        if not _is_utf8_name(rel):
            counters.ignored_files += 1
            self._logger.warning(f"Skipping file with a non UTF-8 name: {shown}")
            on_progress(f"Error: cannot copy file '{shown}' - name is not valid UTF-8")
            return

        src_file = os.path.join(source_root, rel)
        dest_file = os.path.join(destination_root, rel)
        try:
            shutil.copy2(src_file, dest_file)
        except OSError as e:
            counters.ignored_files += 1
            self._logger.warning(f"Failed to copy file {shown}: {e}")
            on_progress(f"Error: cannot copy file '{shown}' - {_describe_os_error(e)}")
            return

        counters.processed_files += 1
        self._logger.debug(f"Copied {src_file} -> {dest_file}")
        on_progress(f"Copying file: {shown}")
