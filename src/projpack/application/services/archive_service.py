"""
Archive Service - packages a staged directory into a single ZIP file.
"""

import os
import zipfile
from pathlib import Path

from loguru import logger

from ..dtos import ArchiveSummaryDto
from ..exceptions import ArchiveOperationError


class ArchiveBuilder:
    """
    Writes a deflate-compressed ZIP of a staged directory.

    Entries are stored relative to the staged root (the root itself is not
    an entry) and use forward slashes. Directories get their own entries so
    empty ones survive extraction.

    Parameters
    ----------
    compression_level : int
        Deflate level, 9 being the best compression.
    """

    def __init__(self, compression_level: int = 9) -> None:
        if not 0 <= compression_level <= 9:
            raise ValueError("compression_level must be between 0 and 9")
        self._compression_level = compression_level
        self._logger = logger.bind(service="ArchiveBuilder")

    def build_archive(self, staged_directory: str, output_archive_path: str) -> ArchiveSummaryDto:
        """
        Create ``output_archive_path`` from the contents of ``staged_directory``.

        A file already at ``output_archive_path`` is deleted first, so the
        result never merges old and new contents.

        Raises
        ------
        ArchiveOperationError
            If the old archive cannot be removed or the new one cannot be
            written. A partially written archive is removed before raising.
        """
        staged = Path(staged_directory)
        output = Path(output_archive_path)

        if not staged.is_dir():
            raise ArchiveOperationError(
                str(output), "create", f"staged directory does not exist: {staged}"
            )

        if output.exists() or output.is_symlink():
            if output.is_dir() and not output.is_symlink():
                raise ArchiveOperationError(str(output), "replace", "output path is a directory")
            try:
                output.unlink()
                self._logger.info(f"Removed existing archive {output}")
            except OSError as e:
                raise ArchiveOperationError(str(output), "replace", str(e)) from e

        summary = ArchiveSummaryDto(archive_path=str(output))
        try:
            with zipfile.ZipFile(
                output,
                "w",
                compression=zipfile.ZIP_DEFLATED,
                compresslevel=self._compression_level,
                strict_timestamps=False,
            ) as archive:
                for root, dirs, files in os.walk(staged):
                    dirs.sort()
                    root_path = Path(root)
                    for name in dirs:
                        dir_path = root_path / name
                        archive.write(dir_path, arcname=dir_path.relative_to(staged).as_posix())
                        summary.directory_count += 1
                    for name in sorted(files):
                        file_path = root_path / name
                        archive.write(file_path, arcname=file_path.relative_to(staged).as_posix())
                        summary.file_count += 1
        except (OSError, zipfile.BadZipFile, ValueError) as e:
            self._logger.error(f"Failed to write archive {output}: {e}")
            self._remove_partial(output)
            raise ArchiveOperationError(str(output), "create", str(e)) from e

        summary.entry_count = summary.file_count + summary.directory_count
        summary.archive_size = output.stat().st_size
        self._logger.info(
            f"Wrote {output} with {summary.file_count} files and "
            f"{summary.directory_count} directories ({summary.archive_size:,} bytes)"
        )
        return summary

    def _remove_partial(self, output: Path) -> None:
        try:
            if output.is_file():
                output.unlink()
        except OSError as e:
            self._logger.warning(f"Could not remove partial archive {output}: {e}")
