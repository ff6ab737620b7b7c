"""
Pre-run checks a front end performs before starting a pack run.

These are pure functions over the two paths and the running flag so any
interface can use them to enable or disable its "pack" action.
"""

import os
from typing import Optional

from ..core.config import DEFAULT_ARCHIVE_NAME
from .dtos import ValidationResultDto


def _normalize(path: str) -> str:
    return os.path.normcase(os.path.realpath(os.path.expanduser(path))).casefold()


def resolve_path(path: str) -> str:
    """Absolute form of ``path`` with a leading ``~`` expanded."""
    return os.path.abspath(os.path.expanduser(path))


def is_strictly_inside(candidate: str, parent: str) -> bool:
    """True if ``candidate`` lies below ``parent`` (equality is not inside).

    Comparison is case-insensitive and respects path-segment boundaries, so
    ``/work/Source2`` is not inside ``/work/Source``.
    """
    candidate_norm = _normalize(candidate)
    parent_norm = _normalize(parent)
    if candidate_norm == parent_norm:
        return False
    try:
        return os.path.commonpath([candidate_norm, parent_norm]) == parent_norm
    except ValueError:
        # Different drives or mixed absolute/relative paths.
        return False


def validate_pack_request(
    source_path: Optional[str],
    output_path: Optional[str],
    is_running: bool = False,
) -> ValidationResultDto:
    """
    Check whether a pack run may start.

    Parameters
    ----------
    source_path : str
        Directory to pack.
    output_path : str
        Archive file to write.
    is_running : bool
        Whether a run is already in progress for this caller.

    Returns
    -------
    ValidationResultDto
        ``valid`` is False with a human-readable ``reason`` when the request
        must be rejected.
    """
    if not source_path or not source_path.strip():
        return ValidationResultDto(False, "Source directory is required", "source_path")

    if not output_path or not output_path.strip():
        return ValidationResultDto(False, "Output archive path is required", "output_path")

    if is_running:
        return ValidationResultDto(False, "A pack run is already in progress")

    if not os.path.isdir(os.path.expanduser(source_path)):
        return ValidationResultDto(
            False, f"Source directory does not exist: {source_path}", "source_path"
        )

    absolute_output = resolve_path(output_path)
    if os.path.isdir(absolute_output):
        return ValidationResultDto(
            False, f"Output path is a directory: {output_path}", "output_path"
        )

    output_directory = os.path.dirname(absolute_output)
    if not output_directory:
        return ValidationResultDto(
            False, f"Output path has no parent directory: {output_path}", "output_path"
        )

    if is_strictly_inside(output_directory, source_path):
        return ValidationResultDto(
            False,
            "Output archive must not be placed inside a subdirectory of the source directory",
            "output_path",
        )

    return ValidationResultDto(True)


def can_pack(
    source_path: Optional[str], output_path: Optional[str], is_running: bool = False
) -> bool:
    """Boolean form of :func:`validate_pack_request` for enabling UI actions."""
    return validate_pack_request(source_path, output_path, is_running).valid


def default_archive_name(source_path: Optional[str], fallback: str = DEFAULT_ARCHIVE_NAME) -> str:
    """Suggest an archive file name derived from the source folder name."""
    if not source_path or not source_path.strip():
        return fallback
    folder_name = os.path.basename(source_path.rstrip("/\\"))
    if not folder_name or not folder_name.strip() or folder_name in (".", ".."):
        folder_name = os.path.basename(os.path.abspath(source_path).rstrip("/\\"))
    if not folder_name or not folder_name.strip():
        return fallback
    return f"{folder_name}.zip"
