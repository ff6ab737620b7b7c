"""Application services for staging, archiving and cleaning up pack runs."""

from .archive_service import ArchiveBuilder
from .cleanup_service import RobustDeleter
from .copy_service import FilteredCopyService
from .pack_service import PackRun, PackService

__all__ = [
    "ArchiveBuilder",
    "RobustDeleter",
    "FilteredCopyService",
    "PackRun",
    "PackService",
]
