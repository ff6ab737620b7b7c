"""
Application-level exceptions raised by projpack services.
"""

from typing import Optional


class PackError(Exception):
    """Base class for all projpack errors."""


class ValidationError(PackError):
    """A pack request was rejected before any work started."""

    def __init__(self, message: str, field: Optional[str] = None):
        self.field = field
        super().__init__(message)


class OperationNotAllowedError(PackError):
    """The operation cannot run in the current state (e.g. a run is in progress)."""


class StagingError(PackError):
    """The temporary staging directory could not be created."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Could not create staging directory '{path}': {reason}")


class CopyEngineError(PackError):
    """The source tree could not be enumerated at all."""

    def __init__(self, source_root: str, reason: str):
        self.source_root = source_root
        self.reason = reason
        super().__init__(f"Could not read source directory '{source_root}': {reason}")


class ArchiveOperationError(PackError):
    """Writing the output archive failed."""

    def __init__(self, archive_path: str, operation: str, reason: str):
        self.archive_path = archive_path
        self.operation = operation
        self.reason = reason
        super().__init__(f"Archive {operation} failed for '{archive_path}': {reason}")
