"""
Data Transfer Objects (DTOs) for the application layer.

These objects define the contracts between the packing services and the
interface layer (CLI or any other front end).
"""

from dataclasses import dataclass, field
from typing import Callable, List, Optional

from ..domain.entities.run import RunCounters, RunState

# Receives one human-readable status line per event, in order.
ProgressCallback = Callable[[str], None]


def ignore_progress(message: str) -> None:
    """Progress callback that drops every event."""


@dataclass
class PackRequestDto:
    """DTO describing what to pack and where to put the archive."""
    source_path: str
    output_path: str


@dataclass
class ValidationResultDto:
    """Outcome of checking a pack request before a run."""
    valid: bool
    reason: Optional[str] = None
    field: Optional[str] = None

    def __bool__(self) -> bool:
        return self.valid


@dataclass
class ArchiveSummaryDto:
    """What the archive builder wrote."""
    archive_path: str
    entry_count: int = 0
    file_count: int = 0
    directory_count: int = 0
    archive_size: int = 0


@dataclass
class PackResultDto:
    """DTO for the outcome of a packing run."""
    source_path: str
    output_path: str
    success: bool = False
    cancelled: bool = False
    error_message: Optional[str] = None
    counters: RunCounters = field(default_factory=RunCounters)
    cleanup_succeeded: bool = True
    staging_path: Optional[str] = None
    archive: Optional[ArchiveSummaryDto] = None
    summary: str = ""
    state: RunState = RunState.IDLE
    duration_seconds: float = 0.0
    warnings: List[str] = field(default_factory=list)

    @property
    def completed_with_warnings(self) -> bool:
        """True when the archive was written but temporary data may remain."""
        return self.success and not self.cleanup_succeeded
