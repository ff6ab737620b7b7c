"""
Run-related domain entities: lifecycle states and the per-run tally.
"""

from dataclasses import dataclass
from enum import Enum


class RunState(Enum):
    """Lifecycle of a single packing run."""
    IDLE = "idle"
    PREPARING = "preparing"
    COPYING = "copying"
    ARCHIVING = "archiving"
    CLEANING_UP = "cleaning_up"
    DONE = "done"


_TRANSITIONS = {
    RunState.IDLE: {RunState.PREPARING},
    RunState.PREPARING: {RunState.COPYING, RunState.DONE},
    RunState.COPYING: {RunState.ARCHIVING, RunState.CLEANING_UP},
    RunState.ARCHIVING: {RunState.CLEANING_UP},
    RunState.CLEANING_UP: {RunState.DONE},
    RunState.DONE: set(),
}


def can_transition(current: RunState, target: RunState) -> bool:
    """Check whether a run may move from ``current`` to ``target``."""
    return target in _TRANSITIONS[current]


@dataclass
class RunCounters:
    """Tally of processed and ignored entries for one run."""
    processed_files: int = 0
    processed_directories: int = 0
    ignored_files: int = 0
    ignored_directories: int = 0

    def __post_init__(self):
        for name in (
            "processed_files",
            "processed_directories",
            "ignored_files",
            "ignored_directories",
        ):
            value = getattr(self, name)
            if not isinstance(value, int) or value < 0:
                raise ValueError(f"{name} must be a non-negative integer")

    @property
    def processed_total(self) -> int:
        return self.processed_files + self.processed_directories

    @property
    def ignored_total(self) -> int:
        return self.ignored_files + self.ignored_directories

    def reset(self) -> None:
        """Zero every counter."""
        self.processed_files = 0
        self.processed_directories = 0
        self.ignored_files = 0
        self.ignored_directories = 0

    def format_summary(self) -> str:
        """Render the end-of-run summary line."""
        summary = (
            f"Summary: copied {self.processed_total} items "
            f"(files: {self.processed_files}, directories: {self.processed_directories})."
        )
        if self.ignored_total > 0:
            summary += (
                f" Ignored {self.ignored_total} items "
                f"(files: {self.ignored_files}, directories: {self.ignored_directories})."
            )
        return summary
