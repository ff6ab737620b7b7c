"""Progress reporting utilities for projpack.

This module turns the stream of status messages produced by a pack run into
a live rich display, or simply records it for later inspection.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Any, List, Optional

from rich.console import Console
from rich.markup import escape
from rich.progress import (
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
)


@dataclass
class ProgressConfig:
    """Configuration for progress display."""

    # Whether to show the live spinner line
    enabled: bool = True

    # Whether to print every event above the spinner line
    show_events: bool = False

    # Whether to show elapsed time
    show_elapsed: bool = True

    # Longest status text shown on the spinner line
    max_description_width: int = 80


# Global console instance
_console = Console()

# Default progress configuration
_progress_config = ProgressConfig()


def get_console() -> Console:
    """Get the console shared by the CLI and the progress display."""
    return _console


def get_default_progress(console: Optional[Console] = None) -> Progress:
    """Get a default Progress instance with standard columns.

    Returns:
        A configured Progress instance
    """
    columns = [
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
    ]

    if _progress_config.show_elapsed:
        columns.append(TimeElapsedColumn())

    return Progress(
        *columns,
        console=console or _console,
        refresh_per_second=10,
        transient=True,
    )


def _is_error(message: str) -> bool:
    return message.startswith("Error")


def _shorten(text: str, width: int) -> str:
    if len(text) <= width:
        return text
    return text[: max(width - 3, 0)] + "..."


class RichProgressReporter:
    """A progress callback that renders pack run messages with rich.

    Every message replaces the text of a single spinner line; errors are
    always printed in full, other messages only when ``show_events`` is set.
    Instances are callables, so they can be passed wherever a progress
    callback is expected.
    """

    def __init__(
        self,
        console: Optional[Console] = None,
        show_events: Optional[bool] = None,
        progress: Optional[Progress] = None,
        config: Optional[ProgressConfig] = None,
    ) -> None:
        """Initialize the reporter.

        Args:
            console: Console to draw on, defaults to the shared console
            show_events: Print every event, overrides the configuration
            progress: Optional rich Progress instance to use
            config: Display configuration, defaults to the global one
        """
        self._config = config or _progress_config
        self._console = console or _console
        self._show_events = (
            self._config.show_events if show_events is None else show_events
        )
        self._progress = progress
        self._owns_progress = progress is None
        self._task_id: Optional[TaskID] = None
        self._lock = threading.Lock()
        self.event_count = 0
        self.error_count = 0
        self.last_message: Optional[str] = None

    def __enter__(self) -> "RichProgressReporter":
        """Context manager entry - start the live display."""
        self.start()
        return self

    def __exit__(self, *args: Any) -> None:
        """Context manager exit - ensure the display is stopped."""
        self.close()

    def start(self) -> None:
        if not self._config.enabled or self._task_id is not None:
            return
        if self._progress is None:
            self._progress = get_default_progress(self._console)
        if self._owns_progress:
            self._progress.start()
        self._task_id = self._progress.add_task("Starting...", total=None)

    def close(self) -> None:
        """Stop the live display and clean up."""
        if self._task_id is not None and self._progress is not None:
            self._progress.update(self._task_id, visible=False)
            self._progress.stop_task(self._task_id)
            self._task_id = None
            if self._owns_progress:
                self._progress.stop()

    def _print(self, text: str) -> None:
        if self._progress is not None and self._task_id is not None:
            self._progress.console.print(text)
        else:
            self._console.print(text)

    def __call__(self, message: str) -> None:
        with self._lock:
            self.event_count += 1
            self.last_message = message

            if _is_error(message):
                self.error_count += 1
                self._print(f"[red]{escape(message)}[/red]")
            elif self._show_events:
                self._print(escape(message))

            if self._task_id is not None and self._progress is not None:
                headline = message.splitlines()[0] if message else ""
                self._progress.update(
                    self._task_id,
                    description=escape(
                        _shorten(headline, self._config.max_description_width)
                    ),
                )


class CollectingProgress:
    """A progress callback that records every message in order."""

    def __init__(self) -> None:
        self.messages: List[str] = []
        self._lock = threading.Lock()

    def __call__(self, message: str) -> None:
        with self._lock:
            self.messages.append(message)

    def __len__(self) -> int:
        return len(self.messages)

    def __iter__(self):
        return iter(list(self.messages))

    def matching(self, prefix: str) -> List[str]:
        """Messages starting with ``prefix``."""
        return [m for m in self.messages if m.startswith(prefix)]

    @property
    def errors(self) -> List[str]:
        return self.matching("Error")

    @property
    def last(self) -> Optional[str]:
        return self.messages[-1] if self.messages else None
