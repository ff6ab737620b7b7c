"""
Pack Application Service - orchestrates a complete packing run.

A run stages a filtered copy of the source directory in a fresh temporary
directory, zips the staged copy into the output archive and always removes
the staging directory afterwards, reporting every step through a progress
callback.
"""

import asyncio
import functools
import tempfile
import threading
import time
from typing import Callable, List, Optional

from loguru import logger

from ...core.config import PackConfig, get_default_config
from ...domain.entities.exclusion import ExclusionPolicy, ExclusionRules
from ...domain.entities.run import RunCounters, RunState, can_transition
from ..dtos import (
    ArchiveSummaryDto,
    PackRequestDto,
    PackResultDto,
    ProgressCallback,
    ignore_progress,
)
from ..exceptions import (
    OperationNotAllowedError,
    PackError,
    StagingError,
    ValidationError,
)
from ..validation import resolve_path, validate_pack_request
from .archive_service import ArchiveBuilder
from .cleanup_service import RobustDeleter
from .copy_service import FilteredCopyService

ConfirmCallback = Callable[[], bool]


class PackRun:
    """
    A single packing run with its own staging directory and counters.

    Runs are not reusable: :meth:`execute` may be called once. State moves
    through ``IDLE -> PREPARING -> COPYING -> ARCHIVING -> CLEANING_UP ->
    DONE``; a failure while copying or archiving jumps straight to
    ``CLEANING_UP`` and a failure while preparing goes to ``DONE``.
    """

    def __init__(
        self,
        request: PackRequestDto,
        copy_service: FilteredCopyService,
        archive_builder: ArchiveBuilder,
        deleter: RobustDeleter,
        on_progress: ProgressCallback = ignore_progress,
        temp_root: Optional[str] = None,
    ) -> None:
        self.request = request
        self.counters = RunCounters()
        self.state = RunState.IDLE
        self.history: List[RunState] = [RunState.IDLE]
        self.staging_path: Optional[str] = None
        self._copy_service = copy_service
        self._archive_builder = archive_builder
        self._deleter = deleter
        self._on_progress = on_progress
        self._temp_root = temp_root
        self._logger = logger.bind(service="PackRun", source=request.source_path)

    def _emit(self, message: str) -> None:
        self._on_progress(message)

    def _transition(self, target: RunState) -> None:
        if not can_transition(self.state, target):
            raise OperationNotAllowedError(
                f"Invalid run state transition {self.state.value} -> {target.value}"
            )
        self._logger.debug(f"Run state {self.state.value} -> {target.value}")
        self.state = target
        self.history.append(target)

    def _prepare(self) -> str:
        self._transition(RunState.PREPARING)
        self._emit("Creating temporary directory...")
        temp_root = self._temp_root or tempfile.gettempdir()
        try:
            path = tempfile.mkdtemp(prefix="projpack-", dir=self._temp_root)
        except OSError as e:
            raise StagingError(temp_root, str(e)) from e
        self._logger.info(f"Created staging directory {path}")
        return path

    def execute(self) -> PackResultDto:
        """Run every phase and return the outcome. Run-phase errors are captured, not raised."""
        if self.state is not RunState.IDLE:
            raise OperationNotAllowedError("A pack run can only be executed once")

        started = time.monotonic()
        result = PackResultDto(
            source_path=self.request.source_path,
            output_path=self.request.output_path,
            counters=self.counters,
        )
        error: Optional[Exception] = None
        archive: Optional[ArchiveSummaryDto] = None

        self._emit("Compressing project...")
        try:
            self.staging_path = self._prepare()
        except StagingError as e:
            self._logger.error(str(e))
            error = e

        if self.staging_path is not None:
            try:
                self._transition(RunState.COPYING)
                self._copy_service.copy(
                    self.request.source_path,
                    self.staging_path,
                    self._emit,
                    counters=self.counters,
                )

                self._transition(RunState.ARCHIVING)
                self._emit("Creating ZIP archive... please wait.")
                archive = self._archive_builder.build_archive(
                    self.staging_path, self.request.output_path
                )
            except (PackError, OSError) as e:
                self._logger.error(f"Pack run failed during {self.state.value}: {e}")
                error = e
            finally:
                self._transition(RunState.CLEANING_UP)
                self._emit("Cleaning up temporary directory...")
                result.cleanup_succeeded = self._deleter.delete_tree(
                    self.staging_path, self._emit
                )
                if not result.cleanup_succeeded:
                    result.warnings.append(
                        f"Temporary data may remain in {self.staging_path}"
                    )

        self._transition(RunState.DONE)

        result.success = error is None
        result.error_message = str(error) if error is not None else None
        result.staging_path = self.staging_path
        result.archive = archive
        result.state = self.state
        result.duration_seconds = time.monotonic() - started

        if error is not None:
            self._emit(f"Error: {error}")
            headline = "Compression failed!"
        elif not result.cleanup_succeeded:
            headline = "Compression complete with warnings!"
        else:
            headline = "Compression complete!"
        result.summary = f"{headline}\n{self.counters.format_summary()}"
        self._emit(result.summary)

        self._logger.info(
            f"Pack run finished (success={result.success}, "
            f"cleanup={result.cleanup_succeeded}) in {result.duration_seconds:.2f}s"
        )
        return result


class PackService:
    """
    Application service for packing a project directory into a ZIP archive.

    Wires the exclusion policy, copy engine, archive builder and robust
    deleter together from a :class:`PackConfig` and runs one
    :class:`PackRun` at a time.

    Parameters
    ----------
    config : PackConfig, optional
        Settings for rules, retries and compression. Defaults are used when
        omitted.
    copy_service : FilteredCopyService, optional
    archive_builder : ArchiveBuilder, optional
    deleter : RobustDeleter, optional
        Collaborators; built from ``config`` when not supplied.

    Examples
    --------
    >>> service = PackService()
    >>> messages = []
    >>> result = service.run(
    ...     PackRequestDto("/work/MyApp", "/work/MyApp.zip"), messages.append
    ... )  # doctest: +SKIP
    >>> result.counters.processed_files  # doctest: +SKIP
    42
    """

    def __init__(
        self,
        config: Optional[PackConfig] = None,
        copy_service: Optional[FilteredCopyService] = None,
        archive_builder: Optional[ArchiveBuilder] = None,
        deleter: Optional[RobustDeleter] = None,
    ) -> None:
        self._config = config or get_default_config()
        policy = ExclusionPolicy(ExclusionRules.from_config(self._config))
        self._copy_service = copy_service or FilteredCopyService(policy)
        self._archive_builder = archive_builder or ArchiveBuilder(
            compression_level=self._config.compression_level
        )
        self._deleter = deleter or RobustDeleter(
            max_attempts=self._config.delete_max_attempts,
            retry_delay=self._config.delete_retry_delay,
        )
        self._lock = threading.Lock()
        self._running = False
        self._logger = logger.bind(service="PackService")

    @property
    def config(self) -> PackConfig:
        return self._config

    @property
    def policy(self) -> ExclusionPolicy:
        return self._copy_service.policy

    @property
    def is_running(self) -> bool:
        return self._running

    def _check_request(self, request: PackRequestDto) -> PackRequestDto:
        """Validate ``request`` and return it with both paths made absolute."""
        if self._running:
            raise OperationNotAllowedError("A pack run is already in progress")
        validation = validate_pack_request(request.source_path, request.output_path)
        if not validation.valid:
            raise ValidationError(validation.reason, validation.field)
        return PackRequestDto(
            source_path=resolve_path(request.source_path),
            output_path=resolve_path(request.output_path),
        )

    def _cancelled(self, request: PackRequestDto, on_progress: ProgressCallback) -> PackResultDto:
        self._logger.info(f"Pack run for {request.source_path} cancelled before start")
        on_progress("Compression cancelled.")
        return PackResultDto(
            source_path=request.source_path,
            output_path=request.output_path,
            cancelled=True,
            summary="Compression cancelled.",
        )

    def _execute(self, request: PackRequestDto, on_progress: ProgressCallback) -> PackResultDto:
        with self._lock:
            if self._running:
                raise OperationNotAllowedError("A pack run is already in progress")
            self._running = True
        try:
            run = PackRun(
                request,
                self._copy_service,
                self._archive_builder,
                self._deleter,
                on_progress=on_progress,
                temp_root=self._config.temp_root,
            )
            return run.execute()
        finally:
            with self._lock:
                self._running = False

    def run(
        self,
        request: PackRequestDto,
        on_progress: ProgressCallback = ignore_progress,
        confirm: Optional[ConfirmCallback] = None,
    ) -> PackResultDto:
        """
        Validate ``request`` and perform a complete run on the calling thread.

        Parameters
        ----------
        request : PackRequestDto
            Source directory and output archive path.
        on_progress : callable
            Receives every status message in order.
        confirm : callable, optional
            Pre-run gate. When it returns False nothing is touched and a
            cancelled result is returned.

        Raises
        ------
        ValidationError
            If the request is rejected by :func:`validate_pack_request`.
        OperationNotAllowedError
            If another run of this service is in progress.
        """
        request = self._check_request(request)
        if confirm is not None and not confirm():
            return self._cancelled(request, on_progress)
        return self._execute(request, on_progress)

    async def run_async(
        self,
        request: PackRequestDto,
        on_progress: ProgressCallback = ignore_progress,
        confirm: Optional[ConfirmCallback] = None,
    ) -> PackResultDto:
        """
        Like :meth:`run`, but the filesystem work happens in the loop's executor.

        Progress messages are handed back to ``on_progress`` on the event loop
        thread in the order they were produced; all of them have been
        delivered by the time this coroutine returns.
        """
        request = self._check_request(request)
        if confirm is not None and not confirm():
            return self._cancelled(request, on_progress)

        loop = asyncio.get_running_loop()

        def forward(message: str) -> None:
            loop.call_soon_threadsafe(on_progress, message)

        result = await loop.run_in_executor(
            None, functools.partial(self._execute, request, forward)
        )
        return result
