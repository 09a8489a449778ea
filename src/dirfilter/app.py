import logging
import sys
from pathlib import Path
from typing import Optional

from dirfilter.file_functions.filter_by_extension import wait_for_filter
from dirfilter.protocols import EmitCallable
from dirfilter.startup_code.context import AppContext
from dirfilter.watcher.watch_loop import watch_directory

logger = logging.getLogger(__name__)


class AppRunFailureError(Exception):
    """Raised when app.run() cannot produce a listing."""

    pass


class AppSetupError(Exception):
    """Raised when app.run() fails while setting up watch mode."""

    pass


class DirectoryReadError(AppRunFailureError):
    """The directory could not be read; `original_exception` is the untouched cause."""

    def __init__(self, directory: Path, original_exception: BaseException):
        super().__init__(f"Cannot list directory '{directory}': {original_exception}")
        self.directory = directory
        self.original_exception = original_exception


def print_matches(matches: list[str]) -> None:
    """Writes one entry name per line to stdout."""
    for name in matches:
        sys.stdout.write(f"{name}\n")
    sys.stdout.flush()


def run(
    context: AppContext,
    *,
    directory: Path,
    extension: str,
    watch: bool = False,
    emit: Optional[EmitCallable] = None,
) -> None:
    """
    Lists `directory` filtered by `extension` and hands the matches to `emit`.

    With `watch`, keeps listing on every relevant change until the context's
    shutdown_event is set.

    Raises:
        DirectoryReadError: Single-shot listing failed to read the directory.
        AppSetupError: Watch mode could not start observing the directory.
    """
    final_emit = print_matches if emit is None else emit

    if "." in extension:
        logger.warning(
            "Extension '%s' contains a dot and can never match; "
            "extensions are taken from after the last dot",
            extension,
        )

    if not watch:
        outcome = wait_for_filter(
            directory,
            extension,
            fs=context.fs,
            task_runner=context.task_runner,
        )
        if outcome.error is not None:
            raise DirectoryReadError(directory, outcome.error) from outcome.error
        matches = outcome.matches or []
        logger.info(
            "Found %d entries with extension '%s' in '%s'",
            len(matches),
            extension,
            directory,
        )
        final_emit(matches)
        return

    try:
        watch_directory(
            directory=directory,
            extension=extension,
            emit=final_emit,
            stop_event=context.shutdown_event,
            fs=context.fs,
            task_runner=context.task_runner,
            poll_interval=context.config.watch_poll_interval_seconds,
            join_timeout=context.config.observer_join_timeout_seconds,
        )
    except OSError as e:
        raise AppSetupError(f"Cannot watch directory '{directory}': {e}") from e
