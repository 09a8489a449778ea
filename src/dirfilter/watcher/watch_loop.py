import errno
import logging
import threading
from collections.abc import Callable
from pathlib import Path
from typing import Optional

from watchdog.observers import Observer
from watchdog.observers.api import BaseObserver

from dirfilter.file_functions.filter_by_extension import wait_for_filter
from dirfilter.file_functions.fs_mock import FS
from dirfilter.protocols import EmitCallable, TaskRunner
from dirfilter.watcher.handler import DirectoryChangeHandler

logger = logging.getLogger(__name__)


def list_once(
    *,
    directory: Path,
    extension: str,
    emit: EmitCallable,
    fs: FS,
    task_runner: Optional[TaskRunner],
) -> bool:
    """
    Runs one filter request and emits its matches.

    Returns:
        True if the listing succeeded and was emitted, False if the read failed
        (the failure is logged, nothing is emitted).
    """
    outcome = wait_for_filter(directory, extension, fs=fs, task_runner=task_runner)
    if not outcome.ok:
        logger.error("Listing '%s' failed: %s", directory, outcome.error)
        return False
    emit(outcome.matches or [])
    return True


def watch_directory(
    *,
    directory: Path,
    extension: str,
    emit: EmitCallable,
    stop_event: threading.Event,
    fs: FS,
    task_runner: Optional[TaskRunner] = None,
    poll_interval: float,
    join_timeout: float,
    observer_factory: Callable[[], BaseObserver] = Observer,
) -> None:
    """
    Lists the directory once, then lists it again after every relevant change
    until `stop_event` is set.

    Every re-listing is a fresh directory read; nothing is cached between
    cycles. Read failures are logged and the loop keeps waiting.

    Raises:
        NotADirectoryError: If `directory` resolves to something other than a
                            directory.
        OSError: If the observer cannot be scheduled or started on `directory`.
    """
    watched = fs.resolve(directory, strict=True)
    if not fs.is_dir(watched):
        raise NotADirectoryError(
            errno.ENOTDIR, "Cannot watch a non-directory", str(watched)
        )
    change_event = threading.Event()
    handler = DirectoryChangeHandler(
        watched_directory=watched,
        extension=extension,
        change_event=change_event,
    )
    observer = observer_factory()
    observer.schedule(handler, str(watched), recursive=False)
    observer.start()
    logger.info("Watching '%s' for entries with extension '%s'", watched, extension)

    try:
        list_once(
            directory=watched,
            extension=extension,
            emit=emit,
            fs=fs,
            task_runner=task_runner,
        )
        while not stop_event.is_set():
            if not change_event.wait(timeout=poll_interval):
                continue
            change_event.clear()
            if stop_event.is_set():
                break
            list_once(
                directory=watched,
                extension=extension,
                emit=emit,
                fs=fs,
                task_runner=task_runner,
            )
    finally:
        logger.info("Stopping observer for '%s'", watched)
        observer.stop()
        observer.join(timeout=join_timeout)
        if observer.is_alive():
            logger.warning(
                "Observer for '%s' did not stop within %.1fs", watched, join_timeout
            )
