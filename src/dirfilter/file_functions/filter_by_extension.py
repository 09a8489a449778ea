import logging
import threading
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from dirfilter.concurrency.task_runner import run_in_daemon_thread
from dirfilter.file_functions.extension_of import extension_of
from dirfilter.file_functions.fs_mock import FS
from dirfilter.protocols import CompletionHandler, TaskRunner

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FilterOutcome:
    """
    The single outcome of one directory filter request.

    Exactly one of `error` and `matches` is set. An empty `matches` list is a
    successful listing with no matching entries, not a failure.
    """

    error: Optional[BaseException] = None
    matches: Optional[list[str]] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def select_matching_entries(entries: Iterable[str], extension: str) -> list[str]:
    """
    Keeps the entries whose extension equals `extension` exactly.

    Relative order of the input is preserved and the result is densely
    appended; skipped entries leave no gaps.
    """
    return [entry for entry in entries if extension_of(entry) == extension]


def filter_by_extension(
    directory_path: Union[str, Path],
    extension: str,
    on_complete: CompletionHandler,
    *,
    fs: Optional[FS] = None,
    task_runner: Optional[TaskRunner] = None,
) -> None:
    """
    Lists the immediate entries of a directory and reports those whose
    extension matches, without blocking the caller.

    Exactly one read of `directory_path` is issued through `fs.listdir`, on
    the thread provided by `task_runner`. When it completes, `on_complete` is
    invoked exactly once:
      - `on_complete(None, matches)` after a successful read, `matches` being
        the ordered (possibly empty) list of matching entry names.
      - `on_complete(error, None)` if the read raised; the exception object is
        passed through unchanged and no filtering is done. A failure while
        filtering the returned entries is delivered the same way.

    There are no retries and no timeout. Any timeout behaviour is whatever the
    underlying filesystem call does.

    Args:
        directory_path: The directory to list. Not validated before use.
        extension: The extension to match, compared case-sensitively and
                   conventionally given without a leading dot (e.g. "txt").
        on_complete: Completion handler conforming to CompletionHandler.
        fs: Filesystem abstraction; defaults to the real filesystem.
        task_runner: Runs the read off the caller's thread; defaults to a
                     dedicated daemon thread per request.
    """
    final_fs = FS() if fs is None else fs
    final_runner = run_in_daemon_thread if task_runner is None else task_runner

    def read_and_filter() -> None:
        try:
            entries = final_fs.listdir(directory_path)
        except Exception as e:
            logger.warning(
                "Directory read failed for '%s': %s", directory_path, e
            )
            _deliver(on_complete, e, None, directory_path)
            return

        try:
            matches = select_matching_entries(entries, extension)
            logger.debug(
                "Filtered %d entries of '%s' down to %d matching extension '%s'",
                len(entries),
                directory_path,
                len(matches),
                extension,
            )
        except Exception as e:
            logger.exception(
                "Filtering the listing of '%s' failed", directory_path
            )
            _deliver(on_complete, e, None, directory_path)
            return

        _deliver(on_complete, None, matches, directory_path)

    final_runner(read_and_filter, name=f"DirFilter-{directory_path}")


def _deliver(
    on_complete: CompletionHandler,
    error: Optional[BaseException],
    matches: Optional[list[str]],
    directory_path: Union[str, Path],
) -> None:
    # A handler that raises has still been called; it is not called again.
    try:
        on_complete(error, matches)
    except Exception:
        logger.exception(
            "Completion handler raised while handling the listing of '%s'",
            directory_path,
        )


def wait_for_filter(
    directory_path: Union[str, Path],
    extension: str,
    *,
    fs: Optional[FS] = None,
    task_runner: Optional[TaskRunner] = None,
) -> FilterOutcome:
    """
    Issues one filter_by_extension request and blocks until it completes.

    Returns:
        The FilterOutcome delivered to the completion handler.
    """
    done = threading.Event()
    outcomes: list[FilterOutcome] = []

    def on_complete(
        error: Optional[BaseException], matches: Optional[list[str]]
    ) -> None:
        outcomes.append(FilterOutcome(error=error, matches=matches))
        done.set()

    filter_by_extension(
        directory_path,
        extension,
        on_complete,
        fs=fs,
        task_runner=task_runner,
    )
    done.wait()
    return outcomes[0]
