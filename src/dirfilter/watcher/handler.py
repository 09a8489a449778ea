import logging
import threading
from os import fsdecode
from pathlib import Path

from watchdog.events import (
    FileSystemEvent,
    FileSystemEventHandler,
    FileSystemMovedEvent,
)

from dirfilter.file_functions.extension_of import extension_of

logger = logging.getLogger(__name__)


class DirectoryChangeHandler(FileSystemEventHandler):
    """
    Watchdog handler that flags a change in the set of matching entries of a
    single directory, non-recursively.

    Creation, deletion and moves of an immediate child whose name has the
    requested extension set `change_event`. Content modifications are
    ignored since they cannot change a listing of names. Directory events
    count as well, because a directory listing reports subdirectories too.
    """

    def __init__(
        self,
        *,
        watched_directory: Path,
        extension: str,
        change_event: threading.Event,
    ) -> None:
        super().__init__()
        self.watched_directory: Path = watched_directory
        self.extension: str = extension
        self.change_event: threading.Event = change_event
        logger.info(
            "DirectoryChangeHandler initialized for '%s' and extension '%s'",
            self.watched_directory,
            self.extension,
        )

    def _is_relevant(self, raw_path) -> bool:
        path = Path(fsdecode(raw_path))
        if path.parent != self.watched_directory:
            logger.debug(
                "Ignoring event for '%s': not directly within '%s'",
                path,
                self.watched_directory,
            )
            return False
        return extension_of(path.name) == self.extension

    def _flag_change(self, description: str, path_str: str) -> None:
        logger.info("Detected relevant %s: %s", description, path_str)
        self.change_event.set()

    def on_created(self, event: FileSystemEvent) -> None:
        super().on_created(event)
        if self._is_relevant(event.src_path):
            self._flag_change("creation", fsdecode(event.src_path))

    def on_deleted(self, event: FileSystemEvent) -> None:
        super().on_deleted(event)
        if self._is_relevant(event.src_path):
            self._flag_change("deletion", fsdecode(event.src_path))

    def on_moved(self, event: FileSystemMovedEvent) -> None:
        super().on_moved(event)
        if self._is_relevant(event.src_path) or self._is_relevant(event.dest_path):
            self._flag_change(
                "move",
                f"{fsdecode(event.src_path)} -> {fsdecode(event.dest_path)}",
            )
