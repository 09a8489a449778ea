import logging
import threading
from collections.abc import Callable

logger = logging.getLogger(__name__)


def run_in_daemon_thread(task: Callable[[], None], *, name: str) -> None:
    """
    Starts `task` on its own daemon thread and returns immediately.

    One thread per task; the caller is never blocked on the work itself.
    """
    thread = threading.Thread(target=task, name=name, daemon=True)
    thread.start()
    logger.debug("Started worker thread '%s'", thread.name)


def run_inline(task: Callable[[], None], *, name: str) -> None:
    """Runs `task` synchronously on the calling thread."""
    logger.debug("Running task '%s' inline", name)
    task()
