import threading
from typing import Optional

from dirfilter.concurrency.task_runner import run_in_daemon_thread
from dirfilter.file_functions.fs_mock import FS
from dirfilter.protocols import TaskRunner
from dirfilter.startup_code.load_config import Config


class AppContext:
    def __init__(self, config: Config, fs: FS, task_runner: TaskRunner):
        self.shutdown_event = threading.Event()
        self.config: Config = config
        self.fs: FS = fs
        self.task_runner: TaskRunner = task_runner

    def __str__(self) -> str:
        task_runner_repr = getattr(self.task_runner, "__name__", str(self.task_runner))
        return (
            f"{self.__class__.__name__}("
            f"config_type={type(self.config).__name__}, "
            f"fs=<{self.fs.__class__.__name__} instance>, "
            f"task_runner={task_runner_repr}, "
            f"shutdown_event_set={self.shutdown_event.is_set()}"
            f")"
        )

    __repr__ = __str__


def build_context(
    config: Config,
    fs_override: Optional[FS] = None,
    task_runner_override: Optional[TaskRunner] = None,
) -> AppContext:
    """
    Factory function to create an AppContext instance.
    Allows overriding default dependencies for testing.
    """
    return AppContext(
        config=config,
        fs=fs_override if fs_override is not None else FS(),
        task_runner=(
            task_runner_override
            if task_runner_override is not None
            else run_in_daemon_thread
        ),
    )
