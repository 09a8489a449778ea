"""
Integration tests for the directory filter on the real filesystem, using the
default daemon-thread runner and a real watchdog observer.
"""

import os
import queue
import threading
from pathlib import Path

import pytest

from dirfilter.__main__ import EX_NOINPUT, EX_OK, main_entrypoint
from dirfilter.app import AppSetupError, run
from dirfilter.concurrency.task_runner import run_inline
from dirfilter.file_functions.filter_by_extension import (
    filter_by_extension,
    wait_for_filter,
)
from dirfilter.file_functions.fs_mock import FS
from dirfilter.startup_code.context import AppContext
from dirfilter.startup_code.load_config import Config
from dirfilter.watcher.watch_loop import watch_directory

WAIT_TIMEOUT = 10.0


def listing_order(directory: Path, names: set[str]) -> list[str]:
    """Names from `names` in the order the OS lists them."""
    return [n for n in os.listdir(directory) if n in names]


def test_callback_receives_matches_in_listing_order(sample_dir: Path):
    results: queue.Queue = queue.Queue()

    filter_by_extension(sample_dir, "txt", lambda e, m: results.put((e, m)))

    error, matches = results.get(timeout=WAIT_TIMEOUT)
    assert error is None
    assert matches == listing_order(sample_dir, {"a.txt", "c.txt"})
    assert results.empty()


def test_directories_are_entries_too(sample_dir: Path):
    outcome = wait_for_filter(sample_dir, "")

    assert outcome.ok
    assert outcome.matches == ["d"]


def test_no_matches_is_empty_success(sample_dir: Path):
    outcome = wait_for_filter(sample_dir, "pdf")

    assert outcome.error is None
    assert outcome.matches == []


def test_missing_directory_reports_error(tmp_path: Path):
    outcome = wait_for_filter(tmp_path / "missing", "txt")

    assert isinstance(outcome.error, FileNotFoundError)
    assert outcome.matches is None


def test_file_path_reports_not_a_directory(sample_dir: Path):
    outcome = wait_for_filter(sample_dir / "a.txt", "txt")

    assert isinstance(outcome.error, NotADirectoryError)
    assert outcome.matches is None


def test_repeated_calls_are_identical(sample_dir: Path):
    first = wait_for_filter(sample_dir, "txt")
    second = wait_for_filter(sample_dir, "txt")

    assert first == second


def test_concurrent_calls_are_independent(sample_dir: Path, tmp_path: Path):
    results: queue.Queue = queue.Queue()
    requests = [
        (sample_dir, "txt"),
        (sample_dir, "md"),
        (tmp_path / "missing", "txt"),
        (sample_dir, "txt"),
    ]

    for index, (directory, extension) in enumerate(requests):
        filter_by_extension(
            directory,
            extension,
            lambda e, m, i=index: results.put((i, e, m)),
        )

    collected = {}
    for _ in requests:
        i, error, matches = results.get(timeout=WAIT_TIMEOUT)
        assert i not in collected
        collected[i] = (error, matches)

    assert collected[0] == (None, listing_order(sample_dir, {"a.txt", "c.txt"}))
    assert collected[1] == (None, ["b.md"])
    assert isinstance(collected[2][0], FileNotFoundError)
    assert collected[2][1] is None
    assert collected[3] == collected[0]
    assert collected[0][1] is not collected[3][1]


def test_cli_prints_matches(mocker, sample_dir: Path, capsys: pytest.CaptureFixture):
    mocker.patch("dirfilter.__main__.setup_logging")

    assert main_entrypoint([str(sample_dir), "txt"]) == EX_OK

    printed = capsys.readouterr().out.splitlines()
    assert printed == listing_order(sample_dir, {"a.txt", "c.txt"})


def test_cli_missing_directory_exit_code(
    mocker, tmp_path: Path, capsys: pytest.CaptureFixture
):
    mocker.patch("dirfilter.__main__.setup_logging")

    assert main_entrypoint([str(tmp_path / "missing"), "txt"]) == EX_NOINPUT
    assert capsys.readouterr().out == ""


def test_cli_reads_extension_from_config(
    mocker, sample_dir: Path, tmp_path: Path, capsys: pytest.CaptureFixture
):
    mocker.patch("dirfilter.__main__.setup_logging")
    cfg_path = tmp_path / "dirfilter.ini"
    cfg_path.write_text("[Filter]\nextension_no_dot = md\n", encoding="utf-8")

    assert main_entrypoint([str(sample_dir), "-c", str(cfg_path)]) == EX_OK
    assert capsys.readouterr().out.splitlines() == ["b.md"]


def test_watch_relists_after_new_matching_file(sample_dir: Path):
    stop_event = threading.Event()
    emitted: queue.Queue = queue.Queue()
    errors: list[BaseException] = []

    def target():
        try:
            watch_directory(
                directory=sample_dir,
                extension="txt",
                emit=emitted.put,
                stop_event=stop_event,
                fs=FS(),
                poll_interval=0.05,
                join_timeout=5.0,
            )
        except BaseException as e:  # surfaced to the test thread below
            errors.append(e)

    watcher = threading.Thread(target=target, name="WatchUnderTest", daemon=True)
    watcher.start()
    try:
        first = emitted.get(timeout=WAIT_TIMEOUT)
        assert sorted(first) == ["a.txt", "c.txt"]

        (sample_dir / "e.txt").write_text("new")

        latest = None
        while latest is None or "e.txt" not in latest:
            latest = emitted.get(timeout=WAIT_TIMEOUT)
        assert sorted(latest) == ["a.txt", "c.txt", "e.txt"]
    finally:
        stop_event.set()
        watcher.join(timeout=WAIT_TIMEOUT)

    assert not watcher.is_alive()
    assert errors == []


def test_watch_on_regular_file_fails_setup(
    sample_dir: Path, default_test_config: Config
):
    context = AppContext(config=default_test_config, fs=FS(), task_runner=run_inline)
    errors: list[BaseException] = []

    def target():
        try:
            run(
                context,
                directory=sample_dir / "a.txt",
                extension="txt",
                watch=True,
                emit=lambda matches: None,
            )
        except BaseException as e:  # surfaced to the test thread below
            errors.append(e)

    worker = threading.Thread(target=target, name="WatchFileUnderTest", daemon=True)
    worker.start()
    worker.join(timeout=WAIT_TIMEOUT)
    context.shutdown_event.set()

    assert not worker.is_alive()
    assert len(errors) == 1
    assert isinstance(errors[0], AppSetupError)
    assert isinstance(errors[0].__cause__, NotADirectoryError)


def test_cli_watch_on_regular_file_exit_code(
    mocker, sample_dir: Path, capsys: pytest.CaptureFixture
):
    mocker.patch("dirfilter.__main__.setup_logging")
    mocker.patch("dirfilter.__main__.install_signal_handlers")
    restore = mocker.patch("dirfilter.__main__.restore_signal_handlers")

    assert (
        main_entrypoint([str(sample_dir / "a.txt"), "txt", "--watch"]) == EX_NOINPUT
    )
    assert capsys.readouterr().out == ""
    restore.assert_called_once()
