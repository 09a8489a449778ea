"""
Global pytest fixtures for the dirfilter test suite.

This file provides:
- A real filesystem abstraction and a populated sample directory for
  integration-style tests.
- Generic mock objects for the FS abstraction and the task runner.
- A default configuration.
"""

import logging
from pathlib import Path
from unittest.mock import MagicMock, Mock

import pytest

from dirfilter.file_functions.fs_mock import FS
from dirfilter.startup_code.load_config import Config

logger = logging.getLogger(__name__)


# --- 1. Foundational Test Environment Fixtures ---


@pytest.fixture(scope="function")
def real_fs() -> FS:
    """A real filesystem interface backed by os / pathlib."""
    return FS()


@pytest.fixture(scope="function")
def sample_dir(tmp_path: Path) -> Path:
    """
    A directory holding the entries a.txt, b.md, c.txt and d (a subdirectory
    named d, so that directory entries are exercised too).
    """
    d = tmp_path / "sample_dir"
    d.mkdir()
    for name in ("a.txt", "b.md", "c.txt"):
        (d / name).write_text(f"content of {name}")
    (d / "d").mkdir()
    logger.debug("Created sample directory at %s", d)
    return d


# --- 2. Configuration Fixtures ---


@pytest.fixture
def default_test_config() -> Config:
    """A real Config with a fast watch loop, suitable for most tests."""
    return Config(
        default_extension_no_dot="txt",
        log_dir=None,
        watch_poll_interval_seconds=0.05,
        observer_join_timeout_seconds=1.0,
    )


# --- 3. Generic Mocking Fixtures ---


@pytest.fixture
def mock_fs() -> MagicMock:
    """A MagicMock for the FS abstraction, spec'd to its fields."""
    return MagicMock(spec=FS, name="MockFS")


@pytest.fixture
def mock_task_runner() -> Mock:
    """A task runner that records tasks without running them."""
    return Mock(name="MockTaskRunner")


