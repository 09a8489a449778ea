import os
import logging
from pathlib import Path
from dataclasses import dataclass, field
from typing import (
    Union,
    Callable,
    IO,
    ContextManager,
    Protocol,
    Optional,
)

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class ResolveCallable(Protocol):
    def __call__(self, path: PathLike, *, strict: bool = False) -> Path: ...


class OpenFileCallable(Protocol):
    def __call__(
        self, path: PathLike, mode: str, *, encoding: Optional[str] = None
    ) -> ContextManager[IO]: ...


def _default_listdir(path: PathLike) -> list[str]:
    # The one read-directory primitive the filter depends on.
    return os.listdir(str(path))


def _default_exists(path: PathLike) -> bool:
    return os.path.exists(str(path))


def _default_isdir(path: PathLike) -> bool:
    return os.path.isdir(str(path))


def _default_isfile(path: PathLike) -> bool:
    return os.path.isfile(str(path))


def _default_open(
    path: PathLike, mode: str, *, encoding: Optional[str] = None
) -> ContextManager[IO]:
    """
    Default implementation for opening a file.
    Matches the built-in open() signature for mode and encoding.
    """
    return open(str(path), mode, encoding=encoding)


def _default_resolve(path: PathLike, *, strict: bool = False) -> Path:
    p = Path(path)
    try:
        return p.resolve(strict=strict)
    except FileNotFoundError:
        if strict:
            raise
        logger.debug("FS.resolve fell back to absolute() for '%s'", p)
        return p.absolute()


@dataclass(frozen=True)
class FS:
    """Injectable filesystem primitives; every field defaults to the real OS call."""

    listdir: Callable[[PathLike], list[str]] = field(default=_default_listdir)
    exists: Callable[[PathLike], bool] = field(default=_default_exists)
    is_dir: Callable[[PathLike], bool] = field(default=_default_isdir)
    is_file: Callable[[PathLike], bool] = field(default=_default_isfile)
    open: OpenFileCallable = field(default=_default_open)
    resolve: ResolveCallable = field(default=_default_resolve)
