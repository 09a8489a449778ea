from typing import Protocol, Optional, List, Callable


# --- Directory filter Related Protocols ---


class CompletionHandler(Protocol):
    """
    Protocol for the single-shot completion of a directory filter request.

    Called exactly once per request: either `(error, None)` when the
    directory read failed, or `(None, matches)` on success. `matches` may be
    an empty list, which is a success and not an error.
    """

    def __call__(
        self, error: Optional[BaseException], matches: Optional[List[str]]
    ) -> None: ...


class TaskRunner(Protocol):
    """Protocol for a callable that runs one task, usually off the caller's thread."""

    def __call__(self, task: Callable[[], None], *, name: str) -> None: ...


# --- Output Related Type Aliases ---

EmitCallable = Callable[[List[str]], None]
"""Type alias for a callable that publishes one listing result."""
