import signal
import logging
from functools import partial
from typing import Any

from dirfilter.startup_code.context import AppContext

logger = logging.getLogger(__name__)

# Signals that end a --watch session.
WATCH_STOP_SIGNALS = (signal.SIGINT, signal.SIGTERM)


def _signal_name(signum: int) -> str:
    try:
        return signal.Signals(signum).name
    except ValueError:
        return f"SIGNAL {signum}"


def handle_signal(context: AppContext, signum: int, _frame) -> None:
    """Requests the end of the watch loop; repeated signals are only noted."""
    if context.shutdown_event.is_set():
        logger.debug(
            "Ignoring %s; the watch loop is already stopping", _signal_name(signum)
        )
        return
    logger.warning(
        "Received %s (%d), stopping the watch loop", _signal_name(signum), signum
    )
    context.shutdown_event.set()


def install_signal_handlers(context: AppContext) -> dict[int, Any]:
    """
    Routes WATCH_STOP_SIGNALS to handle_signal for `context`.

    Returns:
        The handlers that were replaced, keyed by signal number, for
        restore_signal_handlers.
    """
    handler = partial(handle_signal, context)
    previous = {sig: signal.signal(sig, handler) for sig in WATCH_STOP_SIGNALS}
    logger.debug(
        "Watch stop handlers installed for %s",
        ", ".join(_signal_name(sig) for sig in previous),
    )
    return previous


def restore_signal_handlers(previous: dict[int, Any]) -> None:
    """Puts back the handlers returned by install_signal_handlers."""
    for sig, old_handler in previous.items():
        signal.signal(sig, old_handler)
    logger.debug("Restored %d signal handler(s)", len(previous))
