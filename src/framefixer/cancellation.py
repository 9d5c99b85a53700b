"""
Cancellation
============

Cooperative cancellation for a running scheduler.

Signal handlers only set a flag. The scheduler observes the flag at its
step boundaries and leaves through the normal flush path, so buffered
records are written and the output container is closed properly.
"""

import logging
import signal
import threading
from typing import Dict


logger = logging.getLogger(__name__)


class CancellationToken:
    """
    Thread-safe cancellation flag.

    Example:
        token = CancellationToken()
        previous = install_signal_handlers(token)
        try:
            scheduler.run(source, sink, cancel=token)
        finally:
            restore_signal_handlers(previous)
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        self._event.set()


def install_signal_handlers(token: CancellationToken) -> Dict[int, object]:
    """
    Route SIGINT and SIGTERM to the token.

    Must be called from the main thread.

    Returns:
        Previous handlers keyed by signal number
    """

    def _handle_signal(signum, frame):
        """Set the flag; the scheduler flushes at its next step boundary."""
        logger.info(f"Received {signal.Signals(signum).name}, finishing current step...")
        token.cancel()

    previous = {}
    for signum in (signal.SIGINT, signal.SIGTERM):
        previous[signum] = signal.signal(signum, _handle_signal)
    return previous


def restore_signal_handlers(previous: Dict[int, object]) -> None:
    """Reinstall handlers returned by install_signal_handlers."""
    for signum, handler in previous.items():
        signal.signal(signum, handler)
