"""Deferred delivery of SIGINT / SIGTERM around critical sections."""

from __future__ import annotations

import logging
import signal
import threading
from collections.abc import Iterator
from contextlib import contextmanager

logger = logging.getLogger(__name__)

DEFERRED_SIGNALS = (signal.SIGINT, signal.SIGTERM)


def _deliver(signums: list[int]) -> None:
    """Raise each signal in turn; a handler that raises cannot starve the rest."""
    if not signums:
        return
    try:
        signal.raise_signal(signums[0])
    finally:
        _deliver(signums[1:])


@contextmanager
def ignore_interrupts(
    signals: tuple[signal.Signals, ...] = DEFERRED_SIGNALS,
) -> Iterator[list[int]]:
    """Hold off SIGINT/SIGTERM until the block finishes.

    Signals received inside the block are recorded, then re-delivered once
    each (in arrival order) after the previous handlers are restored. Yields
    the list of recorded signal numbers.

    Handlers can only be installed from the main thread; elsewhere this is a
    no-op and signals are not deferred.
    """
    received: list[int] = []

    if threading.current_thread() is not threading.main_thread():
        yield received
        return

    def _record(signum: int, _frame) -> None:  # type: ignore[no-untyped-def]
        logger.debug("Deferring signal %d until cleanup finishes", signum)
        if signum not in received:
            received.append(signum)

    previous = {sig: signal.signal(sig, _record) for sig in signals}
    try:
        yield received
    finally:
        for sig, handler in previous.items():
            # None: the old handler was not installed from Python
            signal.signal(sig, handler if handler is not None else signal.SIG_DFL)
        _deliver(received)
