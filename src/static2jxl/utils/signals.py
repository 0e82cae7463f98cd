"""Turns SIGINT/SIGTERM into a cooperative cancellation flag."""

from __future__ import annotations

import logging
import signal
import threading
from contextlib import contextmanager
from typing import Iterator, Sequence

LOGGER = logging.getLogger(__name__)

DEFAULT_SIGNALS = (signal.SIGINT, signal.SIGTERM)


@contextmanager
def cancel_on_signals(cancel: threading.Event, signals: Sequence[int] = DEFAULT_SIGNALS) -> Iterator[threading.Event]:
    """Set ``cancel`` when one of ``signals`` arrives.

    Handlers can only be installed from the main thread; elsewhere the
    event is yielded untouched. Previous handlers are restored on exit.
    """

    if threading.current_thread() is not threading.main_thread():
        yield cancel
        return

    def _handler(signum, frame):  # noqa: ARG001
        if not cancel.is_set():
            LOGGER.warning("interrupted, finishing current files...")
        cancel.set()

    previous = {}
    for signum in signals:
        previous[signum] = signal.getsignal(signum)
        signal.signal(signum, _handler)
    try:
        yield cancel
    finally:
        for signum, handler in previous.items():
            signal.signal(signum, handler)
