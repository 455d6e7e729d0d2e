#!/usr/bin/env python3
"""Process-level plumbing: interrupt notifications for the controller thread."""

from __future__ import annotations

import signal
import threading
from contextlib import contextmanager
from typing import Dict, Iterable, Iterator


@contextmanager
def interrupt_notifications(signals: Iterable[int] = (signal.SIGINT,)) -> Iterator[threading.Event]:
    """Yield an event that is set when any of ``signals`` arrives.

    Must be entered from the main thread. Previous handlers are restored on
    exit.
    """
    triggered = threading.Event()

    def _handler(_signum, _frame):
        triggered.set()

    previous: Dict[int, object] = {}
    try:
        for signum in signals:
            previous[signum] = signal.signal(signum, _handler)
        yield triggered
    finally:
        for signum, handler in previous.items():
            signal.signal(signum, handler)


def wait_for(event: threading.Event, poll_s: float = 0.5) -> None:
    while not event.wait(poll_s):
        pass
