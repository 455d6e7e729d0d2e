import signal
import threading

from statsbench.process_utils import interrupt_notifications, wait_for


def test_interrupt_sets_event_and_restores_handler():
    before = signal.getsignal(signal.SIGINT)
    with interrupt_notifications() as interrupted:
        assert not interrupted.is_set()
        signal.raise_signal(signal.SIGINT)
        assert interrupted.is_set()
    assert signal.getsignal(signal.SIGINT) is before


def test_wait_for_returns_once_set():
    event = threading.Event()
    threading.Timer(0.05, event.set).start()
    wait_for(event, poll_s=0.01)
    assert event.is_set()
