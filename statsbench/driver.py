#!/usr/bin/env python3
"""The write loop that pushes gauges into a sink until cancelled.

A controller thread owns a :class:`Cancellation`; the worker polls it once
per iteration, never blocking inside the loop. After the loop stops the
worker reports its counters and acknowledges, and the controller waits for
that acknowledgment before exiting.
"""

from __future__ import annotations

import random
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Optional, Sequence

from statsbench.errors import SinkWriteError
from statsbench.gauge import GaugeEncoder
from statsbench.report import RunCounters

RUNNING = "running"
STOPPED = "stopped"


class Cancellation:
    def __init__(self):
        self._cancelled = threading.Event()
        self._acknowledged = threading.Event()

    def cancel(self) -> None:
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def acknowledge(self) -> None:
        self._acknowledged.set()

    @property
    def acknowledged(self) -> bool:
        return self._acknowledged.is_set()

    def wait_acknowledged(self, timeout: Optional[float] = None) -> bool:
        return self._acknowledged.wait(timeout)


def _encoded_pool(pool: Sequence[str]):
    if not pool:
        raise ValueError("key pool is empty")
    return [key.encode("utf-8") for key in pool]


def _write_or_raise(sink, line) -> int:
    # Sinks flush their pending bytes before raising.
    try:
        return sink.write(line)
    except OSError as exc:
        raise SinkWriteError(f"write failed: {exc}") from exc


@dataclass
class TrafficDriver:
    pool: Sequence[str]
    sink: object
    rng: random.Random = field(default_factory=random.Random)
    line_capacity: int = 256
    state: str = STOPPED
    counters: RunCounters = field(default_factory=RunCounters)

    def run_loop(self, cancellation: Cancellation, limit: Optional[int] = None) -> RunCounters:
        """Write gauges with random values until cancelled (or ``limit`` writes).

        Each call starts from fresh counters.
        """
        keys = _encoded_pool(self.pool)
        n = len(keys)
        encoder = GaugeEncoder(self.line_capacity)
        encode = encoder.encode
        getrandbits = self.rng.getrandbits
        sink = self.sink
        counters = self.counters = RunCounters(started_ns=time.perf_counter_ns())
        self.state = RUNNING
        operations = 0
        size = 0
        i = 0
        try:
            while not cancellation.cancelled:
                if limit is not None and operations >= limit:
                    break
                size += _write_or_raise(sink, encode(keys[i % n], getrandbits(64)))
                operations += 1
                i += 1
        finally:
            counters.operations = operations
            counters.bytes = size
            counters.elapsed_ns = time.perf_counter_ns() - counters.started_ns
            self.state = STOPPED
        return counters

    def run_stdout(self, limit: Optional[int] = None) -> int:
        """Write gauges valued by the iteration index, with no cancellation check."""
        keys = _encoded_pool(self.pool)
        n = len(keys)
        encoder = GaugeEncoder(self.line_capacity)
        self.state = RUNNING
        i = 0
        try:
            while limit is None or i < limit:
                _write_or_raise(self.sink, encoder.encode(keys[i % n], i))
                i += 1
        finally:
            self.state = STOPPED
        return i


@dataclass
class Worker:
    thread: Optional[threading.Thread]
    cancellation: Cancellation
    driver: TrafficDriver
    error: Optional[Exception] = None

    def stop(self) -> RunCounters:
        self.cancellation.cancel()
        self.cancellation.wait_acknowledged()
        self.thread.join()
        return self.driver.counters


def start_worker(
    driver: TrafficDriver,
    on_stop: Callable[[RunCounters], None],
    on_error: Optional[Callable[[Exception], None]] = None,
    cancellation: Optional[Cancellation] = None,
) -> Worker:
    """Run ``driver.run_loop`` on a background thread.

    ``on_stop`` receives the counters before the worker acknowledges. A
    failure is stored on the worker, passed to ``on_error`` and still
    acknowledged so the controller never waits forever.
    """
    cancellation = cancellation or Cancellation()
    worker = Worker(thread=None, cancellation=cancellation, driver=driver)

    def _run():
        try:
            counters = driver.run_loop(cancellation)
            on_stop(counters)
        except Exception as exc:
            worker.error = exc
            if on_error is not None:
                on_error(exc)
        finally:
            cancellation.acknowledge()

    worker.thread = threading.Thread(target=_run, name="genstats-writer", daemon=True)
    worker.thread.start()
    return worker
