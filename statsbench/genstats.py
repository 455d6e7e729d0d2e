#!/usr/bin/env python3
"""Flood a statsd endpoint (or stdout) with gauge lines and report throughput.

Usage examples:
  python3 -m statsbench.genstats 127.0.0.1:8125
  python3 -m statsbench.genstats --stdout | gcat 127.0.0.1:8125
  python3 -m statsbench.genstats -c my_run.yaml --metrics-file out/genstats.json :3004

In TCP mode the run continues until SIGINT, then prints the throughput
report. Stdout mode never reports and runs until interrupted or the reader
goes away.
"""

from __future__ import annotations

import argparse
import random
import sys
import threading
from typing import List, Optional

from statsbench.config import DEFAULT_CONFIG_PATH, GenstatsConfig
from statsbench.driver import TrafficDriver, start_worker
from statsbench.errors import SinkWriteError, StatsbenchError, fatal
from statsbench.keys import KeyGenerator
from statsbench.process_utils import interrupt_notifications, wait_for
from statsbench.report import RunCounters, report, write_metrics
from statsbench.sinks import SocketSink, StdoutSink
from statsbench.words import load_words


def build_pool(config: GenstatsConfig, rng: random.Random) -> List[str]:
    words = load_words(config.dictionary)
    generator = KeyGenerator(
        words,
        rng=rng,
        max_words=config.max_words,
        separator=config.separator,
        max_attempts=config.max_attempts,
        exclude_last_word=config.exclude_last_word,
    )
    return generator.generate_key_pool(config.pool_size)


def run_until_interrupted(
    driver: TrafficDriver,
    interrupted: threading.Event,
    metrics_file: Optional[str] = None,
) -> RunCounters:
    """Drive the worker until ``interrupted`` is set, then stop it and report."""

    def _on_stop(counters: RunCounters) -> None:
        report(counters)
        if metrics_file:
            write_metrics(metrics_file, counters)

    worker = start_worker(driver, on_stop=_on_stop, on_error=lambda _exc: interrupted.set())
    wait_for(interrupted)
    if worker.error is None:
        print("stopping...", file=sys.stderr)
    counters = worker.stop()
    if worker.error is not None:
        raise worker.error
    return counters


def run_socket_mode(address: str, config: GenstatsConfig, metrics_file: Optional[str]) -> RunCounters:
    rng = random.Random(config.seed)
    pool = build_pool(config, rng)
    with SocketSink.connect(address, buffer_size=config.buffer_size) as sink:
        driver = TrafficDriver(pool, sink, rng=rng, line_capacity=config.line_capacity)
        with interrupt_notifications() as interrupted:
            counters = run_until_interrupted(driver, interrupted, metrics_file)
        try:
            sink.close()
        except OSError as exc:
            raise SinkWriteError(f"final flush to {address} failed: {exc}") from exc
    return counters


def run_stdout_mode(config: GenstatsConfig) -> None:
    rng = random.Random(config.seed)
    pool = build_pool(config, rng)
    sink = StdoutSink(buffer_size=config.buffer_size)
    driver = TrafficDriver(pool, sink, rng=rng, line_capacity=config.line_capacity)
    try:
        driver.run_stdout()
    except KeyboardInterrupt:
        sink.flush_quietly()
        sys.exit(130)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="statsd gauge load generator")
    parser.add_argument("address", nargs="?", help="TCP endpoint as HOST:PORT (or :PORT for localhost)")
    parser.add_argument("--stdout", action="store_true", help="Write to stdout instead of ADDRESS")
    parser.add_argument("-c", "--config", default=str(DEFAULT_CONFIG_PATH), help="YAML run configuration")
    parser.add_argument("--pool-size", type=int, help="Number of distinct metric names")
    parser.add_argument("--seed", type=int, help="Seed for key and value generation")
    parser.add_argument("--dictionary", help="gzip word list used to build metric names")
    parser.add_argument("--metrics-file", help="Optional JSON file for the throughput summary")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)
    try:
        config = GenstatsConfig.from_yaml(args.config).with_overrides(
            pool_size=args.pool_size,
            seed=args.seed,
            dictionary=args.dictionary,
        )
    except StatsbenchError as exc:
        fatal(exc)

    if args.stdout:
        try:
            run_stdout_mode(config)
        except StatsbenchError as exc:
            fatal(exc)
        return

    if not args.address:
        fatal("Usage: ADDRESS")
    try:
        run_socket_mode(args.address, config, args.metrics_file)
    except StatsbenchError as exc:
        fatal(exc)


if __name__ == "__main__":
    main()
