#!/usr/bin/env python3
"""Copy standard input to a TCP endpoint (a minimal netcat).

Usage:
  python3 -m statsbench.genstats --stdout | python3 -m statsbench.gcat :3004
"""

from __future__ import annotations

import argparse
import shutil
import sys
from typing import BinaryIO, List, Optional

from statsbench.errors import SinkWriteError, StatsbenchError, fatal
from statsbench.sinks import DEFAULT_BUFFER_SIZE, SocketSink


def relay(source: BinaryIO, sink: SocketSink) -> None:
    try:
        shutil.copyfileobj(source, sink, DEFAULT_BUFFER_SIZE)
        sink.flush()
    except OSError as exc:
        raise SinkWriteError(f"relay failed: {exc}") from exc


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Relay stdin to a TCP endpoint")
    parser.add_argument("address", nargs="?", help="TCP endpoint as HOST:PORT (or :PORT for localhost)")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)
    if not args.address:
        fatal("Usage: ADDRESS")
    try:
        with SocketSink.connect(args.address) as sink:
            relay(sys.stdin.buffer, sink)
    except (StatsbenchError, OSError) as exc:
        fatal(exc)


if __name__ == "__main__":
    main()
