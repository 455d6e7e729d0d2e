#!/usr/bin/env python3
"""Throughput figures for a finished traffic run."""

from __future__ import annotations

import json
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, TextIO

from statsbench.errors import MetricsWriteError

MB = 1024 * 1024


@dataclass
class RunCounters:
    operations: int = 0
    bytes: int = 0
    started_ns: int = 0
    elapsed_ns: int = 0

    @property
    def elapsed_s(self) -> float:
        return self.elapsed_ns / 1e9


def format_duration(elapsed_ns: int) -> str:
    if elapsed_ns >= 1_000_000_000:
        return f"{elapsed_ns / 1e9:.3f}s"
    if elapsed_ns >= 1_000_000:
        return f"{elapsed_ns / 1e6:.3f}ms"
    if elapsed_ns >= 1_000:
        return f"{elapsed_ns / 1e3:.3f}µs"
    return f"{elapsed_ns}ns"


def summarize(counters: RunCounters) -> Dict[str, object]:
    seconds = counters.elapsed_s
    size_mb = counters.bytes / MB
    summary: Dict[str, object] = {
        "operations": counters.operations,
        "bytes": counters.bytes,
        "size_mb": size_mb,
        "duration_s": seconds,
        "throughput_ops_per_s": counters.operations / seconds if seconds > 0 else 0.0,
        "throughput_mb_per_s": size_mb / seconds if seconds > 0 else 0.0,
    }
    if counters.operations:
        summary["ns_per_op"] = counters.elapsed_ns // counters.operations
    return summary


def format_report(counters: RunCounters) -> List[str]:
    summary = summarize(counters)
    lines = [
        f"time:  {format_duration(counters.elapsed_ns)}  count: {counters.operations}"
        f"  size: {counters.bytes}/b {summary['size_mb']:.2f}/mb"
    ]
    if not counters.operations:
        lines.append("no operations completed")
        return lines
    lines.append(f"count: {summary['throughput_ops_per_s']:.2f} sec  {summary['ns_per_op']} ns/op")
    lines.append(f"size:  {summary['throughput_mb_per_s']:.2f} MB/s")
    return lines


def report(counters: RunCounters, stream: Optional[TextIO] = None) -> None:
    out = stream if stream is not None else sys.stdout
    for line in format_report(counters):
        print(line, file=out)
    out.flush()


def write_metrics(path: str, counters: RunCounters) -> None:
    metrics_path = Path(path).expanduser()
    try:
        metrics_path.parent.mkdir(parents=True, exist_ok=True)
        metrics_path.write_text(json.dumps(summarize(counters), indent=2), encoding="utf-8")
    except OSError as exc:
        raise MetricsWriteError(f"cannot write metrics file {metrics_path}: {exc}") from exc
