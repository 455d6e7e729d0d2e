#!/usr/bin/env python3
"""Error taxonomy for the load generators and the fatal reporter."""

from __future__ import annotations

import inspect
import os
import sys
from typing import Optional, TextIO


class StatsbenchError(RuntimeError):
    pass


class DictionaryLoadError(StatsbenchError):
    pass


class KeySpaceExhausted(StatsbenchError):
    pass


class EndpointError(StatsbenchError):
    pass


class SinkWriteError(StatsbenchError):
    pass


class ConfigError(StatsbenchError):
    pass


class MetricsWriteError(StatsbenchError):
    pass


def _caller_location(depth: int) -> Optional[str]:
    frame = inspect.currentframe()
    try:
        for _ in range(depth + 1):
            if frame is None:
                return None
            frame = frame.f_back
        if frame is None or not frame.f_code.co_filename:
            return None
        return f"{os.path.basename(frame.f_code.co_filename)}:{frame.f_lineno}"
    finally:
        del frame


def format_error(err: object, location: Optional[str]) -> str:
    prefix = f"Error ({location})" if location else "Error"
    if isinstance(err, (BaseException, str)):
        return f"{prefix}: {err}"
    return f"{prefix}: {err!r}"


def fatal(err: object, stream: Optional[TextIO] = None) -> None:
    """Report ``err`` with the caller's file:line and exit with status 1.

    ``None`` is a no-op so call sites can pass through optional errors.
    """
    if err is None:
        return
    out = stream if stream is not None else sys.stderr
    print(format_error(err, _caller_location(1)), file=out)
    out.flush()
    sys.exit(1)
