#!/usr/bin/env python3
"""Wire encoding for statsd gauges: ``<key>:<value>|g\\n``."""

from __future__ import annotations

from typing import Union

GAUGE_SUFFIX = b"|g\n"
MAX_GAUGE_VALUE = (1 << 64) - 1

Key = Union[str, bytes]

# Characters that would split or terminate a gauge line.
RESERVED_KEY_CHARS = ":|"


def _key_bytes(key: Key) -> bytes:
    return key.encode("utf-8") if isinstance(key, str) else key


def is_key_safe(text: str) -> bool:
    return not any(ch in RESERVED_KEY_CHARS or ch.isspace() for ch in text)


def _value_bytes(value: int) -> bytes:
    if value < 0 or value > MAX_GAUGE_VALUE:
        raise ValueError(f"gauge value {value} is outside the unsigned 64-bit range")
    return b"%d" % value


def append_gauge(buf: bytearray, key: Key, value: int) -> bytearray:
    """Append one gauge line to ``buf`` and return the same buffer."""
    buf += _key_bytes(key)
    buf += b":"
    buf += _value_bytes(value)
    buf += GAUGE_SUFFIX
    return buf


class GaugeEncoder:
    """Encodes gauges into one preallocated buffer, overwriting it per call.

    The returned memoryview aliases the internal buffer and is only valid
    until the next ``encode``; copy it with ``bytes()`` to keep it.
    """

    def __init__(self, capacity: int = 256):
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {capacity}")
        self._buf = bytearray(capacity)
        self._view = memoryview(self._buf)

    @property
    def capacity(self) -> int:
        return len(self._buf)

    def _grow(self, needed: int) -> None:
        capacity = len(self._buf)
        while capacity < needed:
            capacity *= 2
        self._buf = bytearray(capacity)
        self._view = memoryview(self._buf)

    def encode(self, key: bytes, value: int) -> memoryview:
        digits = _value_bytes(value)
        klen = len(key)
        end = klen + 1 + len(digits) + len(GAUGE_SUFFIX)
        if end > len(self._buf):
            self._grow(end)
        view = self._view
        # Equal-length slice assignment writes in place without resizing.
        view[:klen] = key
        view[klen] = 0x3A  # ':'
        pos = klen + 1
        view[pos:pos + len(digits)] = digits
        pos += len(digits)
        view[pos:end] = GAUGE_SUFFIX
        return view[:end]
