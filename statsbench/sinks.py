#!/usr/bin/env python3
"""Buffered byte sinks: standard output and a TCP connection."""

from __future__ import annotations

import io
import socket
import sys
from typing import Optional, Tuple

from statsbench.errors import EndpointError

DEFAULT_BUFFER_SIZE = 8 * 1024


def parse_endpoint(address: str) -> Tuple[str, int]:
    """Split ``host:port``, ``[v6]:port`` or ``:port`` (localhost)."""
    host, sep, port_text = address.rpartition(":")
    if not sep:
        raise EndpointError(f"missing port in address {address!r}")
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    try:
        port = int(port_text)
    except ValueError as exc:
        raise EndpointError(f"invalid port in address {address!r}") from exc
    if not 0 < port < 65536:
        raise EndpointError(f"port out of range in address {address!r}")
    return host or "localhost", port


class _BufferedSink:
    def __init__(self, raw: io.RawIOBase, buffer_size: int):
        self._writer = io.BufferedWriter(raw, buffer_size=buffer_size)
        self.closed = False

    def write(self, data) -> int:
        try:
            return self._writer.write(data)
        except OSError:
            self.flush_quietly()
            raise

    def flush(self) -> None:
        self._writer.flush()

    def flush_quietly(self) -> Optional[OSError]:
        try:
            self._writer.flush()
        except OSError as exc:
            return exc
        return None

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        try:
            self._writer.flush()
        finally:
            self._release()

    def _release(self) -> None:
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        if exc_type is None:
            self.close()
        elif not self.closed:
            self.flush_quietly()
            self.closed = True
            self._release()


class StdoutSink(_BufferedSink):
    """Buffers writes to a file descriptor (stdout by default) and never closes it."""

    def __init__(self, fd: Optional[int] = None, buffer_size: int = DEFAULT_BUFFER_SIZE):
        if fd is None:
            sys.stdout.flush()
            fd = sys.stdout.fileno()
        super().__init__(io.FileIO(fd, "wb", closefd=False), buffer_size)


class SocketSink(_BufferedSink):
    """Owns a TCP connection and buffers writes to it."""

    def __init__(self, sock: socket.socket, buffer_size: int = DEFAULT_BUFFER_SIZE):
        self.sock = sock
        super().__init__(socket.SocketIO(sock, "wb"), buffer_size)

    @classmethod
    def connect(cls, address: str, buffer_size: int = DEFAULT_BUFFER_SIZE, timeout: Optional[float] = None) -> "SocketSink":
        host, port = parse_endpoint(address)
        try:
            infos = socket.getaddrinfo(host, port, type=socket.SOCK_STREAM)
        except (socket.gaierror, UnicodeError) as exc:
            raise EndpointError(f"cannot resolve {address}: {exc}") from exc
        last_error: Optional[OSError] = None
        for family, socktype, proto, _canon, sockaddr in infos:
            sock = socket.socket(family, socktype, proto)
            try:
                sock.settimeout(timeout)
                sock.connect(sockaddr)
            except OSError as exc:
                sock.close()
                last_error = exc
                continue
            sock.settimeout(None)
            return cls(sock, buffer_size=buffer_size)
        raise EndpointError(f"cannot connect to {address}: {last_error}")

    def _release(self) -> None:
        try:
            self._writer.close()
        except OSError:
            pass
        self.sock.close()
